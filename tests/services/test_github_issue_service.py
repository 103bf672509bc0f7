import json
from datetime import datetime, timezone

import httpx
import pytest

from ai_pm.config.models import GitHubSettings
from ai_pm.services.github_issue_service import GitHubAPIError, GitHubIssueService
from ai_pm.utils import DateRange


def _settings(token="ghp_test"):
    return GitHubSettings(token=token, owner="org", repo="app")


def _raw_issue(number, created_at="2024-01-10T00:00:00Z", pull_request=False):
    raw = {
        "number": number,
        "title": f"Issue {number}",
        "body": "body",
        "created_at": created_at,
        "html_url": f"https://github.com/org/app/issues/{number}",
        "state": "open",
        "labels": [{"name": "bug"}],
    }
    if pull_request:
        raw["pull_request"] = {"url": "x"}
    return raw


class Recorder:
    """Serves paged issue and comment responses and records every request."""

    def __init__(self, pages, comments=None, status=200, headers=None):
        self.pages = pages
        self.comments = comments or {}
        self.status = status
        self.headers = headers or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, headers=self.headers, text="nope")
        page = int(request.url.params.get("page", "1"))
        path = request.url.path
        if request.method == "POST":
            payload = json.loads(request.content)
            return httpx.Response(201, json=_raw_issue(99) | {"title": payload["title"]})
        if path.endswith("/comments"):
            number = int(path.split("/")[-2])
            batch = self.comments.get(number, []) if page == 1 else []
            return httpx.Response(200, json=batch)
        batch = self.pages[page - 1] if page <= len(self.pages) else []
        return httpx.Response(200, json=batch)


def _service(recorder, token="ghp_test"):
    client = httpx.Client(transport=httpx.MockTransport(recorder))
    return GitHubIssueService(_settings(token), "org", "app", client=client)


def test_get_all_issues_walks_pages_and_attaches_comments():
    recorder = Recorder(
        pages=[[_raw_issue(3), _raw_issue(2, pull_request=True)], [_raw_issue(1)]],
        comments={3: [{"id": 7, "user": {"login": "alice"}, "created_at": "2024-01-11T00:00:00Z", "body": "+1"}]},
    )

    issues = _service(recorder).get_all_issues()

    assert [issue["number"] for issue in issues] == [3, 2, 1]
    assert issues[0]["labels"] == ["bug"]
    assert issues[0]["comments"] == [{"id": 7, "user": "alice", "created_at": "2024-01-11T00:00:00Z", "body": "+1"}]
    assert issues[1]["pull_request"] is True
    first = recorder.requests[0]
    assert first.url.path == "/repos/org/app/issues"
    assert first.url.params["state"] == "all"
    assert first.url.params["per_page"] == "100"
    assert first.headers["Authorization"] == "Bearer ghp_test"


def test_pull_requests_can_be_excluded():
    recorder = Recorder(pages=[[_raw_issue(2, pull_request=True), _raw_issue(1)]])

    issues = _service(recorder).get_all_issues(include_pull_requests=False, include_comments=False)

    assert [issue["number"] for issue in issues] == [1]


def test_get_issues_since_passes_watermark():
    recorder = Recorder(pages=[[_raw_issue(5)]])

    issues = _service(recorder).get_issues_since("2024-01-01T00:00:00.000Z", include_comments=False)

    assert [issue["number"] for issue in issues] == [5]
    assert recorder.requests[0].url.params["since"] == "2024-01-01T00:00:00.000Z"
    assert recorder.requests[0].url.params["sort"] == "updated"


def test_get_issues_in_date_range_stops_at_older_issue():
    recorder = Recorder(
        pages=[
            [
                _raw_issue(4, "2024-02-01T00:00:00Z"),
                _raw_issue(3, "2024-01-20T00:00:00Z"),
                _raw_issue(2, "2024-01-15T00:00:00Z", pull_request=True),
                _raw_issue(1, "2023-12-01T00:00:00Z"),
            ],
            [_raw_issue(0, "2023-11-01T00:00:00Z")],
        ]
    )
    window = DateRange(
        start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        end=datetime(2024, 1, 31, tzinfo=timezone.utc),
    )

    issues = _service(recorder).get_issues_in_date_range(window)

    assert [issue["number"] for issue in issues] == [3]
    assert len(recorder.requests) == 1


def test_comment_failure_yields_empty_list():
    recorder = Recorder(pages=[], status=500)

    assert _service(recorder).get_comments_for_issue(1) == []


def test_create_issue_posts_payload():
    recorder = Recorder(pages=[])

    issue = _service(recorder).create_issue("New bug", "Details", labels=["bug"])

    request = recorder.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == {"title": "New bug", "body": "Details", "labels": ["bug"]}
    assert issue["number"] == 99
    assert issue["title"] == "New bug"


@pytest.mark.parametrize(
    "status, headers, message",
    [
        (404, {}, "Resource not found"),
        (401, {}, "Authentication failed"),
        (403, {"X-RateLimit-Remaining": "0"}, "Rate limit remaining: 0"),
        (500, {}, "GitHub API error 500"),
    ],
)
def test_error_statuses_raise(status, headers, message):
    recorder = Recorder(pages=[], status=status, headers=headers)

    with pytest.raises(GitHubAPIError, match=message):
        _service(recorder).get_all_issues(include_comments=False)


def test_missing_token_fails_before_any_request():
    recorder = Recorder(pages=[[_raw_issue(1)]])

    with pytest.raises(GitHubAPIError, match="token not configured"):
        _service(recorder, token=None).get_all_issues()
    assert recorder.requests == []
