"""
GitHub Issue Service - Fetches and creates issues through the GitHub REST API.

Feeds the local issue cache (full and incremental fetches) and creates the
issues a user confirms from LLM proposals.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config.models import GitHubSettings
from ..utils import DateRange, parse_iso

logger = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubAPIError(Exception):
    """Exception raised for GitHub API errors."""
    pass


class GitHubIssueService:
    """
    GitHub API client for one repository's issues.

    Pagination walks page numbers until GitHub returns an empty page.
    Follow-up comment fetches run one issue at a time.
    """

    def __init__(
        self,
        settings: GitHubSettings,
        owner: str,
        repo: str,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        self.token = settings.token
        self.owner = owner
        self.repo = repo

        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": settings.user_agent,
        }
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

        self._client = client
        logger.info(f"[GITHUB ISSUE SERVICE] Initialized for {self.owner}/{self.repo}")

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an authenticated request to GitHub API.

        Fails fast without a token instead of falling back to anonymous limits.
        """
        if not self.token:
            raise GitHubAPIError(
                "GitHub token not configured. Set GITHUB_TOKEN to enable GitHub features."
            )

        url = f"{self.settings.api_url}{endpoint}"
        if self._client is not None:
            response = self._client.request(method, url, headers=self.headers, params=params, json=json_body)
        else:
            with httpx.Client(timeout=self.settings.timeout, follow_redirects=True) as client:
                response = client.request(method, url, headers=self.headers, params=params, json=json_body)

        if response.status_code < 400:
            return response.json()

        if response.status_code == 404:
            raise GitHubAPIError(f"Resource not found: {endpoint}")
        if response.status_code == 401:
            raise GitHubAPIError("Authentication failed. Check GITHUB_TOKEN.")
        if response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining", "unknown")
            raise GitHubAPIError(f"Access forbidden. Rate limit remaining: {remaining}")
        raise GitHubAPIError(f"GitHub API error {response.status_code}: {response.text}")

    def _repo_endpoint(self, suffix: str) -> str:
        """Helper to build repo-scoped endpoints."""
        return f"/repos/{self.owner}/{self.repo}{suffix}"

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------
    def get_all_issues(
        self,
        include_pull_requests: bool = True,
        include_comments: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Fetch every issue (state=all), newest first.

        Args:
            include_pull_requests: Keep pull requests, which GitHub lists as issues
            include_comments: Attach each issue's comments

        Returns:
            List of normalized issue dicts
        """
        logger.info("[GITHUB ISSUE SERVICE] Fetching all issues for %s/%s", self.owner, self.repo)
        params = {"state": "all", "sort": "created", "direction": "desc"}
        issues = self._fetch_issue_pages(params, include_pull_requests)
        logger.info("[GITHUB ISSUE SERVICE] Fetched %s issues total", len(issues))

        if include_comments:
            self._attach_comments(issues)
        return issues

    def get_issues_since(
        self,
        since: str,
        include_pull_requests: bool = True,
        include_comments: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Fetch issues updated at or after `since` (ISO-8601).

        Args:
            since: Watermark from the previous sync
            include_pull_requests: Keep pull requests
            include_comments: Attach each issue's comments

        Returns:
            List of normalized issue dicts
        """
        logger.info("[GITHUB ISSUE SERVICE] Fetching issues updated since %s", since)
        params = {"state": "all", "since": since, "sort": "updated", "direction": "desc"}
        issues = self._fetch_issue_pages(params, include_pull_requests)
        logger.info("[GITHUB ISSUE SERVICE] Fetched %s updated issues", len(issues))

        if include_comments and issues:
            self._attach_comments(issues)
        return issues

    def get_issues_in_date_range(self, date_range: DateRange) -> List[Dict[str, Any]]:
        """
        Fetch issues (not pull requests) created inside the date range.

        Pages are ordered by creation date, so the walk stops at the first
        issue older than the range start.
        """
        logger.info(
            "[GITHUB ISSUE SERVICE] Fetching issues from %s to %s",
            date_range.start.isoformat(),
            date_range.end.isoformat(),
        )
        issues: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._make_request(
                self._repo_endpoint("/issues"),
                params={
                    "state": "all",
                    "sort": "created",
                    "direction": "desc",
                    "per_page": PER_PAGE,
                    "page": page,
                },
            )
            if not batch:
                break
            for raw in batch:
                if raw.get("pull_request"):
                    continue
                created_at = parse_iso(raw["created_at"])
                if created_at < date_range.start:
                    logger.info("[GITHUB ISSUE SERVICE] Fetched %s issues in date range", len(issues))
                    return issues
                if created_at <= date_range.end:
                    issues.append(self._normalize_issue(raw))
            page += 1

        logger.info("[GITHUB ISSUE SERVICE] Fetched %s issues in date range", len(issues))
        return issues

    def get_comments_for_issue(self, issue_number: int) -> List[Dict[str, Any]]:
        """
        Fetch all comments on an issue.

        A failure is logged and yields an empty list so one broken issue does
        not abort the whole fetch.
        """
        comments: List[Dict[str, Any]] = []
        page = 1
        try:
            while True:
                batch = self._make_request(
                    self._repo_endpoint(f"/issues/{issue_number}/comments"),
                    params={"per_page": PER_PAGE, "page": page},
                )
                if not batch:
                    break
                for comment in batch:
                    comments.append({
                        "id": comment.get("id"),
                        "user": (comment.get("user") or {}).get("login") or "unknown",
                        "created_at": comment.get("created_at"),
                        "body": comment.get("body") or "",
                    })
                page += 1
        except (GitHubAPIError, httpx.HTTPError) as exc:
            logger.error("[GITHUB ISSUE SERVICE] Error fetching comments for issue #%s: %s", issue_number, exc)
            return []
        return comments

    def create_issue(
        self,
        title: str,
        body: str,
        labels: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a new issue.

        Returns:
            The created issue, normalized like fetched issues
        """
        payload: Dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels
        created = self._make_request(self._repo_endpoint("/issues"), method="POST", json_body=payload)
        issue = self._normalize_issue(created)
        logger.info("[GITHUB ISSUE SERVICE] Created issue #%s: %s", issue["number"], issue["title"])
        return issue

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch_issue_pages(self, params: Dict[str, Any], include_pull_requests: bool) -> List[Dict[str, Any]]:
        issues: List[Dict[str, Any]] = []
        page = 1
        while True:
            logger.debug("[GITHUB ISSUE SERVICE] Fetching page %s", page)
            batch = self._make_request(
                self._repo_endpoint("/issues"),
                params={**params, "per_page": PER_PAGE, "page": page},
            )
            if not batch:
                break
            for raw in batch:
                if raw.get("pull_request") and not include_pull_requests:
                    continue
                issues.append(self._normalize_issue(raw))
            page += 1
        return issues

    def _attach_comments(self, issues: List[Dict[str, Any]]) -> None:
        logger.info("[GITHUB ISSUE SERVICE] Fetching comments for %s issues", len(issues))
        for index, issue in enumerate(issues, start=1):
            if index % 50 == 0:
                logger.info("[GITHUB ISSUE SERVICE] Processing %s/%s...", index, len(issues))
            issue["comments"] = self.get_comments_for_issue(issue["number"])

    @staticmethod
    def _normalize_issue(raw: Dict[str, Any]) -> Dict[str, Any]:
        labels = []
        for label in raw.get("labels") or []:
            if isinstance(label, str):
                labels.append(label)
            else:
                labels.append(label.get("name") or "")
        return {
            "number": raw["number"],
            "title": raw.get("title") or "",
            "body": raw.get("body"),
            "created_at": raw.get("created_at"),
            "html_url": raw.get("html_url"),
            "state": raw.get("state"),
            "labels": labels,
            "pull_request": bool(raw.get("pull_request")),
        }


__all__ = ["GitHubAPIError", "GitHubIssueService"]
