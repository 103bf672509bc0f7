from datetime import datetime, timezone

import pytest

from ai_pm.integrations.slack_client import SlackAPIError
from ai_pm.services.slack_history_service import SlackHistoryService
from ai_pm.utils import DateRange


class StubSlackClient:
    """In-memory stand-in for SlackAPIClient."""

    def __init__(self, pages=None, threads=None, channels=None, not_in_channel=False, join_error=None):
        self.pages = pages or [{"messages": []}]
        self.threads = threads or {}
        self.channels = channels or []
        self.not_in_channel = not_in_channel
        self.join_error = join_error
        self.history_calls = []
        self.thread_calls = []
        self.joined = []

    def list_channels(self, limit=200, cursor=None):
        index = int(cursor or 0)
        page = {"channels": self.channels[index]}
        if index + 1 < len(self.channels):
            page["response_metadata"] = {"next_cursor": str(index + 1)}
        return page

    def join_channel(self, channel):
        if self.join_error:
            raise SlackAPIError("join failed", error=self.join_error)
        self.joined.append(channel)
        self.not_in_channel = False
        return {"ok": True}

    def fetch_messages(self, channel, limit=100, oldest=None, latest=None, cursor=None):
        self.history_calls.append({"oldest": oldest, "latest": latest, "cursor": cursor, "limit": limit})
        if self.not_in_channel:
            raise SlackAPIError("not in channel", error="not_in_channel")
        return self.pages[int(cursor or 0)]

    def fetch_thread(self, channel, thread_ts, oldest=None, latest=None, limit=200, cursor=None):
        self.thread_calls.append((thread_ts, oldest, latest, cursor))
        if thread_ts not in self.threads:
            raise SlackAPIError("thread_not_found", error="thread_not_found")
        thread = self.threads[thread_ts]
        if thread and isinstance(thread[0], list):
            index = int(cursor or 0)
            page = {"messages": thread[index]}
            if index + 1 < len(thread):
                page["response_metadata"] = {"next_cursor": str(index + 1)}
            return page
        return {"messages": thread}


def test_channel_lookup_follows_cursor():
    client = StubSlackClient(channels=[[{"id": "C1", "name": "random"}], [{"id": "C2", "name": "dev"}]])
    service = SlackHistoryService(client)

    assert service.get_channel_id_by_name("#dev") == "C2"
    assert service.get_channel_id_by_name("missing") is None


def test_messages_are_paged_and_threads_attached():
    client = StubSlackClient(
        pages=[
            {"messages": [{"ts": "300.0", "text": "c"}], "response_metadata": {"next_cursor": "1"}},
            {"messages": [{"ts": "100.0", "text": "a", "thread_ts": "100.0", "reply_count": 1}]},
        ],
        threads={"100.0": [{"ts": "100.0", "text": "a"}, {"ts": "150.0", "text": "reply"}]},
    )
    service = SlackHistoryService(client, page_limit=50)

    messages = service.get_messages_in_range("C12345678")

    assert [m["ts"] for m in messages] == ["300.0", "100.0"]
    assert messages[1]["replies"] == [{"ts": "150.0", "text": "reply"}]
    assert "replies" not in messages[0]
    assert client.history_calls[0] == {"oldest": None, "latest": None, "cursor": None, "limit": 50}
    assert client.history_calls[1]["cursor"] == "1"


def test_window_and_explicit_oldest():
    client = StubSlackClient()
    service = SlackHistoryService(client)
    window = DateRange(
        start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        end=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )

    service.get_messages_in_range("C12345678", window)
    service.get_messages_in_range("C12345678", oldest="1704067200.000200")

    assert client.history_calls[0]["oldest"] == "1704067200"
    assert client.history_calls[0]["latest"] == "1704153600"
    assert client.history_calls[1]["oldest"] == "1704067200.000200"
    assert client.history_calls[1]["latest"] is None


def test_thread_failure_gives_no_replies():
    client = StubSlackClient(pages=[{"messages": [{"ts": "1.0", "thread_ts": "1.0", "reply_count": 2}]}])

    messages = SlackHistoryService(client).get_messages_in_range("C12345678")

    assert messages[0]["replies"] == []


def test_joins_and_retries_when_not_in_channel():
    client = StubSlackClient(pages=[{"messages": [{"ts": "1.0"}]}], not_in_channel=True)

    messages = SlackHistoryService(client).get_messages_in_range("C12345678")

    assert client.joined == ["C12345678"]
    assert [m["ts"] for m in messages] == ["1.0"]


def test_failed_join_reraises_original_error():
    client = StubSlackClient(not_in_channel=True, join_error="method_not_supported_for_channel_type")

    with pytest.raises(SlackAPIError) as exc_info:
        SlackHistoryService(client).get_messages_in_range("G12345678")

    assert exc_info.value.error == "not_in_channel"


def test_already_in_channel_counts_as_joined():
    client = StubSlackClient(join_error="already_in_channel")

    assert SlackHistoryService(client).join_channel("C12345678") is True


def test_thread_replies_follow_cursor_across_pages():
    parent = {"ts": "100.0", "text": "parent"}
    client = StubSlackClient(
        threads={
            "100.0": [
                [parent, {"ts": "101.0"}, {"ts": "102.0"}],
                [parent, {"ts": "103.0"}],
            ]
        }
    )

    replies = SlackHistoryService(client).get_thread_replies("C12345678", "100.0")

    assert [r["ts"] for r in replies] == ["101.0", "102.0", "103.0"]
    assert [call[3] for call in client.thread_calls] == [None, "1"]
