from datetime import datetime, timezone

import pytest

from ai_pm.cache import ChannelSnapshot, SlackCacheService
from ai_pm.ingestion import SlackCacheSync
from ai_pm.ingestion.results import FAILED, INITIALIZED, SKIPPED, UPDATED
from ai_pm.integrations.slack_client import SlackAPIError

FIXED_NOW = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


class StubHistory:
    def __init__(self, messages=None, names=None):
        self.messages = messages or []
        self.names = names or {}
        self.calls = []

    def get_channel_id_by_name(self, name):
        return self.names.get(name)

    def get_messages_in_range(self, channel_id, date_range=None, oldest=None):
        self.calls.append((channel_id, oldest))
        return list(self.messages)


def _sync(temp_dir, history):
    cache = SlackCacheService(temp_dir)
    return SlackCacheSync(history, cache, clock=lambda: FIXED_NOW), cache


def test_resolve_channel_accepts_ids_and_names(temp_dir):
    sync, _ = _sync(temp_dir, StubHistory(names={"general": "C0000GENERAL"}))

    assert sync.resolve_channel("C12345678") == ("C12345678", "C12345678")
    assert sync.resolve_channel("#general") == ("C0000GENERAL", "general")
    with pytest.raises(SlackAPIError) as exc_info:
        sync.resolve_channel("nowhere")
    assert exc_info.value.error == "channel_not_found"


def test_initialize_writes_sorted_snapshot(temp_dir):
    history = StubHistory(messages=[{"ts": "300.0"}, {"ts": "100.0"}], names={"general": "C0000GENERAL"})
    sync, cache = _sync(temp_dir, history)

    result = sync.initialize_channel("general")

    assert result.status == INITIALIZED
    assert result.scope == "C0000GENERAL"
    snapshot = cache.load_cache("C0000GENERAL")
    assert snapshot.channel_name == "general"
    assert [m["ts"] for m in snapshot.messages] == ["100.0", "300.0"]
    assert snapshot.last_updated == "2024-05-01T09:00:00.000Z"
    assert history.calls == [("C0000GENERAL", None)]


def test_initialize_skips_existing_cache(temp_dir):
    sync, cache = _sync(temp_dir, StubHistory(messages=[{"ts": "9.0"}]))
    cache.save_cache(ChannelSnapshot("C12345678", "dev", "2024-01-01T00:00:00.000Z", [{"ts": "1.0"}]))

    result = sync.initialize_channel("C12345678")

    assert result.status == SKIPPED
    assert cache.load_cache("C12345678").messages == [{"ts": "1.0"}]


def test_update_uses_latest_reply_as_oldest(temp_dir):
    history = StubHistory(
        messages=[
            {"ts": "1000.000", "text": "edited", "replies": [{"ts": "5000.000"}, {"ts": "6000.000"}]},
            {"ts": "7000.000", "text": "new"},
        ]
    )
    sync, cache = _sync(temp_dir, history)
    cache.save_cache(
        ChannelSnapshot(
            "C12345678",
            "dev",
            "2024-04-01T00:00:00.000Z",
            [{"ts": "1000.000", "text": "parent", "replies": [{"ts": "5000.000"}]}, {"ts": "2000.000"}],
        )
    )

    result = sync.update_channel("C12345678")

    assert history.calls == [("C12345678", "5000.000")]
    assert result.status == UPDATED
    assert (result.total, result.added) == (3, 1)
    snapshot = cache.load_cache("C12345678")
    assert [m["ts"] for m in snapshot.messages] == ["1000.000", "2000.000", "7000.000"]
    assert snapshot.messages[0]["text"] == "edited"
    assert snapshot.channel_name == "dev"
    assert snapshot.last_updated == "2024-05-01T09:00:00.000Z"


def test_update_of_empty_cache_reads_full_history(temp_dir):
    history = StubHistory(messages=[{"ts": "1.0"}])
    sync, cache = _sync(temp_dir, history)
    cache.save_cache(ChannelSnapshot("C12345678", "dev", "2024-04-01T00:00:00.000Z", []))

    sync.update_channel("C12345678")

    assert history.calls == [("C12345678", None)]


def test_update_without_cache_is_skipped(temp_dir):
    sync, _ = _sync(temp_dir, StubHistory())

    assert sync.update_channel("C12345678").status == SKIPPED


def test_unknown_channel_fails_without_stopping_others(temp_dir):
    sync, _ = _sync(temp_dir, StubHistory(messages=[{"ts": "1.0"}]))

    summary = sync.run_initialize(["missing-channel", "C12345678"])

    assert [r.status for r in summary.results] == [FAILED, INITIALIZED]
    assert summary.results[0].scope == "missing-channel"
