"""
Merge engine and watermark extraction for cached issues and messages.

Both caches follow the same rule: build a key -> record map from what is
already stored, let every freshly fetched record overwrite its key, then
emit the records in a deterministic order.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, Iterable, List

Record = Dict[str, Any]


def merge_records(
    existing: Iterable[Record],
    incoming: Iterable[Record],
    key: Callable[[Record], Hashable],
    sort_key: Callable[[Record], Any],
    reverse: bool = False,
) -> List[Record]:
    """
    Merge two record collections by identity key.

    An incoming record replaces the stored record with the same key as a
    whole; fields are never patched individually.

    Args:
        existing: Records already in the snapshot
        incoming: Records returned by the latest fetch
        key: Identity key function
        sort_key: Ordering key for the output
        reverse: Sort descending when True

    Returns:
        New list of merged records (inputs are left untouched)
    """
    by_key: Dict[Hashable, Record] = {}
    for record in existing:
        by_key[key(record)] = record
    for record in incoming:
        by_key[key(record)] = record
    return sorted(by_key.values(), key=sort_key, reverse=reverse)


def _issue_number(issue: Record) -> int:
    return int(issue["number"])


def _message_ts(message: Record) -> str:
    return str(message["ts"])


def _ts_order(message: Record):
    # Equal floats with different spellings ("1.0" vs "1.00") stay distinct keys.
    ts = _message_ts(message)
    return (float(ts), ts)


def merge_issues(existing: Iterable[Record], incoming: Iterable[Record]) -> List[Record]:
    """Merge issues by number, newest (highest number) first."""
    return merge_records(existing, incoming, key=_issue_number, sort_key=_issue_number, reverse=True)


def merge_messages(existing: Iterable[Record], incoming: Iterable[Record]) -> List[Record]:
    """Merge Slack messages by ts, oldest first."""
    return merge_records(existing, incoming, key=_message_ts, sort_key=_ts_order)


def latest_issue_number(issues: Iterable[Record]) -> int:
    """Highest issue number in the collection, or 0 when empty."""
    return max((_issue_number(issue) for issue in issues), default=0)


def latest_timestamp(messages: Iterable[Record]) -> str:
    """
    Latest ts across messages and their thread replies, or "0" when empty.

    Replies count too: a reply can be newer than every top-level message and
    the next incremental fetch has to start after it.
    """
    latest = "0"
    latest_value = float("-inf")
    for message in messages:
        candidates = [message] + list(message.get("replies") or [])
        for candidate in candidates:
            ts = candidate.get("ts")
            if ts is None:
                continue
            value = float(ts)
            if value > latest_value:
                latest_value = value
                latest = str(ts)
    return latest


__all__ = [
    "Record",
    "merge_records",
    "merge_issues",
    "merge_messages",
    "latest_issue_number",
    "latest_timestamp",
]
