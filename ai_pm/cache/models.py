"""
Snapshot document models for the GitHub and Slack caches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .store import SnapshotError

Record = Dict[str, Any]


def _require(data: Dict[str, Any], name: str, expected: type, source: str) -> Any:
    if name not in data:
        raise SnapshotError(f"Missing required field '{name}' in {source}")
    value = data[name]
    if not isinstance(value, expected):
        raise SnapshotError(
            f"Field '{name}' in {source} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _check_issue(record: Any, position: str, source: str) -> None:
    if not isinstance(record, dict):
        raise SnapshotError(f"{position} in {source} must be an object")
    if "number" not in record:
        raise SnapshotError(f"{position} in {source} is missing required field 'number'")
    number = record["number"]
    if isinstance(number, bool) or not isinstance(number, int):
        raise SnapshotError(f"{position} in {source} has non-integer 'number': {number!r}")


def _check_message(record: Any, position: str, source: str) -> None:
    if not isinstance(record, dict):
        raise SnapshotError(f"{position} in {source} must be an object")
    if "ts" not in record:
        raise SnapshotError(f"{position} in {source} is missing required field 'ts'")
    try:
        float(record["ts"])
    except (TypeError, ValueError):
        raise SnapshotError(f"{position} in {source} has non-numeric 'ts': {record['ts']!r}") from None
    replies = record.get("replies")
    if replies is None:
        return
    if not isinstance(replies, list):
        raise SnapshotError(f"{position} in {source} has 'replies' that is not a list")
    for index, reply in enumerate(replies):
        _check_message(reply, f"Reply {index} of {position.lower()}", source)


@dataclass
class IssueSnapshot:
    """Cached issues for one owner/repo."""

    owner: str
    repo: str
    last_updated: str
    issues: List[Record] = field(default_factory=list)

    @property
    def scope(self) -> str:
        return f"{self.owner}/{self.repo}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "repo": self.repo,
            "lastUpdated": self.last_updated,
            "issues": self.issues,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "issue snapshot") -> "IssueSnapshot":
        issues = _require(data, "issues", list, source)
        for index, issue in enumerate(issues):
            _check_issue(issue, f"Record {index}", source)
        return cls(
            owner=_require(data, "owner", str, source),
            repo=_require(data, "repo", str, source),
            last_updated=_require(data, "lastUpdated", str, source),
            issues=issues,
        )


@dataclass
class ChannelSnapshot:
    """Cached messages (with thread replies) for one Slack channel."""

    channel_id: str
    channel_name: str
    last_updated: str
    messages: List[Record] = field(default_factory=list)

    @property
    def scope(self) -> str:
        return self.channel_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channelId": self.channel_id,
            "channelName": self.channel_name,
            "lastUpdated": self.last_updated,
            "messages": self.messages,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "channel snapshot") -> "ChannelSnapshot":
        channel_id = _require(data, "channelId", str, source)
        messages = _require(data, "messages", list, source)
        for index, message in enumerate(messages):
            _check_message(message, f"Record {index}", source)
        return cls(
            channel_id=channel_id,
            channel_name=data.get("channelName") or channel_id,
            last_updated=_require(data, "lastUpdated", str, source),
            messages=messages,
        )


__all__ = ["IssueSnapshot", "ChannelSnapshot"]
