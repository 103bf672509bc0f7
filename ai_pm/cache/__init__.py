"""
Snapshot caches for GitHub issues and Slack messages.
"""

from .github_cache import GitHubCacheService
from .merge import (
    latest_issue_number,
    latest_timestamp,
    merge_issues,
    merge_messages,
    merge_records,
)
from .models import ChannelSnapshot, IssueSnapshot
from .slack_cache import SlackCacheService
from .store import SnapshotError, SnapshotStore

__all__ = [
    "ChannelSnapshot",
    "GitHubCacheService",
    "IssueSnapshot",
    "SlackCacheService",
    "SnapshotError",
    "SnapshotStore",
    "latest_issue_number",
    "latest_timestamp",
    "merge_issues",
    "merge_messages",
    "merge_records",
]
