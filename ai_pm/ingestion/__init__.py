"""
Cache sync jobs for GitHub issues and Slack channels.
"""

from .github_sync import GitHubCacheSync
from .results import SyncResult, SyncSummary
from .slack_sync import SlackCacheSync

__all__ = [
    "GitHubCacheSync",
    "SlackCacheSync",
    "SyncResult",
    "SyncSummary",
]
