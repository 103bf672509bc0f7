"""
Remote sources: GitHub issues and Slack history.
"""

from .github_issue_service import GitHubAPIError, GitHubIssueService
from .slack_history_service import SlackHistoryService

__all__ = ["GitHubAPIError", "GitHubIssueService", "SlackHistoryService"]
