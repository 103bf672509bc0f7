from __future__ import annotations

import logging
from typing import List, Optional

from ..cache import GitHubCacheService, SlackCacheService
from ..config.models import AppSettings
from ..config.repos import RepoConfig, load_repos_config
from ..config_validator import ConfigValidationError, require
from ..ingestion import GitHubCacheSync, SlackCacheSync, SyncSummary
from ..ingestion.results import FAILED
from ..integrations.slack_client import SlackAPIClient
from ..services.slack_history_service import SlackHistoryService

logger = logging.getLogger(__name__)

INIT = "init"
UPDATE = "update"


def resolve_repos(settings: AppSettings) -> List[RepoConfig]:
    """
    Repositories to sync: the JSON repo list when present, else the single
    owner/repo from config or environment.
    """
    repos = load_repos_config(settings.github.repos_config_path)
    if repos:
        return repos
    hint = f"or create {settings.github.repos_config_path}"
    owner = require(settings.github.owner, "GITHUB_OWNER", hint)
    repo = require(settings.github.repo, "GITHUB_REPO", hint)
    return [RepoConfig(owner=owner, repo=repo)]


class CacheSyncCommand:
    """
    Runs the init/update jobs for the GitHub and Slack caches and prints a
    short report per scope.
    """

    def __init__(
        self,
        settings: AppSettings,
        *,
        github_sync: Optional[GitHubCacheSync] = None,
        slack_sync: Optional[SlackCacheSync] = None,
    ):
        self.settings = settings
        self._github_sync = github_sync
        self._slack_sync = slack_sync

    def github(self, mode: str) -> SyncSummary:
        repos = resolve_repos(self.settings)
        sync = self._github_sync or self._build_github_sync()
        print(f"GitHub cache {mode}: {len(repos)} repositories")
        summary = sync.run_initialize(repos) if mode == INIT else sync.run_update(repos)
        self._report(summary)
        return summary

    def slack(self, mode: str) -> SyncSummary:
        channels = self.settings.slack.channels
        if not channels:
            raise ConfigValidationError("No Slack channels configured (slack.channels or SLACK_CHANNEL_NAME)")
        sync = self._slack_sync or self._build_slack_sync()
        print(f"Slack cache {mode}: {len(channels)} channels")
        summary = sync.run_initialize(channels) if mode == INIT else sync.run_update(channels)
        self._report(summary)
        return summary

    def _build_github_sync(self) -> GitHubCacheSync:
        require(self.settings.github.token, "GITHUB_TOKEN")
        cache = GitHubCacheService(self.settings.cache.data_dir)
        return GitHubCacheSync(self.settings.github, cache)

    def _build_slack_sync(self) -> SlackCacheSync:
        require(self.settings.slack.token, "SLACK_TOKEN")
        client = SlackAPIClient(self.settings.slack)
        history = SlackHistoryService(client, page_limit=self.settings.slack.page_limit)
        cache = SlackCacheService(self.settings.cache.data_dir)
        return SlackCacheSync(history, cache)

    @staticmethod
    def _report(summary: SyncSummary) -> None:
        for result in summary.results:
            if result.status == FAILED:
                print(f"  {result.scope}: failed ({result.message})")
            elif result.ok:
                print(f"  {result.scope}: {result.status}, added {result.added}, total {result.total}")
            else:
                print(f"  {result.scope}: skipped ({result.message})")
        print(f"Done. Succeeded: {summary.succeeded}, Skipped: {summary.skipped}, Failed: {summary.failed}")


__all__ = ["CacheSyncCommand", "INIT", "UPDATE", "resolve_repos"]
