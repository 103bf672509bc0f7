"""
GitHub issue cache sync: full initialization and incremental updates.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from ..cache import GitHubCacheService, IssueSnapshot
from ..config.models import GitHubSettings
from ..config.repos import RepoConfig
from ..services.github_issue_service import GitHubIssueService
from ..utils import to_iso, utc_now
from .results import INITIALIZED, SKIPPED, UPDATED, SyncResult, SyncSummary, run_scopes

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[str, str], GitHubIssueService]


class GitHubCacheSync:
    """
    Keeps one issue snapshot per repository in step with GitHub.
    """

    def __init__(
        self,
        settings: GitHubSettings,
        cache: GitHubCacheService,
        service_factory: Optional[ServiceFactory] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings
        self.cache = cache
        self.service_factory = service_factory or (
            lambda owner, repo: GitHubIssueService(settings, owner, repo)
        )
        self.clock = clock

    def initialize_repo(self, owner: str, repo: str) -> SyncResult:
        """
        Fetch every issue and write the first snapshot.

        An existing snapshot is left alone and the repo is reported as skipped.
        """
        scope = f"{owner}/{repo}"
        existing = self.cache.load_cache(owner, repo)
        if existing:
            logger.warning(
                "[GITHUB SYNC] Cache already exists for %s (%s issues, last updated %s); use update instead",
                scope,
                len(existing.issues),
                existing.last_updated,
            )
            return SyncResult(
                scope=scope,
                status=SKIPPED,
                total=len(existing.issues),
                message="cache already exists",
            )

        service = self.service_factory(owner, repo)
        issues = service.get_all_issues(
            include_pull_requests=self.settings.include_pull_requests,
            include_comments=self.settings.include_comments,
        )
        issues = self.cache.merge_issues([], issues)
        snapshot = IssueSnapshot(owner=owner, repo=repo, last_updated=to_iso(self.clock()), issues=issues)
        self.cache.save_cache(snapshot)

        logger.info(
            "[GITHUB SYNC] Initialized %s: %s issues (latest #%s)",
            scope,
            len(issues),
            self.cache.get_latest_issue_number(issues),
        )
        return SyncResult(scope=scope, status=INITIALIZED, total=len(issues), added=len(issues))

    def update_repo(self, owner: str, repo: str) -> SyncResult:
        """
        Fetch issues changed since the last sync, merge them in and save.

        The new watermark is the wall-clock time of this run.
        """
        scope = f"{owner}/{repo}"
        existing = self.cache.load_cache(owner, repo)
        if not existing:
            logger.warning("[GITHUB SYNC] Cache not found for %s; run initialization first", scope)
            return SyncResult(scope=scope, status=SKIPPED, message="cache not found")

        logger.info(
            "[GITHUB SYNC] %s last updated %s (%s issues)",
            scope,
            existing.last_updated,
            len(existing.issues),
        )
        service = self.service_factory(owner, repo)
        updated = service.get_issues_since(
            existing.last_updated,
            include_pull_requests=self.settings.include_pull_requests,
            include_comments=self.settings.include_comments,
        )
        merged = self.cache.merge_issues(existing.issues, updated)
        snapshot = IssueSnapshot(owner=owner, repo=repo, last_updated=to_iso(self.clock()), issues=merged)
        self.cache.save_cache(snapshot)

        added = max(0, len(merged) - len(existing.issues))
        logger.info("[GITHUB SYNC] Updated %s: fetched %s, added %s, total %s", scope, len(updated), added, len(merged))
        return SyncResult(scope=scope, status=UPDATED, total=len(merged), added=added)

    def run_initialize(self, repos: Iterable[RepoConfig]) -> SyncSummary:
        return run_scopes(repos, lambda r: self.initialize_repo(r.owner, r.repo), lambda r: r.scope, "GITHUB SYNC")

    def run_update(self, repos: Iterable[RepoConfig]) -> SyncSummary:
        return run_scopes(repos, lambda r: self.update_repo(r.owner, r.repo), lambda r: r.scope, "GITHUB SYNC")


__all__ = ["GitHubCacheSync"]
