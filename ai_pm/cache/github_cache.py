"""
Local mirror of GitHub issues, one snapshot per owner/repo.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .merge import Record, latest_issue_number, merge_issues
from .models import IssueSnapshot
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class GitHubCacheService:
    """
    Loads, saves and merges cached GitHub issues.

    Snapshots live under ``<base_dir>/github/<owner>_<repo>.json``.
    """

    def __init__(self, base_dir: str | Path = "data"):
        self.store = SnapshotStore(Path(base_dir) / "github")

    @staticmethod
    def cache_key(owner: str, repo: str) -> str:
        return f"{owner}_{repo}"

    def load_cache(self, owner: str, repo: str) -> Optional[IssueSnapshot]:
        key = self.cache_key(owner, repo)
        data = self.store.load(key)
        if data is None:
            return None
        return IssueSnapshot.from_dict(data, source=str(self.store.path_for(key)))

    def save_cache(self, snapshot: IssueSnapshot) -> None:
        path = self.store.save(self.cache_key(snapshot.owner, snapshot.repo), snapshot.to_dict())
        logger.info("[GITHUB CACHE] Saved %s issues for %s to %s", len(snapshot.issues), snapshot.scope, path)

    def merge_issues(self, existing: List[Record], incoming: List[Record]) -> List[Record]:
        return merge_issues(existing, incoming)

    def get_latest_issue_number(self, issues: List[Record]) -> int:
        return latest_issue_number(issues)


__all__ = ["GitHubCacheService"]
