"""
Local mirror of Slack channel history, one snapshot per channel.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .merge import Record, latest_timestamp, merge_messages
from .models import ChannelSnapshot
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class SlackCacheService:
    """
    Loads, saves and merges cached Slack messages.

    Snapshots live under ``<base_dir>/slack/<channel_id>.json``.
    """

    def __init__(self, base_dir: str | Path = "data"):
        self.store = SnapshotStore(Path(base_dir) / "slack")

    def load_cache(self, channel_id: str) -> Optional[ChannelSnapshot]:
        data = self.store.load(channel_id)
        if data is None:
            return None
        return ChannelSnapshot.from_dict(data, source=str(self.store.path_for(channel_id)))

    def list_channel_ids(self) -> List[str]:
        return self.store.keys()

    def save_cache(self, snapshot: ChannelSnapshot) -> None:
        path = self.store.save(snapshot.channel_id, snapshot.to_dict())
        logger.info(
            "[SLACK CACHE] Saved %s messages for #%s to %s",
            len(snapshot.messages),
            snapshot.channel_name,
            path,
        )

    def merge_messages(self, existing: List[Record], incoming: List[Record]) -> List[Record]:
        return merge_messages(existing, incoming)

    def get_latest_timestamp(self, messages: List[Record]) -> str:
        return latest_timestamp(messages)


__all__ = ["SlackCacheService"]
