"""
Slack channel cache sync: full initialization and incremental updates.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from ..cache import ChannelSnapshot, SlackCacheService
from ..integrations.slack_client import SlackAPIError
from ..services.slack_history_service import SlackHistoryService
from ..utils import to_iso, utc_now
from .results import INITIALIZED, SKIPPED, UPDATED, SyncResult, SyncSummary, run_scopes

logger = logging.getLogger(__name__)

CHANNEL_ID_PATTERN = re.compile(r"^[CG][A-Z0-9]{8,}$")


class SlackCacheSync:
    """
    Keeps one message snapshot per channel in step with Slack.
    """

    def __init__(
        self,
        history: SlackHistoryService,
        cache: SlackCacheService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.history = history
        self.cache = cache
        self.clock = clock

    def resolve_channel(self, channel: str) -> Tuple[str, str]:
        """
        Map a configured channel (name, #name or id) to (id, name).

        Raises:
            SlackAPIError: If no visible channel has that name
        """
        if CHANNEL_ID_PATTERN.match(channel):
            return channel, channel
        name = channel.lstrip("#")
        channel_id = self.history.get_channel_id_by_name(name)
        if not channel_id:
            raise SlackAPIError(f"Channel not found: #{name}", error="channel_not_found")
        return channel_id, name

    def initialize_channel(self, channel: str) -> SyncResult:
        """
        Read the whole channel history and write the first snapshot.

        An existing snapshot is left alone and the channel is reported as skipped.
        """
        channel_id, channel_name = self.resolve_channel(channel)
        existing = self.cache.load_cache(channel_id)
        if existing:
            logger.warning(
                "[SLACK SYNC] Cache already exists for #%s (%s messages, last updated %s); use update instead",
                channel_name,
                len(existing.messages),
                existing.last_updated,
            )
            return SyncResult(
                scope=channel_id,
                status=SKIPPED,
                total=len(existing.messages),
                message="cache already exists",
            )

        messages = self.history.get_messages_in_range(channel_id)
        messages = self.cache.merge_messages([], messages)
        snapshot = ChannelSnapshot(
            channel_id=channel_id,
            channel_name=channel_name,
            last_updated=to_iso(self.clock()),
            messages=messages,
        )
        self.cache.save_cache(snapshot)
        logger.info(
            "[SLACK SYNC] Initialized #%s: %s messages (latest ts %s)",
            channel_name,
            len(messages),
            self.cache.get_latest_timestamp(messages),
        )
        return SyncResult(scope=channel_id, status=INITIALIZED, total=len(messages), added=len(messages))

    def update_channel(self, channel: str) -> SyncResult:
        """
        Fetch messages newer than the latest cached ts (replies included),
        merge them in and save with a fresh wall-clock lastUpdated.
        """
        channel_id, channel_name = self.resolve_channel(channel)
        existing = self.cache.load_cache(channel_id)
        if not existing:
            logger.warning("[SLACK SYNC] Cache not found for #%s; run initialization first", channel_name)
            return SyncResult(scope=channel_id, status=SKIPPED, message="cache not found")

        watermark = self.cache.get_latest_timestamp(existing.messages)
        logger.info(
            "[SLACK SYNC] #%s last updated %s (%s messages, latest ts %s)",
            channel_name,
            existing.last_updated,
            len(existing.messages),
            watermark,
        )
        oldest: Optional[str] = watermark if watermark != "0" else None
        incoming = self.history.get_messages_in_range(channel_id, oldest=oldest)
        merged = self.cache.merge_messages(existing.messages, incoming)
        snapshot = ChannelSnapshot(
            channel_id=channel_id,
            channel_name=existing.channel_name or channel_name,
            last_updated=to_iso(self.clock()),
            messages=merged,
        )
        self.cache.save_cache(snapshot)

        added = max(0, len(merged) - len(existing.messages))
        logger.info(
            "[SLACK SYNC] Updated #%s: fetched %s, added %s, total %s",
            channel_name,
            len(incoming),
            added,
            len(merged),
        )
        return SyncResult(scope=channel_id, status=UPDATED, total=len(merged), added=added)

    def run_initialize(self, channels: Iterable[str]) -> SyncSummary:
        return run_scopes(channels, self.initialize_channel, str, "SLACK SYNC")

    def run_update(self, channels: Iterable[str]) -> SyncSummary:
        return run_scopes(channels, self.update_channel, str, "SLACK SYNC")


__all__ = ["SlackCacheSync"]
