"""
Slack history retrieval for the channel cache.

Resolves channel names, joins channels when the bot is not a member yet, and
collects history pages plus thread replies for a time window.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..integrations.slack_client import SlackAPIClient, SlackAPIError
from ..utils import DateRange

logger = logging.getLogger(__name__)

# Errors that make a join impossible without a human in the loop.
JOIN_BLOCKERS = {
    "is_archived": "Channel is archived",
    "method_not_supported_for_channel_type": "This is a private channel. Please manually invite the bot.",
}


def _epoch(value) -> str:
    return str(int(value.timestamp()))


class SlackHistoryService:
    """
    Reads channel history through SlackAPIClient.

    Thread replies are fetched one parent at a time.
    """

    def __init__(self, client: SlackAPIClient, page_limit: int = 100):
        self.client = client
        self.page_limit = page_limit

    def get_channel_id_by_name(self, channel_name: str) -> Optional[str]:
        """
        Find a channel id by name (a leading '#' is ignored).

        Returns:
            Channel id, or None when no visible channel has that name
        """
        clean_name = channel_name.lstrip("#")
        cursor: Optional[str] = None
        while True:
            result = self.client.list_channels(limit=200, cursor=cursor)
            for channel in result.get("channels") or []:
                if channel.get("name") == clean_name:
                    return channel.get("id")
            cursor = (result.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return None

    def join_channel(self, channel_id: str) -> bool:
        """
        Join a channel. Already being a member counts as success.
        """
        try:
            self.client.join_channel(channel_id)
        except SlackAPIError as exc:
            if exc.error == "already_in_channel":
                logger.info("[SLACK HISTORY] Already in channel: %s", channel_id)
                return True
            reason = JOIN_BLOCKERS.get(exc.error or "")
            if reason:
                logger.error("[SLACK HISTORY] Cannot join %s: %s", channel_id, reason)
            else:
                logger.error("[SLACK HISTORY] Error joining channel %s: %s", channel_id, exc)
            return False
        logger.info("[SLACK HISTORY] Joined channel: %s", channel_id)
        return True

    def get_thread_replies(
        self,
        channel_id: str,
        thread_ts: str,
        date_range: Optional[DateRange] = None,
    ) -> List[Dict[str, Any]]:
        """
        Replies to a thread inside the window, without the parent message.

        Follows the reply cursor until the thread is exhausted. A failure is
        logged and yields an empty list.
        """
        oldest = _epoch(date_range.start) if date_range else None
        latest = _epoch(date_range.end) if date_range else None
        replies: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        try:
            while True:
                result = self.client.fetch_thread(
                    channel_id,
                    thread_ts,
                    oldest=oldest,
                    latest=latest,
                    cursor=cursor,
                )
                # Slack repeats the parent at the top of every page.
                replies.extend(msg for msg in result.get("messages") or [] if msg.get("ts") != thread_ts)
                cursor = (result.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
        except SlackAPIError as exc:
            logger.error("[SLACK HISTORY] Error fetching thread replies for %s: %s", thread_ts, exc)
            return []
        return replies

    def get_messages_in_range(
        self,
        channel_id: str,
        date_range: Optional[DateRange] = None,
        oldest: Optional[str] = None,
        _retried: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Fetch top-level messages with their thread replies attached.

        Args:
            channel_id: Channel to read
            date_range: Time window; None reads the whole history
            oldest: Exact Slack ts lower bound, overrides the window start
                (used for incremental fetches so sub-second ts are kept)

        Returns:
            Messages with a ``replies`` list on every threaded parent

        Raises:
            SlackAPIError: If history cannot be read, including when the bot
                is not in the channel and joining it failed
        """
        oldest_ts = oldest or (_epoch(date_range.start) if date_range else None)
        latest_ts = _epoch(date_range.end) if date_range else None
        logger.info(
            "[SLACK HISTORY] Fetching %s (oldest=%s, latest=%s)",
            channel_id,
            oldest_ts or "-",
            latest_ts or "-",
        )

        messages: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        try:
            while True:
                result = self.client.fetch_messages(
                    channel_id,
                    limit=self.page_limit,
                    oldest=oldest_ts,
                    latest=latest_ts,
                    cursor=cursor,
                )
                messages.extend(result.get("messages") or [])
                cursor = (result.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
        except SlackAPIError as exc:
            if exc.error == "not_in_channel" and not _retried:
                logger.info("[SLACK HISTORY] Bot is not in %s. Attempting to join...", channel_id)
                if not self.join_channel(channel_id):
                    logger.error(
                        "[SLACK HISTORY] Failed to join %s automatically. "
                        "For private channels invite the bot with /invite @your-bot-name",
                        channel_id,
                    )
                    raise
                return self.get_messages_in_range(channel_id, date_range, oldest=oldest, _retried=True)
            raise

        logger.info("[SLACK HISTORY] Fetched %s main messages", len(messages))

        reply_count = 0
        for message in messages:
            if message.get("thread_ts") and (message.get("reply_count") or 0) > 0:
                replies = self.get_thread_replies(channel_id, message["thread_ts"], date_range)
                message["replies"] = replies
                reply_count += len(replies)

        logger.info("[SLACK HISTORY] Fetched %s thread replies", reply_count)
        return messages


__all__ = ["SlackHistoryService"]
