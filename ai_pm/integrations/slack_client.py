"""
Slack API client utilities.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..config.models import SlackSettings

logger = logging.getLogger(__name__)


class SlackAPIError(RuntimeError):
    """Raised when Slack API responses are unsuccessful."""

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.error = error


class SlackAPIClient:
    """
    Lightweight wrapper around the Slack Web API.

    Covers the conversation endpoints the channel cache needs: listing,
    joining, history and thread replies.
    """

    BASE_URL = "https://slack.com/api"

    def __init__(self, settings: SlackSettings, session: Optional[requests.Session] = None):
        if not settings.token:
            raise SlackAPIError(
                "Slack credentials not configured. Set SLACK_TOKEN (or legacy "
                "SLACK_BOT_TOKEN) in your environment or slack.token in config.yaml."
            )
        self.settings = settings
        self.session = session or self._build_session(settings.token)

    @staticmethod
    def _build_session(token: str) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
            "User-Agent": "ai-pm/SlackIntegration",
        })
        return session

    # ------------------------------------------------------------------
    # Public API helpers
    # ------------------------------------------------------------------
    def list_channels(
        self,
        limit: int = 200,
        types: str = "public_channel,private_channel",
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        List channels in the workspace (one page).

        Args:
            limit: Maximum number of channels to return
            types: Comma-separated channel types to include
            cursor: Pagination cursor from previous response
        """
        params: Dict[str, Any] = {
            "limit": max(1, min(limit, 1000)),
            "types": types,
        }
        if cursor:
            params["cursor"] = cursor
        data = self._get("conversations.list", params=params)
        self._raise_for_error(data, "list_channels")
        return data

    def join_channel(self, channel: str) -> Dict[str, Any]:
        data = self._post("conversations.join", json={"channel": channel})
        self._raise_for_error(data, "join_channel")
        return data

    def fetch_messages(
        self,
        channel: str,
        limit: int = 100,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Fetch one page of channel history.

        Args:
            channel: Channel ID (e.g., "C0123456789")
            limit: Maximum number of messages to return (1-1000)
            oldest: Only messages after this timestamp
            latest: Only messages before this timestamp
            cursor: Pagination cursor from previous response

        Returns:
            Raw Slack response with messages and response_metadata
        """
        params: Dict[str, Any] = {
            "channel": channel,
            "limit": max(1, min(limit, 1000)),
        }
        if oldest:
            params["oldest"] = oldest
        if latest:
            params["latest"] = latest
        if cursor:
            params["cursor"] = cursor

        data = self._get("conversations.history", params=params)
        self._raise_for_error(data, "fetch_messages")
        return data

    def fetch_thread(
        self,
        channel: str,
        thread_ts: str,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
        limit: int = 200,
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Fetch one page of a Slack thread (parent message + replies).

        Args:
            channel: Channel ID housing the thread.
            thread_ts: Timestamp of root message.
            oldest: Only replies after this timestamp
            latest: Only replies before this timestamp
            limit: Maximum replies to return.
            cursor: Pagination cursor from previous response
        """
        params: Dict[str, Any] = {
            "channel": channel,
            "ts": thread_ts,
            "limit": max(1, min(limit, 1000)),
        }
        if oldest:
            params["oldest"] = oldest
        if latest:
            params["latest"] = latest
        if cursor:
            params["cursor"] = cursor
        data = self._get("conversations.replies", params=params)
        self._raise_for_error(data, "fetch_thread")
        return data

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a GET request to the Slack API."""
        url = f"{self.BASE_URL}/{endpoint}"
        response = self.session.get(url, params=params, timeout=self.settings.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a POST request to the Slack API."""
        url = f"{self.BASE_URL}/{endpoint}"
        response = self.session.post(url, json=json, timeout=self.settings.timeout)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _raise_for_error(data: Dict[str, Any], action: str) -> None:
        """
        Raise SlackAPIError if the response indicates an error.

        Slack API returns ok: false when there's an error.
        """
        if not data.get("ok", False):
            error_code = data.get("error", "unknown_error")
            logger.debug("Slack API error during %s: %s", action, error_code)
            raise SlackAPIError(f"Slack API error during {action}: {error_code}", error=error_code)


__all__ = ["SlackAPIClient", "SlackAPIError"]
