"""
OpenAI client factory with HTTP connection pooling.
"""

import logging
from typing import Optional

import httpx
from openai import OpenAI

from ..config.models import OpenAISettings

logger = logging.getLogger(__name__)


def build_openai_client(
    settings: OpenAISettings,
    max_keepalive: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
    http_client: Optional[httpx.Client] = None,
) -> OpenAI:
    """
    Create an OpenAI client backed by a pooled httpx client.

    Args:
        settings: OpenAI settings (api key, model)
        max_keepalive: Keep-alive connections to hold open
        max_connections: Upper bound on concurrent connections
        keepalive_expiry: Seconds before an idle connection is dropped
        http_client: Pre-built httpx client (tests)

    Returns:
        Configured OpenAI client
    """
    if not settings.api_key:
        raise ValueError("OpenAI API key not found in config")

    if http_client is None:
        http_client = httpx.Client(
            limits=httpx.Limits(
                max_keepalive_connections=max_keepalive,
                max_connections=max_connections,
                keepalive_expiry=keepalive_expiry,
            ),
            timeout=httpx.Timeout(
                timeout=120.0,     # Total timeout
                connect=10.0,      # Connection timeout
            ),
        )

    client = OpenAI(
        api_key=settings.api_key,
        http_client=http_client,
        max_retries=2,  # Automatic retries for transient failures
    )
    logger.info(
        "[OPENAI CLIENT] Created client for model %s (max_connections=%s, keepalive=%s)",
        settings.model,
        max_connections,
        max_keepalive,
    )
    return client
