"""
Typed settings models.

The repository list loader lives in ``ai_pm.config.repos`` and is imported
from there directly to keep this package free of the validator import.
"""

from .models import (
    AppSettings,
    CacheSettings,
    GitHubSettings,
    LoggingSettings,
    OpenAISettings,
    SlackSettings,
)

__all__ = [
    "AppSettings",
    "CacheSettings",
    "GitHubSettings",
    "LoggingSettings",
    "OpenAISettings",
    "SlackSettings",
]
