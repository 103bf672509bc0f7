"""
Config validation and typed access.

Turns the raw dict from load_config() into frozen settings objects that
are handed to each service at construction time.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from .config.models import (
    AppSettings,
    CacheSettings,
    GitHubSettings,
    LoggingSettings,
    OpenAISettings,
    SlackSettings,
)

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _clean(value: Any) -> Optional[str]:
    """Treat empty strings and unexpanded ${VAR} placeholders as missing."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.startswith("${"):
        return None
    return text


def _first(*values: Any) -> Optional[str]:
    for value in values:
        cleaned = _clean(value)
        if cleaned:
            return cleaned
    return None


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(f"Config section '{name}' must be a mapping")
    return section


def _channels(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    if not isinstance(raw, list):
        raise ConfigValidationError("slack.channels must be a list of channel names or ids")
    return [str(item).strip() for item in raw if str(item).strip()]


def build_settings(config: Dict[str, Any]) -> AppSettings:
    """
    Build typed settings from a raw config dict.

    Environment variables fill in anything the YAML leaves empty, so a bare
    .env is enough to run against a single repository and channel.
    """
    github_cfg = _section(config, "github")
    slack_cfg = _section(config, "slack")
    openai_cfg = _section(config, "openai")
    cache_cfg = _section(config, "cache")
    logging_cfg = _section(config, "logging")

    github = GitHubSettings(
        token=_first(github_cfg.get("token"), os.getenv("GITHUB_TOKEN")),
        owner=_first(github_cfg.get("owner"), os.getenv("GITHUB_OWNER")),
        repo=_first(github_cfg.get("repo"), os.getenv("GITHUB_REPO")),
        api_url=(_first(github_cfg.get("api_url"), os.getenv("GITHUB_API_URL")) or "https://api.github.com").rstrip("/"),
        user_agent=_first(github_cfg.get("user_agent")) or "ai-pm/0.1",
        repos_config_path=_first(github_cfg.get("repos_config")) or "config/github-repos.json",
        include_pull_requests=bool(github_cfg.get("include_pull_requests", True)),
        include_comments=bool(github_cfg.get("include_comments", True)),
        timeout=float(github_cfg.get("timeout", 30.0)),
    )

    channels = _channels(slack_cfg.get("channels"))
    if not channels:
        channels = _channels(os.getenv("SLACK_CHANNEL_NAME"))
    slack = SlackSettings(
        token=_first(slack_cfg.get("token"), os.getenv("SLACK_TOKEN"), os.getenv("SLACK_BOT_TOKEN")),
        channels=channels,
        page_limit=max(1, min(int(slack_cfg.get("page_limit", 100)), 1000)),
        timeout=float(slack_cfg.get("timeout", 30.0)),
    )

    language = _first(openai_cfg.get("language"), os.getenv("LANGUAGE")) or "ja"
    if language not in ("ja", "en"):
        raise ConfigValidationError(f"Unsupported language '{language}'. Expected one of: ja, en.")
    openai = OpenAISettings(
        api_key=_first(openai_cfg.get("api_key"), os.getenv("OPENAI_API_KEY")),
        model=_first(openai_cfg.get("model"), os.getenv("OPENAI_MODEL")) or "gpt-4o",
        temperature=float(openai_cfg.get("temperature", 0.7)),
        language=language,
    )

    cache = CacheSettings(
        data_dir=_first(cache_cfg.get("data_dir")) or "data",
        output_dir=_first(cache_cfg.get("output_dir")) or "output",
    )
    log_settings = LoggingSettings(
        level=_first(logging_cfg.get("level")) or "INFO",
        file=_first(logging_cfg.get("file")) or "data/app.log",
    )

    return AppSettings(github=github, slack=slack, openai=openai, cache=cache, logging=log_settings)


def require(value: Optional[str], name: str, hint: str = "") -> str:
    """
    Return a required setting or raise a descriptive error.

    Raises:
        ConfigValidationError: If the value is missing
    """
    if not value:
        message = f"{name} is required"
        if hint:
            message = f"{message} ({hint})"
        raise ConfigValidationError(message)
    return value


__all__ = ["ConfigValidationError", "build_settings", "require"]
