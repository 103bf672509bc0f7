"""
Utility functions for configuration and logging.
"""

import os
import logging
import yaml
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional
from dotenv import load_dotenv, find_dotenv


class DateRange(NamedTuple):
    """Inclusive time window with timezone-aware bounds."""

    start: datetime
    end: datetime


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    The project-local .env is loaded first so ${VAR} placeholders in the
    YAML resolve against it.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary
    """
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}

    # Expand environment variables
    config = _expand_env_vars(config)

    return config


def _expand_env_vars(config: Any) -> Any:
    """
    Recursively expand environment variables in config.

    Args:
        config: Configuration dictionary

    Returns:
        Config with expanded environment variables
    """
    if isinstance(config, dict):
        return {k: _expand_env_vars(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_expand_env_vars(item) for item in config]
    elif isinstance(config, str):
        # Replace ${VAR} with environment variable
        if config.startswith('${') and config.endswith('}'):
            var_name = config[2:-1]
            return os.getenv(var_name, config)
        return config
    else:
        return config


def setup_logging(config: Dict[str, Any]):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_level = config.get('logging', {}).get('level', 'INFO')
    log_file = config.get('logging', {}).get('file', 'data/app.log')

    # Create log directory
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),
        ]
    )

    # Reduce noise from some libraries
    logging.getLogger('openai').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """UTC ISO-8601 with a trailing Z, the format GitHub expects for `since`."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def last_days(days: int, now: Optional[datetime] = None) -> DateRange:
    end = now or utc_now()
    return DateRange(start=end - timedelta(days=days), end=end)


__all__ = [
    "DateRange",
    "last_days",
    "load_config",
    "parse_iso",
    "setup_logging",
    "to_iso",
    "utc_now",
]
