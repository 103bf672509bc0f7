"""
Pytest configuration and fixtures for the ai-pm test suite.

This file provides:
- Temporary data directories
- Settings objects built from an in-memory config
- Isolation from the developer's real tokens
"""

import sys
import shutil
import tempfile
from pathlib import Path

import pytest

# Add project root to path
BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))

from ai_pm.config_validator import build_settings


ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_API_URL",
    "SLACK_TOKEN",
    "SLACK_BOT_TOKEN",
    "SLACK_CHANNEL_NAME",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "LANGUAGE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep real credentials from leaking into tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="function")
def temp_dir():
    """Provide temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def raw_config(temp_dir):
    return {
        "github": {
            "token": "ghp_test",
            "owner": "org",
            "repo": "app",
            "repos_config": str(temp_dir / "github-repos.json"),
        },
        "slack": {"token": "xoxb-test", "channels": ["general"]},
        "openai": {"api_key": "sk-test", "model": "gpt-4o", "language": "en"},
        "cache": {"data_dir": str(temp_dir / "data"), "output_dir": str(temp_dir / "output")},
        "logging": {"level": "INFO", "file": str(temp_dir / "app.log")},
    }


@pytest.fixture
def settings(raw_config):
    return build_settings(raw_config)
