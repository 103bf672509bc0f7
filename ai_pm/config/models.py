"""
Typed configuration models for each collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class GitHubSettings:
    token: Optional[str]
    owner: Optional[str]
    repo: Optional[str]
    api_url: str = "https://api.github.com"
    user_agent: str = "ai-pm/0.1"
    repos_config_path: str = "config/github-repos.json"
    include_pull_requests: bool = True
    include_comments: bool = True
    timeout: float = 30.0


@dataclass(frozen=True)
class SlackSettings:
    token: Optional[str]
    channels: List[str] = field(default_factory=list)
    page_limit: int = 100
    timeout: float = 30.0


@dataclass(frozen=True)
class OpenAISettings:
    api_key: Optional[str]
    model: str = "gpt-4o"
    temperature: float = 0.7
    language: str = "ja"


@dataclass(frozen=True)
class CacheSettings:
    data_dir: str = "data"
    output_dir: str = "output"


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    file: str = "data/app.log"


@dataclass(frozen=True)
class AppSettings:
    github: GitHubSettings
    slack: SlackSettings
    openai: OpenAISettings
    cache: CacheSettings
    logging: LoggingSettings
