"""
Loader for the optional multi-repository list (config/github-repos.json).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config_validator import ConfigValidationError


@dataclass(frozen=True)
class RepoConfig:
    owner: str
    repo: str

    @property
    def scope(self) -> str:
        return f"{self.owner}/{self.repo}"


def load_repos_config(config_path: str | Path = "config/github-repos.json") -> Optional[List[RepoConfig]]:
    """
    Read the repository list.

    Returns None when the file does not exist. A file that exists but
    cannot be used raises ConfigValidationError.
    """
    path = Path(config_path)
    if not path.exists():
        return None

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(f"Invalid JSON in {path}") from exc

    repositories = data.get("repositories") if isinstance(data, dict) else None
    if not isinstance(repositories, list):
        raise ConfigValidationError(f'"repositories" array is required in {path}')

    repos: List[RepoConfig] = []
    for index, entry in enumerate(repositories):
        entry = entry if isinstance(entry, dict) else {}
        for name in ("owner", "repo"):
            value = entry.get(name)
            if not value or not isinstance(value, str):
                raise ConfigValidationError(
                    f'Invalid entry at index {index}: "{name}" is required and must be a string'
                )
        repos.append(RepoConfig(owner=entry["owner"], repo=entry["repo"]))
    return repos


__all__ = ["RepoConfig", "load_repos_config"]
