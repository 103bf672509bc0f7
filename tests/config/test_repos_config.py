import json

import pytest

from ai_pm.config.repos import RepoConfig, load_repos_config
from ai_pm.config_validator import ConfigValidationError


def _write(path, payload):
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return path


def test_missing_file_returns_none(temp_dir):
    assert load_repos_config(temp_dir / "github-repos.json") is None


def test_valid_file_lists_repositories(temp_dir):
    path = _write(
        temp_dir / "repos.json",
        {"repositories": [{"owner": "org", "repo": "api"}, {"owner": "org", "repo": "web"}]},
    )

    repos = load_repos_config(path)

    assert repos == [RepoConfig("org", "api"), RepoConfig("org", "web")]
    assert repos[1].scope == "org/web"


def test_invalid_json_is_rejected(temp_dir):
    path = _write(temp_dir / "repos.json", "{oops")

    with pytest.raises(ConfigValidationError, match="Invalid JSON"):
        load_repos_config(path)


def test_missing_repositories_array_is_rejected(temp_dir):
    path = _write(temp_dir / "repos.json", {"repos": []})

    with pytest.raises(ConfigValidationError, match='"repositories" array is required'):
        load_repos_config(path)


def test_entry_without_repo_reports_index(temp_dir):
    path = _write(
        temp_dir / "repos.json",
        {"repositories": [{"owner": "org", "repo": "api"}, {"owner": "org"}]},
    )

    with pytest.raises(ConfigValidationError) as exc_info:
        load_repos_config(path)

    assert 'Invalid entry at index 1: "repo" is required and must be a string' in str(exc_info.value)


def test_entry_with_non_string_owner_is_rejected(temp_dir):
    path = _write(temp_dir / "repos.json", {"repositories": [{"owner": 5, "repo": "api"}]})

    with pytest.raises(ConfigValidationError, match='index 0: "owner"'):
        load_repos_config(path)
