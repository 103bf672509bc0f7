"""
JSON-backed snapshot storage: one document per tracked scope.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a persisted snapshot cannot be read or is malformed."""


class SnapshotStore:
    """
    Reads and writes whole snapshot documents under a base directory.

    Documents are never patched in place; every save replaces the file.
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def exists(self, key: str) -> bool:
        return self._path_for_key(key).exists()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Load the stored document for the given key.

        Returns None when nothing has been stored yet.

        Raises:
            SnapshotError: If the file is not valid JSON or not an object
        """
        path = self._path_for_key(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SnapshotError(f"Invalid JSON in snapshot {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {path} must contain a JSON object, got {type(data).__name__}")
        return data

    def save(self, key: str, data: Dict[str, Any]) -> Path:
        """
        Persist a document for the given key (atomic write).
        """
        path = self._path_for_key(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.debug("[SNAPSHOT STORE] Wrote %s", path)
        return path

    def keys(self) -> List[str]:
        """Keys of every stored document, sorted."""
        if not self.base_dir.exists():
            return []
        return sorted(path.stem for path in self.base_dir.glob("*.json"))

    def path_for(self, key: str) -> Path:
        return self._path_for_key(key)

    def _path_for_key(self, key: str) -> Path:
        safe_key = key.replace("/", "_")
        return self.base_dir / f"{safe_key}.json"


__all__ = ["SnapshotError", "SnapshotStore"]
