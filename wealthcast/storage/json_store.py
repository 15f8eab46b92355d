"""One-JSON-file-per-key state store."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Persist opaque JSON blobs under ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path) as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", path, e)
            return default

    def save(self, key: str, value: Any) -> bool:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w") as f:
                json.dump(value, f, indent=2)
            os.replace(tmp, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving %s: %s", path, e)
            return False

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error("Error clearing %s: %s", key, e)
            return False
