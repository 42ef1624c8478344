"""
Session storage backends: in-memory and JSON file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path  # noqa: TC003

logger = logging.getLogger(__name__)


class MemorySessionStore:
    """Process-local store, the analogue of browser session storage."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, values: dict[str, str]) -> None:
        self._data.update(values)

    def clear(self, keys: list[str] | None = None) -> None:
        if keys is None:
            self._data.clear()
            return
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileSessionStore:
    """Store persisted as one JSON object, replaced atomically on write."""

    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path

    def _load(self) -> dict[str, str]:
        try:
            with self.file_path.open() as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError:
            logger.warning("Ignoring unreadable session file %s", self.file_path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=f".{self.file_path.name}."
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def read(self, key: str) -> str | None:
        return self._load().get(key)

    def write(self, values: dict[str, str]) -> None:
        data = self._load()
        data.update(values)
        self._save(data)

    def clear(self, keys: list[str] | None = None) -> None:
        if keys is None:
            self._save({})
            return
        data = self._load()
        for key in keys:
            data.pop(key, None)
        self._save(data)

    def keys(self) -> list[str]:
        return list(self._load())
