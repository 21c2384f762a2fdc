# subsonic_adapter/io/session_storage.py

"""Durable string key/value storage for the login session."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    """In-process storage; forgotten when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class JsonFileStorage:
    """Storage backed by a flat JSON object on disk.

    The file is read once on construction and rewritten on every ``set``.
    ``clear`` removes the file and therefore every key in it.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with self._path.open("r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return {}

        if not isinstance(obj, dict):
            logger.warning("Ignoring session file %s: not a JSON object", self._path)
            return {}

        return {str(k): str(v) for k, v in obj.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2)

    def clear(self) -> None:
        self._data.clear()
        self._path.unlink(missing_ok=True)
