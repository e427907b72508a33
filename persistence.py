"""Key-value persistence.

The calculator persists two keys, each holding JSON text the way browser
local storage does. Two backends are provided: an in-memory one for
tests and ephemeral runs, and a JSON file that is rewritten whole on
every change.

Writes are best-effort. A failed write is logged and otherwise ignored;
the in-memory view stays authoritative for the running session.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

THEME_KEY = "calculatorTheme"
HISTORY_KEY = "calculatorHistory"


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage:
    """Storage backed by a single JSON object on disk.

    The file is read once on construction. Every `set` and `delete`
    rewrites it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            logger.warning("Could not write storage file %s: %s", self.path, e)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()


def read_json(storage: KeyValueStorage, key: str) -> object | None:
    """Decode the JSON value under `key`; missing or malformed reads as None."""
    text = storage.get(key)
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError:
        logger.warning("Ignoring malformed value under %r", key)
        return None


def write_json(storage: KeyValueStorage, key: str, value: object) -> None:
    storage.set(key, json.dumps(value))
