"""Small key/value settings stores used for the selected currency."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

from currency_exchange.utils.files import atomic_write_text

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


class SettingsStore(Protocol):
    def get_string(self, key: str) -> str | None: ...

    def set_string(self, key: str, value: str) -> None: ...


class InMemorySettings:
    """Settings kept in a dict; used when nothing should touch the disk."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_string(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set_string(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value


class JSONFileSettings:
    """Settings persisted as a flat JSON object.

    A missing or corrupt file reads as empty. Writes rewrite the whole file through
    a temporary file and ``os.replace``.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._path = Path(directory) / SETTINGS_FILE_NAME
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_string(self, key: str) -> str | None:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_string(self, key: str, value: str) -> None:
        with self._lock:
            values = self._read()
            values[key] = value
            self._path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self._path, json.dumps(values, indent=2, sort_keys=True))

    def _read(self) -> dict[str, object]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Settings file %s is unreadable: %s", self._path, exc)
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Settings file %s is not valid JSON; ignoring it", self._path)
            return {}
        return data if isinstance(data, dict) else {}

