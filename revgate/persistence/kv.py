"""
Key-value stores backing the revision and approval collections.

Values are opaque strings; encoding is the collection layer's job.
"""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """In-process store; used by tests and by embedding callers."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class FileKeyValueStore:
    """
    One file per key under a directory:

        .revgate/revgate-revisions.json
        .revgate/revgate-approvals.json

    Writes go to a temp file first and are renamed into place, so readers
    never observe a half-written collection.
    """

    def __init__(self, root: Path):
        self.root = root
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.fullmatch(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        with self._lock:
            self.root.mkdir(parents=True, exist_ok=True)
            temp_path = path.with_suffix(".tmp")
            temp_path.write_text(value, encoding="utf-8")
            temp_path.replace(path)

    def exists(self, key: str) -> bool:
        return self._path(key).exists()
