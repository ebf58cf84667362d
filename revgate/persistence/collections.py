from __future__ import annotations

import json
import logging
from typing import Any, Callable, Generic, Iterable, TypeVar

from ..errors import PersistenceError
from .kv import KeyValueStore


logger = logging.getLogger(__name__)

REVISIONS_KEY = "revgate-revisions"
APPROVALS_KEY = "revgate-approvals"

T = TypeVar("T")


class Collection(Generic[T]):
    """An ordered list of entities stored as a JSON array under one key."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        *,
        decode: Callable[[dict[str, Any]], T],
        encode: Callable[[T], dict[str, Any]],
    ):
        self.store = store
        self.key = key
        self._decode = decode
        self._encode = encode

    def load(self) -> list[T]:
        raw = self.store.get(self.key)
        if raw is None or not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Collection {self.key!r} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"Collection {self.key!r} must be a JSON list")

        items: list[T] = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise PersistenceError(f"Collection {self.key!r} entry {index} is not an object")
            try:
                items.append(self._decode(entry))
            except (KeyError, TypeError, ValueError) as e:
                raise PersistenceError(f"Collection {self.key!r} entry {index} is malformed: {e}") from e
        logger.debug("loaded %d item(s) from %s", len(items), self.key)
        return items

    def save(self, items: Iterable[T]) -> None:
        payload = [self._encode(item) for item in items]
        try:
            self.store.set(self.key, json.dumps(payload, indent=2, sort_keys=True))
        except OSError as e:
            raise PersistenceError(f"Collection {self.key!r} could not be written: {e}") from e
        logger.debug("saved %d item(s) to %s", len(payload), self.key)
