"""
Persistence adapter.

Revisions and approvals live in two independently keyed collections of a
key-value store, each serialised as an ordered JSON list of flat objects.
"""

from .collections import APPROVALS_KEY, REVISIONS_KEY, Collection
from .kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "Collection",
    "REVISIONS_KEY",
    "APPROVALS_KEY",
]
