"""
Artifact schema packs.

A schema pack checks the parsed document of one detected schema and returns
(errors, warnings). Packs never raise for malformed input.
"""

from __future__ import annotations

from typing import Any, Protocol

from ...config import EngineConfig
from ...models import ValidationIssue


Issues = tuple[list[ValidationIssue], list[ValidationIssue]]


class SchemaPack(Protocol):
    # Whether content must parse as JSON before check() is called.
    parses_json: bool

    def check(self, document: Any, config: EngineConfig) -> Issues:
        ...


from .compose_pack import ComposeSchemaPack
from .generic_pack import JsonSchemaPack, TextSchemaPack
from .testids_pack import TestIdsSchemaPack


SCHEMA_PACKS: dict[str, SchemaPack] = {
    "compose": ComposeSchemaPack(),
    "testids": TestIdsSchemaPack(),
    "json": JsonSchemaPack(),
    "unknown": JsonSchemaPack(),
    "section": TextSchemaPack(),
    "e2e": TextSchemaPack(),
    "markdown": TextSchemaPack(),
}


def get_schema_pack(schema: str) -> SchemaPack:
    """Get the pack for a detected schema; unregistered names get generic JSON checks."""
    return SCHEMA_PACKS.get((schema or "").strip().lower(), SCHEMA_PACKS["unknown"])


def list_schemas() -> list[str]:
    return sorted(SCHEMA_PACKS.keys())
