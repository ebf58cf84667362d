"""
Artifact path naming conventions.

The markers below are load-bearing string contracts shared with the workflow
layer that names generated files (e.g. `specs/COMPOSE_Widget.json`).
"""

from __future__ import annotations

from pathlib import PurePosixPath


COMPOSE_MARKER = "COMPOSE_"
TESTIDS_MARKER = "TESTIDS_"
SECTION_MARKER = "SECTION_"
E2E_MARKER = "E2E_"

SCHEMA_COMPOSE = "compose"
SCHEMA_TESTIDS = "testids"
SCHEMA_SECTION = "section"
SCHEMA_E2E = "e2e"
SCHEMA_JSON = "json"
SCHEMA_MARKDOWN = "markdown"
SCHEMA_UNKNOWN = "unknown"

# Marker checks run in this order; the first hit wins.
_MARKER_SCHEMAS: tuple[tuple[str, str], ...] = (
    (COMPOSE_MARKER, SCHEMA_COMPOSE),
    (TESTIDS_MARKER, SCHEMA_TESTIDS),
    (SECTION_MARKER, SCHEMA_SECTION),
    (E2E_MARKER, SCHEMA_E2E),
)

_EXTENSION_SCHEMAS: dict[str, str] = {
    ".json": SCHEMA_JSON,
    ".md": SCHEMA_MARKDOWN,
}


def detect_schema(path: str) -> str:
    """Detect the schema name for an artifact from its path alone."""
    for marker, schema in _MARKER_SCHEMAS:
        if marker in path:
            return schema
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return _EXTENSION_SCHEMAS.get(suffix, SCHEMA_UNKNOWN)


def is_component_spec(path: str) -> bool:
    return SECTION_MARKER in path or COMPOSE_MARKER in path


def is_testids(path: str) -> bool:
    return TESTIDS_MARKER in path


def is_documentation(path: str) -> bool:
    return ".md" in path
