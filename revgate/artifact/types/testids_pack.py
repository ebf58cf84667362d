from __future__ import annotations

import re
from typing import Any, Iterator

from ...config import EngineConfig
from ...models import ValidationIssue
from .. import codes
from . import Issues


def _escape_pointer(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def iter_string_leaves(node: Any, pointer: str = "") -> Iterator[tuple[str, str]]:
    """Yield (json_pointer, value) for every string leaf, depth first, in document order."""
    if isinstance(node, dict):
        for key, value in node.items():
            yield from iter_string_leaves(value, f"{pointer}/{_escape_pointer(str(key))}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from iter_string_leaves(value, f"{pointer}/{index}")
    elif isinstance(node, str):
        yield pointer, node


def suggest_testid(value: str) -> str:
    """Kebab-case a test id candidate: `Page_Header.Title` -> `page-header-title`."""
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", value)
    return re.sub(r"[^a-z0-9]+", "-", spaced.lower()).strip("-")


class TestIdsSchemaPack:
    """Test-id maps: every string leaf must follow the category-scoped kebab format."""

    __test__ = False

    parses_json = True

    def check(self, document: Any, config: EngineConfig) -> Issues:
        errors: list[ValidationIssue] = []

        if not isinstance(document, dict):
            errors.append(
                ValidationIssue(
                    path="",
                    message="Test-id map must be a JSON object",
                    code=codes.INVALID_TYPE,
                    suggested_fix='Use an object, e.g. {"page": {"submit": "app-page-submit"}}',
                )
            )
            return errors, []

        pattern = config.testid_regex
        for pointer, value in iter_string_leaves(document):
            if pattern.fullmatch(value):
                continue
            errors.append(
                ValidationIssue(
                    path=pointer,
                    message=f"Test id {value!r} does not match {pattern.pattern}",
                    code=codes.INVALID_TESTID_FORMAT,
                    suggested_fix=f"Use a prefixed kebab-case id such as {suggest_testid(value) or 'app-component'!r}",
                )
            )

        return errors, []
