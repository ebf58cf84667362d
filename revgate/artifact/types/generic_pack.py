from __future__ import annotations

from typing import Any

from ...config import EngineConfig
from . import Issues


class JsonSchemaPack:
    """Best-effort checks for JSON artifacts with no dedicated schema: it must parse."""

    parses_json = True

    def check(self, document: Any, config: EngineConfig) -> Issues:
        return [], []


class TextSchemaPack:
    """Markdown-style artifacts carry free text; only the empty-content rule applies."""

    parses_json = False

    def check(self, document: Any, config: EngineConfig) -> Issues:
        return [], []
