"""
Artifact schema validator.

validate() maps one artifact to a fresh ValidationResult. It is pure: no I/O,
no mutation, and no exceptions for bad content.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable

from ..config import DEFAULT_CONFIG, EngineConfig
from ..models import GeneratedArtifact, ValidationIssue, ValidationResult
from . import codes
from .naming import detect_schema
from .types import get_schema_pack


logger = logging.getLogger(__name__)

GENERIC_JSON_FIX = "Check the JSON syntax: quotes, commas, and matching brackets"


def _empty_content(artifact: GeneratedArtifact, schema: str) -> ValidationResult:
    return ValidationResult(
        artifact_id=artifact.id,
        artifact_path=artifact.path,
        schema=schema,
        errors=(
            ValidationIssue(
                path="",
                message="Artifact has no content",
                code=codes.EMPTY_CONTENT,
                suggested_fix="Regenerate the artifact so it includes content",
            ),
        ),
    )


def validate(artifact: GeneratedArtifact, config: EngineConfig | None = None) -> ValidationResult:
    """Validate a single artifact against the schema detected from its path."""
    config = config or DEFAULT_CONFIG
    schema = detect_schema(artifact.path)

    if artifact.content is None or not artifact.content.strip():
        return _empty_content(artifact, schema)

    pack = get_schema_pack(schema)
    document: object = artifact.content
    if pack.parses_json:
        try:
            document = json.loads(artifact.content)
        except json.JSONDecodeError as e:
            return ValidationResult(
                artifact_id=artifact.id,
                artifact_path=artifact.path,
                schema=schema,
                errors=(
                    ValidationIssue(
                        path="",
                        message=f"Invalid JSON: {e}",
                        code=codes.INVALID_JSON,
                        suggested_fix=GENERIC_JSON_FIX,
                    ),
                ),
            )

    errors, warnings = pack.check(document, config)
    result = ValidationResult(
        artifact_id=artifact.id,
        artifact_path=artifact.path,
        schema=schema,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
    logger.debug(
        "validated %s as %s: %d error(s), %d warning(s)",
        artifact.path,
        schema,
        len(result.errors),
        len(result.warnings),
    )
    return result


def validate_all(
    artifacts: Iterable[GeneratedArtifact],
    config: EngineConfig | None = None,
) -> list[ValidationResult]:
    """Validate artifacts in order; one result per artifact."""
    return [validate(artifact, config) for artifact in artifacts]
