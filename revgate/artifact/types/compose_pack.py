from __future__ import annotations

from typing import Any

from ...config import EngineConfig
from ...models import ValidationIssue
from .. import codes
from . import Issues


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


class ComposeSchemaPack:
    """Component composition spec: `{componentName, layer?, props?}`."""

    parses_json = True

    def check(self, document: Any, config: EngineConfig) -> Issues:
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        if not isinstance(document, dict):
            errors.append(
                ValidationIssue(
                    path="",
                    message=f"Compose spec must be a JSON object, got {_type_name(document)}",
                    code=codes.INVALID_TYPE,
                    suggested_fix='Wrap the spec in an object, e.g. {"componentName": "..."}',
                )
            )
            return errors, warnings

        if "componentName" not in document:
            errors.append(
                ValidationIssue(
                    path="/componentName",
                    message="Missing required field: componentName",
                    code=codes.MISSING_REQUIRED_FIELD,
                    suggested_fix='Add "componentName": "<ComponentName>"',
                )
            )
        elif not isinstance(document["componentName"], str):
            errors.append(
                ValidationIssue(
                    path="/componentName",
                    message=f"componentName must be a string, got {_type_name(document['componentName'])}",
                    code=codes.INVALID_TYPE,
                )
            )

        if "layer" in document and document["layer"] not in config.allowed_layers:
            errors.append(
                ValidationIssue(
                    path="/layer",
                    message=(
                        f"Invalid layer {document['layer']!r}; "
                        f"expected one of: {', '.join(config.allowed_layers)}"
                    ),
                    code=codes.INVALID_ENUM_VALUE,
                    suggested_fix=f"Use one of: {', '.join(config.allowed_layers)}",
                )
            )

        if "props" in document:
            props = document["props"]
            if not isinstance(props, dict):
                errors.append(
                    ValidationIssue(
                        path="/props",
                        message=f"props must be an object, got {_type_name(props)}",
                        code=codes.INVALID_TYPE,
                        suggested_fix='Use an object keyed by prop name, e.g. {"label": {"type": "string"}}',
                    )
                )
            else:
                for prop_name, prop_def in props.items():
                    if not isinstance(prop_def, dict) or "type" not in prop_def:
                        warnings.append(
                            ValidationIssue(
                                path=f"/props/{prop_name}",
                                message=f"Prop {prop_name!r} has no type",
                                code=codes.MISSING_PROP_TYPE,
                                suggested_fix=f'Add "type" to props.{prop_name}',
                            )
                        )

        return errors, warnings
