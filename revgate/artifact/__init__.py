"""
Artifact schema validation.

Schema detection is a function of the artifact path; each detected schema has
a type pack that checks the parsed content and reports structured issues.
Validation never raises for bad content: an invalid artifact is an expected
outcome and comes back as a ValidationResult.
"""

from .naming import (
    COMPOSE_MARKER,
    E2E_MARKER,
    SECTION_MARKER,
    TESTIDS_MARKER,
    detect_schema,
    is_component_spec,
    is_documentation,
    is_testids,
)
from .validator import validate, validate_all

__all__ = [
    # Naming conventions
    "COMPOSE_MARKER",
    "TESTIDS_MARKER",
    "SECTION_MARKER",
    "E2E_MARKER",
    "detect_schema",
    "is_component_spec",
    "is_documentation",
    "is_testids",
    # Validation
    "validate",
    "validate_all",
]
