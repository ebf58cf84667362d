"""Validation issue codes reported in ValidationResult errors and warnings."""

from __future__ import annotations

# Errors
EMPTY_CONTENT = "EMPTY_CONTENT"
INVALID_JSON = "INVALID_JSON"
INVALID_TYPE = "INVALID_TYPE"
MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
INVALID_TESTID_FORMAT = "INVALID_TESTID_FORMAT"

# Warnings
MISSING_PROP_TYPE = "MISSING_PROP_TYPE"

ERROR_CODES = frozenset({
    EMPTY_CONTENT,
    INVALID_JSON,
    INVALID_TYPE,
    MISSING_REQUIRED_FIELD,
    INVALID_ENUM_VALUE,
    INVALID_TESTID_FORMAT,
})

WARNING_CODES = frozenset({
    MISSING_PROP_TYPE,
})
