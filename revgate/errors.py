"""
Exception hierarchy for the approval engine.

Schema problems in artifacts are never raised; they are returned as
ValidationResult data. Everything here signals a caller-side problem.
"""

from __future__ import annotations

from typing import Sequence


class RevgateError(Exception):
    """Base class for all revgate errors."""


class NotFoundError(RevgateError, LookupError):
    """An unknown revision, approval or checklist item id was referenced."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class ApprovalPreconditionError(RevgateError, ValueError):
    """Approval was attempted before its checklist and gates allow it."""

    def __init__(self, unchecked_items: Sequence[str], failing_gates: Sequence[str]):
        self.unchecked_items = list(unchecked_items)
        self.failing_gates = list(failing_gates)
        parts: list[str] = []
        if self.unchecked_items:
            parts.append(
                f"{len(self.unchecked_items)} required checklist item(s) unchecked "
                f"({', '.join(self.unchecked_items)})"
            )
        if self.failing_gates:
            parts.append(
                f"{len(self.failing_gates)} required gate(s) not passing "
                f"({', '.join(self.failing_gates)})"
            )
        super().__init__("Cannot approve: " + "; ".join(parts))


class InvalidTransitionError(RevgateError, ValueError):
    """The entity is in a state that does not allow the requested operation."""


class ConflictError(RevgateError):
    """An expected_version did not match the stored version (lost update)."""

    def __init__(self, kind: str, identifier: str, expected: int, actual: int):
        self.kind = kind
        self.identifier = identifier
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{kind} {identifier} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class PersistenceError(RevgateError):
    """A stored collection could not be read, decoded or written."""


class ConfigError(RevgateError, ValueError):
    """Invalid engine configuration."""
