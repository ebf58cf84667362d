"""
Approval gates.

run_gates() derives the fixed, ordered gate battery from a revision. It is a
pure function of the revision and never mutates it.
"""

from __future__ import annotations

from typing import Sequence

from ..artifact.naming import is_component_spec
from ..models import ApprovalGate, GateStatus, Revision


GATE_SCHEMA_VALIDATION = "schema-validation"
GATE_ARTIFACTS_PRESENT = "artifacts-present"
GATE_NO_CRITICAL_ERRORS = "no-critical-errors"
GATE_COMPONENT_SPEC = "component-spec"

GATE_ORDER: tuple[str, ...] = (
    GATE_SCHEMA_VALIDATION,
    GATE_ARTIFACTS_PRESENT,
    GATE_NO_CRITICAL_ERRORS,
    GATE_COMPONENT_SPEC,
)


def _status(ok: bool) -> GateStatus:
    return GateStatus.PASS if ok else GateStatus.FAIL


def schema_validation_gate(revision: Revision) -> ApprovalGate:
    failing = sum(1 for r in revision.validation_results if not r.valid)
    return ApprovalGate(
        id=GATE_SCHEMA_VALIDATION,
        name="Schema Validation",
        description="All artifacts must pass schema validation",
        status=_status(failing == 0),
        required=True,
        details=(
            f"{failing} artifact(s) failed validation"
            if failing
            else "All artifacts validated successfully"
        ),
    )


def artifacts_present_gate(revision: Revision) -> ApprovalGate:
    count = len(revision.outputs)
    return ApprovalGate(
        id=GATE_ARTIFACTS_PRESENT,
        name="Required Artifacts",
        description="All required artifacts must be generated",
        status=_status(count > 0),
        required=True,
        details=f"{count} artifact(s) generated" if count else "No artifacts generated",
    )


def no_critical_errors_gate(revision: Revision) -> ApprovalGate:
    # Counted from the raw error lists, independently of ValidationResult.valid.
    total = sum(len(r.errors) for r in revision.validation_results)
    return ApprovalGate(
        id=GATE_NO_CRITICAL_ERRORS,
        name="No Critical Errors",
        description="No critical validation errors",
        status=_status(total == 0),
        required=True,
        details=f"{total} error(s) found" if total else "No errors found",
    )


def component_spec_gate(revision: Revision) -> ApprovalGate:
    found = any(is_component_spec(a.path) for a in revision.outputs)
    return ApprovalGate(
        id=GATE_COMPONENT_SPEC,
        name="Component Specification",
        description="Component specification must exist",
        status=_status(found),
        required=True,
        details="Component specification found" if found else "Component specification missing",
    )


def run_gates(revision: Revision) -> list[ApprovalGate]:
    return [
        schema_validation_gate(revision),
        artifacts_present_gate(revision),
        no_critical_errors_gate(revision),
        component_spec_gate(revision),
    ]


def gate_status(gates: Sequence[ApprovalGate], gate_id: str) -> GateStatus | None:
    for gate in gates:
        if gate.id == gate_id:
            return gate.status
    return None
