"""
Approval checklist seeding.

Most items are pre-checked from gate results or artifact naming conventions.
Accessibility always starts unchecked: it needs a human.
"""

from __future__ import annotations

from typing import Sequence

from ..artifact.naming import is_documentation, is_testids
from ..models import ApprovalChecklistItem, ApprovalGate, GateStatus, Revision
from .gates import GATE_SCHEMA_VALIDATION, gate_status


ITEM_ARTIFACTS_VALIDATED = "artifacts-validated"
ITEM_DESIGN_SYSTEM = "component-follows-design-system"
ITEM_STORYBOOK_STORY = "storybook-story-exists"
ITEM_DOCUMENTATION = "documentation-exists"
ITEM_TESTIDS = "testids-added"
ITEM_ACCESSIBILITY = "accessibility-tested"
ITEM_CODE_REVIEWED = "code-reviewed"

MANUAL_ITEMS = frozenset({ITEM_ACCESSIBILITY, ITEM_CODE_REVIEWED})


def build_checklist(revision: Revision, gates: Sequence[ApprovalGate]) -> list[ApprovalChecklistItem]:
    outputs = revision.outputs
    return [
        ApprovalChecklistItem(
            id=ITEM_ARTIFACTS_VALIDATED,
            label="All artifacts validated successfully",
            checked=gate_status(gates, GATE_SCHEMA_VALIDATION) == GateStatus.PASS,
            required=True,
        ),
        # TODO: derive from the design-system lint report once it is attached to sessions.
        ApprovalChecklistItem(
            id=ITEM_DESIGN_SYSTEM,
            label="Component follows design system guidelines",
            checked=True,
            required=True,
        ),
        ApprovalChecklistItem(
            id=ITEM_STORYBOOK_STORY,
            label="Storybook story exists (or will be generated)",
            checked=True,
            required=True,
        ),
        ApprovalChecklistItem(
            id=ITEM_DOCUMENTATION,
            label="Documentation exists",
            checked=any(is_documentation(a.path) for a in outputs),
            required=True,
        ),
        ApprovalChecklistItem(
            id=ITEM_TESTIDS,
            label="Test IDs added",
            checked=any(is_testids(a.path) for a in outputs),
            required=True,
        ),
        ApprovalChecklistItem(
            id=ITEM_ACCESSIBILITY,
            label="Accessibility tested",
            checked=False,
            required=True,
        ),
        ApprovalChecklistItem(
            id=ITEM_CODE_REVIEWED,
            label="Code reviewed (if applicable)",
            checked=False,
            required=False,
        ),
    ]
