"""
Data model for revisions, validation results and approvals.

Every entity serialises to a flat camelCase dict (the stored collection shape)
via to_dict() and is rebuilt with from_dict(). Timestamps are timezone-aware
datetimes in memory and ISO-8601 strings on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .util import format_timestamp, parse_timestamp


class RevisionStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class GateStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    PENDING = "pending"


TERMINAL_APPROVAL_STATUSES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})
TERMINAL_REVISION_STATUSES = frozenset({RevisionStatus.APPROVED, RevisionStatus.REJECTED})


def _opt_ts(value: datetime | None) -> str | None:
    return format_timestamp(value) if value is not None else None


@dataclass(frozen=True)
class Actor:
    name: str
    email: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Actor:
        return cls(name=str(data.get("name", "")), email=str(data.get("email", "")))

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>" if self.email else self.name


@dataclass(frozen=True)
class GeneratedArtifact:
    """A generated file-like unit. `path` carries the naming-convention markers."""

    id: str
    type: str
    path: str
    name: str | None = None
    content: str | None = None
    diff: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "type": self.type, "path": self.path}
        if self.name is not None:
            result["name"] = self.name
        if self.content is not None:
            result["content"] = self.content
        if self.diff is not None:
            result["diff"] = self.diff
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratedArtifact:
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "")),
            path=str(data["path"]),
            name=data.get("name"),
            content=data.get("content"),
            diff=data.get("diff"),
        )


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error or warning, located by a JSON-pointer-like path."""

    path: str
    message: str
    code: str
    suggested_fix: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"path": self.path, "message": self.message, "code": self.code}
        if self.suggested_fix is not None:
            result["suggestedFix"] = self.suggested_fix
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationIssue:
        return cls(
            path=str(data.get("path", "")),
            message=str(data.get("message", "")),
            code=str(data.get("code", "")),
            suggested_fix=data.get("suggestedFix"),
        )


@dataclass(frozen=True)
class ValidationResult:
    artifact_id: str
    artifact_path: str
    schema: str
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifactId": self.artifact_id,
            "artifactPath": self.artifact_path,
            "schema": self.schema,
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationResult:
        # `valid` is derived from errors; a stored flag is ignored.
        return cls(
            artifact_id=str(data.get("artifactId", "")),
            artifact_path=str(data.get("artifactPath", "")),
            schema=str(data.get("schema", "unknown")),
            errors=tuple(ValidationIssue.from_dict(e) for e in data.get("errors", [])),
            warnings=tuple(ValidationIssue.from_dict(w) for w in data.get("warnings", [])),
        )


@dataclass
class WorkflowSession:
    """Finished session handed over by the workflow layer."""

    id: str
    workflow_id: str
    data: dict[str, Any] = field(default_factory=dict)
    artifacts: list[GeneratedArtifact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowSession:
        # The workflow layer names the session id either `id` or `sessionId`.
        session_id = data.get("id", data.get("sessionId"))
        if not session_id:
            raise ValueError("session id is required")
        workflow_id = data.get("workflowId")
        if not workflow_id:
            raise ValueError("workflowId is required")
        return cls(
            id=str(session_id),
            workflow_id=str(workflow_id),
            data=dict(data.get("data") or data.get("answers") or {}),
            artifacts=[GeneratedArtifact.from_dict(a) for a in data.get("artifacts", [])],
        )


@dataclass
class Revision:
    """
    Immutable snapshot of a session's artifacts and their validation outcomes.

    Only `status`, `approval_id` and the `version` counter change after
    creation, and only through the store.
    """

    id: str
    workflow_id: str
    session_id: str
    created_at: datetime
    author: Actor
    inputs: dict[str, Any]
    outputs: tuple[GeneratedArtifact, ...]
    validation_results: tuple[ValidationResult, ...]
    status: RevisionStatus = RevisionStatus.DRAFT
    approval_id: str | None = None
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "workflowId": self.workflow_id,
            "sessionId": self.session_id,
            "createdAt": format_timestamp(self.created_at),
            "author": self.author.to_dict(),
            "inputs": self.inputs,
            "outputs": [a.to_dict() for a in self.outputs],
            "validationResults": [r.to_dict() for r in self.validation_results],
            "status": self.status.value,
            "version": self.version,
        }
        if self.approval_id is not None:
            result["approvalId"] = self.approval_id
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Revision:
        created_at = parse_timestamp(data.get("createdAt"))
        if created_at is None:
            raise ValueError(f"revision {data.get('id')!r} has no createdAt")
        return cls(
            id=str(data["id"]),
            workflow_id=str(data.get("workflowId", "")),
            session_id=str(data.get("sessionId", "")),
            created_at=created_at,
            author=Actor.from_dict(data.get("author") or {}),
            inputs=dict(data.get("inputs") or {}),
            outputs=tuple(GeneratedArtifact.from_dict(a) for a in data.get("outputs", [])),
            validation_results=tuple(
                ValidationResult.from_dict(r) for r in data.get("validationResults", [])
            ),
            status=RevisionStatus(data.get("status", RevisionStatus.DRAFT.value)),
            approval_id=data.get("approvalId"),
            version=int(data.get("version", 1)),
        )


@dataclass(frozen=True)
class ApprovalGate:
    id: str
    name: str
    description: str
    status: GateStatus
    required: bool = True
    details: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == GateStatus.PASS

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "required": self.required,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApprovalGate:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            status=GateStatus(data.get("status", GateStatus.PENDING.value)),
            required=bool(data.get("required", True)),
            details=data.get("details"),
        )


@dataclass
class ApprovalChecklistItem:
    id: str
    label: str
    checked: bool
    required: bool
    checked_by: str | None = None
    checked_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "checked": self.checked,
            "required": self.required,
        }
        if self.checked_by is not None:
            result["checkedBy"] = self.checked_by
        if self.checked_at is not None:
            result["checkedAt"] = format_timestamp(self.checked_at)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApprovalChecklistItem:
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", "")),
            checked=bool(data.get("checked", False)),
            required=bool(data.get("required", False)),
            checked_by=data.get("checkedBy"),
            checked_at=parse_timestamp(data.get("checkedAt")),
        )


@dataclass
class Approval:
    """Mutable record of one human review over one Revision."""

    id: str
    revision_id: str
    requested_at: datetime
    requested_by: Actor
    checklist: list[ApprovalChecklistItem]
    gates: tuple[ApprovalGate, ...]
    status: ApprovalStatus = ApprovalStatus.PENDING
    approved_at: datetime | None = None
    approved_by: Actor | None = None
    rejected_at: datetime | None = None
    rejected_by: Actor | None = None
    rejection_reason: str | None = None
    version: int = 1

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_APPROVAL_STATUSES

    def find_item(self, item_id: str) -> ApprovalChecklistItem | None:
        for item in self.checklist:
            if item.id == item_id:
                return item
        return None

    def unchecked_required_items(self) -> list[ApprovalChecklistItem]:
        return [item for item in self.checklist if item.required and not item.checked]

    def failing_required_gates(self) -> list[ApprovalGate]:
        return [gate for gate in self.gates if gate.required and gate.status != GateStatus.PASS]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "revisionId": self.revision_id,
            "requestedAt": format_timestamp(self.requested_at),
            "requestedBy": self.requested_by.to_dict(),
            "status": self.status.value,
            "checklist": [item.to_dict() for item in self.checklist],
            "gates": [gate.to_dict() for gate in self.gates],
            "version": self.version,
        }
        if self.approved_at is not None:
            result["approvedAt"] = _opt_ts(self.approved_at)
        if self.approved_by is not None:
            result["approvedBy"] = self.approved_by.to_dict()
        if self.rejected_at is not None:
            result["rejectedAt"] = _opt_ts(self.rejected_at)
        if self.rejected_by is not None:
            result["rejectedBy"] = self.rejected_by.to_dict()
        if self.rejection_reason is not None:
            result["rejectionReason"] = self.rejection_reason
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Approval:
        requested_at = parse_timestamp(data.get("requestedAt"))
        if requested_at is None:
            raise ValueError(f"approval {data.get('id')!r} has no requestedAt")
        approved_by = data.get("approvedBy")
        rejected_by = data.get("rejectedBy")
        return cls(
            id=str(data["id"]),
            revision_id=str(data["revisionId"]),
            requested_at=requested_at,
            requested_by=Actor.from_dict(data.get("requestedBy") or {}),
            checklist=[ApprovalChecklistItem.from_dict(i) for i in data.get("checklist", [])],
            gates=tuple(ApprovalGate.from_dict(g) for g in data.get("gates", [])),
            status=ApprovalStatus(data.get("status", ApprovalStatus.PENDING.value)),
            approved_at=parse_timestamp(data.get("approvedAt")),
            approved_by=Actor.from_dict(approved_by) if isinstance(approved_by, dict) else None,
            rejected_at=parse_timestamp(data.get("rejectedAt")),
            rejected_by=Actor.from_dict(rejected_by) if isinstance(rejected_by, dict) else None,
            rejection_reason=data.get("rejectionReason"),
            version=int(data.get("version", 1)),
        )
