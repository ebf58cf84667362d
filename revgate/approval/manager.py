"""
Approval state machine.

    pending --approve--> approved   (terminal)
    pending --reject---> rejected   (terminal)

Every mutation holds the approval's lock, then the revision's lock (always in
that order), and persists the approval and the revision status together; if
either write fails both are put back and the error propagates.
Errors are raised, never returned: NotFoundError for unknown ids,
ApprovalPreconditionError when checklist or gates block approval,
InvalidTransitionError for operations on a terminal approval, and
ConflictError when an expected_version is stale.
"""

from __future__ import annotations

import copy
import logging
import threading

from ..errors import (
    ApprovalPreconditionError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
)
from ..locks import KeyedLocks
from ..models import (
    Actor,
    Approval,
    ApprovalStatus,
    RevisionStatus,
    TERMINAL_REVISION_STATUSES,
)
from ..persistence import APPROVALS_KEY, Collection, KeyValueStore
from ..revision.store import RevisionStore
from ..util import Clock, new_id, utc_now
from .checklist import build_checklist
from .gates import run_gates


logger = logging.getLogger(__name__)


def checklist_progress(approval: Approval) -> tuple[int, int]:
    """(checked, total) over required checklist items."""
    required = [item for item in approval.checklist if item.required]
    return sum(1 for item in required if item.checked), len(required)


def blockers(approval: Approval) -> list[str]:
    """Human-readable reasons an approval cannot be approved yet (empty when it can)."""
    reasons: list[str] = []
    if approval.is_terminal():
        reasons.append(f"approval is already {approval.status.value}")
        return reasons
    for item in approval.unchecked_required_items():
        reasons.append(f"checklist item unchecked: {item.label}")
    for gate in approval.failing_required_gates():
        reasons.append(f"gate {gate.status.value}: {gate.name}" + (f" ({gate.details})" if gate.details else ""))
    return reasons


class ApprovalManager:
    def __init__(
        self,
        revisions: RevisionStore,
        persistence: KeyValueStore,
        *,
        clock: Clock | None = None,
    ):
        self.revisions = revisions
        self._collection: Collection[Approval] = Collection(
            persistence,
            APPROVALS_KEY,
            decode=Approval.from_dict,
            encode=Approval.to_dict,
        )
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self.locks = KeyedLocks()
        self._approvals: dict[str, Approval] = {a.id: a for a in self._collection.load()}

    def _persist(self) -> None:
        with self._lock:
            self._collection.save(self._approvals.values())

    def _load(self, approval_id: str) -> Approval:
        with self._lock:
            approval = self._approvals.get(approval_id)
        if approval is None:
            raise NotFoundError("Approval", approval_id)
        return approval

    @staticmethod
    def _check_version(approval: Approval, expected_version: int | None) -> None:
        if expected_version is not None and approval.version != expected_version:
            raise ConflictError("Approval", approval.id, expected_version, approval.version)

    @staticmethod
    def _require_pending(approval: Approval, operation: str) -> None:
        if approval.is_terminal():
            raise InvalidTransitionError(
                f"Cannot {operation}: approval {approval.id} is already {approval.status.value}"
            )

    def _rollback(self, approval_id: str, previous: Approval | None) -> None:
        with self._lock:
            if previous is None:
                self._approvals.pop(approval_id, None)
            else:
                self._approvals[approval_id] = previous

    def _save(self, approval_id: str, previous: Approval | None) -> None:
        """Persist approvals; on failure put `previous` back in memory and re-raise."""
        with self._lock:
            try:
                self._persist()
            except Exception:
                self._rollback(approval_id, previous)
                raise

    def _save_with_revision(
        self,
        approval: Approval,
        previous: Approval | None,
        revision_status: RevisionStatus,
    ) -> None:
        """
        Move the approval's revision to `revision_status` and persist both.

        The caller holds the approval's lock and has already applied its
        change to `approval` in memory; `previous` is the state to go back to
        (None for a new approval). If either write fails, the revision and
        the approval are both put back, in memory and in the store, and the
        error is re-raised.
        """
        with self.revisions.locks.hold(approval.revision_id):
            with self._lock:
                revision_before = self.revisions.get(approval.revision_id)
                if revision_before is None:
                    self._rollback(approval.id, previous)
                    raise NotFoundError("Revision", approval.revision_id)
                try:
                    self.revisions.update_status(approval.revision_id, revision_status, approval.id)
                except Exception:
                    self._rollback(approval.id, previous)
                    raise
                try:
                    self._persist()
                except Exception:
                    self._rollback(approval.id, previous)
                    self.revisions.restore(revision_before)
                    raise

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def create_approval_request(self, revision_id: str, requested_by: Actor) -> Approval:
        """
        Open a pending approval for a revision.

        Gates are evaluated now and frozen into the approval; the checklist is
        seeded from them. The revision moves to pending_approval and points at
        the new approval.
        """
        with self.revisions.locks.hold(revision_id):
            revision = self.revisions.get(revision_id)
            if revision is None:
                raise NotFoundError("Revision", revision_id)
            if revision.status in TERMINAL_REVISION_STATUSES:
                raise InvalidTransitionError(
                    f"Cannot request approval: revision {revision_id} is already {revision.status.value}"
                )
            if revision.approval_id is not None:
                with self._lock:
                    current = self._approvals.get(revision.approval_id)
                if current is not None and current.status == ApprovalStatus.PENDING:
                    raise InvalidTransitionError(
                        f"Revision {revision_id} already has a pending approval: {current.id}"
                    )

            gates = run_gates(revision)
            requested_at = self._clock()
            approval = Approval(
                id=new_id(now=requested_at),
                revision_id=revision_id,
                requested_at=requested_at,
                requested_by=requested_by,
                checklist=build_checklist(revision, gates),
                gates=tuple(gates),
                status=ApprovalStatus.PENDING,
            )
            with self._lock:
                self._approvals[approval.id] = approval
                self._save_with_revision(approval, None, RevisionStatus.PENDING_APPROVAL)

        logger.info(
            "approval %s requested for revision %s by %s (%d/%d gates passing)",
            approval.id,
            revision_id,
            requested_by,
            sum(1 for g in approval.gates if g.passed),
            len(approval.gates),
        )
        return copy.deepcopy(approval)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, approval_id: str) -> Approval | None:
        with self._lock:
            approval = self._approvals.get(approval_id)
            return copy.deepcopy(approval) if approval is not None else None

    def get_for_revision(self, revision_id: str) -> Approval | None:
        """The revision's current (or most recent) approval."""
        revision = self.revisions.get(revision_id)
        if revision is not None and revision.approval_id is not None:
            found = self.get(revision.approval_id)
            if found is not None:
                return found
        candidates = [a for a in self.list() if a.revision_id == revision_id]
        return candidates[0] if candidates else None

    def list(self, *, status: ApprovalStatus | str | None = None) -> list[Approval]:
        """Most recently requested first."""
        with self._lock:
            approvals = list(self._approvals.values())
        if status is not None:
            wanted = ApprovalStatus(status)
            approvals = [a for a in approvals if a.status == wanted]
        approvals = sorted(approvals, key=lambda a: a.requested_at, reverse=True)
        return [copy.deepcopy(a) for a in approvals]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update_checklist_item(
        self,
        approval_id: str,
        item_id: str,
        checked: bool,
        checked_by: str | None = None,
        *,
        expected_version: int | None = None,
    ) -> Approval:
        with self.locks.hold(approval_id):
            approval = self._load(approval_id)
            self._check_version(approval, expected_version)
            self._require_pending(approval, "update checklist")
            item = approval.find_item(item_id)
            if item is None:
                raise NotFoundError("Checklist item", f"{approval_id}/{item_id}")

            with self._lock:
                previous = copy.deepcopy(approval)
                item.checked = bool(checked)
                if item.checked:
                    item.checked_by = checked_by
                    item.checked_at = self._clock()
                else:
                    item.checked_by = None
                    item.checked_at = None
                approval.version += 1
                self._save(approval_id, previous)
            snapshot = copy.deepcopy(approval)

        logger.debug(
            "approval %s: item %s %s by %s",
            approval_id,
            item_id,
            "checked" if checked else "unchecked",
            checked_by or "unknown",
        )
        return snapshot

    def approve(
        self,
        approval_id: str,
        approved_by: Actor,
        *,
        expected_version: int | None = None,
    ) -> Approval:
        """
        Approve a pending approval.

        All required checklist items must be checked and all required gates
        must pass; otherwise ApprovalPreconditionError is raised and nothing
        changes.
        """
        with self.locks.hold(approval_id):
            approval = self._load(approval_id)
            self._check_version(approval, expected_version)
            self._require_pending(approval, "approve")

            unchecked = approval.unchecked_required_items()
            failing = approval.failing_required_gates()
            if unchecked or failing:
                raise ApprovalPreconditionError(
                    [item.id for item in unchecked],
                    [gate.id for gate in failing],
                )

            with self.revisions.locks.hold(approval.revision_id), self._lock:
                previous = copy.deepcopy(approval)
                approval.status = ApprovalStatus.APPROVED
                approval.approved_at = self._clock()
                approval.approved_by = approved_by
                approval.version += 1
                self._save_with_revision(approval, previous, RevisionStatus.APPROVED)
            snapshot = copy.deepcopy(approval)

        logger.info("approval %s approved by %s", approval_id, approved_by)
        return snapshot

    def reject(
        self,
        approval_id: str,
        reason: str,
        rejected_by: Actor,
        *,
        expected_version: int | None = None,
    ) -> Approval:
        """
        Reject a pending approval.

        No checklist or gate preconditions apply, and the reason is stored as
        given.
        """
        with self.locks.hold(approval_id):
            approval = self._load(approval_id)
            self._check_version(approval, expected_version)
            self._require_pending(approval, "reject")

            with self.revisions.locks.hold(approval.revision_id), self._lock:
                previous = copy.deepcopy(approval)
                approval.status = ApprovalStatus.REJECTED
                approval.rejected_at = self._clock()
                approval.rejected_by = rejected_by
                approval.rejection_reason = reason
                approval.version += 1
                self._save_with_revision(approval, previous, RevisionStatus.REJECTED)
            snapshot = copy.deepcopy(approval)

        logger.info("approval %s rejected by %s: %s", approval_id, rejected_by, snapshot.rejection_reason)
        return snapshot
