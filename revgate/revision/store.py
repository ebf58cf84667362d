"""
Revision store.

Revisions are created once from a finished workflow session and are never
deleted. After creation only `status` and `approval_id` change, and the store
does not judge whether a status change is a legal transition: that belongs
to the approval state machine.
"""

from __future__ import annotations

import copy
import difflib
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..errors import ConflictError
from ..locks import KeyedLocks
from ..models import (
    Actor,
    GeneratedArtifact,
    Revision,
    RevisionStatus,
    ValidationResult,
    WorkflowSession,
)
from ..persistence import REVISIONS_KEY, Collection, KeyValueStore
from ..util import Clock, new_id, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactChange:
    """An artifact present in both revisions with different content."""

    artifact: GeneratedArtifact  # copy from the newer (B) revision
    old_artifact: GeneratedArtifact  # copy from the older (A) revision

    @property
    def path(self) -> str:
        return self.artifact.path

    def unified_diff(self, context: int = 3) -> str:
        old_lines = (self.old_artifact.content or "").splitlines(keepends=True)
        new_lines = (self.artifact.content or "").splitlines(keepends=True)
        return "".join(
            difflib.unified_diff(
                old_lines,
                new_lines,
                fromfile=f"a/{self.old_artifact.path}",
                tofile=f"b/{self.artifact.path}",
                n=context,
            )
        )


@dataclass(frozen=True)
class RevisionDiff:
    added: list[GeneratedArtifact] = field(default_factory=list)
    removed: list[GeneratedArtifact] = field(default_factory=list)
    modified: list[ArtifactChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def unified_diff(self, context: int = 3) -> str:
        """Render modified artifacts as one unified diff (added/removed are listed by path)."""
        chunks: list[str] = []
        for artifact in self.added:
            chunks.append(f"+++ added: {artifact.path}\n")
        for artifact in self.removed:
            chunks.append(f"--- removed: {artifact.path}\n")
        for change in self.modified:
            chunks.append(change.unified_diff(context))
        return "".join(chunks)


def _path_map(outputs: Sequence[GeneratedArtifact]) -> dict[str, GeneratedArtifact]:
    # Later artifacts with a duplicate path shadow earlier ones.
    return {artifact.path: artifact for artifact in outputs}


def diff_outputs(
    old_outputs: Sequence[GeneratedArtifact],
    new_outputs: Sequence[GeneratedArtifact],
) -> RevisionDiff:
    """
    Path-keyed diff of two artifact lists.

    Content is compared by exact string equality: a whitespace or key-order
    change in a JSON artifact is a modification.
    """
    old_map = _path_map(old_outputs)
    new_map = _path_map(new_outputs)

    added = [artifact for path, artifact in new_map.items() if path not in old_map]
    removed = [artifact for path, artifact in old_map.items() if path not in new_map]
    modified = [
        ArtifactChange(artifact=artifact, old_artifact=old_map[path])
        for path, artifact in new_map.items()
        if path in old_map and old_map[path].content != artifact.content
    ]
    return RevisionDiff(added=added, removed=removed, modified=modified)


class RevisionStore:
    def __init__(self, persistence: KeyValueStore, *, clock: Clock | None = None):
        self._collection: Collection[Revision] = Collection(
            persistence,
            REVISIONS_KEY,
            decode=Revision.from_dict,
            encode=Revision.to_dict,
        )
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self.locks = KeyedLocks()
        # Insertion order is kept: it breaks createdAt ties in list().
        self._revisions: dict[str, Revision] = {r.id: r for r in self._collection.load()}

    def _persist(self) -> None:
        with self._lock:
            self._collection.save(self._revisions.values())

    def create(
        self,
        session: WorkflowSession,
        author: Actor,
        validation_results: Iterable[ValidationResult],
    ) -> Revision:
        """Freeze a finished session into a new draft revision."""
        created_at = self._clock()
        revision = Revision(
            id=new_id(now=created_at),
            workflow_id=session.workflow_id,
            session_id=session.id,
            created_at=created_at,
            author=author,
            inputs=copy.deepcopy(session.data),
            outputs=tuple(session.artifacts),
            validation_results=tuple(validation_results),
            status=RevisionStatus.DRAFT,
        )
        with self._lock:
            self._revisions[revision.id] = revision
            try:
                self._persist()
            except Exception:
                del self._revisions[revision.id]
                raise
        logger.debug(
            "created revision %s for session %s (%d artifact(s))",
            revision.id,
            session.id,
            len(revision.outputs),
        )
        return copy.deepcopy(revision)

    def get(self, revision_id: str) -> Revision | None:
        with self._lock:
            revision = self._revisions.get(revision_id)
            return copy.deepcopy(revision) if revision is not None else None

    def exists(self, revision_id: str) -> bool:
        with self._lock:
            return revision_id in self._revisions

    def list(
        self,
        *,
        workflow_id: str | None = None,
        status: RevisionStatus | str | None = None,
    ) -> list[Revision]:
        """Most recent first; revisions created at the same instant keep insertion order."""
        with self._lock:
            revisions = list(self._revisions.values())
        if workflow_id is not None:
            revisions = [r for r in revisions if r.workflow_id == workflow_id]
        if status is not None:
            wanted = RevisionStatus(status)
            revisions = [r for r in revisions if r.status == wanted]
        revisions = sorted(revisions, key=lambda r: r.created_at, reverse=True)
        return [copy.deepcopy(r) for r in revisions]

    def list_for_workflow(self, workflow_id: str) -> list[Revision]:
        return self.list(workflow_id=workflow_id)

    def update_status(
        self,
        revision_id: str,
        new_status: RevisionStatus | str,
        approval_id: str | None = None,
        *,
        expected_version: int | None = None,
    ) -> bool:
        """
        Set status (and approval_id when given). Returns False for unknown ids.

        Raises ConflictError when expected_version does not match.
        """
        status = RevisionStatus(new_status)
        with self.locks.hold(revision_id):
            with self._lock:
                revision = self._revisions.get(revision_id)
                if revision is None:
                    return False
                if expected_version is not None and revision.version != expected_version:
                    raise ConflictError("Revision", revision_id, expected_version, revision.version)
                before = copy.deepcopy(revision)
                revision.status = status
                if approval_id is not None:
                    revision.approval_id = approval_id
                revision.version += 1
                try:
                    self._persist()
                except Exception:
                    self._revisions[revision_id] = before
                    raise
        logger.debug("revision %s: %s -> %s", revision_id, before.status.value, status.value)
        return True

    def restore(self, snapshot: Revision) -> None:
        """
        Put back a snapshot taken with get() and persist it.

        Used to undo a status change when the write that was meant to go with
        it (the approval) failed.
        """
        with self.locks.hold(snapshot.id):
            with self._lock:
                self._revisions[snapshot.id] = copy.deepcopy(snapshot)
                self._persist()
        logger.debug("revision %s restored to %s", snapshot.id, snapshot.status.value)

    def compare(self, revision_id_a: str, revision_id_b: str) -> RevisionDiff:
        """Diff A (older) against B (newer). Unknown ids give an empty diff."""
        with self._lock:
            a = self._revisions.get(revision_id_a)
            b = self._revisions.get(revision_id_b)
        if a is None or b is None:
            return RevisionDiff()
        return diff_outputs(a.outputs, b.outputs)
