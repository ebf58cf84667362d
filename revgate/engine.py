"""
Engine wiring.

An Engine is constructed once per process (or per CLI invocation) around an
injected key-value store and handed to whoever needs it. There are no module
level singletons.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .approval.manager import ApprovalManager
from .artifact.validator import validate_all
from .config import DEFAULT_CONFIG, EngineConfig
from .models import Actor, Approval, Revision, WorkflowSession
from .persistence import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .revision.store import RevisionStore
from .util import Clock


logger = logging.getLogger(__name__)


class Engine:
    def __init__(
        self,
        persistence: KeyValueStore,
        *,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.persistence = persistence
        self.revisions = RevisionStore(persistence, clock=clock)
        self.approvals = ApprovalManager(self.revisions, persistence, clock=clock)

    @classmethod
    def in_memory(cls, *, config: EngineConfig | None = None, clock: Clock | None = None) -> Engine:
        return cls(MemoryKeyValueStore(), config=config, clock=clock)

    @classmethod
    def open(cls, store_dir: Path, *, config: EngineConfig | None = None, clock: Clock | None = None) -> Engine:
        logger.debug("opening file store at %s", store_dir)
        return cls(FileKeyValueStore(store_dir), config=config, clock=clock)

    def ingest_session(self, session: WorkflowSession, author: Actor) -> Revision:
        """Validate every session artifact, then freeze the session into a draft revision."""
        results = validate_all(session.artifacts, self.config)
        revision = self.revisions.create(session, author, results)
        invalid = sum(1 for r in results if not r.valid)
        if invalid:
            logger.warning("revision %s has %d invalid artifact(s)", revision.id, invalid)
        return revision

    def submit(self, session: WorkflowSession, author: Actor) -> tuple[Revision, Approval]:
        """Ingest a session and immediately open an approval request for it."""
        revision = self.ingest_session(session, author)
        approval = self.approvals.create_approval_request(revision.id, author)
        return self.revisions.get(revision.id) or revision, approval
