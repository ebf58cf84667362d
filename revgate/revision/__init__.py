"""Revision snapshots: creation, lookup and path-keyed comparison."""

from .store import ArtifactChange, RevisionDiff, RevisionStore, diff_outputs

__all__ = [
    "RevisionStore",
    "RevisionDiff",
    "ArtifactChange",
    "diff_outputs",
]
