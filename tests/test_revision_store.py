from __future__ import annotations

import json
from datetime import timedelta

import pytest

from revgate.errors import ConflictError
from revgate.models import Actor, RevisionStatus
from revgate.persistence import MemoryKeyValueStore
from revgate.revision.store import RevisionStore, diff_outputs

from helpers import COMPOSE_OK, TickingClock, make_artifact, make_session


@pytest.fixture
def store(clock: TickingClock) -> RevisionStore:
    return RevisionStore(MemoryKeyValueStore(), clock=clock)


def test_create_sets_draft_and_copies_session(store: RevisionStore, author: Actor) -> None:
    session = make_session([make_artifact("specs/COMPOSE_Widget.json", COMPOSE_OK)])
    revision = store.create(session, author, [])

    assert revision.status == RevisionStatus.DRAFT
    assert revision.workflow_id == "new-component"
    assert revision.session_id == "session-1"
    assert revision.author == author
    assert revision.inputs == {"intake": {"name": "Widget"}}
    assert [a.path for a in revision.outputs] == ["specs/COMPOSE_Widget.json"]
    assert revision.approval_id is None
    assert len(revision.id) == 26

    # Later changes to the session do not leak into the stored revision.
    session.data["intake"]["name"] = "Changed"
    session.artifacts.append(make_artifact("extra.json", "{}"))
    stored = store.get(revision.id)
    assert stored is not None
    assert stored.inputs == {"intake": {"name": "Widget"}}
    assert len(stored.outputs) == 1


def test_create_assigns_fresh_ids(store: RevisionStore, author: Actor) -> None:
    a = store.create(make_session([]), author, [])
    b = store.create(make_session([]), author, [])
    assert a.id != b.id


def test_get_unknown_returns_none(store: RevisionStore) -> None:
    assert store.get("missing") is None


def test_get_returns_a_copy(store: RevisionStore, author: Actor) -> None:
    revision = store.create(make_session([]), author, [])
    copy_ = store.get(revision.id)
    assert copy_ is not None
    copy_.status = RevisionStatus.APPROVED
    again = store.get(revision.id)
    assert again is not None and again.status == RevisionStatus.DRAFT


def test_list_most_recent_first(store: RevisionStore, author: Actor) -> None:
    first = store.create(make_session([], session_id="s1"), author, [])
    second = store.create(make_session([], session_id="s2"), author, [])
    third = store.create(make_session([], session_id="s3"), author, [])
    assert [r.id for r in store.list()] == [third.id, second.id, first.id]


def test_list_ties_keep_insertion_order(author: Actor) -> None:
    frozen = TickingClock(step=timedelta(0))
    store = RevisionStore(MemoryKeyValueStore(), clock=frozen)
    ids = [store.create(make_session([], session_id=f"s{i}"), author, []).id for i in range(4)]
    assert [r.id for r in store.list()] == ids


def test_list_filters(store: RevisionStore, author: Actor) -> None:
    a = store.create(make_session([], workflow_id="wf-a"), author, [])
    b = store.create(make_session([], workflow_id="wf-b"), author, [])
    store.update_status(b.id, RevisionStatus.PENDING_APPROVAL)

    assert [r.id for r in store.list(workflow_id="wf-a")] == [a.id]
    assert [r.id for r in store.list_for_workflow("wf-b")] == [b.id]
    assert [r.id for r in store.list(status="pending_approval")] == [b.id]
    assert [r.id for r in store.list(status=RevisionStatus.DRAFT)] == [a.id]


def test_update_status(store: RevisionStore, author: Actor) -> None:
    revision = store.create(make_session([]), author, [])
    assert store.update_status(revision.id, RevisionStatus.PENDING_APPROVAL, "approval-1") is True
    updated = store.get(revision.id)
    assert updated is not None
    assert updated.status == RevisionStatus.PENDING_APPROVAL
    assert updated.approval_id == "approval-1"
    assert updated.version == revision.version + 1


def test_update_status_unknown_id_returns_false(store: RevisionStore) -> None:
    assert store.update_status("missing", RevisionStatus.APPROVED) is False


def test_update_status_does_not_police_transitions(store: RevisionStore, author: Actor) -> None:
    revision = store.create(make_session([]), author, [])
    assert store.update_status(revision.id, RevisionStatus.APPROVED)
    assert store.update_status(revision.id, RevisionStatus.DRAFT)
    again = store.get(revision.id)
    assert again is not None and again.status == RevisionStatus.DRAFT


def test_update_status_without_approval_id_keeps_existing(store: RevisionStore, author: Actor) -> None:
    revision = store.create(make_session([]), author, [])
    store.update_status(revision.id, RevisionStatus.PENDING_APPROVAL, "approval-1")
    store.update_status(revision.id, RevisionStatus.APPROVED)
    again = store.get(revision.id)
    assert again is not None and again.approval_id == "approval-1"


def test_update_status_stale_version_conflicts(store: RevisionStore, author: Actor) -> None:
    revision = store.create(make_session([]), author, [])
    store.update_status(revision.id, RevisionStatus.PENDING_APPROVAL, expected_version=revision.version)
    with pytest.raises(ConflictError):
        store.update_status(revision.id, RevisionStatus.APPROVED, expected_version=revision.version)


# ============================================================================
# COMPARE
# ============================================================================


def test_compare_partitions_by_path(store: RevisionStore, author: Actor) -> None:
    a = store.create(
        make_session(
            [
                make_artifact("keep.json", "{}"),
                make_artifact("gone.json", "{}"),
                make_artifact("edit.json", '{"v": 1}'),
            ]
        ),
        author,
        [],
    )
    b = store.create(
        make_session(
            [
                make_artifact("edit.json", '{"v": 2}'),
                make_artifact("keep.json", "{}"),
                make_artifact("new.json", "{}"),
            ]
        ),
        author,
        [],
    )

    diff = store.compare(a.id, b.id)
    assert [x.path for x in diff.added] == ["new.json"]
    assert [x.path for x in diff.removed] == ["gone.json"]
    assert [c.path for c in diff.modified] == ["edit.json"]
    change = diff.modified[0]
    assert change.artifact.content == '{"v": 2}'
    assert change.old_artifact.content == '{"v": 1}'


def test_compare_with_itself_is_empty(store: RevisionStore, author: Actor) -> None:
    a = store.create(make_session([make_artifact("x.json", "{}")]), author, [])
    diff = store.compare(a.id, a.id)
    assert diff.is_empty
    assert (diff.added, diff.removed, diff.modified) == ([], [], [])


def test_compare_unknown_ids_are_empty(store: RevisionStore, author: Actor) -> None:
    a = store.create(make_session([make_artifact("x.json", "{}")]), author, [])
    assert store.compare(a.id, "missing").is_empty
    assert store.compare("missing", a.id).is_empty


def test_compare_single_layer_change(store: RevisionStore, author: Actor) -> None:
    path = "specs/COMPOSE_Widget.json"
    a = store.create(
        make_session([make_artifact(path, json.dumps({"componentName": "Widget", "layer": "blocks"}))]),
        author,
        [],
    )
    b = store.create(
        make_session([make_artifact(path, json.dumps({"componentName": "Widget", "layer": "patterns"}))]),
        author,
        [],
    )
    diff = store.compare(a.id, b.id)
    assert len(diff.modified) == 1
    assert diff.added == [] and diff.removed == []


def test_compare_is_textual_not_structural() -> None:
    old = [make_artifact("c.json", '{"a": 1, "b": 2}')]
    reordered = [make_artifact("c.json", '{"b": 2, "a": 1}')]
    spaced = [make_artifact("c.json", '{"a": 1,  "b": 2}')]
    assert len(diff_outputs(old, reordered).modified) == 1
    assert len(diff_outputs(old, spaced).modified) == 1


def test_unified_diff_renders_changes() -> None:
    diff = diff_outputs(
        [make_artifact("doc.md", "line one\nline two\n"), make_artifact("old.md", "x")],
        [make_artifact("doc.md", "line one\nline 2\n"), make_artifact("new.md", "y")],
    )
    text = diff.unified_diff()
    assert "--- a/doc.md" in text
    assert "+++ b/doc.md" in text
    assert "-line two" in text
    assert "+line 2" in text
    assert "added: new.md" in text
    assert "removed: old.md" in text
