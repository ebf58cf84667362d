from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from revgate.cli import cli
from revgate.engine import Engine
from revgate.errors import PersistenceError
from revgate.models import ApprovalStatus, RevisionStatus

from helpers import COMPOSE_OK, SECTION_OK, TESTIDS_OK


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("REVGATE_STORE", raising=False)
    monkeypatch.delenv("REVGATE_USER_NAME", raising=False)
    return tmp_path


@pytest.fixture
def store(workspace: Path) -> Path:
    return workspace / ".revgate"


def _invoke(store: Path, *args: str):
    return CliRunner().invoke(cli, ["--store", str(store), *args], obj={})


def _session_file(workspace: Path, artifacts: list[dict], name: str = "session.json") -> Path:
    path = workspace / name
    path.write_text(
        json.dumps(
            {
                "sessionId": "session-1",
                "workflowId": "new-component",
                "answers": {"intake": {"name": "Widget"}},
                "artifacts": artifacts,
            }
        ),
        encoding="utf-8",
    )
    return path


COMPLETE_ARTIFACTS = [
    {"id": "a1", "type": "markdown", "path": "specs/SECTION_widget.md", "content": SECTION_OK},
    {"id": "a2", "type": "json", "path": "specs/COMPOSE_Widget.json", "content": COMPOSE_OK},
    {"id": "a3", "type": "json", "path": "specs/TESTIDS_widget.json", "content": TESTIDS_OK},
]


# -----------------------------------------------------------------------------
# validate
# -----------------------------------------------------------------------------


def test_validate_exit_codes(workspace: Path, store: Path) -> None:
    good = workspace / "COMPOSE_Widget.json"
    good.write_text(COMPOSE_OK, encoding="utf-8")
    bad = workspace / "TESTIDS_widget.json"
    bad.write_text('{"root": "Widget Root"}', encoding="utf-8")

    ok = _invoke(store, "validate", str(good))
    assert ok.exit_code == 0, ok.output

    failed = _invoke(store, "validate", "--json", str(good), str(bad))
    assert failed.exit_code == 1
    payload = json.loads(failed.stdout)
    assert [r["valid"] for r in payload] == [True, False]
    assert payload[1]["errors"][0]["code"] == "INVALID_TESTID_FORMAT"


def test_validate_uses_config_file(workspace: Path, store: Path) -> None:
    (workspace / "revgate.toml").write_text('[validation]\nallowed_layers = ["atoms"]\n', encoding="utf-8")
    spec = workspace / "COMPOSE_Widget.json"
    spec.write_text(COMPOSE_OK, encoding="utf-8")

    result = _invoke(store, "validate", "--json", str(spec))
    assert result.exit_code == 1
    assert json.loads(result.stdout)[0]["errors"][0]["code"] == "INVALID_ENUM_VALUE"


# -----------------------------------------------------------------------------
# revision
# -----------------------------------------------------------------------------


def test_revision_create_requires_actor_name(workspace: Path, store: Path) -> None:
    session = _session_file(workspace, COMPLETE_ARTIFACTS)
    result = _invoke(store, "revision", "create", str(session))
    assert result.exit_code != 0
    assert "--name" in result.output


def test_revision_create_list_show(workspace: Path, store: Path) -> None:
    session = _session_file(workspace, COMPLETE_ARTIFACTS)

    created = _invoke(store, "revision", "create", str(session), "--name", "Ada")
    assert created.exit_code == 0, created.output

    revisions = Engine.open(store).revisions.list()
    assert len(revisions) == 1
    revision = revisions[0]
    assert revision.status == RevisionStatus.DRAFT
    assert revision.author.name == "Ada"
    assert revision.inputs == {"intake": {"name": "Widget"}}

    listed = _invoke(store, "revision", "list", "--status", "draft")
    assert listed.exit_code == 0
    assert "Revisions (1)" in listed.output

    shown = _invoke(store, "revision", "show", revision.id)
    assert shown.exit_code == 0
    data = json.loads(shown.stdout)
    assert data["outputs"][0] == {
        "path": "specs/SECTION_widget.md",
        "type": "markdown",
        "bytes": len(SECTION_OK.encode("utf-8")),
    }

    full = _invoke(store, "revision", "show", "--json", revision.id)
    assert json.loads(full.stdout)["outputs"][1]["content"] == COMPOSE_OK

    missing = _invoke(store, "revision", "show", "nope")
    assert missing.exit_code == 1


def test_revision_create_rejects_bad_session(workspace: Path, store: Path) -> None:
    path = workspace / "session.json"
    path.write_text('{"artifacts": []}', encoding="utf-8")
    result = _invoke(store, "revision", "create", str(path), "--name", "Ada")
    assert result.exit_code == 1
    assert "Cannot read session" in result.output


def test_revision_compare(workspace: Path, store: Path) -> None:
    first = _session_file(workspace, COMPLETE_ARTIFACTS, "first.json")
    changed = [dict(a) for a in COMPLETE_ARTIFACTS[:2]]
    changed[1]["content"] = json.dumps({"componentName": "Widget", "layer": "pages"})
    changed.append({"id": "a4", "type": "markdown", "path": "specs/E2E_widget.md", "content": "steps"})
    second = _session_file(workspace, changed, "second.json")

    assert _invoke(store, "revision", "create", str(first), "--name", "Ada").exit_code == 0
    assert _invoke(store, "revision", "create", str(second), "--name", "Ada").exit_code == 0
    newer, older = Engine.open(store).revisions.list()

    result = _invoke(store, "revision", "compare", "--json", older.id, newer.id)
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "added": ["specs/E2E_widget.md"],
        "removed": ["specs/TESTIDS_widget.json"],
        "modified": ["specs/COMPOSE_Widget.json"],
    }

    diff = _invoke(store, "revision", "compare", "--diff", older.id, newer.id)
    assert diff.exit_code == 0
    assert '+{"componentName": "Widget", "layer": "pages"}' in diff.stdout

    same = _invoke(store, "revision", "compare", older.id, older.id)
    assert "No differences" in same.output

    unknown = _invoke(store, "revision", "compare", older.id, "nope")
    assert unknown.exit_code == 1


# -----------------------------------------------------------------------------
# approval
# -----------------------------------------------------------------------------


def test_approval_flow(workspace: Path, store: Path) -> None:
    session = _session_file(workspace, COMPLETE_ARTIFACTS)
    created = _invoke(store, "revision", "create", str(session), "--name", "Ada", "--request-approval")
    assert created.exit_code == 0, created.output

    approval = Engine.open(store).approvals.list()[0]
    assert approval.status == ApprovalStatus.PENDING

    blocked = _invoke(store, "approval", "approve", approval.id, "--name", "Grace")
    assert blocked.exit_code == 1
    assert "Cannot approve" in blocked.output
    assert "Accessibility tested" in blocked.output

    checked = _invoke(store, "approval", "check", approval.id, "accessibility-tested", "--by", "grace")
    assert checked.exit_code == 0, checked.output

    shown = _invoke(store, "approval", "show", "--json", approval.id)
    item = next(i for i in json.loads(shown.stdout)["checklist"] if i["id"] == "accessibility-tested")
    assert item["checked"] is True
    assert item["checkedBy"] == "grace"

    approved = _invoke(store, "approval", "approve", approval.id, "--name", "Grace", "--email", "g@example.com")
    assert approved.exit_code == 0, approved.output

    engine = Engine.open(store)
    final = engine.approvals.get(approval.id)
    assert final is not None
    assert final.status == ApprovalStatus.APPROVED
    assert final.approved_by is not None and final.approved_by.email == "g@example.com"
    revision = engine.revisions.get(approval.revision_id)
    assert revision is not None and revision.status == RevisionStatus.APPROVED

    again = _invoke(store, "approval", "reject", approval.id, "--reason", "late", "--name", "Grace")
    assert again.exit_code == 1
    assert "already approved" in again.output


def test_approval_request_and_reject(workspace: Path, store: Path) -> None:
    session = _session_file(workspace, [])
    assert _invoke(store, "revision", "create", str(session), "--name", "Ada").exit_code == 0
    revision = Engine.open(store).revisions.list()[0]

    requested = _invoke(store, "approval", "request", revision.id, "--name", "Ada")
    assert requested.exit_code == 0, requested.output
    duplicate = _invoke(store, "approval", "request", revision.id, "--name", "Ada")
    assert duplicate.exit_code == 1

    approval = Engine.open(store).approvals.get_for_revision(revision.id)
    assert approval is not None

    rejected = _invoke(store, "approval", "reject", approval.id, "--reason", "no artifacts", "--name", "Grace")
    assert rejected.exit_code == 0, rejected.output

    listed = _invoke(store, "approval", "list", "--status", "rejected")
    assert listed.exit_code == 0
    assert "Approvals (1)" in listed.output

    final = Engine.open(store).revisions.get(revision.id)
    assert final is not None and final.status == RevisionStatus.REJECTED


def test_unknown_approval(workspace: Path, store: Path) -> None:
    assert _invoke(store, "approval", "show", "nope").exit_code == 1
    result = _invoke(store, "approval", "check", "nope", "accessibility-tested")
    assert result.exit_code == 1
    assert "Approval not found: nope" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ("revision", "list"),
        ("revision", "show", "r1"),
        ("revision", "compare", "r1", "r2"),
        ("approval", "list"),
        ("approval", "show", "a1"),
        ("approval", "request", "r1", "--name", "Ada"),
        ("approval", "check", "a1", "accessibility-tested"),
        ("approval", "approve", "a1", "--name", "Ada"),
        ("approval", "reject", "a1", "--reason", "no", "--name", "Ada"),
    ],
)
def test_corrupt_store_is_reported(workspace: Path, store: Path, args: tuple[str, ...]) -> None:
    store.mkdir()
    (store / "revgate-revisions.json").write_text("{not json", encoding="utf-8")

    result = _invoke(store, *args)

    assert result.exit_code == 1
    assert not isinstance(result.exception, PersistenceError)
    assert "revgate-revisions" in result.output


def test_corrupt_store_on_revision_create(workspace: Path, store: Path) -> None:
    session = _session_file(workspace, COMPLETE_ARTIFACTS)
    store.mkdir()
    (store / "revgate-approvals.json").write_text('{"not": "a list"}', encoding="utf-8")

    result = _invoke(store, "revision", "create", str(session), "--name", "Ada")

    assert result.exit_code == 1
    assert "must be a JSON list" in result.output
