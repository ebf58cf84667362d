"""Revision CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..config import EngineConfig
from ..engine import Engine
from ..errors import RevgateError
from ..models import Actor, WorkflowSession
from .validate_cmd import print_validation_results


def _engine(store_dir: Path, config: EngineConfig) -> Engine:
    return Engine.open(store_dir, config=config)


def _status_style(status: str) -> str:
    return {
        "approved": "green",
        "rejected": "red",
        "pending_approval": "yellow",
    }.get(status, "")


def run_revision_create(
    store_dir: Path,
    session_file: Path,
    *,
    author: Actor,
    config: EngineConfig,
    request_approval: bool = False,
) -> int:
    err = Console(stderr=True)
    console = Console()
    try:
        raw: Any = json.loads(session_file.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("session file must contain a JSON object")
        session = WorkflowSession.from_dict(raw)
    except (OSError, ValueError, KeyError) as e:
        err.print(f"Cannot read session {session_file}: {e}", style="bold red")
        return 1

    try:
        engine = _engine(store_dir, config)
        if request_approval:
            revision, approval = engine.submit(session, author)
        else:
            revision, approval = engine.ingest_session(session, author), None
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1

    print_validation_results(console, revision.validation_results)
    err.print(f"revision: {revision.id}", style="green")
    if approval is not None:
        err.print(f"approval: {approval.id}", style="dim")
    return 0


def run_revision_list(
    store_dir: Path,
    *,
    config: EngineConfig,
    workflow_id: str | None = None,
    status: str | None = None,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        revisions = _engine(store_dir, config).revisions.list(workflow_id=workflow_id, status=status)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1

    table = Table(title=f"Revisions ({len(revisions)})")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("workflow", style="magenta")
    table.add_column("created")
    table.add_column("author")
    table.add_column("status")
    table.add_column("files", justify="right")
    for r in revisions:
        table.add_row(
            r.id,
            r.workflow_id,
            r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            r.author.name,
            f"[{_status_style(r.status.value)}]{r.status.value}[/]" if _status_style(r.status.value) else r.status.value,
            str(len(r.outputs)),
        )
    console.print(table)
    return 0


def run_revision_show(store_dir: Path, revision_id: str, *, config: EngineConfig, output_json: bool = False) -> int:
    err = Console(stderr=True)
    try:
        revision = _engine(store_dir, config).revisions.get(revision_id)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    if revision is None:
        err.print(f"Revision not found: {revision_id}", style="bold red")
        return 1

    data = revision.to_dict()
    if not output_json:
        # Artifact bodies are noisy in the terminal; show sizes instead.
        data["outputs"] = [
            {"path": a.path, "type": a.type, "bytes": len((a.content or "").encode("utf-8"))}
            for a in revision.outputs
        ]
    print(json.dumps(data, indent=2, sort_keys=True))
    return 0


def run_revision_compare(
    store_dir: Path,
    revision_id_a: str,
    revision_id_b: str,
    *,
    config: EngineConfig,
    show_diff: bool = False,
    output_json: bool = False,
) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        engine = _engine(store_dir, config)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    for rid in (revision_id_a, revision_id_b):
        if not engine.revisions.exists(rid):
            err.print(f"Revision not found: {rid}", style="bold red")
            return 1

    diff = engine.revisions.compare(revision_id_a, revision_id_b)

    if output_json:
        print(
            json.dumps(
                {
                    "added": [a.path for a in diff.added],
                    "removed": [a.path for a in diff.removed],
                    "modified": [c.path for c in diff.modified],
                },
                indent=2,
            )
        )
        return 0

    if diff.is_empty:
        console.print("No differences", style="dim")
        return 0

    for a in diff.added:
        console.print(f"[green]+ {a.path}[/green]")
    for a in diff.removed:
        console.print(f"[red]- {a.path}[/red]")
    for c in diff.modified:
        console.print(f"[yellow]~ {c.path}[/yellow]")

    if show_diff:
        for c in diff.modified:
            print(c.unified_diff(), end="")
    return 0
