"""Approval CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..approval.manager import blockers, checklist_progress
from ..config import EngineConfig
from ..engine import Engine
from ..errors import ApprovalPreconditionError, RevgateError
from ..models import Actor, Approval


def _engine(store_dir: Path, config: EngineConfig) -> Engine:
    return Engine.open(store_dir, config=config)


def print_approval(console: Console, approval: Approval) -> None:
    checked, total = checklist_progress(approval)
    console.print(f"approval: {approval.id}  revision: {approval.revision_id}")
    console.print(f"status: {approval.status.value}  checklist: {checked}/{total} required checked")

    gates = Table(title="Gates")
    gates.add_column("gate", style="cyan")
    gates.add_column("status")
    gates.add_column("details", style="dim")
    for gate in approval.gates:
        color = "green" if gate.passed else "red"
        gates.add_row(gate.id, f"[{color}]{gate.status.value}[/{color}]", escape(gate.details or ""))
    console.print(gates)

    checklist = Table(title="Checklist")
    checklist.add_column("item", style="cyan")
    checklist.add_column("label")
    checklist.add_column("checked")
    checklist.add_column("required")
    checklist.add_column("by", style="dim")
    for item in approval.checklist:
        checklist.add_row(
            item.id,
            escape(item.label),
            "[green]x[/green]" if item.checked else "",
            "yes" if item.required else "no",
            escape(item.checked_by or ""),
        )
    console.print(checklist)

    if approval.rejection_reason:
        console.print(f"rejection reason: {escape(approval.rejection_reason)}", style="red")
    for reason in blockers(approval):
        console.print(f"  blocked: {escape(reason)}", style="yellow")


def run_approval_request(store_dir: Path, revision_id: str, *, requested_by: Actor, config: EngineConfig) -> int:
    err = Console(stderr=True)
    try:
        approval = _engine(store_dir, config).approvals.create_approval_request(revision_id, requested_by)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    print_approval(Console(), approval)
    return 0


def run_approval_show(store_dir: Path, approval_id: str, *, config: EngineConfig, output_json: bool = False) -> int:
    err = Console(stderr=True)
    try:
        approval = _engine(store_dir, config).approvals.get(approval_id)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    if approval is None:
        err.print(f"Approval not found: {approval_id}", style="bold red")
        return 1
    if output_json:
        print(json.dumps(approval.to_dict(), indent=2, sort_keys=True))
    else:
        print_approval(Console(), approval)
    return 0


def run_approval_list(store_dir: Path, *, config: EngineConfig, status: str | None = None) -> int:
    console = Console()
    err = Console(stderr=True)
    try:
        approvals = _engine(store_dir, config).approvals.list(status=status)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1

    table = Table(title=f"Approvals ({len(approvals)})")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("revision", style="magenta", no_wrap=True)
    table.add_column("requested")
    table.add_column("by")
    table.add_column("status")
    table.add_column("checklist", justify="right")
    for a in approvals:
        checked, total = checklist_progress(a)
        table.add_row(
            a.id,
            a.revision_id,
            a.requested_at.strftime("%Y-%m-%d %H:%M:%S"),
            escape(a.requested_by.name),
            a.status.value,
            f"{checked}/{total}",
        )
    console.print(table)
    return 0


def run_approval_check(
    store_dir: Path,
    approval_id: str,
    item_id: str,
    *,
    checked: bool,
    checked_by: str | None,
    config: EngineConfig,
) -> int:
    err = Console(stderr=True)
    try:
        approval = _engine(store_dir, config).approvals.update_checklist_item(approval_id, item_id, checked, checked_by)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    done, total = checklist_progress(approval)
    err.print(f"{item_id}: {'checked' if checked else 'unchecked'} ({done}/{total} required checked)", style="green")
    return 0


def run_approval_approve(store_dir: Path, approval_id: str, *, approved_by: Actor, config: EngineConfig) -> int:
    err = Console(stderr=True)
    try:
        engine = _engine(store_dir, config)
        approval = engine.approvals.approve(approval_id, approved_by)
    except ApprovalPreconditionError as e:
        err.print(str(e), style="bold red")
        current = engine.approvals.get(approval_id)
        if current is not None:
            for reason in blockers(current):
                err.print(f"  - {escape(reason)}", style="yellow")
        return 1
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    err.print(f"approved: {approval.id} (revision {approval.revision_id})", style="green")
    return 0


def run_approval_reject(
    store_dir: Path,
    approval_id: str,
    *,
    reason: str,
    rejected_by: Actor,
    config: EngineConfig,
) -> int:
    err = Console(stderr=True)
    try:
        approval = _engine(store_dir, config).approvals.reject(approval_id, reason, rejected_by)
    except RevgateError as e:
        err.print(str(e), style="bold red")
        return 1
    err.print(f"rejected: {approval.id} (revision {approval.revision_id})", style="red")
    return 0
