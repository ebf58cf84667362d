"""Validate artifact files on disk without creating a revision."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..artifact.naming import detect_schema
from ..artifact.validator import validate
from ..config import EngineConfig
from ..models import GeneratedArtifact, ValidationResult


def artifact_from_file(path: Path) -> GeneratedArtifact:
    posix = path.as_posix()
    return GeneratedArtifact(
        id=posix,
        type=detect_schema(posix),
        path=posix,
        name=path.stem,
        content=path.read_text(encoding="utf-8"),
    )


def print_validation_results(console: Console, results: Sequence[ValidationResult]) -> None:
    table = Table(title="Validation")
    table.add_column("artifact", style="cyan")
    table.add_column("schema", style="magenta")
    table.add_column("valid")
    table.add_column("errors", justify="right")
    table.add_column("warnings", justify="right")
    for r in results:
        table.add_row(
            r.artifact_path,
            r.schema,
            "[green]yes[/green]" if r.valid else "[red]no[/red]",
            str(len(r.errors)),
            str(len(r.warnings)),
        )
    console.print(table)

    for r in results:
        for issue in r.errors:
            console.print(f"[red]error[/red] {escape(r.artifact_path + issue.path)}: {escape(issue.code)} {escape(issue.message)}")
            if issue.suggested_fix:
                console.print(f"  fix: {escape(issue.suggested_fix)}", style="dim")
        for issue in r.warnings:
            console.print(f"[yellow]warning[/yellow] {escape(r.artifact_path + issue.path)}: {escape(issue.code)} {escape(issue.message)}")
            if issue.suggested_fix:
                console.print(f"  fix: {escape(issue.suggested_fix)}", style="dim")


def run_validate(paths: Sequence[Path], *, config: EngineConfig, output_json: bool = False) -> int:
    results = [validate(artifact_from_file(p), config) for p in paths]

    if output_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        print_validation_results(Console(), results)

    return 0 if all(r.valid for r in results) else 1
