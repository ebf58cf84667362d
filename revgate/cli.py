"""CLI entrypoint for revgate."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import DEFAULT_STORE_DIRNAME, EngineConfig, find_config, find_store_dir, load_config
from .errors import ConfigError
from .logs import configure_logging
from .models import Actor


def _resolve_store(explicit: Path | None, config: EngineConfig) -> Path:
    if explicit is not None:
        return explicit.resolve()
    if config.store_dir is not None:
        return config.store_dir
    detected = find_store_dir(Path.cwd())
    if detected is not None:
        return detected
    return (Path.cwd() / DEFAULT_STORE_DIRNAME).resolve()


def _actor_options(f):
    f = click.option(
        "--email",
        envvar="REVGATE_USER_EMAIL",
        default="",
        show_envvar=True,
        help="Actor email",
    )(f)
    f = click.option(
        "--name",
        envvar="REVGATE_USER_NAME",
        required=True,
        show_envvar=True,
        help="Actor name",
    )(f)
    return f


@click.group()
@click.version_option(__version__, prog_name="revgate")
@click.option(
    "--store",
    "-s",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    envvar="REVGATE_STORE",
    show_envvar=True,
    help="Store directory (defaults to an auto-detected .revgate directory)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to revgate.toml (defaults to the nearest one walking up)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, store: Path | None, config_path: Path | None, verbose: bool) -> None:
    """revgate - revisions, schema validation and approvals for workflow sessions."""
    configure_logging(verbose)
    ctx.ensure_object(dict)

    config_path = config_path or find_config(Path.cwd())
    try:
        config = load_config(config_path) if config_path is not None else EngineConfig()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    ctx.obj["config"] = config
    ctx.obj["store"] = _resolve_store(store, config)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def validate(ctx: click.Context, files: tuple[Path, ...], output_json: bool) -> None:
    """Validate artifact FILES against the schema detected from their names."""
    from .commands.validate_cmd import run_validate

    sys.exit(run_validate(list(files), config=ctx.obj["config"], output_json=output_json))


# -----------------------------------------------------------------------------
# Revisions
# -----------------------------------------------------------------------------


@cli.group()
def revision() -> None:
    """Create, list and compare revisions."""


@revision.command("create")
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_actor_options
@click.option("--request-approval", is_flag=True, help="Open an approval request right away")
@click.pass_context
def revision_create(
    ctx: click.Context,
    session_file: Path,
    name: str,
    email: str,
    request_approval: bool,
) -> None:
    """Freeze a finished workflow session (JSON) into a draft revision."""
    from .commands.revision_cmd import run_revision_create

    sys.exit(
        run_revision_create(
            ctx.obj["store"],
            session_file,
            author=Actor(name=name, email=email),
            config=ctx.obj["config"],
            request_approval=request_approval,
        )
    )


@revision.command("list")
@click.option("--workflow", "workflow_id", default=None, help="Only revisions of this workflow")
@click.option(
    "--status",
    type=click.Choice(["draft", "pending_approval", "approved", "rejected"]),
    default=None,
)
@click.pass_context
def revision_list(ctx: click.Context, workflow_id: str | None, status: str | None) -> None:
    """List revisions, most recent first."""
    from .commands.revision_cmd import run_revision_list

    sys.exit(run_revision_list(ctx.obj["store"], config=ctx.obj["config"], workflow_id=workflow_id, status=status))


@revision.command("show")
@click.argument("revision_id")
@click.option("--json", "output_json", is_flag=True, help="Include artifact contents")
@click.pass_context
def revision_show(ctx: click.Context, revision_id: str, output_json: bool) -> None:
    """Show a revision."""
    from .commands.revision_cmd import run_revision_show

    sys.exit(run_revision_show(ctx.obj["store"], revision_id, config=ctx.obj["config"], output_json=output_json))


@revision.command("compare")
@click.argument("old_revision_id")
@click.argument("new_revision_id")
@click.option("--diff", "show_diff", is_flag=True, help="Print a unified diff of modified artifacts")
@click.option("--json", "output_json", is_flag=True, help="Output changed paths as JSON")
@click.pass_context
def revision_compare(
    ctx: click.Context,
    old_revision_id: str,
    new_revision_id: str,
    show_diff: bool,
    output_json: bool,
) -> None:
    """Compare the artifacts of two revisions by path."""
    from .commands.revision_cmd import run_revision_compare

    sys.exit(
        run_revision_compare(
            ctx.obj["store"],
            old_revision_id,
            new_revision_id,
            config=ctx.obj["config"],
            show_diff=show_diff,
            output_json=output_json,
        )
    )


# -----------------------------------------------------------------------------
# Approvals
# -----------------------------------------------------------------------------


@cli.group()
def approval() -> None:
    """Request, review, approve and reject revisions."""


@approval.command("request")
@click.argument("revision_id")
@_actor_options
@click.pass_context
def approval_request(ctx: click.Context, revision_id: str, name: str, email: str) -> None:
    """Open an approval request for a revision."""
    from .commands.approval_cmd import run_approval_request

    sys.exit(
        run_approval_request(
            ctx.obj["store"],
            revision_id,
            requested_by=Actor(name=name, email=email),
            config=ctx.obj["config"],
        )
    )


@approval.command("show")
@click.argument("approval_id")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def approval_show(ctx: click.Context, approval_id: str, output_json: bool) -> None:
    """Show gates and checklist of an approval."""
    from .commands.approval_cmd import run_approval_show

    sys.exit(run_approval_show(ctx.obj["store"], approval_id, config=ctx.obj["config"], output_json=output_json))


@approval.command("list")
@click.option("--status", type=click.Choice(["pending", "approved", "rejected"]), default=None)
@click.pass_context
def approval_list(ctx: click.Context, status: str | None) -> None:
    """List approvals, most recently requested first."""
    from .commands.approval_cmd import run_approval_list

    sys.exit(run_approval_list(ctx.obj["store"], config=ctx.obj["config"], status=status))


@approval.command("check")
@click.argument("approval_id")
@click.argument("item_id")
@click.option("--uncheck", is_flag=True, help="Clear the item instead of checking it")
@click.option("--by", "checked_by", envvar="REVGATE_USER_NAME", default=None, help="Who checked the item")
@click.pass_context
def approval_check(ctx: click.Context, approval_id: str, item_id: str, uncheck: bool, checked_by: str | None) -> None:
    """Check (or uncheck) a checklist item."""
    from .commands.approval_cmd import run_approval_check

    sys.exit(
        run_approval_check(
            ctx.obj["store"],
            approval_id,
            item_id,
            checked=not uncheck,
            checked_by=checked_by,
            config=ctx.obj["config"],
        )
    )


@approval.command("approve")
@click.argument("approval_id")
@_actor_options
@click.pass_context
def approval_approve(ctx: click.Context, approval_id: str, name: str, email: str) -> None:
    """Approve a pending approval (all required items and gates must pass)."""
    from .commands.approval_cmd import run_approval_approve

    sys.exit(
        run_approval_approve(
            ctx.obj["store"],
            approval_id,
            approved_by=Actor(name=name, email=email),
            config=ctx.obj["config"],
        )
    )


@approval.command("reject")
@click.argument("approval_id")
@click.option("--reason", required=True, help="Why the revision is rejected")
@_actor_options
@click.pass_context
def approval_reject(ctx: click.Context, approval_id: str, reason: str, name: str, email: str) -> None:
    """Reject a pending approval."""
    from .commands.approval_cmd import run_approval_reject

    sys.exit(
        run_approval_reject(
            ctx.obj["store"],
            approval_id,
            reason=reason,
            rejected_by=Actor(name=name, email=email),
            config=ctx.obj["config"],
        )
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
