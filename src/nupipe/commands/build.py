"""Build command implementation."""

import typer

from ..errors import ConcurrencyViolation
from ..output import get_output_context
from .common import report_run, require_project


def build(
    counter: int | None = typer.Option(
        None, "--counter", "-c", min=0, help="Build counter (defaults to the next counter)"
    ),
    branch: str | None = typer.Option(None, "--branch", "-b", help="Branch to build"),
    label: str | None = typer.Option(
        None, "--label", "-l", help="Pre-release label (empty string for none)"
    ),
    publish: bool | None = typer.Option(
        None, "--publish/--no-publish", help="Push the pre-release package to the feed"
    ),
    credential_ref: str | None = typer.Option(
        None, "--credential-ref", help="Environment variable holding the feed token"
    ),
) -> None:
    """Build the pre-release and release packages."""
    ctx = get_output_context()
    project = require_project(ctx)

    invocation = project.make_invocation(
        build_counter=counter,
        pre_release_label=label,
        should_publish=publish,
        credential_ref=credential_ref,
    )
    credential = project.credential_for(invocation)
    try:
        run = project.build.run(invocation, credential=credential, branch=branch)
    except ConcurrencyViolation as e:
        ctx.error(str(e))
        raise typer.Exit(e.exit_code) from None
    report_run(ctx, run)
