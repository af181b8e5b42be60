"""Release command implementation."""

import typer

from ..errors import ConcurrencyViolation
from ..output import get_output_context
from .common import report_run, require_project


def release(
    credential_ref: str | None = typer.Option(
        None, "--credential-ref", help="Environment variable holding the feed token"
    ),
) -> None:
    """Publish the release packages of the last successful build."""
    ctx = get_output_context()
    project = require_project(ctx)

    invocation = project.make_invocation(credential_ref=credential_ref)
    credential = project.credential_for(invocation)
    try:
        run = project.release.run(credential)
    except ConcurrencyViolation as e:
        ctx.error(str(e))
        raise typer.Exit(e.exit_code) from None
    report_run(ctx, run)
