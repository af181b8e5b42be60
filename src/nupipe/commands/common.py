"""Helpers shared by the CLI commands."""

import typer

from ..constants import EXIT_ERROR, EXIT_SUCCESS
from ..core.project import Project, find_project_root, load_project
from ..models import PipelineRun
from ..output import OutputContext


def require_project(ctx: OutputContext) -> Project:
    """Load the project around the current directory or exit 1."""
    root = find_project_root()
    if root is None:
        ctx.error("Not a nupipe project. Run 'nupipe init' first.")
        raise typer.Exit(EXIT_ERROR)
    try:
        return load_project(root)
    except ValueError as e:
        # pydantic ValidationError is a ValueError
        ctx.error(f"Invalid configuration: {e}")
        raise typer.Exit(EXIT_ERROR) from None


def report_run(ctx: OutputContext, run: PipelineRun) -> None:
    """Print a finished run and exit with its exit code if it failed."""
    exit_code = ctx.run_report(run)
    if exit_code != EXIT_SUCCESS:
        raise typer.Exit(exit_code)
