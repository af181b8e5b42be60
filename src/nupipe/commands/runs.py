"""Runs command: show run history."""

import typer
from rich.table import Table

from ..output import get_output_context
from .common import require_project


def runs(
    pipeline: str | None = typer.Option(
        None, "--pipeline", "-p", help="Pipeline id (defaults to build and release)"
    ),
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Runs per pipeline"),
) -> None:
    """List recent pipeline runs, newest first."""
    ctx = get_output_context()
    project = require_project(ctx)

    if pipeline:
        pipeline_ids = [pipeline]
    else:
        pipeline_ids = [project.build.pipeline_id, project.release.pipeline_id]
    found = [r for pid in pipeline_ids for r in project.history.list_runs(pid)[:limit]]

    if ctx.json_mode:
        ctx.print_json({"runs": [r.model_dump(mode="json") for r in found]})
        return
    if not found:
        ctx.print("[yellow]No runs found[/yellow]")
        return

    table = Table(title="Runs")
    table.add_column("Pipeline")
    table.add_column("Run")
    table.add_column("Status")
    table.add_column("Version")
    table.add_column("Artifacts")
    for r in found:
        style = {"succeeded": "green", "failed": "red"}.get(r.status.value, "")
        table.add_row(
            r.pipeline_id,
            r.run_id,
            f"[{style}]{r.status.value}[/{style}]" if style else r.status.value,
            r.version or "-",
            ", ".join(a.file_name for a in r.artifacts) or (r.error or "-"),
        )
    ctx.console.print(table)
