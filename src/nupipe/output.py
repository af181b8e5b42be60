"""User-facing output for nupipe commands.

Results go to stdout, either as rich text or, with --json, as one JSON
document per command. Errors go to stderr in text mode so CI logs keep them
apart from results.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console

from .models import PipelineRun, RunStatus


@dataclass
class OutputContext:
    console: Console
    json_mode: bool = False
    err_console: Console = field(default_factory=lambda: Console(stderr=True, highlight=False))

    def print(self, message: str, style: str | None = None) -> None:
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Print a command result in the active format."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.err_console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")

    def run_report(self, run: PipelineRun) -> int:
        """Report a finished pipeline run and return its exit code."""
        data = run.model_dump(mode="json")
        if run.status is RunStatus.SUCCEEDED:
            files = ", ".join(a.file_name for a in run.artifacts) or "no artifacts"
            published = " (published)" if run.published else ""
            self.success(f"{run.pipeline_id} {run.run_id} succeeded{published}: {files}", data)
        else:
            self.error(f"{run.pipeline_id} {run.run_id} failed: {run.error}", data)
        return run.exit_code


# Set by the CLI callback
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Current output context, or a plain one outside the CLI."""
    return _ctx if _ctx is not None else OutputContext(Console())


def set_output_context(ctx: OutputContext) -> None:
    global _ctx
    _ctx = ctx
