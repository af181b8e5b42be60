"""Watch command: build the default branch after each quiet period."""

import typer

from ..constants import DEFAULT_POLL_INTERVAL
from ..core.watcher import watch_source
from ..errors import ConcurrencyViolation
from ..models import SourceChange
from ..output import get_output_context
from ..services.git import GitError, get_branch_head
from .common import require_project


def watch(
    interval: int = typer.Option(
        DEFAULT_POLL_INTERVAL, "--interval", "-i", min=1, help="Seconds between polls"
    ),
    max_runs: int | None = typer.Option(None, "--max-runs", min=1, help="Stop after N builds"),
) -> None:
    """Watch the default branch and build when changes settle."""
    ctx = get_output_context()
    project = require_project(ctx)
    branch = project.config.vcs.default_branch
    trigger = project.make_trigger()

    if not trigger.branch_filter.accepts(branch):
        ctx.error(f"Branch {branch} is excluded by the branch filter")
        raise typer.Exit(1)

    def poll() -> str:
        return get_branch_head(branch, cwd=project.root, url=project.config.vcs.url)

    def on_fire(change: SourceChange) -> None:
        invocation = project.make_invocation()
        try:
            run = project.build.run(
                invocation,
                credential=project.credential_for(invocation),
                branch=change.branch,
                trigger=change,
            )
        except ConcurrencyViolation as e:
            # Build again once the running one has finished
            ctx.error(str(e))
            trigger.notify(change)
            return
        ctx.print(f"{run.run_id}: {run.status.value} {run.version or ''}")

    try:
        count = watch_source(
            branch,
            poll_revision=poll,
            trigger=trigger,
            on_fire=on_fire,
            interval=interval,
            max_runs=max_runs,
            is_busy=lambda: project.build.busy,
        )
    except GitError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        ctx.print("\nStopped watching")
        return
    ctx.result({"builds": count}, f"Started {count} build(s)")
