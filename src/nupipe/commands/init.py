"""Init command implementation."""

import shlex
import shutil
from pathlib import Path

import typer

from ..config import load_config, write_config_template
from ..constants import CONFIG_FILE, STATE_DIR
from ..output import get_output_context


def init(
    name: str | None = typer.Option(None, "--name", "-n", help="Package name"),
) -> None:
    """Initialize nupipe in the current directory."""
    ctx = get_output_context()
    state_dir = Path.cwd() / STATE_DIR
    config_path = state_dir / CONFIG_FILE

    state_dir.mkdir(exist_ok=True)
    (state_dir / "runs").mkdir(exist_ok=True)

    if not config_path.exists():
        write_config_template(state_dir, package_name=name)
        ctx.print(f"[green]Created config template:[/green] {config_path}")
    else:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")

    config = load_config(state_dir)
    tools = {"git": "git"}
    push_tool = shlex.split(config.feed.push_command)[0]
    tools[push_tool] = push_tool
    if config.build.pack_command:
        pack_tool = shlex.split(config.build.pack_command)[0]
        tools[pack_tool] = pack_tool

    for label, executable in tools.items():
        if shutil.which(executable):
            ctx.print(f"[green]✓[/green] {label}")
        else:
            ctx.print(f"[yellow]![/yellow] {label}: not found in PATH")

    ctx.result({"config": str(config_path)}, "\n[bold green]nupipe initialized[/bold green]")
