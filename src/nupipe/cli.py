"""nupipe CLI: build, pre-release and release installer packages."""

import typer
from rich.console import Console

from nupipe import __version__

from .commands import build, init, release, runs, watch
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"nupipe {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="nupipe",
    help="Build, pre-release and release pipeline for NuGet-packaged installer scripts",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """nupipe - package, pre-release and release installer scripts."""
    configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)
    set_output_context(
        OutputContext(
            console=Console(no_color=no_color, highlight=False),
            json_mode=json_output,
            err_console=Console(stderr=True, no_color=no_color, highlight=False),
        )
    )


app.command()(init)
app.command()(build)
app.command()(release)
app.command()(runs)
app.command()(watch)


if __name__ == "__main__":
    app()
