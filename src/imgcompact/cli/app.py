"""Root Typer app with global options."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from imgcompact.cli.compress import compress
from imgcompact.cli.plan import plan

app = typer.Typer(
    name="imgcompact",
    help="Adaptive image compression with a single self-correcting retry.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        from imgcompact import __version__

        typer.echo(f"imgcompact {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log planning and retry decisions."),
) -> None:
    """imgcompact: adaptive image compression."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


app.command()(compress)
app.command()(plan)
