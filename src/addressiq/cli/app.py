"""
Root Typer application for the AddressIQ CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from addressiq import __version__
from addressiq.cli.lookup import lookup, sources
from addressiq.cli.serve import serve

app = Typer(
    name="addressiq",
    help="AddressIQ: aggregated property intelligence for Dutch addresses.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"addressiq {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """AddressIQ CLI: serve the API, look up an address, inspect sources."""


app.command("serve")(serve)
app.command("lookup")(lookup)
app.command("sources")(sources)
