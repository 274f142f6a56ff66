"""
fleetid CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from fleetid import __version__
from fleetid.cli import generate, parse
from fleetid.core.config.env import load_env_files

app = typer.Typer(
    name="fleetid",
    help="Generate and inspect node-stamped, time-sortable ids",
    no_args_is_help=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool = False) -> None:
    """
    Configure logging for CLI commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"fleetid {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    fleetid - node-stamped, millisecond-sortable ids.

    Examples:
        fleetid generate --prefix ORD --node 7
        fleetid generate --prefix ORD --count 5 --partition 3/8
        fleetid parse ORD2401151030001230007005
    """
    # Precedence: OS env > project .env.local > project .env > user .env
    load_env_files()
    configure_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="generate")(generate.generate)
app.command(name="parse")(parse.parse)


__all__ = ["app", "main"]
