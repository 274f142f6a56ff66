"""
fleetid CLI - Parse command.

Decode an id back into its node, exponent and timestamp.
"""

from __future__ import annotations

import json
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from fleetid.core.config import ConfigError
from fleetid.core.ids import parse_id
from fleetid.core.ids.api import get_generator

console = Console()


def parse(
    text: Annotated[str, typer.Argument(help="Id to decode")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Emit the decoded id as JSON"),
    ] = False,
) -> None:
    """
    Decode an id.

    Examples:

        fleetid parse ORD2401151030001230007005
        fleetid parse ORD2401151030001230007005 --json
    """
    try:
        tz = get_generator().tz
    except (ConfigError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    identifier = parse_id(text, tz)
    if identifier is None:
        console.print(f"[red]Error:[/red] Not a valid id: {text}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(identifier.model_dump(mode="json"), indent=2))
        return

    table = Table(title=identifier.text, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("prefix", identifier.prefix or "-")
    table.add_row("generated_at", identifier.generated_at.isoformat(timespec="milliseconds"))
    table.add_row("node", str(identifier.node))
    table.add_row("exponent", str(identifier.exponent))
    console.print(table)
