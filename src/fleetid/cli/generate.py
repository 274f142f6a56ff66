"""
fleetid CLI - Generate command.

Mint one or more ids, optionally restricted to a hash partition.
"""

from __future__ import annotations

import json
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from fleetid.core.config import ConfigError
from fleetid.core.ids import (
    HashCodeKeyPartitioner,
    IdGenerator,
    IdValidationConstraint,
    PartitionValidator,
    get_generator,
    initialize,
)

console = Console()


def _parse_partition(value: str) -> PartitionValidator:
    """Turn ``K/N`` into a validator for partition K out of N."""
    try:
        partition_str, total_str = value.split("/", 1)
        partition, total = int(partition_str), int(total_str)
    except ValueError:
        raise typer.BadParameter("Expected K/N, e.g. 3/8") from None
    if total < 1 or not 0 <= partition < total:
        raise typer.BadParameter(f"Partition must be in [0, {total}) and N >= 1")
    return PartitionValidator(partition, HashCodeKeyPartitioner(total))


def generate(
    prefix: Annotated[
        str,
        typer.Option("--prefix", "-p", help="Prefix prepended to every id"),
    ] = "",
    node: Annotated[
        int | None,
        typer.Option(
            "--node",
            "-n",
            help="Node number (0-9999); defaults to FLEETID_NODE or config",
        ),
    ] = None,
    count: Annotated[
        int,
        typer.Option("--count", "-c", min=1, help="Number of ids to generate"),
    ] = 1,
    partition: Annotated[
        str | None,
        typer.Option(
            "--partition",
            help="Only emit ids hashing into partition K of N (K/N)",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Emit decoded ids as JSON"),
    ] = False,
) -> None:
    """
    Generate ids.

    Examples:

        # One id for node 7
        fleetid generate --prefix ORD --node 7

        # Five ids that all land in shard 3 of 8
        fleetid generate --prefix ORD --count 5 --partition 3/8
    """
    constraints: list[IdValidationConstraint] = []
    if partition is not None:
        constraints.append(_parse_partition(partition))

    try:
        generator: IdGenerator = initialize(node) if node is not None else get_generator()
    except (ConfigError, ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    identifiers = []
    for _ in range(count):
        if constraints:
            identifier = generator.generate_with_constraints(prefix, constraints)
            if identifier is None:
                console.print(
                    f"[red]Error:[/red] Could not generate an id in partition {partition}"
                )
                raise typer.Exit(1)
        else:
            identifier = generator.generate(prefix)
        identifiers.append(identifier)

    if as_json:
        payload = [i.model_dump(mode="json") for i in identifiers]
        typer.echo(json.dumps(payload, indent=2))
        return

    for identifier in identifiers:
        typer.echo(identifier.text)
