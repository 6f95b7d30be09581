"""``agentweave agents`` — list agent manifests."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.markup import escape

from agentweave.cli_commands._output import console, print_agents_table


@click.group()
def agents() -> None:
    """Manage agent manifests."""


@agents.command("list")
@click.option(
    "--dir",
    "directory",
    default="agents",
    type=click.Path(exists=False),
    help="Directory containing agent manifests.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def list_agents(directory: str, fmt: str) -> None:
    """List all agent manifests in a directory."""
    from agentweave.core.agents.manifest import ManifestLoader
    from agentweave.core.errors import ManifestError

    dir_path = Path(directory)
    if not dir_path.is_dir():
        console.print(f"[yellow]Directory not found: {directory}[/yellow]")
        return

    try:
        manifests = ManifestLoader(dir_path).load_all()
    except ManifestError as exc:
        console.print(f"[red]Manifest error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not manifests:
        console.print("[yellow]No agent manifests found.[/yellow]")
        return

    if fmt == "json":
        data = {name: m.model_dump(exclude={"model"}) for name, m in manifests.items()}
        console.print_json(json.dumps(data, default=str))
    else:
        print_agents_table(manifests)
