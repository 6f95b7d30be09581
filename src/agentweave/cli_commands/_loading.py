"""Shared helpers for commands that build agents from manifests."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.markup import escape

from agentweave.cli_commands._output import console

if TYPE_CHECKING:
    from agentweave.core.agents.agent import Agent


def load_agent(directory: str, name: str) -> Agent:
    """Build the agent tree from *directory* and return the agent called *name*.

    Exits with status 1 on manifest or validation errors.
    """
    from agentweave.core.agents.manifest import ManifestLoader, build_agents
    from agentweave.core.errors import AgentWeaveError

    dir_path = Path(directory)
    if not dir_path.is_dir():
        console.print(f"[red]Directory not found:[/red] {directory}")
        sys.exit(1)

    try:
        agents = build_agents(ManifestLoader(dir_path).load_all())
    except AgentWeaveError as exc:
        console.print(f"[red]Manifest error:[/red] {escape(str(exc))}")
        sys.exit(1)

    agent = agents.get(name)
    if agent is None:
        console.print(f"[red]Unknown agent:[/red] {name}")
        sys.exit(1)
    return agent


def parse_inputs(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into input values; JSON values are decoded."""
    values: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            console.print(f"[red]Invalid input (expected key=value):[/red] {pair}")
            sys.exit(1)
        try:
            values[key] = json.loads(raw)
        except json.JSONDecodeError:
            values[key] = raw
    return values
