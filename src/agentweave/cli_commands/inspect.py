"""``agentweave inspect`` — show the callable an agent exposes to parents."""

from __future__ import annotations

import json

import click

from agentweave.cli_commands._loading import load_agent
from agentweave.cli_commands._output import console


@click.command("inspect")
@click.argument("agent_name")
@click.option(
    "--dir",
    "directory",
    default="agents",
    type=click.Path(exists=False),
    help="Directory containing agent manifests.",
)
def inspect_cmd(agent_name: str, directory: str) -> None:
    """Print AGENT_NAME's function schema and routing features as JSON."""
    agent = load_agent(directory, agent_name)
    features = agent.get_features()

    data = {
        "function": agent.get_function().to_tool_schema()["function"],
        "signature": str(agent.signature),
        "agents": [child.get_function().name for child in agent.agents],
        "features": {
            "can_configure_smart_model_routing": features.can_configure_smart_model_routing,
            "exclude_fields_from_passthrough": list(features.exclude_fields_from_passthrough),
        },
    }
    console.print_json(json.dumps(data))
