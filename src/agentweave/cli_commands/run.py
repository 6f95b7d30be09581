"""``agentweave run`` — run an agent defined in a manifest directory."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.markup import escape

from agentweave.cli_commands._loading import load_agent, parse_inputs
from agentweave.cli_commands._output import console, print_result, print_traces


@click.command()
@click.argument("agent_name")
@click.option(
    "--dir",
    "directory",
    default="agents",
    type=click.Path(exists=False),
    help="Directory containing agent manifests.",
)
@click.option("--input", "-i", "inputs", multiple=True, help="Input value as key=value (repeatable).")
@click.option("--model", "-m", default=None, help="LiteLLM model for agents without their own.")
@click.option("--session", "session_id", default=None, help="Conversation session id.")
@click.option("--json", "as_json", is_flag=True, help="Output the result as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Print generation traces.")
@click.option("--telemetry", is_flag=True, help="Print OpenTelemetry spans to stdout.")
@click.option("--otlp-endpoint", default=None, help="Export OpenTelemetry spans over OTLP/gRPC to this endpoint.")
def run(
    agent_name: str,
    directory: str,
    inputs: tuple[str, ...],
    model: str | None,
    session_id: str | None,
    as_json: bool,
    verbose: bool,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Run AGENT_NAME with the given inputs."""
    agent = load_agent(directory, agent_name)
    values = parse_inputs(inputs)

    service = None
    if model is not None:
        from agentweave.core.interface.client import LiteLLMService
        from agentweave.core.interface.config import ModelConfig

        service = LiteLLMService(ModelConfig(model=model))

    if telemetry or otlp_endpoint:
        from agentweave.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(console=telemetry, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {escape(str(exc))}")
            sys.exit(1)

    if verbose:
        console.print(f"Running agent: {agent.name}")
        console.print(f"Inputs: {values}")

    try:
        result = asyncio.run(agent.forward(service, values, session_id=session_id))
    except Exception as exc:
        if verbose:
            print_traces(agent.get_traces())
        console.print(f"[red]Execution error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if verbose:
        print_traces(agent.get_traces())
    print_result(result, as_json=as_json)
