"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentweave.core.agents.models import AgentManifest  # noqa: TC001
from agentweave.core.generation.trace import GenerationTrace  # noqa: TC001

console = Console()


def print_agents_table(manifests: dict[str, AgentManifest]) -> None:
    """Pretty-print agent manifests as a table."""
    table = Table(title="Agent Manifests")
    table.add_column("Name", style="cyan")
    table.add_column("Signature")
    table.add_column("Description")
    table.add_column("Child Agents")
    table.add_column("Model")

    for manifest in manifests.values():
        signature = manifest.signature if isinstance(manifest.signature, str) else "(structured)"
        table.add_row(
            manifest.name,
            _truncate(signature, 40),
            _truncate(manifest.description),
            ", ".join(manifest.agents) or "-",
            manifest.model.model if manifest.model is not None else "-",
        )

    console.print(table)


def print_result(result: dict[str, Any], *, as_json: bool = False) -> None:
    """Print an agent's output fields."""
    if as_json:
        console.print_json(json.dumps(result, default=str))
        return

    console.print("\n[bold]Result[/bold]")
    for key, val in result.items():
        console.print(f"  [cyan]{key}[/cyan]: {escape(str(val))}")


def print_traces(traces: list[GenerationTrace]) -> None:
    """Summarise generation traces step by step."""
    for trace in traces:
        usage = trace.total_usage()
        state = trace.state.value if trace.state is not None else "running"
        console.print(
            f"\n[bold]Trace {trace.id}[/bold] ({state}, {len(trace.steps)} step(s), "
            f"{usage.total_tokens} tokens)"
        )
        for index, step in enumerate(trace.steps):
            console.print(f"  {index + 1}. ({step.kind}) {escape(_truncate(step.response))}")
            for execution in step.functions:
                console.print(f"       -> {execution.name or '(none)'}: {escape(_truncate(execution.result, 60))}")
            if step.parsing_error is not None:
                console.print(f"       [yellow]parsing error:[/yellow] {escape(_truncate(step.parsing_error.error, 60))}")
        if trace.final_error:
            console.print(f"  [red]error:[/red] {escape(trace.final_error)}")


def _truncate(text: str, max_len: int = 80) -> str:
    text = text.replace("\n", " ")
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
