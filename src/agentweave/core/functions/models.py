"""Callable descriptions offered to a completion model."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from agentweave.core.schema.models import SchemaNode

if TYPE_CHECKING:
    from agentweave.core.generation.loop import RateLimiter
    from agentweave.core.interface.service import CompletionService

FunctionHandler = Callable[..., Any]


@dataclass
class FunctionOptions:
    """Runtime options threaded from the generation loop into a callable.

    Child agents run on *service* when they have none of their own, and
    share the caller's *session_id* and *rate_limiter*.
    """

    service: CompletionService | None = None
    session_id: str | None = None
    rate_limiter: RateLimiter | None = None
    debug: bool = False


@dataclass
class AgentFunction:
    """A named operation with a parameter shape and an invocation handler.

    Consumers must treat an exposed function as immutable; adapters produce
    projected copies with :func:`dataclasses.replace`.
    """

    name: str
    description: str
    func: FunctionHandler
    parameters: SchemaNode | None = None

    async def invoke(self, args: dict[str, Any], options: FunctionOptions | None = None) -> Any:
        """Call the handler, awaiting it when it returns an awaitable."""
        result = self.func(args, options)
        if inspect.isawaitable(result):
            result = await result
        return result

    def to_tool_schema(self) -> dict[str, Any]:
        """Render as an OpenAI-compatible function schema."""
        parameters = self.parameters or SchemaNode.empty_object()
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters.to_json_schema(),
            },
        }


@dataclass
class FunctionCall:
    """A function invocation extracted from model text."""

    name: str
    arguments: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())


@dataclass
class FunctionExecution:
    """Outcome of executing (or failing to find) a function named by the model."""

    name: str
    result: str
    raw: str
    arguments: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())
