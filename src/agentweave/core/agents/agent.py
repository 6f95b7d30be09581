"""Agent — a named, schema-described unit backed by the generation loop.

An :class:`Agent` can be run directly with :meth:`Agent.forward`, or
exposed to a parent agent as a single callable via
:meth:`Agent.get_function`.  When run, it adapts each child agent's
function to its own inputs (see :mod:`agentweave.core.agents.adapter`) and
hands the combined callable set to a :class:`GenerationLoop`.

Usage::

    researcher = Agent(
        "researcher",
        "Looks up facts about a region and summarises them.",
        "region, topic -> summary",
    )
    planner = Agent(
        "trip-planner",
        "Plans a trip itinerary using research about the destination.",
        "region, days:number -> itinerary",
        service=LiteLLMService(ModelConfig(model="openai/gpt-4o")),
        agents=[researcher],
    )
    result = await planner.forward(None, {"region": "Patagonia", "days": 5})
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from agentweave.core.agents.adapter import AdapterPolicy, adapt_child_function
from agentweave.core.agents.signature import Signature
from agentweave.core.errors import MissingServiceError, ValidationError
from agentweave.core.functions.models import AgentFunction, FunctionOptions
from agentweave.core.generation.loop import (
    DiagnosticSink,
    GenerationLoop,
    GenerationResult,
    RateLimiter,
    StreamEvent,
)
from agentweave.core.generation.trace import GenerationTrace
from agentweave.core.interface.models import TokenUsage
from agentweave.core.interface.service import CompletionService
from agentweave.core.memory.memory import Memory
from agentweave.core.schema.models import SchemaNode
from agentweave.core.schema.projector import MODEL_FIELD, add_model_field
from agentweave.utils.telemetry import (
    ATTR_AGENT_ID,
    ATTR_AGENT_NAME,
    ATTR_FUNCTION_COUNT,
    get_tracer,
    record_generation,
)

_tracer = get_tracer(__name__)

MIN_NAME_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20


class AgentOptions(BaseModel):
    """Construction-time agent settings."""

    disable_smart_model_routing: bool = False
    exclude_fields_from_passthrough: list[str] = []
    debug: bool = False
    max_steps: int = 20
    max_retries: int = 3


@dataclass(frozen=True)
class AgentFeatures:
    """What a parent may do with this agent's function."""

    can_configure_smart_model_routing: bool
    exclude_fields_from_passthrough: tuple[str, ...]


class AgentDemos(BaseModel):
    """Recorded input/output traces for one program, keyed by its id."""

    program_id: str
    traces: list[dict[str, Any]] = []


class Agent:
    """A named agent with a signature, optional service, functions and child agents."""

    def __init__(
        self,
        name: str,
        description: str,
        signature: str | Mapping[str, Any] | Signature,
        *,
        service: CompletionService | None = None,
        agents: Sequence[Agent] = (),
        functions: Sequence[AgentFunction] = (),
        options: AgentOptions | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        _validate_name(name)
        _validate_description(description)

        self.name = name
        self.description = description
        self.service = service
        self.options = options or AgentOptions()
        self.agents = list(agents)
        self.functions = list(functions)
        self._sink = sink

        self.signature = Signature(signature)
        self.signature.set_description(description)

        self._id = uuid4().hex[:12]
        self._parent_id: str | None = None
        self._examples: list[dict[str, Any]] = []
        self._demos: list[dict[str, Any]] = []
        self._traces: list[GenerationTrace] = []

        for agent in self.agents:
            self._register(agent)

        self._func = AgentFunction(
            name=to_camel_case(name),
            description=description,
            parameters=self._function_parameters(),
            func=self._invoke,
        )

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, signature={str(self.signature)!r})"

    # ------------------------------------------------------------------
    # Identity, examples and demos
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def parent_id(self) -> str | None:
        return self._parent_id

    def set_id(self, agent_id: str) -> None:
        self._id = agent_id
        for agent in self.agents:
            agent.set_parent_id(agent_id)

    def set_parent_id(self, parent_id: str) -> None:
        self._parent_id = parent_id

    def set_examples(self, examples: Sequence[Mapping[str, Any]]) -> None:
        """Few-shot examples: mappings of input and output field values."""
        self._examples = [dict(e) for e in examples]

    def set_demos(self, demos: Sequence[AgentDemos]) -> None:
        """Assign demos to this agent and, by program id, to its child agents."""
        for demo in demos:
            if demo.program_id == self._id:
                self._demos = [dict(t) for t in demo.traces]
        for agent in self.agents:
            agent.set_demos(demos)

    def set_description(self, description: str) -> None:
        """Update the description on the agent, its signature and its function."""
        _validate_description(description)
        self.description = description
        self.signature.set_description(description)
        self._func.description = description
        self._func.parameters = self._function_parameters()

    # ------------------------------------------------------------------
    # Exposure to parents
    # ------------------------------------------------------------------

    def get_function(self) -> AgentFunction:
        """Return this agent as a callable for a parent's generation loop."""
        params = self._func.parameters
        return replace(self._func, parameters=params.model_copy(deep=True) if params is not None else None)

    def get_features(self) -> AgentFeatures:
        return AgentFeatures(
            can_configure_smart_model_routing=self.service is None,
            exclude_fields_from_passthrough=tuple(self.options.exclude_fields_from_passthrough),
        )

    async def _invoke(self, args: Mapping[str, Any], options: FunctionOptions | None = None) -> dict[str, Any]:
        values = dict(args)
        model = values.pop(MODEL_FIELD, None)
        service = self.service or (options.service if options is not None else None)
        if service is None:
            raise MissingServiceError(self.name)
        return await self.forward(
            service,
            values,
            model=model,
            session_id=options.session_id if options is not None else None,
            rate_limiter=options.rate_limiter if options is not None else None,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def forward(
        self,
        service: CompletionService | None,
        values: Mapping[str, Any],
        *,
        functions: Sequence[AgentFunction] | None = None,
        model: str | None = None,
        session_id: str | None = None,
        memory: Memory | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> dict[str, Any]:
        """Run the agent on *values* and return its output fields.

        The agent's own service takes precedence over *service*.
        *functions*, when given, replace the directly attached functions.
        *rate_limiter* wraps every completion request of this run and of the
        child agents it calls.
        """
        loop = self._build_loop(service, values, functions)

        with _tracer.start_as_current_span("agent.forward") as span:
            span.set_attribute(ATTR_AGENT_NAME, self.name)
            span.set_attribute(ATTR_AGENT_ID, self._id)
            span.set_attribute(ATTR_FUNCTION_COUNT, len(loop.functions))

            result = await loop.run(
                self._render_query(values),
                session_id=session_id,
                memory=memory,
                model=model,
                rate_limiter=rate_limiter,
            )
            record_generation(span, result.trace)

        self._traces.append(result.trace)
        return self._to_output(result.unwrap())

    async def streaming_forward(
        self,
        service: CompletionService | None,
        values: Mapping[str, Any],
        *,
        functions: Sequence[AgentFunction] | None = None,
        model: str | None = None,
        session_id: str | None = None,
        memory: Memory | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Like :meth:`forward`, yielding events as they are produced.

        The final ``result`` event carries the output fields as its value.
        The run's trace is recorded whether it succeeds or fails.
        """
        loop = self._build_loop(service, values, functions)

        def _record(result: GenerationResult) -> None:
            self._traces.append(result.trace)

        stream = loop.stream(
            self._render_query(values),
            session_id=session_id,
            memory=memory,
            model=model,
            rate_limiter=rate_limiter,
            on_result=_record,
        )
        async for event in stream:
            if event.type == "result":
                yield replace(event, value=self._to_output(event.value))
            else:
                yield event

    def get_traces(self) -> list[GenerationTrace]:
        return list(self._traces)

    def get_usage(self) -> TokenUsage:
        total = TokenUsage()
        for trace in self._traces:
            total = total + trace.total_usage()
        return total

    def reset_usage(self) -> None:
        self._traces.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register(self, agent: Agent) -> None:
        agent.set_parent_id(self._id)

    def _function_parameters(self) -> SchemaNode:
        """Input schema offered to parents, with a ``model`` field when routing applies."""
        parameters = self.signature.input_schema()
        models = self.service.get_model_list() if self.service is not None else None
        if models and not self.options.disable_smart_model_routing:
            return add_model_field(parameters, models)
        return parameters

    def _resolve_service(self, service: CompletionService | None) -> CompletionService:
        resolved = self.service or service
        if resolved is None:
            raise MissingServiceError(self.name)
        return resolved

    def _child_functions(self, service: CompletionService, values: Mapping[str, Any]) -> list[AgentFunction]:
        models = service.get_model_list()
        parent_keys = self.signature.input_names()
        debug = service.get_options().debug or self.options.debug

        adapted: list[AgentFunction] = []
        for agent in self.agents:
            features = agent.get_features()
            policy = AdapterPolicy(
                debug=debug,
                disable_smart_model_routing=self.options.disable_smart_model_routing,
                passthrough_exclusions=features.exclude_fields_from_passthrough,
                can_configure_smart_model_routing=features.can_configure_smart_model_routing,
            )
            adapted.append(
                adapt_child_function(agent.get_function(), values, parent_keys, models, policy, sink=self._sink)
            )
        return adapted

    def _build_loop(
        self,
        service: CompletionService | None,
        values: Mapping[str, Any],
        functions: Sequence[AgentFunction] | None,
    ) -> GenerationLoop:
        resolved = self._resolve_service(service)
        own = list(functions) if functions is not None else self.functions
        combined = [*own, *self._child_functions(resolved, values)]

        return GenerationLoop(
            resolved,
            functions=combined,
            response_schema=None if self.signature.is_plain_text_output else self.signature.output_schema(),
            max_steps=self.options.max_steps,
            max_retries=self.options.max_retries,
            debug=self.options.debug or resolved.get_options().debug,
            sink=self._sink,
        )

    def _render_query(self, values: Mapping[str, Any]) -> str:
        shots = [*self._examples, *self._demos]
        query = self.signature.render_query(values)
        if not shots:
            return query

        blocks: list[str] = []
        for shot in shots:
            lines = [
                f"{name}: {shot[name]}"
                for name in (*self.signature.input_names(), *self.signature.output_names())
                if name in shot
            ]
            blocks.append("\n".join(lines))
        return "Examples:\n\n" + "\n\n".join(blocks) + "\n\n" + query

    def _to_output(self, value: Any) -> dict[str, Any]:
        if self.signature.is_plain_text_output:
            return {self.signature.outputs[0].name: value}
        if isinstance(value, dict):
            return value
        return {self.signature.outputs[0].name: value}


def to_camel_case(text: str) -> str:
    """``"trip-planner agent"`` -> ``"tripPlannerAgent"``."""
    words = re.split(r"[^a-zA-Z0-9]", text)
    out: list[str] = []
    for index, word in enumerate(words):
        lower = word.lower()
        if index > 0 and lower:
            lower = lower[0].upper() + lower[1:]
        out.append(lower)
    return "".join(out)


def _validate_name(name: str) -> None:
    if not name or len(name) < MIN_NAME_LENGTH:
        raise ValidationError(
            "name",
            f"Agent name must be at least {MIN_NAME_LENGTH} characters (more descriptive): {name!r}",
        )


def _validate_description(description: str) -> None:
    if not description or len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            "description",
            f"Agent description must be at least {MIN_DESCRIPTION_LENGTH} characters "
            f"(explain in detail what the agent does): {description!r}",
        )
