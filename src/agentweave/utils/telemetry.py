"""OpenTelemetry instrumentation for agent runs.

Every layer opens its spans through :func:`get_tracer`; without a
configured SDK the OpenTelemetry API hands back no-op tracers, so
instrumentation costs nothing until :func:`configure_telemetry` is called
(``pip install agentweave[otel]``).

Span layout for one ``Agent.forward``::

    agent.forward
    └── generation.run
        ├── generation.step / generation.repair
        │   ├── model.generate
        │   └── function.execute   (a child agent nests its own agent.forward)
        └── ...

:func:`record_usage` and :func:`record_generation` put token counts and
terminal states on those spans under the ``agentweave.*`` keys below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from agentweave.core.generation.trace import GenerationTrace
    from agentweave.core.interface.models import TokenUsage

ATTR_AGENT_NAME = "agentweave.agent.name"
ATTR_AGENT_ID = "agentweave.agent.id"
ATTR_SESSION_ID = "agentweave.session.id"
ATTR_MODEL = "agentweave.model"
ATTR_PROVIDER = "agentweave.provider"
ATTR_TOKENS_PROMPT = "agentweave.tokens.prompt"
ATTR_TOKENS_COMPLETION = "agentweave.tokens.completion"
ATTR_TOKENS_TOTAL = "agentweave.tokens.total"
ATTR_FINISH_REASON = "agentweave.finish_reason"
ATTR_FUNCTION_NAME = "agentweave.function.name"
ATTR_FUNCTION_COUNT = "agentweave.function.count"
ATTR_STEP = "agentweave.generation.step"
ATTR_STEP_COUNT = "agentweave.generation.step_count"
ATTR_MAX_STEPS = "agentweave.generation.max_steps"
ATTR_PARSING_ERRORS = "agentweave.generation.parsing_errors"
ATTR_REPAIR_ATTEMPT = "agentweave.repair.attempt"
ATTR_TERMINAL_STATE = "agentweave.generation.state"

_INSTRUMENTATION_NAME = "agentweave"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name* (a module ``__name__``); no-op until configured."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_usage(span: trace.Span, usage: TokenUsage | None) -> None:
    """Set prompt, completion and total token counts on *span*."""
    if usage is None:
        return
    span.set_attribute(ATTR_TOKENS_PROMPT, usage.prompt_tokens)
    span.set_attribute(ATTR_TOKENS_COMPLETION, usage.completion_tokens)
    span.set_attribute(ATTR_TOKENS_TOTAL, usage.total_tokens)


def record_generation(span: trace.Span, generation: GenerationTrace) -> None:
    """Summarise a finished generation run on *span*.

    Records the terminal state, the number of completion calls, the parsing
    errors met along the way and the summed token usage.
    """
    if generation.state is not None:
        span.set_attribute(ATTR_TERMINAL_STATE, generation.state.value)
    span.set_attribute(ATTR_STEP_COUNT, len(generation.steps))
    span.set_attribute(ATTR_PARSING_ERRORS, len(generation.parsing_errors))
    record_usage(span, generation.total_usage())
    if generation.final_error:
        span.set_status(trace.Status(trace.StatusCode.ERROR, generation.final_error))


def configure_telemetry(
    *,
    service_name: str = "agentweave",
    console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider exporting agent spans.

    Spans go to stdout when *console* is set, and over OTLP/gRPC when
    *otlp_endpoint* is given; both may be active at once.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP export,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for configure_telemetry(); install agentweave[otel]"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    for exporter, batched in _exporters(console, otlp_endpoint):
        processor = BatchSpanProcessor(exporter) if batched else SimpleSpanProcessor(exporter)
        provider.add_span_processor(processor)  # pyright: ignore[reportUnknownMemberType]

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _exporters(console: bool, otlp_endpoint: str | None) -> list[tuple[Any, bool]]:
    """Exporters to install, each paired with whether to batch it."""
    exporters: list[tuple[Any, bool]] = []
    if console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

        exporters.append((ConsoleSpanExporter(), False))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        except ImportError as exc:
            msg = "opentelemetry-exporter-otlp is required for OTLP export; install agentweave[otel]"
            raise ImportError(msg) from exc
        exporters.append((OTLPSpanExporter(endpoint=otlp_endpoint), True))
    return exporters
