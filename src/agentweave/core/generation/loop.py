"""Self-correcting generation loop.

``GenerationLoop`` drives a :class:`CompletionService` through a bounded
sequence of completion calls:

* Without callables it issues a single request, then decodes the output,
  feeding decode errors back to the model for up to ``max_retries``
  attempts.
* With callables it runs up to ``max_steps`` function steps, executing
  whatever function each response names and appending the exchange to
  memory, until ``finalResult`` is invoked.

Every run ends in one of the :class:`TerminalState` values and is reported
as a :class:`GenerationResult`; :meth:`GenerationLoop.generate` unwraps it
into a value or a typed error.

Usage::

    loop = GenerationLoop(service, functions=[search], response_schema=schema)
    result = await loop.run("Find the capital of France", session_id="s1")
    value = result.unwrap()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from agentweave.core.codec.decoder import JsonOutputDecoder, OutputDecoder, decode_key_values
from agentweave.core.errors import (
    DecodeError,
    DuplicateResponseError,
    EmptyResponseError,
    StepBudgetExceededError,
    SyntaxRepairExhaustedError,
)
from agentweave.core.functions.executor import FINAL_RESULT, FunctionExecutor, final_result_function
from agentweave.core.functions.models import AgentFunction, FunctionExecution, FunctionOptions
from agentweave.core.functions.prompt import FunctionPromptBuilder
from agentweave.core.generation.trace import GenerationTrace, TerminalState, TraceStep
from agentweave.core.interface.models import GenerateConfig, GenerateResponse
from agentweave.core.interface.service import CompletionService, StreamingCompletionService
from agentweave.core.memory.memory import InMemoryMemory, Memory
from agentweave.core.schema.models import SchemaNode
from agentweave.utils.telemetry import (
    ATTR_FUNCTION_COUNT,
    ATTR_MAX_STEPS,
    ATTR_REPAIR_ATTEMPT,
    ATTR_SESSION_ID,
    ATTR_STEP,
    get_tracer,
    record_generation,
)

logger = logging.getLogger(__name__)
_diagnostics = logging.getLogger("agentweave.diagnostics")
_tracer = get_tracer(__name__)

DiagnosticSink = Callable[[str], None]
RateLimiter = Callable[[Callable[[], Awaitable[GenerateResponse]]], Awaitable[GenerateResponse]]
ResultHook = Callable[["GenerationResult"], None]

RESULT_STOP_SEQUENCE = "Result:"


def log_diagnostic(message: str) -> None:
    """Default diagnostic sink: log at INFO on ``agentweave.diagnostics``."""
    _diagnostics.info(message)


@dataclass
class StreamEvent:
    """An incremental output fragment from :meth:`GenerationLoop.stream`."""

    type: Literal["delta", "function", "result"]
    text: str = ""
    function: FunctionExecution | None = None
    value: Any = None
    trace: GenerationTrace | None = None


@dataclass
class GenerationResult:
    """Tagged outcome of one generation loop run."""

    state: TerminalState
    trace: GenerationTrace
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.state is TerminalState.FINAL

    def unwrap(self) -> Any:
        """Return the value, or raise the error that ended the run."""
        if self.error is not None:
            raise self.error
        return self.value


@dataclass
class _RunContext:
    query: str
    session_id: str | None
    memory: Memory
    model: str | None
    trace: GenerationTrace
    rate_limiter: RateLimiter | None = None
    streaming: bool = False
    text: str = ""
    state: TerminalState | None = None
    value: Any = None


class GenerationLoop:
    """Bounded completion loop with function execution and output repair.

    Parameters
    ----------
    service:
        The completion service to call.
    functions:
        Callables offered to the model.  When empty the loop runs in
        single-shot mode.
    response_schema:
        Output shape.  Responses are decoded against it, and in function
        mode a ``finalResult`` function with these parameters is appended.
    response_mode:
        ``"auto"`` decodes against *response_schema* when one is given and
        returns plain text otherwise; ``"key_value"`` decodes ``Key: value``
        lines.
    max_steps:
        Function-step budget (default ``20``).
    max_retries:
        Decode attempts before giving up (default ``3``).
    debug:
        Mirror the full trace to *sink* when a run ends.
    """

    def __init__(
        self,
        service: CompletionService,
        *,
        functions: Sequence[AgentFunction] | None = None,
        response_schema: SchemaNode | None = None,
        response_mode: Literal["auto", "key_value"] = "auto",
        max_steps: int = 20,
        max_retries: int = 3,
        decoder: OutputDecoder | None = None,
        executor: FunctionExecutor | None = None,
        memory: Memory | None = None,
        debug: bool = False,
        sink: DiagnosticSink | None = None,
        stop_sequences: Sequence[str] = (),
        query_prefix: str = "Query: ",
        response_prefix: str = "\nResponse: ",
    ) -> None:
        if max_steps < 1:
            msg = "max_steps must be at least 1"
            raise ValueError(msg)
        if max_retries < 1:
            msg = "max_retries must be at least 1"
            raise ValueError(msg)

        self.service = service
        self.functions = list(functions or [])
        self.response_schema = response_schema
        self.response_mode = response_mode
        self.max_steps = max_steps
        self.max_retries = max_retries
        self.decoder = decoder or JsonOutputDecoder()
        self.executor = executor or FunctionExecutor()
        self.memory = memory
        self.debug = debug
        self.sink = sink or log_diagnostic
        self.stop_sequences = list(stop_sequences)
        self.query_prefix = query_prefix
        self.response_prefix = response_prefix
        self._prompt_builder = FunctionPromptBuilder()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_prompt(self, query: str, history: str) -> str:
        return f"{query}\n{history}\n"

    def active_functions(self) -> list[AgentFunction]:
        """Callables offered to the model, including the synthetic ``finalResult``."""
        functions = list(self.functions)
        if functions and self.response_schema is not None:
            functions.append(final_result_function(self.response_schema))
        return functions

    async def run(
        self,
        query: str,
        *,
        session_id: str | None = None,
        memory: Memory | None = None,
        model: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> GenerationResult:
        """Run the loop to a terminal state.

        Never raises the loop's own fatal conditions; they are reported on
        the returned :class:`GenerationResult`.  *rate_limiter*, when given,
        wraps every completion request of this run.
        """
        ctx = self._context(query, session_id, memory, model, rate_limiter)

        with _tracer.start_as_current_span("generation.run") as span:
            span.set_attribute(ATTR_MAX_STEPS, self.max_steps)
            span.set_attribute(ATTR_FUNCTION_COUNT, len(self.functions))
            if session_id:
                span.set_attribute(ATTR_SESSION_ID, session_id)

            try:
                async for _ in self._execute(ctx):
                    pass
            except Exception as exc:
                result = self._finish(ctx, exc)
            else:
                result = self._finish(ctx)

            record_generation(span, result.trace)
            return result

    async def generate(
        self,
        query: str,
        *,
        session_id: str | None = None,
        memory: Memory | None = None,
        model: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> Any:
        """Run the loop and return its value, raising on any failure."""
        result = await self.run(
            query,
            session_id=session_id,
            memory=memory,
            model=model,
            rate_limiter=rate_limiter,
        )
        return result.unwrap()

    async def stream(
        self,
        query: str,
        *,
        session_id: str | None = None,
        memory: Memory | None = None,
        model: str | None = None,
        rate_limiter: RateLimiter | None = None,
        on_result: ResultHook | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Yield output fragments as the run progresses.

        The last event is a ``result`` event carrying the value and trace.
        Each call starts a fresh run; failures are raised from the iterator.
        *on_result* receives the :class:`GenerationResult` once the run ends,
        before the final event is yielded or the error is raised.
        """
        ctx = self._context(query, session_id, memory, model, rate_limiter, streaming=True)

        try:
            async for event in self._execute(ctx):
                yield event
        except Exception as exc:
            result = self._finish(ctx, exc)
        else:
            result = self._finish(ctx)

        if on_result is not None:
            on_result(result)
        if result.error is not None:
            raise result.error
        yield StreamEvent(type="result", value=result.value, trace=result.trace)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _context(
        self,
        query: str,
        session_id: str | None,
        memory: Memory | None,
        model: str | None,
        rate_limiter: RateLimiter | None,
        *,
        streaming: bool = False,
    ) -> _RunContext:
        return _RunContext(
            query=query,
            session_id=session_id,
            memory=memory or self.memory or InMemoryMemory(),
            model=model,
            trace=GenerationTrace(session_id=session_id, query=query),
            rate_limiter=rate_limiter,
            streaming=streaming,
        )

    async def _execute(self, ctx: _RunContext) -> AsyncIterator[StreamEvent]:
        if self.functions:
            async for event in self._function_steps(ctx):
                yield event
        else:
            async for event in self._single_shot(ctx):
                yield event

        if ctx.state is None:
            await self._decode_with_repair(ctx)

    async def _single_shot(self, ctx: _RunContext) -> AsyncIterator[StreamEvent]:
        prompt = self.build_prompt(ctx.query, ctx.memory.history(ctx.session_id))
        config = self._config(ctx)

        if ctx.streaming and isinstance(self.service, StreamingCompletionService):
            step = self._begin_step(ctx, "generate", prompt)
            parts: list[str] = []
            async for fragment in self.service.stream_generate(prompt, config, ctx.session_id):
                parts.append(fragment)
                yield StreamEvent(type="delta", text=fragment)
            value = "".join(parts).strip()
            step.response = value
        else:
            response = await self._call(ctx, "generate", prompt, config)
            value = response.text
            if ctx.streaming and value:
                yield StreamEvent(type="delta", text=value)

        if not value:
            ctx.state = TerminalState.EMPTY_RESPONSE
            return

        ctx.memory.add(f"{self.query_prefix}{ctx.query}{self.response_prefix}{value}", ctx.session_id)
        ctx.text = value

    async def _function_steps(self, ctx: _RunContext) -> AsyncIterator[StreamEvent]:
        functions = self.active_functions()
        final_name = FINAL_RESULT if self.response_schema is not None else None
        catalogue = self._prompt_builder.build(functions, final_result_name=final_name)
        query = f"{catalogue}\n\n{ctx.query}"
        config = self._config(ctx, RESULT_STOP_SEQUENCE)
        options = FunctionOptions(
            service=self.service,
            session_id=ctx.session_id,
            rate_limiter=ctx.rate_limiter,
            debug=self.debug,
        )

        previous: str | None = None
        for index in range(self.max_steps):
            with _tracer.start_as_current_span("generation.step") as span:
                span.set_attribute(ATTR_STEP, index)

                prompt = self.build_prompt(query, ctx.memory.history(ctx.session_id))
                response = await self._call(ctx, "function", prompt, config)
                value = response.text

                if not value:
                    ctx.state = TerminalState.EMPTY_RESPONSE
                    return
                if previous is not None and value == previous:
                    ctx.state = TerminalState.DUPLICATE_RESPONSE
                    return

                execution = await self.executor.execute(value, functions, options)
                ctx.trace.steps[-1].functions.append(execution)
                ctx.memory.add(f"\n{value}\n{RESULT_STOP_SEQUENCE} {execution.result}", ctx.session_id)

            yield StreamEvent(type="function", function=execution)

            if execution.name == FINAL_RESULT:
                ctx.text = execution.result
                return
            previous = value

        ctx.state = TerminalState.BUDGET_EXHAUSTED

    async def _decode_with_repair(self, ctx: _RunContext) -> None:
        value = ctx.text
        for attempt in range(self.max_retries):
            try:
                ctx.value = self._decode(value)
            except DecodeError as exc:
                error = str(exc)
                ctx.trace.record_parsing_error(error, value)
                logger.debug("Decode attempt %d failed: %s", attempt + 1, error)
            else:
                ctx.state = TerminalState.FINAL
                return

            if attempt == self.max_retries - 1:
                break

            value = await self._repair(ctx, error, value, attempt)
            if not value:
                ctx.state = TerminalState.EMPTY_RESPONSE
                return

        ctx.state = TerminalState.REPAIR_EXHAUSTED

    def _decode(self, value: str) -> Any:
        if self.response_mode == "key_value":
            return decode_key_values(value)
        if self.response_schema is not None:
            return self.decoder.decode(value, self.response_schema)
        return value

    async def _repair(self, ctx: _RunContext, error: str, value: str, attempt: int) -> str:
        """Ask the model to fix output that failed to decode."""
        with _tracer.start_as_current_span("generation.repair") as span:
            span.set_attribute(ATTR_REPAIR_ATTEMPT, attempt + 1)
            history = ctx.memory.history(ctx.session_id)
            prompt = f"{history}\nSyntax Error: {error}\n{value}"
            response = await self._call(ctx, "repair", prompt, self._config(ctx))
            return response.text

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _config(self, ctx: _RunContext, *extra_stops: str) -> GenerateConfig:
        return GenerateConfig(model=ctx.model, stop_sequences=[*self.stop_sequences, *extra_stops])

    def _begin_step(self, ctx: _RunContext, kind: Literal["generate", "function", "repair"], prompt: str) -> TraceStep:
        step = TraceStep(kind=kind, prompt=prompt)
        ctx.trace.steps.append(step)
        return step

    async def _call(
        self,
        ctx: _RunContext,
        kind: Literal["generate", "function", "repair"],
        prompt: str,
        config: GenerateConfig,
    ) -> GenerateResponse:
        step = self._begin_step(ctx, kind, prompt)

        def request() -> Awaitable[GenerateResponse]:
            return self.service.generate(prompt, config, ctx.session_id)

        if ctx.rate_limiter is not None:
            response = await ctx.rate_limiter(request)
        else:
            response = await request()
        step.response = response.text
        step.token_usage = response.token_usage
        return response

    def _finish(self, ctx: _RunContext, error: Exception | None = None) -> GenerationResult:
        trace = ctx.trace
        if error is not None:
            state = TerminalState.FAILED
        else:
            state = ctx.state or TerminalState.FAILED
            error = self._terminal_error(state, trace)

        trace.state = state
        if error is not None:
            trace.final_error = str(error)
            logger.debug("Generation run %s ended in %s: %s", trace.id, state.value, error)

        if self.debug:
            self.sink(f"Generation trace:\n{trace.model_dump_json(indent=2)}")

        value = ctx.value if state is TerminalState.FINAL else None
        return GenerationResult(state=state, trace=trace, value=value, error=error)

    def _terminal_error(self, state: TerminalState, trace: GenerationTrace) -> Exception | None:
        if state is TerminalState.EMPTY_RESPONSE:
            return EmptyResponseError(trace)
        if state is TerminalState.DUPLICATE_RESPONSE:
            return DuplicateResponseError(trace)
        if state is TerminalState.BUDGET_EXHAUSTED:
            return StepBudgetExceededError(self.max_steps, trace)
        if state is TerminalState.REPAIR_EXHAUSTED:
            return SyntaxRepairExhaustedError(self.max_retries, trace)
        return None
