"""FunctionExecutor — resolves and runs the function a model asked for."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from agentweave.core.errors import AgentWeaveError, FunctionExecutionError
from agentweave.core.functions.models import AgentFunction, FunctionExecution, FunctionOptions
from agentweave.core.functions.parser import FunctionCallParser
from agentweave.utils.telemetry import ATTR_FUNCTION_NAME, get_tracer

if TYPE_CHECKING:
    from agentweave.core.schema.models import SchemaNode

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

FINAL_RESULT = "finalResult"

_NO_CALL_FEEDBACK = (
    "No function call found. Respond with an Action and a JSON Action Input, "
    "or finish with {finish}."
)


def final_result_function(schema: SchemaNode) -> AgentFunction:
    """Build the synthetic function a model calls to deliver its output."""

    def _final_result(args: dict[str, Any], options: FunctionOptions | None = None) -> str:
        return json.dumps(args)

    return AgentFunction(
        name=FINAL_RESULT,
        description="Return the final result once all the required values are known.",
        parameters=schema,
        func=_final_result,
    )


class FunctionExecutor:
    """Parses model text and dispatches to the named function.

    Unknown names and unparseable text are reported back as the execution
    result so the model can correct itself.  Exceptions raised by a
    function are wrapped in :class:`FunctionExecutionError` and propagate.

    Usage::

        executor = FunctionExecutor()
        execution = await executor.execute(text, functions, FunctionOptions())
        if execution.name == FINAL_RESULT:
            ...
    """

    def __init__(self, parser: FunctionCallParser | None = None) -> None:
        self._parser = parser or FunctionCallParser()

    async def execute(
        self,
        text: str,
        functions: Sequence[AgentFunction],
        options: FunctionOptions | None = None,
    ) -> FunctionExecution:
        parsed = self._parser.parse(text)

        if parsed.final_answer is not None:
            return FunctionExecution(name=FINAL_RESULT, result=parsed.final_answer, raw=text)

        if parsed.call is None:
            has_final = any(f.name == FINAL_RESULT for f in functions)
            finish = f"an Action calling `{FINAL_RESULT}`" if has_final else "a Final Answer"
            return FunctionExecution(name="", result=_NO_CALL_FEEDBACK.format(finish=finish), raw=text)

        table = {f.name: f for f in functions}
        call = parsed.call
        fn = table.get(call.name)
        if fn is None:
            available = ", ".join(table) or "(none)"
            logger.debug("Model requested unknown function %s", call.name)
            return FunctionExecution(
                name=call.name,
                result=f"Function not found: {call.name}. Available functions: {available}",
                raw=text,
                arguments=call.arguments,
            )

        with _tracer.start_as_current_span("function.execute") as span:
            span.set_attribute(ATTR_FUNCTION_NAME, fn.name)
            try:
                output = await fn.invoke(call.arguments, options)
            except AgentWeaveError:
                raise
            except Exception as exc:
                raise FunctionExecutionError(fn.name, str(exc)) from exc

        return FunctionExecution(
            name=fn.name,
            result=_stringify(output),
            raw=text,
            arguments=call.arguments,
        )


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
