"""Tests for FunctionExecutor and the synthetic finalResult function."""

from __future__ import annotations

import json
from typing import Any

import pytest

from agentweave.core.errors import FunctionExecutionError, MissingServiceError
from agentweave.core.functions.executor import FINAL_RESULT, FunctionExecutor, final_result_function
from agentweave.core.functions.models import AgentFunction, FunctionOptions
from agentweave.core.schema.models import SchemaNode


def _echo() -> AgentFunction:
    def _handler(args: dict[str, Any], options: FunctionOptions | None = None) -> dict[str, Any]:
        return {"echo": args}

    return AgentFunction(name="echo", description="Echo the arguments", func=_handler)


class TestFunctionExecutor:
    async def test_executes_named_function(self) -> None:
        executor = FunctionExecutor()
        text = 'Action: echo\nAction Input: {"x": 1}'
        execution = await executor.execute(text, [_echo()])
        assert execution.name == "echo"
        assert json.loads(execution.result) == {"echo": {"x": 1}}
        assert execution.raw == text
        assert execution.arguments == {"x": 1}

    async def test_async_handler_awaited(self) -> None:
        async def _handler(args: dict[str, Any], options: FunctionOptions | None = None) -> str:
            return f"hi {args['name']}"

        fn = AgentFunction(name="greet", description="Greets", func=_handler)
        execution = await FunctionExecutor().execute('Action: greet\nAction Input: {"name": "Ana"}', [fn])
        assert execution.result == "hi Ana"

    async def test_options_passed_through(self) -> None:
        seen: list[FunctionOptions | None] = []

        def _handler(args: dict[str, Any], options: FunctionOptions | None = None) -> str:
            seen.append(options)
            return "ok"

        fn = AgentFunction(name="inspector", description="Inspects its options.", func=_handler)
        options = FunctionOptions(session_id="s1")
        await FunctionExecutor().execute("Action: inspector", [fn], options)
        assert seen == [options]

    async def test_unknown_function_reported(self) -> None:
        execution = await FunctionExecutor().execute("Action: missing", [_echo()])
        assert execution.name == "missing"
        assert "Function not found: missing" in execution.result
        assert "echo" in execution.result

    async def test_no_call_reported(self) -> None:
        execution = await FunctionExecutor().execute("hmm, let me think", [_echo()])
        assert execution.name == ""
        assert "No function call found" in execution.result

    async def test_final_answer_maps_to_final_result(self) -> None:
        execution = await FunctionExecutor().execute("Final Answer: 42", [_echo()])
        assert execution.name == FINAL_RESULT
        assert execution.result == "42"

    async def test_handler_error_wrapped(self) -> None:
        def _boom(args: dict[str, Any], options: FunctionOptions | None = None) -> None:
            raise RuntimeError("disk full")

        fn = AgentFunction(name="boom", description="Fails", func=_boom)
        with pytest.raises(FunctionExecutionError, match="disk full"):
            await FunctionExecutor().execute("Action: boom", [fn])

    async def test_agentweave_errors_propagate_unwrapped(self) -> None:
        def _no_service(args: dict[str, Any], options: FunctionOptions | None = None) -> None:
            raise MissingServiceError("child")

        fn = AgentFunction(name="child", description="Child", func=_no_service)
        with pytest.raises(MissingServiceError):
            await FunctionExecutor().execute("Action: child", [fn])


class TestFinalResultFunction:
    async def test_returns_arguments_as_json(self) -> None:
        schema = SchemaNode(properties={"answer": SchemaNode(type="string")}, required=["answer"])
        fn = final_result_function(schema)
        assert fn.name == FINAL_RESULT
        assert fn.parameters == schema
        assert json.loads(await fn.invoke({"answer": "yes"})) == {"answer": "yes"}
