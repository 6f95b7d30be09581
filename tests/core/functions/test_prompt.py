"""Tests for FunctionPromptBuilder."""

from __future__ import annotations

from typing import Any

from agentweave.core.functions.models import AgentFunction
from agentweave.core.functions.prompt import FunctionPromptBuilder
from agentweave.core.schema.models import SchemaNode


def _fn(name: str) -> AgentFunction:
    def _handler(args: dict[str, Any], options: Any = None) -> str:
        return ""

    return AgentFunction(
        name=name,
        description=f"Does {name}",
        func=_handler,
        parameters=SchemaNode(properties={"q": SchemaNode(type="string")}, required=["q"]),
    )


class TestFunctionPromptBuilder:
    def test_lists_functions(self) -> None:
        text = FunctionPromptBuilder().build([_fn("search"), _fn("fetch")])
        assert "- search: Does search" in text
        assert "- fetch: Does fetch" in text
        assert '"q"' in text

    def test_final_answer_instruction_without_final_result(self) -> None:
        text = FunctionPromptBuilder().build([_fn("search")])
        assert "Final Answer:" in text

    def test_final_result_instruction(self) -> None:
        text = FunctionPromptBuilder().build([_fn("search")], final_result_name="finalResult")
        assert "call `finalResult`" in text
        assert "Final Answer:" not in text
