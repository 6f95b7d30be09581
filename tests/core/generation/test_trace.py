"""Tests for GenerationTrace bookkeeping."""

from __future__ import annotations

from agentweave.core.functions.models import FunctionExecution
from agentweave.core.generation.trace import GenerationTrace, TraceStep
from agentweave.core.interface.models import TokenUsage


class TestGenerationTrace:
    def test_parsing_error_attaches_to_last_step(self) -> None:
        trace = GenerationTrace(steps=[TraceStep(kind="generate", prompt="p1"), TraceStep(kind="repair", prompt="p2")])
        trace.record_parsing_error("bad json", "{oops")

        assert trace.steps[0].parsing_error is None
        assert trace.steps[1].parsing_error is not None
        assert trace.parsing_errors[0].data == "{oops"

    def test_parsing_error_without_steps_is_ignored(self) -> None:
        trace = GenerationTrace()
        trace.record_parsing_error("bad", "x")
        assert trace.parsing_errors == []

    def test_total_usage_skips_missing(self) -> None:
        trace = GenerationTrace(
            steps=[
                TraceStep(kind="generate", prompt="a", token_usage=TokenUsage(prompt_tokens=3, completion_tokens=2, total_tokens=5)),
                TraceStep(kind="repair", prompt="b"),
                TraceStep(kind="repair", prompt="c", token_usage=TokenUsage(prompt_tokens=1, completion_tokens=1, total_tokens=2)),
            ]
        )
        usage = trace.total_usage()
        assert (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens) == (4, 3, 7)

    def test_function_executions_flattened(self) -> None:
        step = TraceStep(kind="function", prompt="p")
        step.functions.append(FunctionExecution(name="a", result="1", raw="Action: a"))
        other = TraceStep(kind="function", prompt="q")
        other.functions.append(FunctionExecution(name="b", result="2", raw="Action: b"))
        trace = GenerationTrace(steps=[step, other])

        assert [f.name for f in trace.function_executions] == ["a", "b"]

    def test_serializes(self) -> None:
        trace = GenerationTrace(query="q", steps=[TraceStep(kind="generate", prompt="p", response="r")])
        assert '"query":"q"' in trace.model_dump_json()
