"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from agentweave.core.generation.trace import GenerationTrace, TerminalState, TraceStep
from agentweave.core.interface.models import TokenUsage
from agentweave.utils import telemetry
from agentweave.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    configure_telemetry,
    get_tracer,
    record_generation,
    record_usage,
)


def _attributes(span: MagicMock) -> dict[str, object]:
    return {c.args[0]: c.args[1] for c in span.set_attribute.call_args_list}


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("test.module"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("test") as span:
            span.set_attribute(telemetry.ATTR_AGENT_NAME, "value")


class TestRecordUsage:
    def test_sets_token_counts(self) -> None:
        span = MagicMock()
        record_usage(span, TokenUsage(prompt_tokens=7, completion_tokens=3, total_tokens=10))

        assert _attributes(span) == {
            telemetry.ATTR_TOKENS_PROMPT: 7,
            telemetry.ATTR_TOKENS_COMPLETION: 3,
            telemetry.ATTR_TOKENS_TOTAL: 10,
        }

    def test_none_is_ignored(self) -> None:
        span = MagicMock()
        record_usage(span, None)
        span.set_attribute.assert_not_called()


class TestRecordGeneration:
    def test_final_run(self) -> None:
        generation = GenerationTrace(
            steps=[
                TraceStep(kind="function", prompt="p1", token_usage=TokenUsage(prompt_tokens=4, completion_tokens=1, total_tokens=5)),
                TraceStep(kind="function", prompt="p2", token_usage=TokenUsage(prompt_tokens=6, completion_tokens=2, total_tokens=8)),
            ],
            state=TerminalState.FINAL,
        )
        span = MagicMock()
        record_generation(span, generation)

        attrs = _attributes(span)
        assert attrs[telemetry.ATTR_TERMINAL_STATE] == "final"
        assert attrs[telemetry.ATTR_STEP_COUNT] == 2
        assert attrs[telemetry.ATTR_PARSING_ERRORS] == 0
        assert attrs[telemetry.ATTR_TOKENS_TOTAL] == 13
        span.set_status.assert_not_called()

    def test_failed_run_sets_error_status(self) -> None:
        generation = GenerationTrace(
            steps=[TraceStep(kind="generate", prompt="p", response="")],
            state=TerminalState.EMPTY_RESPONSE,
            final_error="Empty response received",
        )
        span = MagicMock()
        record_generation(span, generation)

        assert _attributes(span)[telemetry.ATTR_TERMINAL_STATE] == "empty_response"
        status = span.set_status.call_args.args[0]
        assert status.status_code == trace.StatusCode.ERROR
        assert status.description == "Empty response received"

    def test_counts_parsing_errors(self) -> None:
        generation = GenerationTrace(steps=[TraceStep(kind="generate", prompt="p", response="{oops")])
        generation.record_parsing_error("Invalid JSON", "{oops")
        span = MagicMock()
        record_generation(span, generation)

        attrs = _attributes(span)
        assert attrs[telemetry.ATTR_PARSING_ERRORS] == 1
        assert telemetry.ATTR_TERMINAL_STATE not in attrs


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")

        with patch.dict("sys.modules", {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None}):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(console=False, otlp_endpoint="http://localhost:4317")

    def test_exporters_follow_flags(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")

        assert telemetry._exporters(False, None) == []
        [(exporter, batched)] = telemetry._exporters(True, None)
        assert type(exporter).__name__ == "ConsoleSpanExporter"
        assert batched is False


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        names = [n for n in dir(telemetry) if n.startswith("ATTR_")]
        assert names
        for name in names:
            assert getattr(telemetry, name).startswith("agentweave.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "agentweave"
