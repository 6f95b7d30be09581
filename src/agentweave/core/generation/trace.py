"""Per-call generation traces.

A :class:`GenerationTrace` is created for every loop run, threaded through
each step, and handed back to the caller on the result (or on the error).
Nothing is accumulated process-wide.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from agentweave.core.functions.models import FunctionExecution
from agentweave.core.interface.models import TokenUsage


class TerminalState(str, Enum):
    """How a generation loop run ended."""

    FINAL = "final"
    BUDGET_EXHAUSTED = "budget_exhausted"
    DUPLICATE_RESPONSE = "duplicate_response"
    EMPTY_RESPONSE = "empty_response"
    REPAIR_EXHAUSTED = "repair_exhausted"
    FAILED = "failed"


class ParsingError(BaseModel):
    """A decode failure and the text that caused it."""

    error: str
    data: str


class TraceStep(BaseModel):
    """One completion call and what followed from it."""

    kind: Literal["generate", "function", "repair"]
    prompt: str
    response: str = ""
    functions: list[FunctionExecution] = []
    parsing_error: ParsingError | None = None
    token_usage: TokenUsage | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class GenerationTrace(BaseModel):
    """Ordered log of one generation loop run."""

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    session_id: str | None = None
    query: str = ""
    steps: list[TraceStep] = []
    state: TerminalState | None = None
    final_error: str | None = None

    @property
    def parsing_errors(self) -> list[ParsingError]:
        return [s.parsing_error for s in self.steps if s.parsing_error is not None]

    @property
    def function_executions(self) -> list[FunctionExecution]:
        return [f for s in self.steps for f in s.functions]

    def total_usage(self) -> TokenUsage:
        """Sum the token usage reported by every step."""
        total = TokenUsage()
        for step in self.steps:
            if step.token_usage is not None:
                total = total + step.token_usage
        return total

    def record_parsing_error(self, error: str, data: str) -> None:
        """Attach a parsing error to the most recent step."""
        if not self.steps:
            return
        self.steps[-1].parsing_error = ParsingError(error=error, data=data)
