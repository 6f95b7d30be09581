"""Shared error types for agent composition and the generation loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentweave.core.generation.trace import GenerationTrace


class AgentWeaveError(Exception):
    """Base error for all agentweave failures."""


class ValidationError(AgentWeaveError):
    """An agent or signature was constructed with invalid values."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"Invalid {field}: {detail}")


class SignatureError(ValidationError):
    """A signature string or mapping could not be parsed."""

    def __init__(self, detail: str) -> None:
        super().__init__("signature", detail)


class MissingServiceError(AgentWeaveError):
    """No completion service was bound to the agent or supplied by the caller."""

    def __init__(self, agent_name: str = "") -> None:
        self.agent_name = agent_name
        msg = "AI service is required to run the agent"
        if agent_name:
            msg += f": {agent_name}"
        super().__init__(msg)


class DecodeError(AgentWeaveError):
    """Model output could not be decoded into the declared output shape."""

    def __init__(self, detail: str, text: str = "") -> None:
        self.detail = detail
        self.text = text
        super().__init__(detail)


class FunctionExecutionError(AgentWeaveError):
    """A callable raised while being invoked by the generation loop."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Function execution failed: {name}" + (f": {detail}" if detail else ""))


class ManifestError(AgentWeaveError):
    """Agent manifests could not be loaded or linked into a tree."""


# ---------------------------------------------------------------------------
# Fatal generation-loop conditions
# ---------------------------------------------------------------------------


class GenerationError(AgentWeaveError):
    """A generation loop run terminated without a final value.

    The trace recorded up to the failure is available as :attr:`trace`.
    """

    def __init__(self, message: str, trace: GenerationTrace | None = None) -> None:
        self.trace = trace
        super().__init__(message)


class EmptyResponseError(GenerationError):
    def __init__(self, trace: GenerationTrace | None = None) -> None:
        super().__init__("Empty response received", trace)


class DuplicateResponseError(GenerationError):
    def __init__(self, trace: GenerationTrace | None = None) -> None:
        super().__init__("Duplicate response received", trace)


class StepBudgetExceededError(GenerationError):
    def __init__(self, max_steps: int, trace: GenerationTrace | None = None) -> None:
        self.max_steps = max_steps
        super().__init__(f"max {max_steps} steps allowed", trace)


class SyntaxRepairExhaustedError(GenerationError):
    def __init__(self, attempts: int, trace: GenerationTrace | None = None) -> None:
        self.attempts = attempts
        super().__init__(f"Unable to fix result syntax after {attempts} attempts", trace)
