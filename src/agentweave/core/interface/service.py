"""CompletionService protocol — the capability every backing model exposes.

Agents and the generation loop depend only on this protocol; the
:class:`~agentweave.core.interface.client.LiteLLMService` is the bundled
implementation.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agentweave.core.interface.models import GenerateConfig, GenerateResponse, ServiceOptions
    from agentweave.core.schema.models import ModelList


@runtime_checkable
class CompletionService(Protocol):
    """Generates text for a prompt and describes its selectable models."""

    async def generate(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None = None,
    ) -> GenerateResponse:
        """Return completion candidates for *prompt*."""
        ...

    def get_model_list(self) -> ModelList | None:
        """Return the models a caller may route to, or ``None``."""
        ...

    def get_options(self) -> ServiceOptions:
        ...


@runtime_checkable
class StreamingCompletionService(CompletionService, Protocol):
    """A service that can also yield text fragments as they arrive."""

    def stream_generate(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None = None,
    ) -> AsyncIterator[str]: ...
