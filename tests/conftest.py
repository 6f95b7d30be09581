"""Shared fixtures: a scripted CompletionService fake."""

from __future__ import annotations

import os

# Use litellm's bundled model cost map instead of fetching it over the network
# at import time (the fetch fails offline and can deadlock during collection).
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from collections.abc import Callable, Sequence

import pytest

from agentweave.core.interface.models import (
    GenerateConfig,
    GenerateResponse,
    ServiceOptions,
    TokenUsage,
)
from agentweave.core.schema.models import ModelDescriptor


class ScriptedService:
    """Returns canned responses in order; the last one repeats forever.

    A single string means "always return this".
    """

    def __init__(
        self,
        responses: str | Sequence[str],
        *,
        models: list[ModelDescriptor] | None = None,
        debug: bool = False,
    ) -> None:
        self._responses = [responses] if isinstance(responses, str) else list(responses)
        self._models = models
        self._debug = debug
        self.prompts: list[str] = []
        self.configs: list[GenerateConfig] = []
        self.session_ids: list[str | None] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None = None,
    ) -> GenerateResponse:
        index = min(len(self.prompts), len(self._responses) - 1)
        self.prompts.append(prompt)
        self.configs.append(config)
        self.session_ids.append(session_id)
        return GenerateResponse.from_text(
            self._responses[index],
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    def get_model_list(self) -> list[ModelDescriptor] | None:
        return self._models

    def get_options(self) -> ServiceOptions:
        return ServiceOptions(debug=self._debug)


@pytest.fixture
def scripted() -> Callable[..., ScriptedService]:
    """Factory fixture: ``scripted(["a", "b"], models=...)``."""
    return ScriptedService


@pytest.fixture
def model_list() -> list[ModelDescriptor]:
    return [
        ModelDescriptor(key="fast", model="openai/gpt-4o-mini", description="cheap and quick"),
        ModelDescriptor(key="smart", model="openai/gpt-4o", description="best reasoning"),
    ]
