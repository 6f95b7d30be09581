"""LiteLLMService — the bundled CompletionService, backed by LiteLLM.

Wraps ``litellm.acompletion`` behind the prompt-in / text-out interface
the generation loop expects.  Provider adaptation is left to LiteLLM.
"""

from collections.abc import AsyncIterator
from typing import Any

import litellm

from agentweave.core.interface.config import ModelConfig
from agentweave.core.interface.models import (
    GenerateConfig,
    GenerateResponse,
    ServiceOptions,
    TextResult,
    TokenUsage,
)
from agentweave.core.schema.models import ModelList
from agentweave.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_PROVIDER,
    ATTR_SESSION_ID,
    get_tracer,
    record_usage,
)

_tracer = get_tracer(__name__)


class LiteLLMService:
    """Async completion service for any LiteLLM-supported model.

    Usage::

        config = ModelConfig(model="openai/gpt-4o")
        service = LiteLLMService(config)
        response = await service.generate("Say hi", GenerateConfig())
    """

    def __init__(self, config: ModelConfig) -> None:
        self.config = config

    def get_model_list(self) -> ModelList | None:
        return list(self.config.models) or None

    def get_options(self) -> ServiceOptions:
        return ServiceOptions(debug=self.config.debug)

    async def generate(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None = None,
    ) -> GenerateResponse:
        """Generate a completion for *prompt*.

        Args:
            prompt: The full prompt text, sent as a single user message.
            config: Per-call settings; ``config.model`` may be a routing key.
            session_id: Forwarded to LiteLLM as request metadata.

        Returns:
            A :class:`GenerateResponse` with one result per choice.
        """
        call_kwargs = self._call_kwargs(prompt, config, session_id)

        with _tracer.start_as_current_span("model.generate") as span:
            span.set_attribute(ATTR_MODEL, call_kwargs["model"])
            span.set_attribute(ATTR_PROVIDER, self.config.provider)
            if session_id:
                span.set_attribute(ATTR_SESSION_ID, session_id)

            # Call LiteLLM (type stubs are incomplete)
            response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]
            result = self._parse_response(response)

            record_usage(span, result.token_usage)
            if result.results and result.results[0].finish_reason is not None:
                span.set_attribute(ATTR_FINISH_REASON, result.results[0].finish_reason)

            return result

    async def stream_generate(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield text fragments as LiteLLM streams them."""
        call_kwargs = self._call_kwargs(prompt, config, session_id)
        call_kwargs["stream"] = True

        response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]
        async for chunk in response:  # pyright: ignore[reportGeneralTypeIssues]
            delta = chunk.choices[0].delta
            if delta is not None and delta.content:
                yield delta.content

    def _call_kwargs(
        self,
        prompt: str,
        config: GenerateConfig,
        session_id: str | None,
    ) -> dict[str, Any]:
        call_kwargs: dict[str, Any] = {
            "model": self.config.resolve_model(config.model),
            "messages": [{"role": "user", "content": prompt}],
            **self.config.extra,
        }

        if self.config.api_key:
            call_kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            call_kwargs["api_base"] = self.config.api_base

        temperature = config.temperature if config.temperature is not None else self.config.temperature
        if temperature is not None:
            call_kwargs["temperature"] = temperature
        max_tokens = config.max_tokens or self.config.max_tokens
        if max_tokens:
            call_kwargs["max_tokens"] = max_tokens
        if config.stop_sequences:
            call_kwargs["stop"] = list(config.stop_sequences)
        if session_id:
            call_kwargs["metadata"] = {"session_id": session_id}

        return call_kwargs

    def _parse_response(self, response: Any) -> GenerateResponse:
        """Convert a LiteLLM response to a :class:`GenerateResponse`.

        LiteLLM returns OpenAI-compatible response objects regardless of
        the underlying provider.
        """
        results = [
            TextResult(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason,
            )
            for choice in response.choices
        ]

        usage: TokenUsage | None = None
        if hasattr(response, "usage") and response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return GenerateResponse(results=results, token_usage=usage, model=response.model)
