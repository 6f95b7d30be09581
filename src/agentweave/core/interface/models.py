"""Completion request/response models shared by every service implementation."""

from __future__ import annotations

from pydantic import BaseModel


class TokenUsage(BaseModel):
    """Token accounting reported by a completion call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class TextResult(BaseModel):
    """A single completion candidate."""

    text: str = ""
    finish_reason: str | None = None


class GenerateResponse(BaseModel):
    """What a :class:`CompletionService` returns for one prompt."""

    results: list[TextResult] = []
    token_usage: TokenUsage | None = None
    model: str | None = None

    @property
    def text(self) -> str:
        """Text of the first candidate, stripped; empty when there is none."""
        if not self.results:
            return ""
        return self.results[0].text.strip()

    @classmethod
    def from_text(cls, text: str, **kwargs: object) -> GenerateResponse:
        return cls(results=[TextResult(text=text)], **kwargs)  # type: ignore[arg-type]


class GenerateConfig(BaseModel):
    """Per-call generation settings passed to the service."""

    model: str | None = None
    stop_sequences: list[str] = []
    temperature: float | None = None
    max_tokens: int | None = None


class ServiceOptions(BaseModel):
    """Service-level flags a consumer may read."""

    debug: bool = False
