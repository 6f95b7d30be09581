"""Model configuration — provider, model name, routing list."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from agentweave.core.schema.models import ModelDescriptor, validate_model_list


class ModelConfig(BaseModel):
    """Configuration for a specific model/provider combination.

    The ``model`` field uses LiteLLM's naming convention:
    ``provider/model_name`` (e.g. ``openai/gpt-4o``, ``anthropic/claude-3-opus``).

    ``models`` is the smart-routing list: each entry maps a short key that a
    calling model may choose to a concrete LiteLLM model string.
    """

    model: str
    api_key: str | None = None
    api_base: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    models: list[ModelDescriptor] = Field(default_factory=lambda: list[ModelDescriptor]())
    debug: bool = False
    extra: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    @field_validator("models")
    @classmethod
    def _unique_keys(cls, value: list[ModelDescriptor]) -> list[ModelDescriptor]:
        return validate_model_list(value)

    @property
    def provider(self) -> str:
        """Extract the provider prefix from the model string."""
        if "/" in self.model:
            return self.model.split("/", 1)[0]
        return "openai"

    def resolve_model(self, key: str | None) -> str:
        """Map a routing key (or a raw model string) to a LiteLLM model name."""
        if key is None:
            return self.model
        for entry in self.models:
            if entry.key == key:
                return entry.model
        return key
