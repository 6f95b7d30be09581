"""Completion service interface and the bundled LiteLLM implementation."""

from agentweave.core.interface.client import LiteLLMService
from agentweave.core.interface.config import ModelConfig
from agentweave.core.interface.models import (
    GenerateConfig,
    GenerateResponse,
    ServiceOptions,
    TextResult,
    TokenUsage,
)
from agentweave.core.interface.service import CompletionService, StreamingCompletionService

__all__ = [
    "CompletionService",
    "GenerateConfig",
    "GenerateResponse",
    "LiteLLMService",
    "ModelConfig",
    "ServiceOptions",
    "StreamingCompletionService",
    "TextResult",
    "TokenUsage",
]
