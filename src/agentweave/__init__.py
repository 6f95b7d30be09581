"""agentweave — composable LLM agents with a self-correcting generation loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from agentweave.core.agents.agent import Agent as Agent
    from agentweave.core.agents.agent import AgentOptions as AgentOptions
    from agentweave.core.generation.loop import GenerationLoop as GenerationLoop
    from agentweave.core.interface.client import LiteLLMService as LiteLLMService
    from agentweave.core.interface.config import ModelConfig as ModelConfig

_EXPORTS = {
    "Agent": "agentweave.core.agents.agent",
    "AgentOptions": "agentweave.core.agents.agent",
    "GenerationLoop": "agentweave.core.generation.loop",
    "LiteLLMService": "agentweave.core.interface.client",
    "ModelConfig": "agentweave.core.interface.config",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'agentweave' has no attribute {name!r}")
