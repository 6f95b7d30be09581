"""Agent Manifest models — YAML-driven agent definitions.

An Agent Manifest declares everything needed to build an :class:`Agent`:
its signature, its child agents (by name), and optionally a model
configuration that pins it to its own backing service.

Example YAML::

    name: trip-planner
    description: Plans a day-by-day trip itinerary for a region.
    signature: "region, days:number -> itinerary"
    agents: [researcher]
    model:
      model: openai/gpt-4o
      api_key: ${OPENAI_API_KEY}
      models:
        - key: fast
          model: openai/gpt-4o-mini
          description: cheap and quick
    exclude_fields_from_passthrough: [days]
"""

from typing import Any

from pydantic import BaseModel

from agentweave.core.interface.config import ModelConfig


class AgentManifest(BaseModel):
    """Validated representation of an ``agents/*.yaml`` file."""

    name: str
    description: str
    signature: str | dict[str, Any]
    agents: list[str] = []
    model: ModelConfig | None = None
    disable_smart_model_routing: bool = False
    exclude_fields_from_passthrough: list[str] = []
    debug: bool = False
    max_steps: int = 20
    max_retries: int = 3
