"""E2E: manifests -> build_agents -> LiteLLMService with mocked LiteLLM."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from agentweave.core.agents.agent import Agent
from agentweave.core.agents.manifest import ManifestLoader, build_agents
from agentweave.core.generation.loop import GenerationLoop
from agentweave.core.interface.client import LiteLLMService
from agentweave.core.interface.config import ModelConfig
from agentweave.core.memory.memory import InMemoryMemory

from tests.e2e.conftest import make_mock_litellm_response

_ACOMPLETION = "agentweave.core.interface.client.litellm.acompletion"


class TestSingleAgent:
    async def test_hello(self) -> None:
        service = LiteLLMService(ModelConfig(model="openai/gpt-4o"))
        agent = Agent("greeter", "Greets the user with a single friendly word.", "name -> answer", service=service)

        with patch(_ACOMPLETION, new_callable=AsyncMock, return_value=make_mock_litellm_response("hello")):
            result = await agent.forward(None, {"name": "Ada"})

        assert result == {"answer": "hello"}
        assert agent.get_usage().total_tokens == 30

    async def test_loop_memory(self) -> None:
        service = LiteLLMService(ModelConfig(model="openai/gpt-4o"))
        memory = InMemoryMemory()

        with patch(_ACOMPLETION, new_callable=AsyncMock, return_value=make_mock_litellm_response("hello")):
            value = await GenerationLoop(service, memory=memory).generate("Say hello", session_id="s1")

        assert value == "hello"
        assert len(memory.entries("s1")) == 1


class TestPassthroughTree:
    async def test_parent_region_reaches_child(self, tmp_path: Path) -> None:
        (tmp_path / "planner.yaml").write_text(
            "name: trip-planner\n"
            "description: Plans a day-by-day trip itinerary for a region.\n"
            'signature: "region, days:number -> itinerary"\n'
            "agents: [researcher]\n"
            "model:\n"
            "  model: openai/gpt-4o\n"
        )
        (tmp_path / "researcher.yaml").write_text(
            "name: researcher\n"
            "description: Looks up facts about a region and summarises them.\n"
            'signature: "region, topic -> summary"\n'
        )
        agents = build_agents(ManifestLoader(tmp_path).load_all())

        responses = [
            make_mock_litellm_response('Thought: need food facts\nAction: researcher\nAction Input: {"topic": "food", "region": "Mars"}'),
            make_mock_litellm_response("Patagonia has great lamb."),
            make_mock_litellm_response("Final Answer: Day 1: eat lamb."),
        ]
        with patch(_ACOMPLETION, new_callable=AsyncMock, side_effect=responses) as mock_call:
            result = await agents["trip-planner"].forward(None, {"region": "Patagonia", "days": 2})

        assert result == {"itinerary": "Day 1: eat lamb."}

        prompts = [call.kwargs["messages"][0]["content"] for call in mock_call.call_args_list]
        # The child's parameters no longer list the shared field.
        catalogue = prompts[0].split("To use a function")[0]
        assert '"topic"' in catalogue
        assert '"region"' not in catalogue
        # The child ran with the parent's value, not the model's.
        assert "Region: Patagonia" in prompts[1]
        assert "Mars" not in prompts[1]
        assert "Topic: food" in prompts[1]
        # The child's output was fed back to the parent.
        assert json.dumps({"summary": "Patagonia has great lamb."}) in prompts[2]

        child_traces = agents["researcher"].get_traces()
        assert len(child_traces) == 1
