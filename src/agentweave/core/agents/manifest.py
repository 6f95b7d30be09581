"""Agent Manifest loader — discover, parse, and link agent YAML files.

Typical usage::

    loader = ManifestLoader(Path("agents"))
    manifests = loader.load_all()
    agents = build_agents(manifests)
    result = await agents["trip-planner"].forward(None, {"region": "Patagonia", "days": 5})
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path  # noqa: TC003
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from agentweave.core.agents.agent import Agent, AgentOptions
from agentweave.core.agents.models import AgentManifest
from agentweave.core.errors import ManifestError
from agentweave.core.interface.client import LiteLLMService
from agentweave.core.interface.config import ModelConfig
from agentweave.core.interface.service import CompletionService

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[ModelConfig], CompletionService]

_SUFFIXES = (".yaml", ".yml", ".json")


def parse_manifest(raw: str, *, format: str = "yaml") -> AgentManifest:
    """Parse a raw string into a validated :class:`AgentManifest`.

    Environment variables (``${VAR}`` / ``$VAR``) are expanded first.

    Args:
        raw: The raw file contents.
        format: ``"yaml"`` (default) or ``"json"``.

    Raises:
        ManifestError: On parse errors or schema validation failures.
    """
    expanded = os.path.expandvars(raw)
    try:
        data: Any = json.loads(expanded) if format == "json" else yaml.safe_load(expanded)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"Manifest parse error: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestError("Agent manifest must be a mapping")

    try:
        return AgentManifest.model_validate(data)
    except PydanticValidationError as exc:
        raise ManifestError(str(exc)) from exc


class ManifestLoader:
    """Load agent manifests from a directory.

    Scans the directory for ``.yaml``, ``.yml``, and ``.json`` files.
    Each file is expected to contain a single agent manifest.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def load_all(self) -> dict[str, AgentManifest]:
        """Load all manifests from the directory, keyed by agent name.

        Re-reads from disk every call.
        """
        manifests: dict[str, AgentManifest] = {}
        if not self.directory.is_dir():
            return manifests

        for path in sorted(self.directory.iterdir()):
            if path.suffix in _SUFFIXES:
                manifest = self._load_file(path)
                if manifest.name in manifests:
                    raise ManifestError(f"Duplicate agent name '{manifest.name}' in {path}")
                manifests[manifest.name] = manifest

        return manifests

    def _load_file(self, path: Path) -> AgentManifest:
        raw = path.read_text(encoding="utf-8")
        fmt = "json" if path.suffix == ".json" else "yaml"
        try:
            return parse_manifest(raw, format=fmt)
        except ManifestError as exc:
            raise ManifestError(f"{path}: {exc}") from exc


def build_agents(
    manifests: Mapping[str, AgentManifest],
    *,
    service_factory: ServiceFactory = LiteLLMService,
) -> dict[str, Agent]:
    """Instantiate every manifest as an :class:`Agent`, children first.

    A child referenced by several parents is built once and shared.

    Raises:
        ManifestError: For unknown child references or cycles.
    """
    built: dict[str, Agent] = {}
    visiting: list[str] = []

    def _build(name: str) -> Agent:
        if name in built:
            return built[name]
        if name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(name) :], name])
            raise ManifestError(f"Agent cycle detected: {cycle}")
        manifest = manifests.get(name)
        if manifest is None:
            parent = visiting[-1] if visiting else "?"
            raise ManifestError(f"Agent '{parent}' references unknown agent '{name}'")

        visiting.append(name)
        children = [_build(child) for child in manifest.agents]
        visiting.pop()

        service = service_factory(manifest.model) if manifest.model is not None else None
        agent = Agent(
            manifest.name,
            manifest.description,
            manifest.signature,
            service=service,
            agents=children,
            options=AgentOptions(
                disable_smart_model_routing=manifest.disable_smart_model_routing,
                exclude_fields_from_passthrough=manifest.exclude_fields_from_passthrough,
                debug=manifest.debug,
                max_steps=manifest.max_steps,
                max_retries=manifest.max_retries,
            ),
        )
        logger.debug("Built agent %s with %d child agent(s)", name, len(children))
        built[name] = agent
        return agent

    for name in manifests:
        _build(name)
    return built
