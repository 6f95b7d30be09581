"""Agents — composition, child-function adaptation, and manifests."""

from agentweave.core.agents.adapter import (
    AdapterPolicy,
    adapt_child_function,
    injection_keys,
    merge_passthrough,
)
from agentweave.core.agents.agent import (
    Agent,
    AgentDemos,
    AgentFeatures,
    AgentOptions,
    to_camel_case,
)
from agentweave.core.agents.manifest import ManifestLoader, build_agents, parse_manifest
from agentweave.core.agents.models import AgentManifest
from agentweave.core.agents.signature import Field, Signature

__all__ = [
    "AdapterPolicy",
    "Agent",
    "AgentDemos",
    "AgentFeatures",
    "AgentManifest",
    "AgentOptions",
    "Field",
    "ManifestLoader",
    "Signature",
    "adapt_child_function",
    "build_agents",
    "injection_keys",
    "merge_passthrough",
    "parse_manifest",
    "to_camel_case",
]
