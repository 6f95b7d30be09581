"""Conversation memory."""

from agentweave.core.memory.memory import InMemoryMemory, Memory

__all__ = ["InMemoryMemory", "Memory"]
