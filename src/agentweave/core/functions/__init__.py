"""Callables, function-call parsing, and execution."""

from agentweave.core.functions.executor import FINAL_RESULT, FunctionExecutor, final_result_function
from agentweave.core.functions.models import (
    AgentFunction,
    FunctionCall,
    FunctionExecution,
    FunctionOptions,
)
from agentweave.core.functions.parser import FunctionCallParser, ParsedResponse
from agentweave.core.functions.prompt import FunctionPromptBuilder

__all__ = [
    "FINAL_RESULT",
    "AgentFunction",
    "FunctionCall",
    "FunctionCallParser",
    "FunctionExecution",
    "FunctionExecutor",
    "FunctionOptions",
    "FunctionPromptBuilder",
    "ParsedResponse",
    "final_result_function",
]
