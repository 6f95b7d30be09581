"""The self-correcting generation loop and its traces."""

from agentweave.core.generation.loop import (
    DiagnosticSink,
    GenerationLoop,
    GenerationResult,
    StreamEvent,
    log_diagnostic,
)
from agentweave.core.generation.trace import (
    GenerationTrace,
    ParsingError,
    TerminalState,
    TraceStep,
)

__all__ = [
    "DiagnosticSink",
    "GenerationLoop",
    "GenerationResult",
    "GenerationTrace",
    "ParsingError",
    "StreamEvent",
    "TerminalState",
    "TraceStep",
    "log_diagnostic",
]
