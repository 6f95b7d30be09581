"""Function-call parser — extracts invocations from free-form model text.

Parses the Thought / Action / Action Input / Final Answer patterns the
function prompt asks the model to follow.
"""

import json
import re
from dataclasses import dataclass

from agentweave.core.functions.models import FunctionCall

# Patterns accept optional whitespace and work across multi-line text.
_THOUGHT_RE = re.compile(r"Thought:\s*(.+?)(?=\n(?:Action:|Final Answer:)|$)", re.DOTALL)
_ACTION_RE = re.compile(r"Action:\s*(.+)")
_ACTION_INPUT_RE = re.compile(r"Action Input:\s*(.+)", re.DOTALL)
_FINAL_ANSWER_RE = re.compile(r"Final Answer:\s*(.+)", re.DOTALL)
# Inline call style: ``name({"arg": 1})``
_INLINE_CALL_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\((.*)\)\s*$", re.DOTALL)


@dataclass
class ParsedResponse:
    """Result of parsing a model response."""

    thought: str | None = None
    call: FunctionCall | None = None
    final_answer: str | None = None


class FunctionCallParser:
    """Extracts a function call or a final answer from model output."""

    def parse(self, text: str) -> ParsedResponse:
        """Parse *text* for an invocation.

        A ``Final Answer`` takes priority over an ``Action``.  Text with no
        recognisable pattern yields a result with neither set.
        """
        thought = self._extract_thought(text)

        final = _FINAL_ANSWER_RE.search(text)
        if final:
            return ParsedResponse(thought=thought, final_answer=final.group(1).strip())

        action_match = _ACTION_RE.search(text)
        if action_match:
            name = action_match.group(1).strip()
            return ParsedResponse(
                thought=thought,
                call=FunctionCall(name=name, arguments=self._extract_arguments(text)),
            )

        inline = _INLINE_CALL_RE.match(text)
        if inline:
            return ParsedResponse(
                thought=thought,
                call=FunctionCall(name=inline.group(1), arguments=_loads_arguments(inline.group(2))),
            )

        return ParsedResponse(thought=thought)

    @staticmethod
    def _extract_thought(text: str) -> str | None:
        m = _THOUGHT_RE.search(text)
        return m.group(1).strip() if m else None

    @staticmethod
    def _extract_arguments(text: str) -> dict[str, object]:
        m = _ACTION_INPUT_RE.search(text)
        if not m:
            return {}
        return _loads_arguments(m.group(1))


def _loads_arguments(raw: str) -> dict[str, object]:
    raw = raw.strip()
    if not raw:
        return {}
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"input": raw}
    if not isinstance(result, dict):
        return {"input": result}
    return result
