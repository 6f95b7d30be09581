"""Renders the callable catalogue into prompt text.

Models are instructed to use the Thought / Action / Action Input /
Result / Final Answer format understood by
:class:`~agentweave.core.functions.parser.FunctionCallParser`.
"""

import json
from collections.abc import Sequence

from agentweave.core.functions.models import AgentFunction

_FUNCTIONS_PREAMBLE = """\
You have access to the following functions:

{function_list}

To use a function, respond with EXACTLY this format:

Thought: <your reasoning about what to do next>
Action: <function_name>
Action Input: <JSON object with the function arguments>

After the function runs you will receive a Result.
You may repeat the Thought/Action/Action Input cycle as many times as needed.
{finish_instruction}
IMPORTANT:
- Always start with a Thought.
- Use EXACTLY the function names listed above.
- Action Input MUST be valid JSON.
- Never repeat an identical response.\
"""

_FINISH_WITH_FUNCTION = """
When you are done, call `{name}` with the final values as its Action Input.
"""

_FINISH_WITH_ANSWER = """
When you have enough information to answer, respond with:

Thought: <your final reasoning>
Final Answer: <your response>
"""

_FUNCTION_TEMPLATE = """\
- {name}: {description}
  Parameters: {parameters}\
"""


class FunctionPromptBuilder:
    """Builds the function-calling instruction block for a set of callables."""

    def build(self, functions: Sequence[AgentFunction], *, final_result_name: str | None = None) -> str:
        lines: list[str] = []
        for fn in functions:
            schema = fn.to_tool_schema()["function"]
            lines.append(
                _FUNCTION_TEMPLATE.format(
                    name=fn.name,
                    description=fn.description or "No description provided.",
                    parameters=json.dumps(schema["parameters"], indent=2),
                )
            )

        if final_result_name is not None:
            finish = _FINISH_WITH_FUNCTION.format(name=final_result_name)
        else:
            finish = _FINISH_WITH_ANSWER
        return _FUNCTIONS_PREAMBLE.format(function_list="\n".join(lines), finish_instruction=finish)
