"""Child-agent function adaptation.

When a parent agent exposes a child agent as a callable, the child's
function is rewritten per invocation context:

* **Passthrough** — inputs the parent and child share are hidden from the
  child's parameter schema and filled from the parent's values at call
  time.  Parent values always win over model-supplied arguments.
* **Smart model routing** — otherwise, a required ``model`` enum field may
  be added so the calling model can choose which backing model runs the
  sub-task.

The two rewrites are mutually exclusive; passthrough takes precedence.
The original function is never mutated, and every adapted copy owns its
parameter schema.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from agentweave.core.functions.models import AgentFunction, FunctionOptions
from agentweave.core.generation.loop import DiagnosticSink, log_diagnostic
from agentweave.core.schema.models import ModelList
from agentweave.core.schema.projector import MODEL_FIELD, add_model_field, remove_fields


@dataclass(frozen=True)
class AdapterPolicy:
    """Routing policy applied to one child function."""

    debug: bool = False
    disable_smart_model_routing: bool = False
    passthrough_exclusions: tuple[str, ...] = ()
    can_configure_smart_model_routing: bool = False


def merge_passthrough(
    args: Mapping[str, Any],
    source_values: Mapping[str, Any],
    target_keys: Iterable[str],
) -> dict[str, Any]:
    """Merge *source_values* for *target_keys* over *args*.

    Source values take precedence.  Keys missing from *source_values* are
    left as supplied in *args*.
    """
    merged = dict(args)
    for key in target_keys:
        if key in source_values:
            merged[key] = source_values[key]
    return merged


def injection_keys(
    parent_keys: Sequence[str],
    child_keys: Iterable[str],
    exclusions: Iterable[str],
) -> list[str]:
    """Shared input keys that should be filled from the parent, in parent order."""
    child = set(child_keys)
    excluded = set(exclusions)
    common = [k for k in parent_keys if k in child and k != MODEL_FIELD]
    return [k for k in common if k not in excluded]


def adapt_child_function(
    function: AgentFunction,
    parent_values: Mapping[str, Any],
    parent_keys: Sequence[str],
    models: ModelList | None,
    policy: AdapterPolicy,
    *,
    sink: DiagnosticSink | None = None,
) -> AgentFunction:
    """Return a copy of *function* rewritten for the parent's context."""
    child_keys = function.parameters.properties.keys() if function.parameters is not None else ()
    keys = injection_keys(parent_keys, child_keys, policy.passthrough_exclusions)

    if keys and function.parameters is not None:
        values = {k: parent_values[k] for k in keys if k in parent_values}
        original = function
        emit = sink or log_diagnostic

        async def _with_passthrough(args: dict[str, Any], options: FunctionOptions | None = None) -> Any:
            merged = merge_passthrough(args, values, keys)
            if policy.debug:
                emit(f"Function Params: {json.dumps(merged, indent=2, default=str)}")
            return await original.invoke(merged, options)

        return replace(
            function,
            parameters=remove_fields(function.parameters, keys),
            func=_with_passthrough,
        )

    if models and not policy.disable_smart_model_routing and policy.can_configure_smart_model_routing:
        return replace(function, parameters=add_model_field(function.parameters, models))

    params = function.parameters
    return replace(function, parameters=params.model_copy(deep=True) if params is not None else None)
