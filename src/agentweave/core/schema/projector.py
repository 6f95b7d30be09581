"""Copy-on-write projections over :class:`SchemaNode` trees."""

from __future__ import annotations

from collections.abc import Iterable

from agentweave.core.schema.models import ModelList, SchemaNode

MODEL_FIELD = "model"


def remove_fields(shape: SchemaNode, keys: Iterable[str]) -> SchemaNode:
    """Return a deep copy of *shape* without *keys* in ``properties`` or ``required``.

    Keys absent from the shape are ignored.
    """
    drop = set(keys)
    projected = shape.model_copy(deep=True)
    projected.properties = {k: v for k, v in projected.properties.items() if k not in drop}
    projected.required = [r for r in projected.required if r not in drop]
    return projected


def add_model_field(shape: SchemaNode | None, models: ModelList) -> SchemaNode:
    """Return a copy of *shape* with a required ``model`` enum field.

    A missing *shape* becomes an empty object schema.  If the shape already
    has a ``model`` property the copy is returned as-is.
    """
    projected = shape.model_copy(deep=True) if shape is not None else SchemaNode.empty_object()

    if MODEL_FIELD in projected.properties:
        return projected

    options = ", ".join(f"`{m.key}` {m.description}" for m in models)
    projected.properties = {
        **projected.properties,
        MODEL_FIELD: SchemaNode(
            type="string",
            enum=[m.key for m in models],
            description=f"The AI model to use for this function call. Available options: {options}",
        ),
    }
    projected.required = [*projected.required, MODEL_FIELD]
    return projected
