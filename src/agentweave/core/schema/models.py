"""Schema-as-data: parameter shapes and selectable model descriptors.

A :class:`SchemaNode` is a loose JSON-schema tree.  Projection functions in
:mod:`agentweave.core.schema.projector` never mutate a node; they work on
deep copies.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class SchemaNode(BaseModel):
    """A JSON-schema-style descriptor for a parameter or output shape."""

    model_config = ConfigDict(extra="allow")

    type: str = "object"
    description: str = ""
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []
    items: SchemaNode | None = None
    enum: list[str] | None = None

    @classmethod
    def empty_object(cls) -> SchemaNode:
        return cls(type="object", properties={}, required=[])

    @classmethod
    def from_json_schema(cls, data: dict[str, Any]) -> SchemaNode:
        return cls.model_validate(data)

    def to_json_schema(self) -> dict[str, Any]:
        """Dump as a plain dict, dropping keys that carry no information."""
        data: dict[str, Any] = {"type": self.type}
        if self.description:
            data["description"] = self.description
        if self.enum is not None:
            data["enum"] = list(self.enum)
        if self.items is not None:
            data["items"] = self.items.to_json_schema()
        if self.type == "object" or self.properties:
            data["properties"] = {k: v.to_json_schema() for k, v in self.properties.items()}
            data["required"] = list(self.required)
        if self.model_extra:
            data.update(self.model_extra)
        return data


class ModelDescriptor(BaseModel):
    """One entry of a smart-routing model list."""

    key: str
    model: str
    description: str = ""


ModelList = list[ModelDescriptor]


def validate_model_list(models: ModelList) -> ModelList:
    """Return *models* unchanged, raising ``ValueError`` on duplicate keys."""
    seen: set[str] = set()
    for m in models:
        if m.key in seen:
            msg = f"duplicate model key in model list: {m.key}"
            raise ValueError(msg)
        seen.add(m.key)
    return models
