"""Tests for schema projection: remove_fields and add_model_field."""

from __future__ import annotations

import pytest

from agentweave.core.schema.models import ModelDescriptor, SchemaNode, validate_model_list
from agentweave.core.schema.projector import add_model_field, remove_fields


def _shape() -> SchemaNode:
    return SchemaNode(
        type="object",
        properties={
            "region": SchemaNode(type="string"),
            "topic": SchemaNode(type="string", description="what to research"),
            "days": SchemaNode(type="number"),
        },
        required=["region", "topic"],
    )


class TestRemoveFields:
    def test_empty_keys_is_identity_copy(self) -> None:
        shape = _shape()
        projected = remove_fields(shape, [])
        assert projected == shape
        assert projected is not shape
        assert projected.properties is not shape.properties

    def test_removes_property_and_required(self) -> None:
        projected = remove_fields(_shape(), ["region"])
        assert "region" not in projected.properties
        assert projected.required == ["topic"]

    def test_required_is_original_minus_keys(self) -> None:
        shape = _shape()
        keys = ["topic", "days"]
        projected = remove_fields(shape, keys)
        assert projected.required == [r for r in shape.required if r not in keys]
        assert not set(keys) & set(projected.properties)

    def test_absent_keys_are_ignored(self) -> None:
        projected = remove_fields(_shape(), ["nope"])
        assert projected == _shape()

    def test_original_not_mutated(self) -> None:
        shape = _shape()
        remove_fields(shape, ["region", "topic"])
        assert set(shape.properties) == {"region", "topic", "days"}
        assert shape.required == ["region", "topic"]

    def test_nested_nodes_are_copied(self) -> None:
        shape = _shape()
        projected = remove_fields(shape, ["region"])
        projected.properties["topic"].description = "changed"
        assert shape.properties["topic"].description == "what to research"


class TestAddModelField:
    def test_adds_required_enum(self, model_list: list[ModelDescriptor]) -> None:
        projected = add_model_field(_shape(), model_list)
        field = projected.properties["model"]
        assert field.type == "string"
        assert field.enum == ["fast", "smart"]
        assert projected.required[-1] == "model"

    def test_description_lists_every_model(self, model_list: list[ModelDescriptor]) -> None:
        field = add_model_field(_shape(), model_list).properties["model"]
        assert "`fast` cheap and quick" in field.description
        assert "`smart` best reasoning" in field.description

    def test_missing_shape_becomes_object(self, model_list: list[ModelDescriptor]) -> None:
        projected = add_model_field(None, model_list)
        assert projected.type == "object"
        assert list(projected.properties) == ["model"]
        assert projected.required == ["model"]

    def test_idempotent(self, model_list: list[ModelDescriptor]) -> None:
        once = add_model_field(_shape(), model_list)
        twice = add_model_field(once, model_list)
        assert twice == once
        assert twice.required.count("model") == 1

    def test_existing_model_field_not_overwritten(self, model_list: list[ModelDescriptor]) -> None:
        shape = _shape()
        shape.properties["model"] = SchemaNode(type="string", description="custom")
        projected = add_model_field(shape, model_list)
        assert projected.properties["model"].description == "custom"
        assert projected.properties["model"].enum is None

    def test_original_not_mutated(self, model_list: list[ModelDescriptor]) -> None:
        shape = _shape()
        add_model_field(shape, model_list)
        assert "model" not in shape.properties


class TestSchemaNode:
    def test_to_json_schema_round_shape(self) -> None:
        data = _shape().to_json_schema()
        assert data["type"] == "object"
        assert data["required"] == ["region", "topic"]
        assert data["properties"]["topic"] == {"type": "string", "description": "what to research"}

    def test_extra_keys_preserved(self) -> None:
        node = SchemaNode.from_json_schema({"type": "string", "format": "date"})
        assert node.to_json_schema()["format"] == "date"

    def test_duplicate_model_keys_rejected(self) -> None:
        models = [
            ModelDescriptor(key="a", model="m1"),
            ModelDescriptor(key="a", model="m2"),
        ]
        with pytest.raises(ValueError, match="duplicate"):
            validate_model_list(models)
