"""Agent signatures — declared input and output fields.

A signature can be written as a string::

    'question:string "what to answer", context?:string[] -> answer:string'

or given as a mapping with ``inputs`` and ``outputs`` lists of field dicts.
Each field becomes a property of the input or output :class:`SchemaNode`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel

from agentweave.core.errors import SignatureError
from agentweave.core.schema.models import SchemaNode

FieldType = Literal["string", "number", "boolean", "json"]

_FIELD_RE = re.compile(
    r"""^\s*
    (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    (?P<optional>\?)?
    (?:\s*:\s*(?P<type>[a-z]+)(?P<array>\[\])?)?
    (?:\s+"(?P<description>[^"]*)")?
    \s*$""",
    re.VERBOSE,
)
_SPLIT_RE = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')
_VALID_TYPES = ("string", "number", "boolean", "json")


class Field(BaseModel):
    """One named input or output of a signature."""

    name: str
    type: FieldType = "string"
    is_array: bool = False
    optional: bool = False
    description: str = ""

    def to_schema(self) -> SchemaNode:
        if self.type == "json":
            item = SchemaNode(type="object", description=self.description)
        else:
            item = SchemaNode(type=self.type, description=self.description)
        if self.is_array:
            return SchemaNode(type="array", items=item.model_copy(update={"description": ""}), description=self.description)
        return item


class Signature:
    """Input/output declaration with a free-text description."""

    def __init__(self, signature: str | Mapping[str, Any] | Signature, description: str = "") -> None:
        if isinstance(signature, Signature):
            self.inputs = [f.model_copy() for f in signature.inputs]
            self.outputs = [f.model_copy() for f in signature.outputs]
            description = description or signature.description
        elif isinstance(signature, str):
            self.inputs, self.outputs = _parse_string(signature)
        else:
            self.inputs = _parse_fields(signature.get("inputs", []), "inputs")
            self.outputs = _parse_fields(signature.get("outputs", []), "outputs")

        self.description = description
        self._validate()

    def set_description(self, description: str) -> None:
        self.description = description

    def input_names(self) -> list[str]:
        return [f.name for f in self.inputs]

    def output_names(self) -> list[str]:
        return [f.name for f in self.outputs]

    def input_schema(self) -> SchemaNode:
        """Schema for the inputs; also used as the agent's function parameters."""
        return _object_schema(self.inputs, self.description)

    def output_schema(self) -> SchemaNode:
        return _object_schema(self.outputs, "")

    @property
    def is_plain_text_output(self) -> bool:
        """Exactly one output, a scalar string."""
        return (
            len(self.outputs) == 1
            and self.outputs[0].type == "string"
            and not self.outputs[0].is_array
        )

    def render_query(self, values: Mapping[str, Any]) -> str:
        """Format the description and input values as query text."""
        lines: list[str] = []
        if self.description:
            lines.append(self.description)
            lines.append("")
        for f in self.inputs:
            if f.name not in values or values[f.name] is None:
                continue
            lines.append(f"{_title(f.name)}: {_format_value(values[f.name])}")
        lines.append("")
        if self.is_plain_text_output:
            out = self.outputs[0]
            hint = f" ({out.description})" if out.description else ""
            lines.append(f"Respond with the {_title(out.name)}{hint}.")
        else:
            names = ", ".join(self.output_names())
            lines.append(f"Respond with a JSON object containing: {names}.")
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"{_format_fields(self.inputs)} -> {_format_fields(self.outputs)}"

    def __repr__(self) -> str:
        return f"Signature({str(self)!r})"

    def _validate(self) -> None:
        if not self.inputs:
            raise SignatureError("at least one input field is required")
        if not self.outputs:
            raise SignatureError("at least one output field is required")
        for side, fields in (("input", self.inputs), ("output", self.outputs)):
            names = [f.name for f in fields]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise SignatureError(f"duplicate {side} field(s): {', '.join(duplicates)}")


def _parse_string(text: str) -> tuple[list[Field], list[Field]]:
    if text.count("->") != 1:
        raise SignatureError(f"expected exactly one '->' in {text!r}")
    left, right = text.split("->")
    return _parse_side(left), _parse_side(right)


def _parse_side(text: str) -> list[Field]:
    fields: list[Field] = []
    for part in _SPLIT_RE.split(text):
        if not part.strip():
            continue
        m = _FIELD_RE.match(part)
        if m is None:
            raise SignatureError(f"invalid field definition: {part.strip()!r}")
        field_type = m.group("type") or "string"
        if field_type not in _VALID_TYPES:
            raise SignatureError(f"unknown field type {field_type!r} for {m.group('name')}")
        fields.append(
            Field(
                name=m.group("name"),
                type=field_type,  # type: ignore[arg-type]
                is_array=bool(m.group("array")),
                optional=bool(m.group("optional")),
                description=m.group("description") or "",
            )
        )
    return fields


def _parse_fields(raw: Any, side: str) -> list[Field]:
    if not isinstance(raw, list):
        raise SignatureError(f"'{side}' must be a list of fields")
    fields: list[Field] = []
    for item in raw:
        if isinstance(item, str):
            fields.extend(_parse_side(item))
            continue
        try:
            fields.append(Field.model_validate(item))
        except ValueError as exc:
            raise SignatureError(f"invalid field in '{side}': {exc}") from exc
    return fields


def _object_schema(fields: list[Field], description: str) -> SchemaNode:
    return SchemaNode(
        type="object",
        description=description,
        properties={f.name: f.to_schema() for f in fields},
        required=[f.name for f in fields if not f.optional],
    )


def _format_fields(fields: list[Field]) -> str:
    parts: list[str] = []
    for f in fields:
        text = f.name + ("?" if f.optional else "")
        if f.type != "string" or f.is_array:
            text += f":{f.type}" + ("[]" if f.is_array else "")
        if f.description:
            text += f' "{f.description}"'
        parts.append(text)
    return ", ".join(parts)


def _title(name: str) -> str:
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|_", " ", name)
    return spaced.strip().capitalize()


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
