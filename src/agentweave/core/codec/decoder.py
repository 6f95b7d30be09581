"""Structured-output decoding — turns raw model text into typed values.

Decoders raise :class:`~agentweave.core.errors.DecodeError` on malformed
input; the generation loop feeds that error back to the model and retries.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol, runtime_checkable

from agentweave.core.errors import DecodeError
from agentweave.core.schema.models import SchemaNode

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)
_KEY_VALUE_RE = re.compile(r"([a-zA-Z ]+):\s*\n?(((?!N/A).)+)$", re.MULTILINE)


@runtime_checkable
class OutputDecoder(Protocol):
    """Decodes model text against a declared output shape."""

    def decode(self, text: str, schema: SchemaNode) -> Any: ...


class JsonOutputDecoder:
    """Decodes JSON output and checks it against a :class:`SchemaNode`.

    String-typed schemas return the text unchanged.  Object schemas must
    parse to a JSON object containing every required key, with property
    values of the declared types.  Markdown code fences are tolerated.
    """

    def decode(self, text: str, schema: SchemaNode) -> Any:
        if schema.type == "string":
            return text

        body = text.strip()
        fenced = _FENCE_RE.match(body)
        if fenced:
            body = fenced.group(1).strip()

        try:
            value: Any = json.loads(body)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"Response is not valid JSON: {exc}", text) from exc

        errors = _check(value, schema, path="")
        if errors:
            raise DecodeError("; ".join(errors), text)
        return value


def decode_key_values(text: str) -> dict[str, list[str]]:
    """Decode ``Key: value, value`` lines into a mapping of lists.

    Lines whose value is ``N/A`` are skipped.
    """
    values: dict[str, list[str]] = {}
    for m in _KEY_VALUE_RE.finditer(text):
        values[m.group(1).strip()] = [v.strip() for v in m.group(2).split(",")]
    if not values:
        raise DecodeError("Expected format is a list of key: value", text)
    return values


def _check(value: Any, schema: SchemaNode, path: str) -> list[str]:
    where = path or "response"
    kind = schema.type

    if kind == "object":
        if not schema.properties:
            return []
        if not isinstance(value, dict):
            return [f"{where} is not a JSON object"]
        errors: list[str] = []
        missing = [k for k in schema.required if k not in value]
        if missing:
            errors.append(f"Missing required keys: {', '.join(missing)}")
        for key, node in schema.properties.items():
            if key in value and value[key] is not None:
                errors.extend(_check(value[key], node, f"{path}.{key}" if path else key))
        return errors

    if kind == "array":
        if not isinstance(value, list):
            return [f"{where} must be an array"]
        if schema.items is None:
            return []
        errors = []
        for i, item in enumerate(value):
            errors.extend(_check(item, schema.items, f"{where}[{i}]"))
        return errors

    if kind == "string" and not isinstance(value, str):
        return [f"{where} must be a string"]
    if kind in ("number", "integer") and (isinstance(value, bool) or not isinstance(value, (int, float))):
        return [f"{where} must be a number"]
    if kind == "integer" and isinstance(value, float) and not value.is_integer():
        return [f"{where} must be an integer"]
    if kind == "boolean" and not isinstance(value, bool):
        return [f"{where} must be a boolean"]
    if schema.enum is not None and value not in schema.enum:
        return [f"{where} must be one of: {', '.join(schema.enum)}"]
    return []
