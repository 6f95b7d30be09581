"""Parameter shapes and their projections."""

from agentweave.core.schema.models import (
    ModelDescriptor,
    ModelList,
    SchemaNode,
    validate_model_list,
)
from agentweave.core.schema.projector import MODEL_FIELD, add_model_field, remove_fields

__all__ = [
    "MODEL_FIELD",
    "ModelDescriptor",
    "ModelList",
    "SchemaNode",
    "add_model_field",
    "remove_fields",
    "validate_model_list",
]
