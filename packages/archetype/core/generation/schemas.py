"""Response schema descriptors generated from the record models.

Requests always carry the current schema definition, so the shape the service
is asked for and the shape the validator enforces cannot drift apart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from archetype.core.generation.models import FeedbackRecord, GenerationKind, PersonaBatch

if TYPE_CHECKING:
    from pydantic import BaseModel

_DROPPED_KEYS = frozenset({"title"})


def build_response_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Generate a self-contained JSON schema from a Pydantic model.

    Uses wire (alias) names, inlines ``$defs`` references and drops the
    cosmetic ``title`` keys Pydantic adds to every node.

    Args:
        model: Pydantic model class

    Returns:
        JSON schema dict suitable for a structured-output request
    """
    schema = model.model_json_schema(by_alias=True)
    defs = schema.pop("$defs", {})
    return _inline(schema, defs)


def _inline(node: Any, defs: dict[str, Any], *, is_properties: bool = False) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/$defs/"):
            name = ref.rsplit("/", 1)[-1]
            merged = {**defs[name], **{k: v for k, v in node.items() if k != "$ref"}}
            return _inline(merged, defs)
        # Keys of a "properties" mapping are field names, not schema keywords
        return {
            k: _inline(v, defs, is_properties=(k == "properties" and not is_properties))
            for k, v in node.items()
            if is_properties or k not in _DROPPED_KEYS
        }
    if isinstance(node, list):
        return [_inline(item, defs) for item in node]
    return node


def response_schema_for(kind: GenerationKind) -> dict[str, Any] | None:
    """Schema descriptor for a request kind (None for image responses)."""
    match kind:
        case GenerationKind.PERSONA_SYNTHESIS:
            return build_response_schema(PersonaBatch)
        case GenerationKind.FEEDBACK_SYNTHESIS:
            return build_response_schema(FeedbackRecord)
        case GenerationKind.PORTRAIT_SYNTHESIS:
            return None

