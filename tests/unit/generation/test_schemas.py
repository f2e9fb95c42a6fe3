"""Tests for response schema descriptors."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from archetype.core.generation.models import GenerationKind
from archetype.core.generation.schemas import build_response_schema, response_schema_for


def _keys(node: Any) -> set[str]:
    """Collect every dict key in a schema, excluding property names."""
    found: set[str] = set()
    if isinstance(node, dict):
        for key, value in node.items():
            found.add(key)
            if key == "properties":
                for prop in value.values():
                    found |= _keys(prop)
            else:
                found |= _keys(value)
    elif isinstance(node, list):
        for item in node:
            found |= _keys(item)
    return found


class TestResponseSchemaFor:
    """Test suite for response_schema_for."""

    def test_persona_schema_uses_wire_names(self):
        """Test persona schema is self-contained and camelCase."""
        schema = response_schema_for(GenerationKind.PERSONA_SYNTHESIS)

        assert schema["type"] == "object"
        assert schema["required"] == ["archetypes"]
        archetypes = schema["properties"]["archetypes"]
        assert archetypes["type"] == "array"
        assert archetypes["minItems"] == 1

        item = archetypes["items"]
        assert "techLiteracy" in item["properties"]
        assert "imagePrompt" in item["properties"]
        assert "tech_literacy" not in item["properties"]
        assert set(item["required"]) >= {"name", "role", "age", "imagePrompt", "tags"}

    def test_schema_has_no_refs_or_titles(self):
        """Test references are inlined and cosmetic titles dropped."""
        schema = response_schema_for(GenerationKind.PERSONA_SYNTHESIS)
        keys = _keys(schema)
        assert "$ref" not in keys
        assert "$defs" not in keys
        assert "title" not in keys

    def test_field_descriptions_carried(self):
        schema = response_schema_for(GenerationKind.FEEDBACK_SYNTHESIS)
        score = schema["properties"]["score"]
        assert score["type"] == "integer"
        assert score["minimum"] == 0
        assert score["maximum"] == 100
        assert "description" in score

    def test_portrait_has_no_schema(self):
        assert response_schema_for(GenerationKind.PORTRAIT_SYNTHESIS) is None


class TestBuildResponseSchema:
    def test_property_named_title_is_kept(self):
        """Test a field called ``title`` survives title stripping."""

        class Chapter(BaseModel):
            title: str
            pages: int

        schema = build_response_schema(Chapter)
        assert set(schema["properties"]) == {"title", "pages"}
        assert "title" not in schema
        assert "title" not in schema["properties"]["title"]
