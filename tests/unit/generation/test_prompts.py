"""Tests for payload builders."""

from __future__ import annotations

from archetype.core.generation.models import FeedbackRecord, ResearchNotes
from archetype.core.generation.prompts import (
    build_feedback_payload,
    build_persona_payload,
    build_portrait_payload,
    render_notes,
)


def _notes() -> ResearchNotes:
    return ResearchNotes(
        title="Checkout study",
        researcher_name="Dana",
        team_name="Payments",
        description="Interviews with 8 shoppers",
        pain_points="Hidden fees",
        actions="",
    )


class TestRenderNotes:
    def test_blank_sections_skipped(self):
        rendered = render_notes(_notes())
        assert rendered.splitlines() == [
            "Title: Checkout study",
            "Description: Interviews with 8 shoppers",
            "Pain Points: Hidden fees",
        ]


class TestPayloads:
    """Test suite for payload builders."""

    def test_persona_payload_embeds_notes(self):
        payload = build_persona_payload(_notes())
        assert "Pain Points: Hidden fees" in payload
        assert "archetypes" in payload.lower()

    def test_feedback_payload_names_researcher(self):
        payload = build_feedback_payload(_notes())
        assert "Student: Dana" in payload
        assert "Team: Payments" in payload
        assert "Previous review" not in payload

    def test_feedback_payload_embeds_previous_feedback(self):
        """Test previous feedback is carried so improvement can be judged."""
        previous = FeedbackRecord(
            grade="C",
            score=61,
            feedback_title="Needs depth",
            strengths=["Clear goal"],
            improvements=["Add direct quotes", "Separate actions from motivations"],
            thought_provoking_questions=["Why now?", "Who else is affected?"],
            overall_comment="Keep going.",
        )
        payload = build_feedback_payload(_notes(), previous)

        assert "Previous review of an earlier draft:" in payload
        assert "Grade: C (score 61/100)" in payload
        assert "- Add direct quotes" in payload

    def test_portrait_payload_wraps_description(self):
        payload = build_portrait_payload("  Woman in her thirties, short hair  ")
        assert payload.startswith(
            "A high-quality, professional headshot of: Woman in her thirties, short hair."
        )
        assert "Photorealistic" in payload
