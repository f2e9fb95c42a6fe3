"""Payload builders for generation requests.

Renders research notes, previous feedback and portrait descriptions into the
opaque payload strings sent to the inference service.
"""

from __future__ import annotations

from archetype.core.generation.models import FeedbackRecord, ResearchNotes

PERSONA_SYSTEM_INSTRUCTION = (
    "You are a precise and insightful UX researcher. "
    "Create realistic, empathetic, and useful personas."
)

FEEDBACK_SYSTEM_INSTRUCTION = (
    "You are a gamified tutor. Be energetic, encouraging, but honest about gaps in the research."
)


def render_notes(notes: ResearchNotes) -> str:
    """Render the non-empty sections of research notes as labelled lines."""
    sections = (
        ("Title", notes.title),
        ("Description", notes.description),
        ("Pain Points", notes.pain_points),
        ("Needs", notes.needs),
        ("Goals", notes.goals),
        ("Actions", notes.actions),
    )
    return "\n".join(f"{label}: {value.strip()}" for label, value in sections if value.strip())


def build_persona_payload(notes: ResearchNotes) -> str:
    return (
        "You are an expert User Researcher and UX Designer.\n"
        "Analyze the following raw research data (interview notes, survey responses, or "
        "descriptions) and synthesize it into distinct User Archetypes.\n"
        "Focus on behavioral patterns, goals, and pain points. Give each archetype a few short "
        "behavioral tags.\n\n"
        f'Raw Data:\n"""\n{render_notes(notes)}\n"""\n\n'
        "Generate 2 to 4 distinct archetypes that represent the key segments found in this data."
    )


def build_feedback_payload(
    notes: ResearchNotes,
    previous_feedback: FeedbackRecord | None = None,
) -> str:
    """Render the feedback payload.

    When previous feedback is supplied it is embedded so the service can judge
    whether the notes improved since the last review.
    """
    lines = [
        'You are "Professor Archetype", a supportive but rigorous UX Design professor.',
        "A student has submitted research notes for their User Archetype project.",
        "",
        f"Student: {notes.researcher_name or 'Unknown'}",
        f"Team: {notes.team_name or 'Unknown'}",
        "",
        "Review the notes for specificity, separation of behaviors (Actions) from drivers "
        "(Motivations), empathy, and completeness. Address the student by name if possible.",
        "",
        "Student's Work:",
        render_notes(notes),
    ]

    if previous_feedback is not None:
        lines += [
            "",
            "Previous review of an earlier draft:",
            f"Grade: {previous_feedback.grade} (score {previous_feedback.score}/100)",
            "Requested improvements:",
            *(f"- {item}" for item in previous_feedback.improvements),
            "",
            "Acknowledge which improvements were addressed and grade the new draft accordingly.",
        ]

    lines += [
        "",
        "Provide constructive feedback, a grade, and questions that inspire the student to "
        "improve their notes before generating the final personas.",
    ]
    return "\n".join(lines)


def build_portrait_payload(prompt_text: str) -> str:
    return (
        f"A high-quality, professional headshot of: {prompt_text.strip()}. "
        "Photorealistic, neutral lighting, solid color background, looking at camera. "
        "4k resolution."
    )
