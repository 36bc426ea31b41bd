"""Prompt templates for the three analysis endpoints."""

from __future__ import annotations

from typing import Optional

JOURNEY_PROMPT = """Analyze the user interface shown in the image provided.
Imagine a typical user trying to achieve a common goal related to this UI (e.g., sign up, find information, complete a task).
Describe a potential user journey, highlighting:
1. Clarity: Is the main call to action clear? Is navigation intuitive?
2. Potential Confusion: Are there any ambiguous labels, confusing icons, or potentially misleading elements?
3. Friction Points: Could any steps be frustrating or cause users to abandon the task?
4. Suggestions: Briefly suggest 1-2 improvements for flow or clarity.
Keep the analysis concise and actionable. Focus on the primary flow visible in the screenshot."""

ABTEST_PROMPT = """Analyze the user interface shown in the image.
Focus on key call-to-action buttons or primary headlines visible.
Suggest 1-2 alternative text variations (copy) for A/B testing for ONE prominent element (like a button or headline).
Clearly state the original text (if discernible) and the suggested variations.
Explain briefly why these variations might perform better (e.g., clearer value proposition, stronger verb, urgency).
Format the output clearly, using markdown.

Target Element (if provided): {element_type}
Element Description (if provided): {element_description}"""

VARIANT_PROMPT = """Redesign the user interface shown in the image as an improved version of the same screen.
Keep the same purpose, content and overall layout so the two can be compared side by side.
Make the primary call to action more prominent, strengthen visual hierarchy, increase text contrast
and remove visual clutter. Output a clean, realistic UI screenshot without annotations."""


def _with_context(prompt: str, context: Optional[str]) -> str:
    if not context:
        return prompt
    return f"{prompt}\n\nAdditional context from the designer:\n{context}"


def build_journey_prompt(context: Optional[str] = None) -> str:
    return _with_context(JOURNEY_PROMPT, context)


def build_abtest_prompt(
    *,
    element_type: Optional[str] = None,
    element_description: Optional[str] = None,
    context: Optional[str] = None,
) -> str:
    prompt = ABTEST_PROMPT.format(
        element_type=element_type or "Primary Button/Headline",
        element_description=element_description or "N/A",
    )
    return _with_context(prompt, context)


def build_variant_prompt(context: Optional[str] = None) -> str:
    return _with_context(VARIANT_PROMPT, context)
