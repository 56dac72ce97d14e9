# wellguide/flows/mood_tracker.py
from __future__ import annotations

"""
Mood tracker: primary mood, optional secondary mood, intensity, and an
optional note. High intensity (4-5) detours through a short support offer
before the note.

Recommendations key on (primary_mood, secondary_mood) and fall back to the
primary mood alone when the secondary step was skipped.
"""

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

PRIMARY_MOODS = ("joy", "calm", "neutral", "stressed", "anxious")

SECONDARY_MOODS = {
    "joy": ("grateful", "energetic", "hopeful", "excited"),
    "calm": ("peaceful", "content", "relaxed", "centered"),
    "neutral": ("tired", "distracted", "indifferent", "balanced"),
    "stressed": ("overwhelmed", "frustrated", "pressured", "tense"),
    "anxious": ("worried", "panicked", "uneasy", "fearful"),
}

INTENSITY_LEVELS = (1, 2, 3, 4, 5)
HIGH_INTENSITY = 4  # >=4 offers immediate support

SUPPORT_CHOICES = ("breathing", "grounding", "thought_record", "not_now")


def _secondary_options(answers: Mapping[str, Any]):
    return SECONDARY_MOODS.get(str(answers.get("primary_mood") or ""), ())


def _feeling(answers: Mapping[str, Any]) -> str:
    primary = answers.get("primary_mood") or "this"
    secondary = answers.get("secondary_mood")
    if secondary:
        return f"{primary} and {secondary}"
    return str(primary)


def _secondary_prompt(answers: Mapping[str, Any]) -> str:
    primary = answers.get("primary_mood")
    if primary:
        return f"Which word fits your {primary} feeling best? (optional)"
    return "Which word fits your feeling best? (optional)"


def _intensity_prompt(answers: Mapping[str, Any]) -> str:
    return f"How intense is your {_feeling(answers)} feeling? (1 = mild, 5 = very intense)"


def _support_prompt(answers: Mapping[str, Any]) -> str:
    return (
        f"You're feeling {_feeling(answers)} at a high intensity. "
        "Would one of these help right now?"
    )


def _after_intensity(answers: Mapping[str, Any]) -> str:
    try:
        level = int(answers.get("intensity") or 0)
    except (TypeError, ValueError):
        level = 0
    return "support_offer" if level >= HIGH_INTENSITY else "note"


STEPS = StepGraph([
    Step(
        id="primary_mood",
        title="Track Your Mood",
        prompt="How are you feeling right now?",
        required_fields={"primary_mood"},
        next_step="secondary_mood",
        options={"primary_mood": PRIMARY_MOODS},
    ),
    Step(
        id="secondary_mood",
        title="Name It",
        prompt=_secondary_prompt,
        required_fields={"secondary_mood"},
        skippable=True,
        depends_on={"primary_mood"},
        next_step="intensity",
        options={"secondary_mood": _secondary_options},
    ),
    Step(
        id="intensity",
        title="Intensity",
        prompt=_intensity_prompt,
        required_fields={"intensity"},
        branch=_after_intensity,
        branch_targets=("support_offer", "note"),
        options={"intensity": INTENSITY_LEVELS},
    ),
    Step(
        id="support_offer",
        title="Support",
        prompt=_support_prompt,
        required_fields={"support_choice"},
        skippable=True,
        next_step="note",
        options={"support_choice": SUPPORT_CHOICES},
    ),
    Step(
        id="note",
        title="Anything Else?",
        prompt="Add a short note about what's behind this feeling (optional).",
        optional_fields={"note"},
        skippable=True,
        next_step=TERMINAL,
    ),
])


PRIMARY_TEXT = {
    ("joy",): "Keep up the positive energy! Try sharing your joy with the community.",
    ("calm",): "Great to hear you're feeling calm. Consider a short meditation to maintain this state.",
    ("neutral",): "It's perfectly normal to feel neutral. Try our breathing exercise to center yourself.",
    ("stressed",): "Take a moment to breathe. Our 3-minute breathing exercise can help you reset.",
    ("anxious",): "You're not alone in feeling anxious. Try our guided breathing or reach out to the community.",
}

COMBINED_TEXT = {
    ("joy", "grateful"): "Your gratitude is beautiful. A few lines in the gratitude journal can make it last.",
    ("joy", "energetic"): "Great energy! Channel it into something meaningful, like a walk or a creative project.",
    ("calm", "peaceful"): "Savor this peaceful moment. A 3-minute body scan can help you return to it later.",
    ("neutral", "tired"): "Rest is important. A gentle sleep-prep routine can help you recharge.",
    ("neutral", "distracted"): "Try a 2-minute focus reset: name five things you can see, then pick one small task.",
    ("stressed", "overwhelmed"): "Feeling overwhelmed can be hard. A personal safety plan can help you through difficult moments.",
    ("stressed", "tense"): "Release some tension with progressive muscle relaxation, one muscle group at a time.",
    ("anxious", "worried"): "Write your worries down, then try box breathing: in 4, hold 4, out 4, hold 4.",
    ("anxious", "panicked"): "Let's ground you first: 5 things you see, 4 you hear, 3 you can touch, 2 you smell, 1 you taste.",
    ("anxious", "uneasy"): "Step away from screens for a few minutes and focus on slow, steady breaths.",
}

FALLBACK_TEXT = "Thanks for checking in. Take a slow breath; small steps count."

RULES = RuleTable(
    "mood_tracker",
    tiers=(("primary_mood", "secondary_mood"), ("primary_mood",)),
    rules={**COMBINED_TEXT, **PRIMARY_TEXT},
    fallback=FALLBACK_TEXT,
)

FLOW = WizardFlow(
    flow_id="mood_tracker",
    title="Mood Tracker",
    description="Log how you feel and get a quick suggestion.",
    steps=STEPS,
    rules=RULES,
)
