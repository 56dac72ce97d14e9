# wellguide/flows/gratitude_journal.py
"""
Gratitude journal: mood before, a gratitude prompt, one or more written
entries, then mood after and an optional note.

Recommendations key on the chosen prompt, sharpened by a low starting mood.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

MOOD_LEVELS = (1, 2, 3, 4, 5)

PROMPTS = {
    "people": ("Who are you grateful for today?",
               ("A friend who listened", "A kind stranger", "Family support")),
    "experiences": ("What experience made you smile today?",
                    ("A beautiful sunset", "A good conversation", "A moment of peace")),
    "simple_pleasures": ("What small thing brought you joy?",
                         ("A warm cup of tea", "Fresh air", "A good book")),
    "growth": ("What are you learning or improving?",
               ("A new skill", "Patience", "Self-compassion")),
    "comfort": ("What makes you feel safe and comfortable?",
                ("Your cozy bed", "A familiar routine", "A favorite song")),
}


def mood_label(level: Any) -> str:
    try:
        level = int(level)
    except (TypeError, ValueError):
        return "Unknown"
    if level >= 4:
        return "Great"
    if level >= 3:
        return "Good"
    if level >= 2:
        return "Okay"
    return "Low"


def _entries_prompt(answers: Mapping[str, Any]) -> str:
    chosen = PROMPTS.get(str(answers.get("gratitude_prompt") or ""))
    if chosen is None:
        return "Add up to 3 things you're grateful for."
    return f"{chosen[0]} Add up to 3 things."


def _entry_examples(answers: Mapping[str, Any]):
    chosen = PROMPTS.get(str(answers.get("gratitude_prompt") or ""))
    return chosen[1] if chosen else ()


def _after_prompt(answers: Mapping[str, Any]) -> str:
    before = answers.get("mood_before")
    if before is None:
        return "How do you feel after practicing gratitude?"
    return f"You started feeling {mood_label(before).lower()}. How do you feel now?"


STEPS = StepGraph([
    Step(
        id="mood_before",
        title="How are you feeling?",
        prompt="Rate your mood before practicing gratitude.",
        required_fields={"mood_before"},
        next_step="prompt",
        options={"mood_before": MOOD_LEVELS},
    ),
    Step(
        id="prompt",
        title="Choose a gratitude prompt",
        prompt="What would you like to be grateful for?",
        required_fields={"gratitude_prompt"},
        next_step="entries",
        options={"gratitude_prompt": tuple(PROMPTS)},
    ),
    Step(
        id="entries",
        title="Write your gratitude",
        prompt=_entries_prompt,
        required_fields={"entries"},
        next_step="mood_after",
        options={"entries": _entry_examples},
    ),
    Step(
        id="mood_after",
        title="How do you feel now?",
        prompt=_after_prompt,
        required_fields={"mood_after"},
        optional_fields={"notes"},
        next_step=TERMINAL,
        options={"mood_after": MOOD_LEVELS},
    ),
])

RULES = RuleTable(
    "gratitude_journal",
    tiers=(("gratitude_prompt", "mood_before"), ("gratitude_prompt",)),
    rules={
        ("people", 1): "On heavy days, a short message to someone you're grateful for can lift you both.",
        ("people", 2): "Let the person you wrote about know; shared gratitude tends to come back.",
        ("comfort", 1): "Lean on what makes you feel safe tonight. Small comforts are allowed to be enough.",
        ("simple_pleasures", 1): "Pick one small pleasure you listed and give yourself ten minutes of it today.",
        ("people",): "Strong relationships grow from noticed kindness. Consider saying thank you out loud.",
        ("experiences",): "Replay the moment for a few breaths; savoring helps good experiences stick.",
        ("simple_pleasures",): "Small joys add up. Try noticing one more before the day ends.",
        ("growth",): "Progress counts even when it's slow. Note one step you'll take tomorrow.",
        ("comfort",): "Knowing what comforts you is a strength. Keep these close for harder days.",
    },
    fallback="Three good things a day is a simple habit with a real effect. Come back tomorrow.",
)

FLOW = WizardFlow(
    flow_id="gratitude_journal",
    title="Gratitude Journal",
    description="Write down what you're thankful for and notice how your mood shifts.",
    steps=STEPS,
    rules=RULES,
)
