# wellguide/flows/self_care.py
from __future__ import annotations

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

ACTIVITIES = {
    "stressed": (
        "Deep breathing exercise",
        "Progressive muscle relaxation",
        "Take a warm bath",
        "Listen to calming music",
        "Go for a walk in nature",
        "Write in a journal",
        "Practice mindfulness",
        "Call a friend",
    ),
    "tired": (
        "Take a power nap",
        "Gentle stretching",
        "Drink water and hydrate",
        "Step outside for fresh air",
        "Listen to upbeat music",
        "Light exercise",
        "Eat a healthy snack",
        "Practice self-massage",
    ),
    "sad": (
        "Watch a funny video",
        "Call a loved one",
        "Write gratitude list",
        "Take a warm shower",
        "Listen to uplifting music",
        "Do something creative",
        "Cuddle with a pet",
        "Practice self-compassion",
    ),
    "anxious": (
        "Grounding exercise (5-4-3-2-1)",
        "Box breathing technique",
        "Progressive muscle relaxation",
        "Focus on your senses",
        "Write down your worries",
        "Take a break from screens",
        "Gentle yoga or stretching",
        "Talk to someone you trust",
    ),
    "happy": (
        "Share your joy with others",
        "Do something you love",
        "Practice gratitude",
        "Help someone else",
        "Celebrate your wins",
        "Plan something fun",
        "Express yourself creatively",
        "Savor the moment",
    ),
}

MOODS = tuple(ACTIVITIES)
QUICK_ACTIONS = ("breathing", "stretching", "music", "journaling")
DURATIONS = (1, 2, 3, 5, 10, 15)  # minutes
MOOD_AFTER_LEVELS = (1, 2, 3, 4, 5)


def _activity_options(answers: Mapping[str, Any]):
    return ACTIVITIES.get(str(answers.get("current_mood") or ""), ())


def _duration_prompt(answers: Mapping[str, Any]) -> str:
    picked = answers.get("activities") or []
    if len(picked) == 1:
        return f"How many minutes can you give to \"{picked[0]}\"?"
    return "How many minutes can you set aside? Add a quick action if you like."


STEPS = StepGraph([
    Step(
        id="current_mood",
        title="How are you feeling?",
        prompt="Pick the mood that fits you best right now.",
        required_fields={"current_mood"},
        next_step="activities",
        options={"current_mood": MOODS},
    ),
    Step(
        id="activities",
        title="Choose Activities",
        prompt="Select one or more activities that feel doable.",
        required_fields={"activities"},
        depends_on={"current_mood"},
        next_step="duration",
        options={"activities": _activity_options},
    ),
    Step(
        id="duration",
        title="Quick Actions",
        prompt=_duration_prompt,
        required_fields={"duration"},
        optional_fields={"quick_action"},
        next_step="reflection",
        options={"duration": DURATIONS, "quick_action": QUICK_ACTIONS},
    ),
    Step(
        id="reflection",
        title="Reflect",
        prompt="How do you feel after taking this time for yourself?",
        required_fields={"mood_after"},
        optional_fields={"notes"},
        next_step=TERMINAL,
        options={"mood_after": MOOD_AFTER_LEVELS},
    ),
])

RULES = RuleTable(
    "self_care",
    tiers=(("current_mood", "quick_action"), ("current_mood",)),
    rules={
        ("stressed", "breathing"): "Two minutes of slow exhales (longer out than in) is a great stress reset.",
        ("tired", "stretching"): "Gentle stretching wakes the body up; follow it with a glass of water.",
        ("anxious", "breathing"): "Try box breathing: in 4, hold 4, out 4, hold 4, for three rounds.",
        ("sad", "music"): "Put on a song that once lifted you and let yourself move a little.",
        ("stressed",): "Pick one small activity and give it your full attention; tension eases with focus.",
        ("tired",): "Low energy is a signal, not a failure. Start with water and fresh air.",
        ("sad",): "Be gentle with yourself today. Reaching out to someone you trust can help.",
        ("anxious",): "Grounding first: feel your feet on the floor and name what you can see.",
        ("happy",): "Wonderful! Sharing a good moment helps it last longer.",
    },
    fallback="Any time you spend caring for yourself counts. Start small.",
)

FLOW = WizardFlow(
    flow_id="self_care",
    title="Self-Care Menu",
    description="Pick a few mood-matched activities and reflect afterwards.",
    steps=STEPS,
    rules=RULES,
)
