# wellguide/flows/peer_support.py
from __future__ import annotations

"""
Peer-support intake: topics, comfort level, format and privacy preferences,
and an optional note for the matcher.
"""

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

TOPICS = ("anxiety", "depression", "relationships", "work-life", "self-care", "grief")
COMFORT_LEVELS = (1, 2, 3, 4, 5)
FORMATS = ("one-on-one", "small-group", "large-group")
AVAILABILITY = ("flexible", "mornings", "afternoons", "evenings", "weekends")
PRIVACY = ("anonymous", "pseudonym", "verified")


def _comfort_prompt(answers: Mapping[str, Any]) -> str:
    topics = answers.get("topics") or []
    if topics:
        return f"How comfortable are you talking about {', '.join(topics)} with others?"
    return "How comfortable are you talking with others?"


STEPS = StepGraph([
    Step(
        id="topics",
        title="What would you like support with?",
        prompt="Choose one or more topics.",
        required_fields={"topics"},
        next_step="comfort",
        options={"topics": TOPICS},
    ),
    Step(
        id="comfort",
        title="Comfort Level",
        prompt=_comfort_prompt,
        required_fields={"comfort_level"},
        next_step="preferences",
        options={"comfort_level": COMFORT_LEVELS},
    ),
    Step(
        id="preferences",
        title="Preferences",
        prompt="How would you like to connect, and how much would you like to share?",
        required_fields={"preferred_format", "privacy_settings"},
        optional_fields={"availability"},
        next_step="review",
        options={
            "preferred_format": FORMATS,
            "availability": AVAILABILITY,
            "privacy_settings": PRIVACY,
        },
    ),
    Step(
        id="review",
        title="Review",
        prompt="Anything you'd like your peer group to know? (optional)",
        optional_fields={"notes"},
        skippable=True,
        next_step=TERMINAL,
    ),
])

RULES = RuleTable(
    "peer_support",
    tiers=(("preferred_format", "availability"), ("preferred_format",)),
    rules={
        ("one-on-one", "evenings"): "Evening one-on-one chats fill quickly; we'll look for a match after 6 PM.",
        ("small-group", "weekends"): "Weekend small groups are a relaxed way to start; sessions run about 45 minutes.",
        ("one-on-one",): "A one-on-one chat is private and paced by you. Share only what feels right.",
        ("small-group",): "Small groups of 3-5 people balance privacy with shared experience.",
        ("large-group",): "Larger groups are great for listening first; you can join in whenever you're ready.",
    },
    fallback="We'll match you with peers who share your interests. You can change preferences anytime.",
)

FLOW = WizardFlow(
    flow_id="peer_support",
    title="Peer Support Matching",
    description="Tell us how you'd like to connect with peers.",
    steps=STEPS,
    rules=RULES,
)
