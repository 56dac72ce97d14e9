# wellguide/flows/cbt_record.py
from __future__ import annotations

"""
CBT thought record: situation, automatic thought with emotion and intensity,
an optional thinking-trap label, evidence for and against, a balanced
reframe, and a short reflection.
"""

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

DISTORTIONS = (
    "all-or-nothing",
    "overgeneralization",
    "mental-filter",
    "catastrophizing",
    "emotional-reasoning",
)

INTENSITY_LEVELS = (1, 2, 3, 4, 5)
MOOD_AFTER_LEVELS = (1, 2, 3, 4, 5)


def _evidence_prompt(answers: Mapping[str, Any]) -> str:
    thought = answers.get("thought")
    if thought:
        return f'What supports and what challenges the thought "{thought}"?'
    return "What supports and what challenges this thought?"


def _reframe_prompt(answers: Mapping[str, Any]) -> str:
    distortion = answers.get("distortion")
    if distortion:
        return f"Looking past the {distortion} pattern, what is a more balanced thought?"
    return "Considering all the evidence, what is a more balanced thought?"


STEPS = StepGraph([
    Step(
        id="situation",
        title="What happened?",
        prompt="Describe the situation that triggered your thoughts.",
        required_fields={"situation"},
        next_step="thought",
    ),
    Step(
        id="thought",
        title="Thoughts & Feelings",
        prompt="What went through your mind, and how did it make you feel?",
        required_fields={"thought", "emotion", "intensity"},
        next_step="distortion",
        options={"intensity": INTENSITY_LEVELS},
    ),
    Step(
        id="distortion",
        title="Thinking Traps",
        prompt="Does this thought fit one of these common patterns? (optional)",
        required_fields={"distortion"},
        skippable=True,
        next_step="evidence",
        options={"distortion": DISTORTIONS},
    ),
    Step(
        id="evidence",
        title="Examine the Evidence",
        prompt=_evidence_prompt,
        required_fields={"evidence_for", "evidence_against"},
        next_step="reframe",
    ),
    Step(
        id="reframe",
        title="Reframe",
        prompt=_reframe_prompt,
        required_fields={"reframed_thought"},
        next_step="reflection",
    ),
    Step(
        id="reflection",
        title="How do you feel now?",
        prompt="Rate your mood after reframing, and add any notes.",
        required_fields={"mood_after"},
        optional_fields={"notes"},
        next_step=TERMINAL,
        options={"mood_after": MOOD_AFTER_LEVELS},
    ),
])

RULES = RuleTable(
    "cbt_record",
    tiers=(("distortion",),),
    rules={
        ("all-or-nothing",): "Look for the middle ground: what would 'partly true' sound like here?",
        ("overgeneralization",): "Is this one event, or truly 'always'? Name one time it went differently.",
        ("mental-filter",): "List one thing that went well alongside what went wrong.",
        ("catastrophizing",): "Ask what is most likely to happen, not just what is worst.",
        ("emotional-reasoning",): "Feelings are real, but they are not facts. What would you tell a friend?",
    },
    fallback="Balanced thoughts take practice. Revisit this record tomorrow and notice what changed.",
)

FLOW = WizardFlow(
    flow_id="cbt_record",
    title="CBT Thought Record",
    description="Challenge and reframe an unhelpful thought.",
    steps=STEPS,
    rules=RULES,
)
