# wellguide/flows/crisis_safety_planning.py
"""
Crisis safety plan: warning signs, coping strategies, trusted contacts, and
safe places plus professional help. Signs and strategies are needed before
moving on; contacts and the last step's lists are optional.

Warning signs, contacts and notes are free text. Contacts are dicts with
name / relationship / phone / is_emergency and are toggled in and out like
any other multi-select value.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..graph.steps import TERMINAL, Step, StepGraph
from ..tools.recommend import RuleTable
from .base import WizardFlow

COMMON_WARNING_SIGNS = (
    "Increased anxiety",
    "Trouble sleeping",
    "Isolating from others",
    "Loss of appetite",
    "Feeling hopeless",
    "Thoughts of self-harm",
)

COPING_STRATEGIES = (
    "Deep breathing exercises",
    "Call a trusted friend or family member",
    "Go for a walk in nature",
    "Listen to calming music",
    "Write in a journal",
    "Take a warm bath or shower",
    "Practice grounding techniques (5-4-3-2-1)",
    "Use progressive muscle relaxation",
    "Call a crisis hotline",
    "Remove yourself from triggering situations",
)
STARTER_STRATEGIES = COPING_STRATEGIES[:5]

SAFE_PLACES = (
    "Your bedroom",
    "A local park",
    "A friend's house",
    "A library",
    "A coffee shop",
    "A place of worship",
    "A community center",
)

PROFESSIONAL_HELP = (
    "National Suicide Prevention Lifeline: 988",
    "Crisis Text Line: Text HOME to 741741",
    "Your therapist or counselor",
    "Your primary care doctor",
    "Local mental health crisis center",
    "Emergency services: 911",
)


def _contacts_prompt(answers: Mapping[str, Any]) -> str:
    contacts = answers.get("emergency_contacts") or ()
    if not contacts:
        return "Who can you reach out to when you need support? (optional)"
    return f"You've added {len(contacts)} contact(s). Anyone else you can reach out to?"


STEPS = StepGraph([
    Step(
        id="warning_signs",
        title="Warning Signs",
        prompt="What are your early warning signs that you're struggling?",
        required_fields={"warning_signs"},
        next_step="coping",
        options={"warning_signs": COMMON_WARNING_SIGNS},
    ),
    Step(
        id="coping",
        title="Coping Strategies",
        prompt="What helps you feel better when you're struggling?",
        required_fields={"coping_strategies"},
        next_step="contacts",
        options={"coping_strategies": COPING_STRATEGIES},
    ),
    Step(
        id="contacts",
        title="Emergency Contacts",
        prompt=_contacts_prompt,
        optional_fields={"emergency_contacts"},
        skippable=True,
        next_step="resources",
    ),
    Step(
        id="resources",
        title="Safe Places & Professional Help",
        prompt="Where can you go and who can you call for help?",
        optional_fields={"safe_places", "professional_help", "notes"},
        next_step=TERMINAL,
        options={"safe_places": SAFE_PLACES, "professional_help": PROFESSIONAL_HELP},
    ),
])

RULES = RuleTable(
    "crisis_safety_planning",
    tiers=(("coping_strategies",),),
    rules={
        (tuple(sorted(STARTER_STRATEGIES)),):
            "You kept the starter strategies. Adding one that is personal to you makes the plan easier to use.",
        (("Call a crisis hotline",),):
            "Save 988 in your phone now so it's one tap away, and add one more strategy you can do alone.",
    },
    fallback="Keep this plan somewhere easy to reach. If you are in immediate danger, call 988 or 911.",
)

FLOW = WizardFlow(
    flow_id="crisis_safety_planning",
    title="Crisis Safety Planning",
    description="Create your personalized safety plan.",
    steps=STEPS,
    rules=RULES,
)
