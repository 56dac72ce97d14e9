# wellguide/graph/nodes.py
"""
Wizard event graph nodes.

Every user action (select, toggle, clear, advance, back, skip, reset, cancel)
and every submission outcome (submit_ok, submit_failed) is one graph turn:

    classify_event -> <handler> -> refresh_recommendation -> END

`classify_event` decides whether the current status accepts the event; if not,
the turn ends in `reject_event` with no state change. Handlers record what
happened in `state["outcome"]` so the controller can report it:

    applied | blocked | rejected | noop | submitting | reset |
    cancelled | completed | failed

Blocked advances and rejected events are normal outcomes, never exceptions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from ..flows.base import WizardFlow
from ..tools.recommend import relevant_fields, resolve
from .gate import can_advance, is_filled
from .state import (
    ACTIVE,
    CANCELLED,
    COMPLETED,
    SUBMITTING,
    WizardState,
    clear_field,
    plain_answers,
    reset_session,
    set_scalar,
    snapshot,
    toggle_in_set,
)
from .steps import TERMINAL

logger = logging.getLogger("wellguide")

# event kind -> handler label, accepted only while ACTIVE
ACTIVE_EVENTS: Dict[str, str] = {
    "select": "apply_scalar",
    "toggle": "apply_toggle",
    "clear": "apply_clear",
    "advance": "advance_step",
    "back": "back_step",
    "skip": "skip_step",
    "reset": "reset_session",
}
FIELD_EVENTS = {"select", "toggle", "clear"}

# ------------------------------ Helpers -------------------------------------

def _event(state: WizardState) -> Dict[str, Any]:
    return dict(state.get("event") or {})

def _move_to(state: WizardState, step_id: str) -> None:
    history = list(state.get("history") or [])
    history.append(step_id)
    state["history"] = history
    state["current_step"] = step_id

def _begin_submit(state: WizardState) -> None:
    state["status"] = SUBMITTING
    state["captured_at"] = datetime.now(timezone.utc)
    state["error"] = None
    state["outcome"] = "submitting"

def _discard_session(state: WizardState) -> None:
    state["answers"] = {}
    state["history"] = []
    state["current_step"] = None
    state["recommendation"] = None

# ------------------------------ Routing -------------------------------------

def classify_event(state: WizardState) -> WizardState:
    event = _event(state)
    kind = str(event.get("kind") or "")
    status = state.get("status")
    label = "reject_event"

    if kind == "cancel":
        if status in (ACTIVE, SUBMITTING):
            label = "cancel_session"
    elif kind == "submit_ok":
        if status == SUBMITTING:
            label = "mark_completed"
    elif kind == "submit_failed":
        if status == SUBMITTING:
            label = "mark_failed"
    elif kind in ACTIVE_EVENTS and status == ACTIVE:
        if kind not in FIELD_EVENTS or event.get("field"):
            label = ACTIVE_EVENTS[kind]

    state["label"] = label
    state["outcome"] = None
    return state

def policy_router(state: WizardState) -> str:
    return (state or {}).get("label") or "reject_event"

def reject_event(state: WizardState) -> WizardState:
    event = _event(state)
    logger.info(
        "wizard %s: rejected %r event while %s",
        state.get("session_id"), event.get("kind"), state.get("status"),
    )
    state["outcome"] = "rejected"
    return state

# ---- Selection store --------------------------------------------------------

def _drop_dependents(state: WizardState, flow: WizardFlow, field: str) -> None:
    """Clear answers derived from `field`, and whatever derives from those."""
    answers = state.get("answers") or {}
    pending = [field]
    while pending:
        name = pending.pop()
        for step in flow.steps.dependents_of(name):
            for stale in sorted(step.answer_fields):
                if stale in answers:
                    clear_field(state, stale)
                    pending.append(stale)
                    logger.info(
                        "wizard %s: cleared %r after %r changed",
                        state.get("session_id"), stale, name,
                    )

def _mutate(state: WizardState, flow: WizardFlow, change) -> WizardState:
    event = _event(state)
    field = event["field"]
    before = plain_answers(state.get("answers") or {}).get(field)
    change(state, field, event.get("value"))
    if (state.get("answers") or {}).get(field) != before:
        _drop_dependents(state, flow, field)
    state["outcome"] = "applied"
    return state

def apply_scalar(state: WizardState, flow: WizardFlow) -> WizardState:
    return _mutate(state, flow, set_scalar)

def apply_toggle(state: WizardState, flow: WizardFlow) -> WizardState:
    return _mutate(state, flow, toggle_in_set)

def apply_clear(state: WizardState, flow: WizardFlow) -> WizardState:
    return _mutate(state, flow, lambda st, name, _value: clear_field(st, name))

# ---- Navigation -------------------------------------------------------------

def advance_step(state: WizardState, flow: WizardFlow) -> WizardState:
    step = flow.steps.get(state["current_step"])
    answers = state.get("answers") or {}
    if not can_advance(step, answers):
        state["outcome"] = "blocked"
        return state

    target = flow.steps.next_step(step, snapshot(answers))
    if target == TERMINAL:
        _begin_submit(state)
        return state

    _move_to(state, target)
    state["outcome"] = "applied"
    return state

def back_step(state: WizardState, flow: WizardFlow) -> WizardState:
    previous = flow.steps.previous_step(state.get("history") or [])
    if previous is None:
        state["outcome"] = "noop"
        return state
    state["history"] = list(state["history"][:-1])
    state["current_step"] = previous
    state["outcome"] = "applied"
    return state

def skip_step(state: WizardState, flow: WizardFlow) -> WizardState:
    step = flow.steps.get(state["current_step"])
    if not step.skippable:
        logger.info("wizard %s: step %r is not skippable", state.get("session_id"), step.id)
        state["outcome"] = "rejected"
        return state

    # Skipped fields stay absent, never defaulted
    for name in step.answer_fields:
        clear_field(state, name)

    target = flow.steps.skip_target(step, snapshot(state.get("answers") or {}))
    if target == TERMINAL:
        _begin_submit(state)
        return state

    _move_to(state, target)
    state["outcome"] = "applied"
    return state

def reset_wizard(state: WizardState, flow: WizardFlow) -> WizardState:
    reset_session(state, flow.steps.first)
    state["outcome"] = "reset"
    return state

# ---- Lifecycle --------------------------------------------------------------

def cancel_session(state: WizardState) -> WizardState:
    state["status"] = CANCELLED
    state["captured_at"] = None
    _discard_session(state)
    state["outcome"] = "cancelled"
    return state

def mark_completed(state: WizardState) -> WizardState:
    # The result already owns the answers; the session is spent.
    state["status"] = COMPLETED
    _discard_session(state)
    state["outcome"] = "completed"
    return state

def mark_failed(state: WizardState) -> WizardState:
    event = _event(state)
    state["status"] = ACTIVE
    state["captured_at"] = None
    state["error"] = str(event.get("error") or "submission failed")
    state["outcome"] = "failed"
    logger.warning("wizard %s: submission failed: %s", state.get("session_id"), state["error"])
    return state

# ---- Recommendation ---------------------------------------------------------

def refresh_recommendation(state: WizardState, flow: WizardFlow) -> WizardState:
    """
    Re-resolve after every mutation. Stays None until at least one field the
    rule table keys on has been answered.
    """
    answers = state.get("answers") or {}
    if any(is_filled(answers.get(f)) for f in relevant_fields(flow.rules)):
        state["recommendation"] = resolve(flow.rules, snapshot(answers))
    else:
        state["recommendation"] = None
    return state


__all__ = [
    "ACTIVE_EVENTS",
    "classify_event",
    "policy_router",
    "reject_event",
    "apply_scalar",
    "apply_toggle",
    "apply_clear",
    "advance_step",
    "back_step",
    "skip_step",
    "reset_wizard",
    "cancel_session",
    "mark_completed",
    "mark_failed",
    "refresh_recommendation",
]
