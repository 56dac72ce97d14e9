# wellguide/graph/state.py
from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, TypedDict


# ---- Status values ----------------------------------------------------------

ACTIVE = "active"
SUBMITTING = "submitting"
COMPLETED = "completed"
CANCELLED = "cancelled"

TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED})


# ---- Typed structures -------------------------------------------------------


class WizardEvent(TypedDict, total=False):
    kind: str                       # "select" | "toggle" | "clear" | "advance" | ...
    field: str
    value: Any
    error: str                      # only for "submit_failed"


class WizardState(TypedDict, total=False):
    # Identity
    session_id: str
    flow_id: str
    status: str                     # ACTIVE | SUBMITTING | COMPLETED | CANCELLED

    # Navigation
    current_step: Optional[str]
    history: List[str]              # visited step ids; current_step is last

    # Selection store
    answers: Dict[str, Any]         # scalar, or ordered unique list for multi-select

    # Display
    recommendation: Optional[str]

    # Per-event bookkeeping
    event: Optional[WizardEvent]
    label: Optional[str]            # routing label set by classify_event
    outcome: Optional[str]          # "applied" | "blocked" | "rejected" | ...

    # Submission
    captured_at: Optional[datetime]
    error: Optional[str]            # last submission failure, if any


# ---- Constructors -----------------------------------------------------------


def new_session(session_id: str, flow_id: str, first_step: str) -> WizardState:
    """
    Create a brand-new session positioned on the first step.
    """
    return {
        "session_id": session_id,
        "flow_id": flow_id,
        "status": ACTIVE,
        "current_step": first_step,
        "history": [first_step],
        "answers": {},
        "recommendation": None,
        "event": None,
        "label": None,
        "outcome": None,
        "captured_at": None,
        "error": None,
    }


def reset_session(state: WizardState, first_step: str) -> WizardState:
    """
    Put the session back into its freshly created shape, in place.
    """
    fresh = new_session(state["session_id"], state["flow_id"], first_step)
    state.update(fresh)
    return state


# ---- Selection store --------------------------------------------------------


def set_scalar(state: WizardState, field: str, value: Any) -> None:
    """
    Overwrite a single answer.
    """
    state.setdefault("answers", {})[field] = value


def toggle_in_set(state: WizardState, field: str, value: Any) -> None:
    """
    Add `value` to the multi-select `field`, or remove it if already there.
    Two toggles with the same value cancel out.
    """
    answers = state.setdefault("answers", {})
    current = answers.get(field)
    members = list(current) if isinstance(current, (list, tuple, set, frozenset)) else []
    if value in members:
        members.remove(value)
    else:
        members.append(value)
    answers[field] = members


def clear_field(state: WizardState, field: str) -> None:
    """
    Drop the answer entirely ("never answered" rather than "answered empty").
    """
    state.setdefault("answers", {}).pop(field, None)


def snapshot(answers: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Read-only copy of the answers; multi-select values become tuples.
    """
    frozen = {
        k: tuple(v) if isinstance(v, (list, set, frozenset)) else v
        for k, v in answers.items()
    }
    return MappingProxyType(frozen)


def plain_answers(answers: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Detached, JSON-friendly copy of the answers (lists for multi-select).
    """
    return {
        k: list(v) if isinstance(v, (list, tuple, set, frozenset)) else v
        for k, v in answers.items()
    }


__all__ = [
    "ACTIVE",
    "SUBMITTING",
    "COMPLETED",
    "CANCELLED",
    "TERMINAL_STATUSES",
    "WizardEvent",
    "WizardState",
    "new_session",
    "reset_session",
    "set_scalar",
    "toggle_in_set",
    "clear_field",
    "snapshot",
    "plain_answers",
]
