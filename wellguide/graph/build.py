# wellguide/graph/build.py
from __future__ import annotations

from typing import Any, Dict

from langgraph.graph import StateGraph, END

from ..flows.base import WizardFlow
from .state import WizardState
from .nodes import (
    classify_event,
    policy_router,
    reject_event,
    apply_scalar,
    apply_toggle,
    apply_clear,
    advance_step,
    back_step,
    skip_step,
    reset_wizard,
    cancel_session,
    mark_completed,
    mark_failed,
    refresh_recommendation,
)

# Compiled graphs are immutable; one per flow is shared by every session
_COMPILED: Dict[WizardFlow, Any] = {}


def build_graph(flow: WizardFlow):
    g = StateGraph(WizardState)

    # Nodes
    g.add_node("classify_event", classify_event)
    g.add_node("reject_event", reject_event)

    g.add_node("apply_scalar", lambda s: apply_scalar(s, flow))
    g.add_node("apply_toggle", lambda s: apply_toggle(s, flow))
    g.add_node("apply_clear", lambda s: apply_clear(s, flow))

    g.add_node("advance_step", lambda s: advance_step(s, flow))
    g.add_node("back_step", lambda s: back_step(s, flow))
    g.add_node("skip_step", lambda s: skip_step(s, flow))
    g.add_node("reset_session", lambda s: reset_wizard(s, flow))

    g.add_node("cancel_session", cancel_session)
    g.add_node("mark_completed", mark_completed)
    g.add_node("mark_failed", mark_failed)

    g.add_node("refresh_recommendation", lambda s: refresh_recommendation(s, flow))

    # Entry
    g.set_entry_point("classify_event")

    # Router from classify_event
    g.add_conditional_edges(
        "classify_event",
        policy_router,
        {
            "reject_event": "reject_event",
            "apply_scalar": "apply_scalar",
            "apply_toggle": "apply_toggle",
            "apply_clear": "apply_clear",
            "advance_step": "advance_step",
            "back_step": "back_step",
            "skip_step": "skip_step",
            "reset_session": "reset_session",
            "cancel_session": "cancel_session",
            "mark_completed": "mark_completed",
            "mark_failed": "mark_failed",
        },
    )

    # Anything that may change answers -> refresh the live recommendation
    for name in (
        "apply_scalar",
        "apply_toggle",
        "apply_clear",
        "advance_step",
        "back_step",
        "skip_step",
        "reset_session",
    ):
        g.add_edge(name, "refresh_recommendation")

    # End
    g.add_edge("refresh_recommendation", END)
    g.add_edge("reject_event", END)
    g.add_edge("cancel_session", END)
    g.add_edge("mark_completed", END)
    g.add_edge("mark_failed", END)

    return g.compile()


def graph_for(flow: WizardFlow):
    """Compile once per flow and reuse."""
    graph = _COMPILED.get(flow)
    if graph is None:
        graph = build_graph(flow)
        _COMPILED[flow] = graph
    return graph


__all__ = ["build_graph", "graph_for"]
