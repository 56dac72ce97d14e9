# wellguide/flows/registry.py
from __future__ import annotations

from typing import Dict, List

from ..errors import ConfigurationError
from .base import WizardFlow
from .cbt_record import FLOW as CBT_RECORD
from .crisis_safety_planning import FLOW as CRISIS_SAFETY_PLANNING
from .gratitude_journal import FLOW as GRATITUDE_JOURNAL
from .mood_tracker import FLOW as MOOD_TRACKER
from .peer_support import FLOW as PEER_SUPPORT
from .self_care import FLOW as SELF_CARE

FLOWS: Dict[str, WizardFlow] = {
    flow.flow_id: flow
    for flow in (
        MOOD_TRACKER,
        CBT_RECORD,
        SELF_CARE,
        PEER_SUPPORT,
        CRISIS_SAFETY_PLANNING,
        GRATITUDE_JOURNAL,
    )
}


def get_flow(flow_id: str) -> WizardFlow:
    flow = FLOWS.get(flow_id)
    if flow is None:
        raise ConfigurationError(f"unknown flow: {flow_id!r}")
    return flow


def list_flows() -> List[WizardFlow]:
    return list(FLOWS.values())


__all__ = ["FLOWS", "get_flow", "list_flows"]
