# wellguide/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# ====== Engine output ======

class WizardResult(BaseModel):
    """Finished, validated answers handed to the caller exactly once."""
    model_config = ConfigDict(frozen=True)

    session_id: str
    flow_id: str
    answers: Dict[str, Any]
    recommendation: Optional[str] = None
    captured_at: datetime


class WizardView(BaseModel):
    """Read-only display state for the presentation layer."""
    session_id: str
    flow_id: str
    status: str
    step_id: Optional[str] = None
    title: str = ""
    prompt: str = ""
    options: Dict[str, List[Any]] = Field(default_factory=dict)
    can_advance: bool = False
    missing_fields: List[str] = Field(default_factory=list)
    skippable: bool = False
    can_go_back: bool = False
    is_final_step: bool = False
    recommendation: Optional[str] = None
    answers: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


# ====== HTTP request/response bodies ======

EventKind = Literal["select", "toggle", "clear", "advance", "back", "skip", "reset"]


class StartRequest(BaseModel):
    """Open a new wizard session for one flow."""
    flow_id: str = Field(..., min_length=1, examples=["mood_tracker"])


class SessionRequest(BaseModel):
    """Request that only needs a session id (e.g., to cancel a wizard)."""
    session_id: str = Field(..., min_length=1, examples=["a1b2c3d4"])


class EventRequest(SessionRequest):
    """One user action against an open wizard."""
    kind: EventKind
    field: Optional[str] = Field(default=None, examples=["primary_mood"])
    value: Any = Field(default=None, examples=["anxious"])


class WizardResponse(BaseModel):
    """Outcome of the last event, the current view, and the result once completed."""
    outcome: Optional[str] = None
    view: WizardView
    result: Optional[WizardResult] = None


class FlowSummary(BaseModel):
    flow_id: str
    title: str
    description: str = ""
    steps: List[str]
