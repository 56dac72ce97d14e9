# wellguide/main.py
from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .controller import WizardController
from .errors import ConfigurationError
from .flows.registry import get_flow, list_flows
from .schemas import (
    EventRequest,
    FlowSummary,
    SessionRequest,
    StartRequest,
    WizardResponse,
    WizardResult,
)
from .graph.state import TERMINAL_STATUSES
from .settings import settings
from . import memory

logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title="WellGuide",
    version="1.0.0",
    description="Guided wellness wizards: step machine plus rule-based recommendations.",
)

# Open CORS for local testing (tighten in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _controller_or_404(session_id: str) -> WizardController:
    controller = memory.get_controller(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Unknown wizard session: {session_id}")
    return controller


def _respond(controller: WizardController, outcome: str | None) -> WizardResponse:
    response = WizardResponse(outcome=outcome, view=controller.view(), result=controller.result)
    # Completed or cancelled sessions are spent; results wait in the outbox
    if controller.status in TERMINAL_STATUSES:
        memory.drop_controller(controller.session_id)
    return response


@app.get("/health")
def health():
    return {"ok": True, "service": "wellguide"}


@app.get("/flows", response_model=list[FlowSummary])
def flows():
    return [flow.describe() for flow in list_flows()]


@app.post("/wizards/start", response_model=WizardResponse)
def start_wizard(req: StartRequest):
    """
    Open a fresh session for the requested flow.
    """
    try:
        flow = get_flow(req.flow_id)
    except ConfigurationError:
        raise HTTPException(status_code=404, detail=f"Unknown flow: {req.flow_id}")

    controller = WizardController(flow, on_complete=memory.save_result)
    memory.set_controller(controller)
    return WizardResponse(outcome=None, view=controller.view())


@app.post("/wizards/event", response_model=WizardResponse)
async def wizard_event(req: EventRequest):
    """
    Apply one user action. When the action submits the wizard, wait for the
    packaging to finish (or fail) before answering.
    """
    controller = _controller_or_404(req.session_id)
    outcome = controller.dispatch(req.kind, req.field, req.value)

    pending = controller.pending
    if outcome == "submitting" and pending is not None and not pending.done():
        await asyncio.wait({pending})

    return _respond(controller, outcome)


@app.post("/wizards/cancel", response_model=WizardResponse)
def cancel_wizard(req: SessionRequest):
    controller = _controller_or_404(req.session_id)
    outcome = controller.cancel()
    return _respond(controller, outcome)


@app.get("/wizards/{session_id}", response_model=WizardResponse)
def wizard_view(session_id: str):
    controller = _controller_or_404(session_id)
    return WizardResponse(outcome=None, view=controller.view(), result=controller.result)


@app.get("/results/{session_id}", response_model=WizardResult)
def wizard_result(session_id: str):
    """
    Collect a finished result. Results stay available for the configured TTL.
    """
    result = memory.get_result(session_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No result for session: {session_id}")
    return result
