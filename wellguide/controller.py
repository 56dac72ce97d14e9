# wellguide/controller.py
"""
WizardController: one open wizard.

Owns a single session and runs each user action through the flow's compiled
event graph. Navigation and answer events are synchronous. Advancing (or
skipping) past the final step moves the session to "submitting" and schedules
the adapter's packaging on the running event loop:

    active --advance on final step--> submitting --ok--> completed
    submitting --failure/timeout--> active
    active | submitting --cancel--> cancelled

While submitting, every other event is rejected. After cancel/close the
controller is no longer live: a late packaging result is dropped and no
caller callback fires.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Optional

from .errors import InvalidTransition, SubmissionFailure
from .flows.base import WizardFlow
from .graph.build import graph_for
from .graph.gate import can_advance, missing_fields
from .graph.state import (
    ACTIVE,
    CANCELLED,
    COMPLETED,
    SUBMITTING,
    TERMINAL_STATUSES,
    WizardState,
    new_session,
    plain_answers,
    snapshot,
)
from .graph.steps import render_options, render_prompt
from .schemas import WizardResult, WizardView
from .settings import settings
from .submission import DelayedPackager, SubmissionAdapter

logger = logging.getLogger("wellguide")

ResultHandler = Callable[[WizardResult], None]
FailureHandler = Callable[[SubmissionFailure], None]
CancelHandler = Callable[[], None]


class WizardController:
    def __init__(
        self,
        flow: WizardFlow,
        on_complete: Optional[ResultHandler] = None,
        *,
        on_failure: Optional[FailureHandler] = None,
        on_cancel: Optional[CancelHandler] = None,
        adapter: Optional[SubmissionAdapter] = None,
        timeout: Optional[float] = None,
        session_id: Optional[str] = None,
    ):
        self.flow = flow
        self._graph = graph_for(flow)
        self._on_complete = on_complete
        self._on_failure = on_failure
        self._on_cancel = on_cancel
        self._adapter = adapter if adapter is not None else DelayedPackager(settings.submit_delay_sec)
        self._timeout = settings.submit_timeout_sec if timeout is None else timeout
        self._state: WizardState = new_session(
            session_id or str(uuid.uuid4())[:8], flow.flow_id, flow.steps.first
        )
        self._pending: Optional[asyncio.Task] = None
        self._live = True
        self._emitted = False
        self.result: Optional[WizardResult] = None
        self.last_rejection: Optional[InvalidTransition] = None

    # ---- Read-only state ----------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._state["session_id"]

    @property
    def status(self) -> str:
        return self._state["status"]

    @property
    def current_step(self) -> Optional[str]:
        return self._state.get("current_step")

    @property
    def history(self) -> tuple:
        return tuple(self._state.get("history") or ())

    @property
    def recommendation(self) -> Optional[str]:
        return self._state.get("recommendation")

    @property
    def pending(self) -> Optional[asyncio.Task]:
        """The in-flight submission task, if any."""
        return self._pending

    @property
    def is_live(self) -> bool:
        return self._live

    def answers(self):
        """Immutable snapshot of the current answers."""
        return snapshot(self._state.get("answers") or {})

    def can_advance(self) -> bool:
        if self.status != ACTIVE or self.current_step is None:
            return False
        return can_advance(self.flow.steps.get(self.current_step), self._state.get("answers") or {})

    def view(self) -> WizardView:
        st = self._state
        answers = self.answers()
        step = self.flow.steps.get(st["current_step"]) if st.get("current_step") else None
        if step is None:
            return WizardView(
                session_id=st["session_id"],
                flow_id=st["flow_id"],
                status=st["status"],
                recommendation=st.get("recommendation"),
                error=st.get("error"),
            )
        return WizardView(
            session_id=st["session_id"],
            flow_id=st["flow_id"],
            status=st["status"],
            step_id=step.id,
            title=step.title,
            prompt=render_prompt(step, answers),
            options=render_options(step, answers),
            can_advance=self.can_advance(),
            missing_fields=missing_fields(step, answers),
            skippable=step.skippable and st["status"] == ACTIVE,
            can_go_back=len(st.get("history") or []) > 1 and st["status"] == ACTIVE,
            is_final_step=self.flow.steps.is_final(step, answers),
            recommendation=st.get("recommendation"),
            answers=plain_answers(st.get("answers") or {}),
            error=st.get("error"),
        )

    # ---- Events -------------------------------------------------------------

    def select_scalar(self, field: str, value: Any) -> str:
        return self._dispatch({"kind": "select", "field": field, "value": value})

    def toggle_set_member(self, field: str, value: Any) -> str:
        return self._dispatch({"kind": "toggle", "field": field, "value": value})

    def clear_field(self, field: str) -> str:
        return self._dispatch({"kind": "clear", "field": field})

    def advance(self) -> str:
        outcome = self._dispatch({"kind": "advance"})
        if outcome == "submitting":
            self._begin_submission()
        return outcome

    def back(self) -> str:
        return self._dispatch({"kind": "back"})

    def skip(self) -> str:
        outcome = self._dispatch({"kind": "skip"})
        if outcome == "submitting":
            self._begin_submission()
        return outcome

    def reset(self) -> str:
        return self._dispatch({"kind": "reset"})

    def cancel(self) -> str:
        """Close/dismiss. Drops the session and any in-flight submission."""
        outcome = self._dispatch({"kind": "cancel"})
        if outcome != "cancelled":
            return outcome
        self._live = False
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        if self._on_cancel is not None:
            self._on_cancel()
        return outcome

    def close(self) -> None:
        """Teardown of the owning component; counts as cancellation."""
        if self.status not in TERMINAL_STATUSES:
            self.cancel()
        self._live = False

    def dispatch(self, kind: str, field: Optional[str] = None, value: Any = None) -> str:
        """Route a named event (as received from the HTTP layer)."""
        handlers = {
            "select": lambda: self.select_scalar(field, value),
            "toggle": lambda: self.toggle_set_member(field, value),
            "clear": lambda: self.clear_field(field),
            "advance": self.advance,
            "back": self.back,
            "skip": self.skip,
            "reset": self.reset,
            "cancel": self.cancel,
        }
        handler = handlers.get(kind)
        if handler is None:
            return self._reject(f"unknown event {kind!r}")
        return handler()

    # ---- Internals ----------------------------------------------------------

    def _reject(self, reason: str) -> str:
        self.last_rejection = InvalidTransition(reason)
        logger.info("wizard %s: %s", self.session_id, reason)
        return "rejected"

    def _dispatch(self, event: dict) -> str:
        if not self._live:
            return self._reject(f"{event.get('kind')!r} after the wizard was closed")
        state = dict(self._state)
        state["event"] = event
        self._state = self._graph.invoke(state)
        outcome = self._state.get("outcome") or "rejected"
        if outcome == "rejected":
            self.last_rejection = InvalidTransition(
                f"{event.get('kind')!r} not accepted while {self.status} on step {self.current_step!r}"
            )
        return outcome

    def _begin_submission(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to run packaging on: undo the transition instead of hanging
            self._dispatch({"kind": "submit_failed", "error": "no running event loop"})
            raise
        answers = plain_answers(self._state.get("answers") or {})
        self._pending = loop.create_task(
            self._run_submission(
                answers,
                self._state["captured_at"],
                self._state.get("recommendation"),
            )
        )

    async def _run_submission(self, answers, captured_at, recommendation) -> Optional[WizardResult]:
        error: Optional[SubmissionFailure] = None
        result: Optional[WizardResult] = None
        try:
            result = await asyncio.wait_for(
                self._adapter.package(
                    self.session_id, self.flow.flow_id, answers, captured_at, recommendation
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error = SubmissionFailure(f"packaging timed out after {self._timeout}s")
        except SubmissionFailure as exc:
            error = exc
        except Exception as exc:
            logger.exception("wizard %s: packaging raised", self.session_id)
            error = SubmissionFailure(f"packaging failed: {exc}")

        # Cancelled or torn down while packaging: drop everything
        if not self._live or self.status != SUBMITTING:
            logger.info("wizard %s: discarding submission outcome after cancel", self.session_id)
            return None

        if error is not None:
            self._dispatch({"kind": "submit_failed", "error": str(error)})
            if self._on_failure is not None:
                self._on_failure(error)
            return None

        self._dispatch({"kind": "submit_ok"})
        self.result = result
        self._live = False
        self._emit(result)
        return result

    def _emit(self, result: WizardResult) -> None:
        if self._emitted:
            return
        self._emitted = True
        logger.info("wizard %s: %s completed", self.session_id, self.flow.flow_id)
        if self._on_complete is not None:
            self._on_complete(result)


__all__ = ["WizardController", "ACTIVE", "SUBMITTING", "COMPLETED", "CANCELLED"]
