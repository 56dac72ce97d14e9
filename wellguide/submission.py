# wellguide/submission.py
"""
Packaging of finished wizard sessions.

A SubmissionAdapter turns the final answers into a WizardResult. It is the
only asynchronous step in a wizard's life; the controller wraps it in a
timeout and treats any SubmissionFailure as "go back to the final step".
Storing or sending the result is NOT the adapter's job: the result goes to
the caller's completion handler, and the caller persists it.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Protocol

from .errors import SubmissionFailure
from .schemas import WizardResult


class SubmissionAdapter(Protocol):
    async def package(
        self,
        session_id: str,
        flow_id: str,
        answers: Mapping[str, Any],
        captured_at: datetime,
        recommendation: Optional[str],
    ) -> WizardResult:
        ...


def _normalize_answers(answers: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Trim free-text answers and drop the ones left blank; multi-select values
    become plain lists.
    """
    out: Dict[str, Any] = {}
    for key, value in answers.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        elif isinstance(value, (list, tuple, set, frozenset)):
            value = list(value)
        out[key] = value
    return out


class DelayedPackager:
    """
    Default adapter: normalizes the answers and builds the result after a
    short delay (the packaging latency the wizards have always shown).
    """

    def __init__(self, delay: float = 1.0):
        self.delay = max(0.0, float(delay))

    async def package(
        self,
        session_id: str,
        flow_id: str,
        answers: Mapping[str, Any],
        captured_at: datetime,
        recommendation: Optional[str],
    ) -> WizardResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        try:
            return WizardResult(
                session_id=session_id,
                flow_id=flow_id,
                answers=_normalize_answers(answers),
                recommendation=recommendation,
                captured_at=captured_at,
            )
        except ValueError as exc:  # pydantic.ValidationError
            raise SubmissionFailure(f"could not package {flow_id} answers: {exc}") from exc


__all__ = ["SubmissionAdapter", "DelayedPackager"]
