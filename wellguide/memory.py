# wellguide/memory.py
"""
In-memory registries for the HTTP layer.

- get_controller / set_controller / drop_controller / list_controllers:
  open wizard sessions keyed by session_id. A session untouched for
  `session_ttl_sec` is closed (counts as cancel) and forgotten.
- Result outbox (save_result / get_result / clear_result): finished
  WizardResults parked for a short TTL until the caller collects them. The
  caller is responsible for real persistence.

Note: This storage is per-process.
"""

from __future__ import annotations

from typing import Dict, Optional
import logging
import time

from .controller import WizardController
from .schemas import WizardResult
from .settings import settings

logger = logging.getLogger("wellguide")


def _now() -> float:
    return time.time()


# ---------------------------------------------------------------------------
# Open wizard sessions (idle TTL)
# ---------------------------------------------------------------------------

_CONTROLLERS: Dict[str, WizardController] = {}
_controller_expiry: Dict[str, float] = {}


def _purge_idle_controllers() -> None:
    now = _now()
    for key in [k for k, exp in _controller_expiry.items() if exp < now]:
        logger.info("wizard %s: closing idle session", key)
        drop_controller(key)


def get_controller(session_id: str) -> Optional[WizardController]:
    """Fetch the controller for a session_id (None if unknown or idle too long)."""
    _purge_idle_controllers()
    controller = _CONTROLLERS.get(session_id)
    if controller is not None:
        _controller_expiry[session_id] = _now() + settings.session_ttl_sec
    return controller


def set_controller(controller: WizardController) -> WizardController:
    _purge_idle_controllers()
    _CONTROLLERS[controller.session_id] = controller
    _controller_expiry[controller.session_id] = _now() + settings.session_ttl_sec
    return controller


def drop_controller(session_id: str) -> None:
    """Forget a session; tears it down if still open."""
    _controller_expiry.pop(session_id, None)
    controller = _CONTROLLERS.pop(session_id, None)
    if controller is not None:
        controller.close()


def list_controllers() -> Dict[str, WizardController]:
    """Return the live in-memory session map (debug only)."""
    _purge_idle_controllers()
    return _CONTROLLERS


# ---------------------------------------------------------------------------
# Result outbox (TTL)
# ---------------------------------------------------------------------------

_results: Dict[str, WizardResult] = {}
_expiry: Dict[str, float] = {}


def _purge_expired() -> None:
    now = _now()
    for key in [k for k, exp in _expiry.items() if exp < now]:
        _results.pop(key, None)
        _expiry.pop(key, None)


def save_result(result: WizardResult) -> None:
    _purge_expired()
    _results[result.session_id] = result
    _expiry[result.session_id] = _now() + settings.result_ttl_sec


def get_result(session_id: str) -> Optional[WizardResult]:
    """Read a parked result (None if unknown or expired)."""
    _purge_expired()
    return _results.get(session_id)


def clear_result(session_id: str) -> None:
    _results.pop(session_id, None)
    _expiry.pop(session_id, None)


def reset_all() -> None:
    """Tear down every session and empty the outbox (tests)."""
    for session_id in list(_CONTROLLERS):
        drop_controller(session_id)
    _controller_expiry.clear()
    _results.clear()
    _expiry.clear()
