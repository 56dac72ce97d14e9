# wellguide/graph/gate.py
from __future__ import annotations

from typing import Any, List, Mapping

from .steps import Step


def is_filled(value: Any) -> bool:
    """
    An answer counts as given unless it is None, a blank string, or an empty
    collection. Zero and False are real answers.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    return True


def missing_fields(step: Step, answers: Mapping[str, Any]) -> List[str]:
    return sorted(f for f in step.required_fields if not is_filled(answers.get(f)))


def can_advance(step: Step, answers: Mapping[str, Any]) -> bool:
    """All of the step's required fields are present and non-empty."""
    return not missing_fields(step, answers)


__all__ = ["is_filled", "missing_fields", "can_advance"]
