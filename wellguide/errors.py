# wellguide/errors.py
"""
Error kinds for the wizard engine.

Advance attempts blocked by validation and navigation in the wrong state are
NOT exceptions: the controller reports them as outcomes ("blocked",
"rejected"). Only configuration defects and submission failures raise.
"""

from __future__ import annotations


class WizardError(Exception):
    """Base class for all wizard engine errors."""


class ConfigurationError(WizardError):
    """A flow, step graph or rule table is malformed."""


class UnresolvedRecommendation(ConfigurationError):
    """A rule table has no generic fallback text."""


class InvalidTransition(WizardError):
    """An event arrived in a state that does not accept it."""


class SubmissionFailure(WizardError):
    """Packaging a finished session failed or timed out."""


__all__ = [
    "WizardError",
    "ConfigurationError",
    "UnresolvedRecommendation",
    "InvalidTransition",
    "SubmissionFailure",
]
