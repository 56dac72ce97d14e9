# wellguide/flows/base.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from ..errors import ConfigurationError
from ..graph.steps import StepGraph
from ..tools.recommend import RuleTable, relevant_fields


class WizardFlow(BaseModel):
    """One wizard's configuration: its steps and its recommendation table."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    flow_id: str
    title: str
    description: str = ""
    steps: StepGraph
    rules: RuleTable

    def model_post_init(self, __context: Any) -> None:
        unknown = relevant_fields(self.rules) - self.steps.all_fields()
        if unknown:
            raise ConfigurationError(
                f"flow {self.flow_id!r}: rule tiers read fields no step collects: {sorted(unknown)}"
            )

    def describe(self) -> Dict[str, Any]:
        return {
            "flow_id": self.flow_id,
            "title": self.title,
            "description": self.description,
            "steps": [step.id for step in self.steps],
        }


__all__ = ["WizardFlow"]
