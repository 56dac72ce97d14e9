# wellguide/graph/steps.py
"""
Step definitions and the step graph.

A Step is static configuration: which answers it needs before the user may
move on, whether it can be skipped, and where it leads. Linear steps name a
fixed `next_step`; branch steps carry a `branch(answers) -> step_id` function
plus the full list of ids it may return, so the graph can be checked up front.

`TERMINAL` marks the end of a flow. A step whose next id resolves to TERMINAL
is the final step: advancing from it submits the session.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from ..errors import ConfigurationError

TERMINAL = "__terminal__"

Answers = Mapping[str, Any]
Branch = Callable[[Answers], str]
PromptFn = Callable[[Answers], str]


class Step(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    title: str = ""
    prompt: Union[str, PromptFn] = ""
    required_fields: FrozenSet[str] = frozenset()
    optional_fields: FrozenSet[str] = frozenset()
    skippable: bool = False

    # Upstream answers this step's choices derive from; changing one clears
    # this step's answers
    depends_on: FrozenSet[str] = frozenset()

    # Transition: exactly one of next_step / branch
    next_step: Optional[str] = None
    branch: Optional[Branch] = None
    branch_targets: Tuple[str, ...] = ()
    skip_to: Optional[str] = None

    # Display-only choices per field: a tuple, or a function of the answers
    options: Dict[str, Any] = {}

    @property
    def answer_fields(self) -> FrozenSet[str]:
        return self.required_fields | self.optional_fields

    @property
    def is_branch(self) -> bool:
        return self.branch is not None

    def targets(self) -> Tuple[str, ...]:
        """Every id this step can lead to (next, branch targets, skip target)."""
        out: List[str] = []
        if self.next_step is not None:
            out.append(self.next_step)
        out.extend(self.branch_targets)
        if self.skip_to is not None:
            out.append(self.skip_to)
        return tuple(out)


def render_prompt(step: Step, answers: Answers) -> str:
    """Prompt text for a step; callable prompts see the current answers."""
    if callable(step.prompt):
        return step.prompt(answers)
    return step.prompt


def render_options(step: Step, answers: Answers) -> Dict[str, List[Any]]:
    out: Dict[str, List[Any]] = {}
    for name, choices in step.options.items():
        resolved = choices(answers) if callable(choices) else choices
        out[name] = list(resolved or ())
    return out


class StepGraph:
    """
    Ordered, possibly branching set of steps for one flow.

    Checked on construction:
    - step ids are unique and the first step exists
    - every step has exactly one of `next_step` / `branch`
    - every next/branch/skip target is a known step or TERMINAL
    - no step points at itself
    - `depends_on` names fields that other steps collect
    """

    def __init__(self, steps: Sequence[Step], first: Optional[str] = None):
        if not steps:
            raise ConfigurationError("a step graph needs at least one step")
        self._steps: Dict[str, Step] = {}
        for step in steps:
            if step.id in self._steps:
                raise ConfigurationError(f"duplicate step id: {step.id!r}")
            if step.id == TERMINAL:
                raise ConfigurationError(f"{TERMINAL!r} is reserved")
            self._steps[step.id] = step
        self.first = first or steps[0].id
        if self.first not in self._steps:
            raise ConfigurationError(f"unknown first step: {self.first!r}")
        self._check()

    def _check(self) -> None:
        collected = self.all_fields()
        for step in self._steps.values():
            stray = step.depends_on - collected
            if stray:
                raise ConfigurationError(
                    f"step {step.id!r} depends on fields no step collects: {sorted(stray)}"
                )
            if step.depends_on & step.answer_fields:
                raise ConfigurationError(f"step {step.id!r} depends on its own fields")
            if (step.next_step is None) == (step.branch is None):
                raise ConfigurationError(
                    f"step {step.id!r} needs exactly one of next_step or branch"
                )
            if step.branch is not None and not step.branch_targets:
                raise ConfigurationError(f"branch step {step.id!r} declares no targets")
            for target in step.targets():
                if target == step.id:
                    raise ConfigurationError(f"step {step.id!r} points at itself")
                if target != TERMINAL and target not in self._steps:
                    raise ConfigurationError(
                        f"step {step.id!r} points at unknown step {target!r}"
                    )

    # ---- Lookup -------------------------------------------------------------

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __iter__(self):
        return iter(self._steps.values())

    def __len__(self) -> int:
        return len(self._steps)

    def get(self, step_id: str) -> Step:
        try:
            return self._steps[step_id]
        except KeyError:
            raise ConfigurationError(f"unknown step: {step_id!r}") from None

    def all_fields(self) -> FrozenSet[str]:
        out: FrozenSet[str] = frozenset()
        for step in self._steps.values():
            out = out | step.answer_fields
        return out

    def dependents_of(self, field: str) -> List[Step]:
        """Steps whose answers are derived from `field`."""
        return [step for step in self._steps.values() if field in step.depends_on]

    # ---- Transitions --------------------------------------------------------

    def next_step(self, step: Step, answers: Answers) -> str:
        """Next step id, or TERMINAL."""
        if step.branch is None:
            return step.next_step  # type: ignore[return-value]
        target = step.branch(answers)
        if target not in step.branch_targets:
            raise ConfigurationError(
                f"branch of step {step.id!r} returned undeclared target {target!r}"
            )
        return target

    def skip_target(self, step: Step, answers: Answers) -> str:
        if step.skip_to is not None:
            return step.skip_to
        return self.next_step(step, answers)

    def is_final(self, step: Step, answers: Answers) -> bool:
        return self.next_step(step, answers) == TERMINAL

    @staticmethod
    def previous_step(history: Sequence[str]) -> Optional[str]:
        """Penultimate visited step, or None when Back has nowhere to go."""
        if len(history) < 2:
            return None
        return history[-2]


__all__ = [
    "TERMINAL",
    "Step",
    "StepGraph",
    "render_prompt",
    "render_options",
]
