"""Selection store helpers and the validation gate."""

import pytest

from wellguide.graph.gate import can_advance, is_filled, missing_fields
from wellguide.graph.state import (
    clear_field,
    new_session,
    plain_answers,
    set_scalar,
    snapshot,
    toggle_in_set,
)
from wellguide.graph.steps import TERMINAL, Step


@pytest.fixture
def state():
    return new_session("s1", "demo", "first")


def test_set_scalar_overwrites(state):
    set_scalar(state, "mood", "calm")
    set_scalar(state, "mood", "anxious")
    assert state["answers"] == {"mood": "anxious"}


def test_toggle_twice_restores_original(state):
    toggle_in_set(state, "topics", "grief")
    before = list(state["answers"]["topics"])

    toggle_in_set(state, "topics", "anxiety")
    toggle_in_set(state, "topics", "anxiety")

    assert state["answers"]["topics"] == before


def test_toggle_membership_is_order_independent():
    a = new_session("a", "demo", "first")
    b = new_session("b", "demo", "first")
    for value in ("x", "y", "z"):
        toggle_in_set(a, "picks", value)
    for value in ("z", "x", "y"):
        toggle_in_set(b, "picks", value)
    assert set(a["answers"]["picks"]) == set(b["answers"]["picks"]) == {"x", "y", "z"}


def test_toggle_off_last_member_leaves_empty_not_absent(state):
    toggle_in_set(state, "topics", "grief")
    toggle_in_set(state, "topics", "grief")
    assert state["answers"]["topics"] == []


def test_clear_field_removes_key(state):
    set_scalar(state, "note", "")
    clear_field(state, "note")
    clear_field(state, "never-set")
    assert "note" not in state["answers"]


def test_snapshot_is_read_only_and_detached(state):
    toggle_in_set(state, "topics", "grief")
    snap = snapshot(state["answers"])

    with pytest.raises(TypeError):
        snap["topics"] = ("other",)  # type: ignore[index]
    assert snap["topics"] == ("grief",)

    toggle_in_set(state, "topics", "anxiety")
    assert snap["topics"] == ("grief",)


def test_plain_answers_converts_tuples_to_lists():
    assert plain_answers({"a": ("x",), "b": 3}) == {"a": ["x"], "b": 3}


# ---- Validation gate ---------------------------------------------------------

STEP = Step(id="s", required_fields={"mood", "activities"}, next_step=TERMINAL)


def test_is_filled_edges():
    assert is_filled(0)
    assert is_filled(False)
    assert not is_filled(None)
    assert not is_filled("   ")
    assert not is_filled([])


def test_gate_blocks_on_any_missing_field():
    assert not can_advance(STEP, {})
    assert not can_advance(STEP, {"mood": "calm"})
    assert missing_fields(STEP, {"mood": "calm"}) == ["activities"]


def test_gate_requires_non_empty_sets():
    assert not can_advance(STEP, {"mood": "calm", "activities": []})
    assert can_advance(STEP, {"mood": "calm", "activities": ["walk"]})


def test_gate_ignores_unrelated_fields():
    answers = {"mood": "calm", "activities": ["walk"], "unrelated": None, "other": 5}
    assert can_advance(STEP, answers)
    assert not can_advance(STEP, {"unrelated": "x", "activities": ["walk"]})


def test_step_without_required_fields_always_passes():
    step = Step(id="note", optional_fields={"note"}, skippable=True, next_step=TERMINAL)
    assert can_advance(step, {})
