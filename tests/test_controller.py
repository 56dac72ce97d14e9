"""
WizardController behaviour: navigation, gating, skip/reset, and the
asynchronous submission lifecycle (success, failure, timeout, cancel).
"""

import asyncio

import pytest

from wellguide.controller import WizardController
from wellguide.errors import InvalidTransition, SubmissionFailure
from wellguide.flows import mood_tracker
from wellguide.flows.registry import get_flow
from wellguide.graph.state import ACTIVE, CANCELLED, COMPLETED, SUBMITTING
from wellguide.schemas import WizardResult
from wellguide.submission import DelayedPackager


class FailingPackager:
    def __init__(self):
        self.calls = 0

    async def package(self, session_id, flow_id, answers, captured_at, recommendation):
        self.calls += 1
        raise SubmissionFailure("storage offline")


class BrokenPackager:
    async def package(self, session_id, flow_id, answers, captured_at, recommendation):
        raise OSError("disk gone")


class SlowPackager:
    async def package(self, session_id, flow_id, answers, captured_at, recommendation):
        await asyncio.sleep(5)
        raise AssertionError("should have timed out")


def _mood(**kwargs):
    kwargs.setdefault("adapter", DelayedPackager(0))
    return WizardController(mood_tracker.FLOW, **kwargs)


# ---- Navigation and gating ---------------------------------------------------

def test_new_session_shape():
    wiz = _mood(session_id="s1")
    assert wiz.session_id == "s1"
    assert wiz.status == ACTIVE
    assert wiz.current_step == "primary_mood"
    assert wiz.history == ("primary_mood",)
    assert dict(wiz.answers()) == {}
    assert wiz.recommendation is None


def test_advance_is_blocked_until_required_fields_are_set():
    wiz = _mood()
    assert not wiz.can_advance()
    assert wiz.advance() == "blocked"
    assert wiz.current_step == "primary_mood"

    assert wiz.select_scalar("primary_mood", "calm") == "applied"
    assert wiz.can_advance()
    assert wiz.advance() == "applied"
    assert wiz.current_step == "secondary_mood"
    assert wiz.history == ("primary_mood", "secondary_mood")


def test_back_on_first_step_is_a_noop():
    wiz = _mood()
    assert wiz.back() == "noop"
    assert wiz.current_step == "primary_mood"
    assert wiz.history == ("primary_mood",)


def test_back_keeps_answers():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "stressed")
    wiz.advance()
    wiz.select_scalar("secondary_mood", "tense")
    assert wiz.back() == "applied"
    assert wiz.current_step == "primary_mood"
    assert wiz.answers()["secondary_mood"] == "tense"


def test_non_skippable_step_rejects_skip():
    wiz = _mood()
    assert wiz.skip() == "rejected"
    assert isinstance(wiz.last_rejection, InvalidTransition)
    assert wiz.current_step == "primary_mood"


def test_field_events_need_a_field():
    wiz = _mood()
    assert wiz.dispatch("select", None, "calm") == "rejected"
    assert wiz.dispatch("bogus") == "rejected"
    assert dict(wiz.answers()) == {}


def test_recommendation_tracks_answers():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "anxious")
    assert wiz.recommendation == mood_tracker.PRIMARY_TEXT[("anxious",)]
    wiz.advance()
    wiz.select_scalar("secondary_mood", "worried")
    assert wiz.recommendation == mood_tracker.COMBINED_TEXT[("anxious", "worried")]
    wiz.clear_field("secondary_mood")
    assert wiz.recommendation == mood_tracker.PRIMARY_TEXT[("anxious",)]


def test_view_renders_dynamic_prompt_and_options():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "anxious")
    wiz.advance()
    view = wiz.view()
    assert view.step_id == "secondary_mood"
    assert "anxious" in view.prompt
    assert view.options["secondary_mood"] == list(mood_tracker.SECONDARY_MOODS["anxious"])
    assert view.skippable
    assert view.can_go_back
    assert not view.can_advance
    assert view.missing_fields == ["secondary_mood"]
    assert not view.is_final_step


def test_high_intensity_detours_through_support_offer():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "stressed")
    wiz.advance()
    wiz.skip()
    wiz.select_scalar("intensity", 5)
    wiz.advance()
    assert wiz.current_step == "support_offer"

    wiz.back()
    wiz.select_scalar("intensity", 2)
    wiz.advance()
    assert wiz.current_step == "note"


def test_skip_leaves_fields_absent_and_reduces_the_key():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "anxious")
    wiz.advance()
    wiz.select_scalar("secondary_mood", "worried")
    assert wiz.skip() == "applied"
    assert wiz.current_step == "intensity"
    assert "secondary_mood" not in wiz.answers()
    assert wiz.recommendation == mood_tracker.PRIMARY_TEXT[("anxious",)]


def test_reset_matches_a_fresh_session():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "joy")
    wiz.advance()
    wiz.select_scalar("secondary_mood", "grateful")
    assert wiz.reset() == "reset"

    fresh = _mood()
    assert wiz.status == fresh.status
    assert wiz.current_step == fresh.current_step == mood_tracker.FLOW.steps.first
    assert wiz.history == fresh.history
    assert len(wiz.history) == 1
    assert dict(wiz.answers()) == dict(fresh.answers()) == {}
    assert wiz.recommendation is fresh.recommendation is None


def test_cancel_while_active_discards_session():
    cancelled = []
    wiz = _mood(on_cancel=lambda: cancelled.append(True))
    wiz.select_scalar("primary_mood", "calm")
    assert wiz.cancel() == "cancelled"
    assert wiz.status == CANCELLED
    assert dict(wiz.answers()) == {}
    assert cancelled == [True]

    assert wiz.select_scalar("primary_mood", "joy") == "rejected"
    assert wiz.cancel() == "rejected"
    assert cancelled == [True]


def test_advance_without_event_loop_rolls_back():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "calm")
    wiz.advance()
    wiz.skip()
    wiz.select_scalar("intensity", 1)
    wiz.advance()
    assert wiz.current_step == "note"

    with pytest.raises(RuntimeError):
        wiz.advance()
    assert wiz.status == ACTIVE
    assert wiz.current_step == "note"
    assert wiz.view().error


def test_changing_primary_mood_drops_the_stale_secondary():
    wiz = _mood()
    wiz.select_scalar("primary_mood", "anxious")
    wiz.advance()
    wiz.select_scalar("secondary_mood", "worried")
    wiz.back()

    # same value again keeps the dependent answer
    wiz.select_scalar("primary_mood", "anxious")
    assert wiz.answers()["secondary_mood"] == "worried"

    wiz.select_scalar("primary_mood", "joy")
    assert "secondary_mood" not in wiz.answers()
    assert wiz.recommendation == mood_tracker.PRIMARY_TEXT[("joy",)]

    wiz.advance()
    view = wiz.view()
    assert view.options["secondary_mood"] == list(mood_tracker.SECONDARY_MOODS["joy"])
    assert view.answers == {"primary_mood": "joy"}
    assert not view.can_advance


def test_changing_self_care_mood_drops_activities():
    wiz = WizardController(get_flow("self_care"), adapter=DelayedPackager(0))
    wiz.select_scalar("current_mood", "stressed")
    wiz.advance()
    wiz.toggle_set_member("activities", "Write in a journal")
    wiz.back()
    wiz.select_scalar("current_mood", "tired")
    assert "activities" not in wiz.answers()

    wiz.clear_field("current_mood")
    wiz.select_scalar("current_mood", "tired")
    wiz.advance()
    assert wiz.advance() == "blocked"


# ---- Retroactive clearing ----------------------------------------------------

def test_clearing_an_earlier_field_does_not_block_a_later_step(four_step_flow):
    wiz = WizardController(four_step_flow, adapter=DelayedPackager(0))
    for field, value in (("fa", "x"), ("fb", "y"), ("fc", "z")):
        wiz.select_scalar(field, value)
        assert wiz.advance() == "applied"
    assert wiz.current_step == "d"

    wiz.clear_field("fb")
    wiz.select_scalar("fd", "w")
    assert wiz.can_advance()

    wiz.back()
    wiz.back()
    assert wiz.current_step == "b"
    assert not wiz.can_advance()
    assert wiz.view().missing_fields == ["fb"]
    assert wiz.advance() == "blocked"


# ---- Submission --------------------------------------------------------------

async def _walk_mood(wiz, primary, secondary, intensity):
    wiz.select_scalar("primary_mood", primary)
    wiz.advance()
    if secondary is None:
        wiz.skip()
    else:
        wiz.select_scalar("secondary_mood", secondary)
        wiz.advance()
    wiz.select_scalar("intensity", intensity)
    wiz.advance()
    assert wiz.current_step == "note"
    return wiz.advance()


@pytest.mark.asyncio
async def test_anxious_and_worried_gets_the_combined_entry():
    results = []
    wiz = _mood(on_complete=results.append)

    assert await _walk_mood(wiz, "anxious", "worried", 3) == "submitting"
    assert wiz.status == SUBMITTING
    await wiz.pending

    assert wiz.status == COMPLETED
    assert len(results) == 1
    result = results[0]
    assert isinstance(result, WizardResult)
    assert result.recommendation == mood_tracker.COMBINED_TEXT[("anxious", "worried")]
    assert result.answers == {"primary_mood": "anxious", "secondary_mood": "worried", "intensity": 3}
    assert result.flow_id == "mood_tracker"
    assert result.captured_at.tzinfo is not None


@pytest.mark.asyncio
async def test_skipped_secondary_gets_the_primary_only_entry():
    results = []
    wiz = _mood(on_complete=results.append)

    await _walk_mood(wiz, "anxious", None, 2)
    await wiz.pending

    result = results[0]
    assert "secondary_mood" not in result.answers
    assert result.recommendation == mood_tracker.PRIMARY_TEXT[("anxious",)]
    assert result.recommendation != mood_tracker.FALLBACK_TEXT


@pytest.mark.asyncio
async def test_submitting_from_last_step_ignores_earlier_cleared_field(four_step_flow):
    results = []
    wiz = WizardController(four_step_flow, results.append, adapter=DelayedPackager(0))
    for field, value in (("fa", "x"), ("fb", "y"), ("fc", "z")):
        wiz.select_scalar(field, value)
        wiz.advance()
    wiz.clear_field("fb")
    wiz.select_scalar("fd", "w")

    assert wiz.advance() == "submitting"
    await wiz.pending
    assert results[0].answers == {"fa": "x", "fc": "z", "fd": "w"}
    assert results[0].recommendation == "x and z"


@pytest.mark.asyncio
async def test_skipping_the_final_step_submits():
    results = []
    wiz = _mood(on_complete=results.append)
    wiz.select_scalar("primary_mood", "joy")
    wiz.advance()
    wiz.skip()
    wiz.select_scalar("intensity", 4)
    wiz.advance()
    assert wiz.current_step == "support_offer"
    wiz.skip()
    assert wiz.current_step == "note"
    wiz.select_scalar("note", "ignored")

    assert wiz.skip() == "submitting"
    await wiz.pending
    assert "note" not in results[0].answers
    assert "support_choice" not in results[0].answers


@pytest.mark.asyncio
async def test_events_are_rejected_while_submitting():
    wiz = _mood(adapter=DelayedPackager(0.05))
    await _walk_mood(wiz, "calm", "peaceful", 1)
    before = dict(wiz.answers())

    for outcome in (
        wiz.select_scalar("primary_mood", "joy"),
        wiz.toggle_set_member("extra", "x"),
        wiz.clear_field("primary_mood"),
        wiz.advance(),
        wiz.back(),
        wiz.skip(),
        wiz.reset(),
    ):
        assert outcome == "rejected"
    assert isinstance(wiz.last_rejection, InvalidTransition)
    assert dict(wiz.answers()) == before
    assert wiz.current_step == "note"

    await wiz.pending
    assert wiz.status == COMPLETED


@pytest.mark.asyncio
async def test_result_is_emitted_exactly_once():
    results = []
    wiz = _mood(on_complete=results.append)
    await _walk_mood(wiz, "neutral", "tired", 2)
    await wiz.pending

    assert wiz.advance() == "rejected"
    assert wiz.cancel() == "rejected"
    wiz.close()
    await asyncio.sleep(0)
    assert len(results) == 1
    assert wiz.result == results[0]


@pytest.mark.asyncio
async def test_cancel_during_submission_drops_the_result():
    results, cancelled = [], []
    wiz = _mood(
        on_complete=results.append,
        on_cancel=lambda: cancelled.append(True),
        adapter=DelayedPackager(0.05),
    )
    await _walk_mood(wiz, "anxious", "worried", 3)
    task = wiz.pending

    assert wiz.cancel() == "cancelled"
    await asyncio.sleep(0.1)

    assert task.cancelled()
    assert results == []
    assert cancelled == [True]
    assert wiz.status == CANCELLED
    assert wiz.result is None
    assert dict(wiz.answers()) == {}
    assert not wiz.is_live


@pytest.mark.asyncio
async def test_close_during_submission_counts_as_cancel():
    results = []
    wiz = _mood(on_complete=results.append, adapter=DelayedPackager(0.05))
    await _walk_mood(wiz, "calm", None, 1)
    wiz.close()
    await asyncio.sleep(0.1)
    assert results == []
    assert wiz.status == CANCELLED


@pytest.mark.asyncio
async def test_submission_failure_returns_to_active():
    results, failures = [], []
    adapter = FailingPackager()
    wiz = _mood(on_complete=results.append, on_failure=failures.append, adapter=adapter)
    await _walk_mood(wiz, "stressed", "tense", 2)
    await wiz.pending

    assert wiz.status == ACTIVE
    assert wiz.current_step == "note"
    assert wiz.answers()["secondary_mood"] == "tense"
    assert results == []
    assert len(failures) == 1 and isinstance(failures[0], SubmissionFailure)
    assert "storage offline" in wiz.view().error

    # user may retry from the final step
    assert wiz.advance() == "submitting"
    await wiz.pending
    assert adapter.calls == 2


@pytest.mark.asyncio
async def test_submission_timeout_is_a_failure():
    failures = []
    wiz = _mood(on_failure=failures.append, adapter=SlowPackager(), timeout=0.05)
    await _walk_mood(wiz, "joy", "hopeful", 2)
    await wiz.pending

    assert wiz.status == ACTIVE
    assert len(failures) == 1
    assert "timed out" in str(failures[0])


@pytest.mark.asyncio
async def test_unexpected_adapter_error_is_a_failure():
    results, failures = [], []
    wiz = _mood(on_complete=results.append, on_failure=failures.append, adapter=BrokenPackager())
    await _walk_mood(wiz, "calm", "content", 2)
    await wiz.pending

    assert wiz.status == ACTIVE
    assert results == []
    assert len(failures) == 1 and isinstance(failures[0], SubmissionFailure)
    assert "disk gone" in str(failures[0])
    assert wiz.back() == "applied"
