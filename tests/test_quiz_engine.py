import pytest

from app.services import quiz_engine as engine
from app.services.attempt_ledger import AttemptOutcome
from app.services.errors import InvalidTransition
from app.services.quiz_engine import (
    LogAnswer,
    LogRestart,
    LogView,
    QuizState,
    UpsertSessionCompletion,
)


def _ticks(ctx, *seconds):
    for s in seconds:
        engine.on_position_tick(ctx, s)


def test_start_moves_to_awaiting_playback(context_factory) -> None:
    ctx = context_factory()
    transition = engine.start(ctx, 42)

    assert transition.intents == ()
    assert ctx.state is QuizState.AWAITING_PLAYBACK
    assert ctx.playing
    assert ctx.session.is_active
    assert ctx.session.session_record_id == 42


def test_start_twice_is_rejected(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    with pytest.raises(InvalidTransition):
        engine.start(ctx, 1)


def test_inputs_before_start(context_factory) -> None:
    ctx = context_factory()
    assert engine.on_position_tick(ctx, 10).intents == ()
    assert ctx.state is QuizState.NOT_STARTED
    with pytest.raises(InvalidTransition):
        engine.on_answer(ctx, "A")
    with pytest.raises(InvalidTransition):
        engine.on_playback_ended(ctx)


def test_first_play_logs_one_view_per_sub_session(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)

    first = engine.on_play(ctx)
    second = engine.on_play(ctx)

    assert [type(i) for i in first.intents] == [LogView]
    assert second.intents == ()


def test_restart_scenario_then_pass(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 7)

    _ticks(ctx, 0, 5, 10)
    assert ctx.state is QuizState.QUESTION_OPEN
    assert ctx.current_checkpoint.prompt_text == "Q1"
    assert not ctx.playing

    retry = engine.on_answer(ctx, "A")
    assert retry.outcome is AttemptOutcome.INCORRECT_RETRY
    assert ctx.state is QuizState.QUESTION_OPEN
    assert ctx.last_wrong_answer == "A"
    assert [(i.attempt_number, i.is_correct) for i in retry.intents] == [(1, False)]

    exhausted = engine.on_answer(ctx, "A")
    assert exhausted.outcome is AttemptOutcome.INCORRECT_EXHAUSTED
    assert exhausted.seek_to == 0.0
    answer_intent, restart_intent = exhausted.intents
    assert isinstance(answer_intent, LogAnswer) and answer_intent.attempt_number == 2
    assert isinstance(restart_intent, LogRestart) and restart_intent.restart_count == 1
    assert ctx.session.restart_count == 1
    assert ctx.state is QuizState.AWAITING_PLAYBACK
    assert ctx.tracker.position == 0.0
    assert ctx.current_checkpoint_id is None

    _ticks(ctx, 0.1, 5, 10)
    assert ctx.current_checkpoint.prompt_text == "Q1"
    assert engine.on_answer(ctx, "B").outcome is AttemptOutcome.CORRECT_ADVANCE
    assert ctx.playing

    _ticks(ctx, 15, 20)
    assert ctx.current_checkpoint.prompt_text == "Q2"
    assert engine.on_answer(ctx, "A").outcome is AttemptOutcome.CORRECT_ADVANCE

    done = engine.on_playback_ended(ctx)
    assert ctx.state is QuizState.FINISHED
    assert ctx.score == 1.0
    assert ctx.passed is True
    (completion,) = done.intents
    assert isinstance(completion, UpsertSessionCompletion)
    assert completion.session_record_id == 7 and completion.passed


def test_one_of_three_correct_fails(context_factory) -> None:
    rows = [
        {"id": i, "timestamp": t, "question": f"Q{i}", "options": ["A", "B"], "correct_answer": 0}
        for i, t in [(1, 10), (2, 20), (3, 30)]
    ]
    ctx = context_factory(rows)
    engine.start(ctx, 1)
    _ticks(ctx, 10)
    engine.on_answer(ctx, "A")
    # Q2 and Q3 are never reached before the player reports the end
    engine.on_playback_ended(ctx)

    assert ctx.score == pytest.approx(1 / 3)
    assert ctx.passed is False


def test_pass_threshold_is_inclusive(context_factory) -> None:
    rows = [
        {"id": i, "timestamp": 10 * i, "question": f"Q{i}", "options": ["A", "B"], "correct_answer": 0}
        for i in range(1, 6)
    ]
    ctx = context_factory(rows)
    engine.start(ctx, 1)
    for i in range(1, 4):
        _ticks(ctx, 10 * i)
        engine.on_answer(ctx, "A")

    engine.on_playback_ended(ctx)
    assert ctx.score == pytest.approx(0.6)
    assert ctx.passed is True


def test_ticks_are_ignored_while_a_question_is_open(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    _ticks(ctx, 10)
    _ticks(ctx, 25, 30)

    assert ctx.current_checkpoint_id == 1
    assert ctx.tracker.position == 10
    assert ctx.pending == []


def test_adjacent_checkpoints_open_one_at_a_time(context_factory) -> None:
    rows = [
        {"id": "early", "timestamp": 10, "question": "E", "options": ["A", "B"], "correct_answer": 0},
        {"id": "late", "timestamp": 10.3, "question": "L", "options": ["A", "B"], "correct_answer": 0},
    ]
    ctx = context_factory(rows)
    engine.start(ctx, 1)

    _ticks(ctx, 9.95, 10.35)
    assert ctx.current_checkpoint_id == "early"
    assert ctx.pending == ["late"]

    engine.on_answer(ctx, "A")
    assert ctx.state is QuizState.AWAITING_PLAYBACK

    _ticks(ctx, 10.45)
    assert ctx.current_checkpoint_id == "late"


def test_restart_clears_pending_and_previous_resolutions(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    _ticks(ctx, 10)
    engine.on_answer(ctx, "B")
    _ticks(ctx, 20)
    engine.on_answer(ctx, "B")
    engine.on_answer(ctx, "B")

    assert ctx.ledger.resolved_ids() == set()
    assert ctx.tracker.triggered_ids == frozenset()
    assert ctx.session.restart_count == 1


def test_each_restart_emits_exactly_one_restart_event(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    restarts = []
    for _ in range(3):
        _ticks(ctx, 10)
        engine.on_answer(ctx, "A")
        transition = engine.on_answer(ctx, "A")
        restarts.extend(i for i in transition.intents if isinstance(i, LogRestart))

    assert [r.restart_count for r in restarts] == [1, 2, 3]
    assert ctx.session.restart_count == 3


def test_view_is_logged_again_after_restart(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    engine.on_play(ctx)
    _ticks(ctx, 10)
    engine.on_answer(ctx, "A")
    engine.on_answer(ctx, "A")

    assert [type(i) for i in engine.on_play(ctx).intents] == [LogView]


def test_answer_outside_question_is_rejected(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    with pytest.raises(InvalidTransition):
        engine.on_answer(ctx, "B")


def test_ended_while_question_open_is_rejected(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    _ticks(ctx, 10)
    with pytest.raises(InvalidTransition):
        engine.on_playback_ended(ctx)


def test_duplicate_ended_is_a_no_op(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, 1)
    first = engine.on_playback_ended(ctx)
    second = engine.on_playback_ended(ctx)

    assert len(first.intents) == 1
    assert second.intents == ()
    assert ctx.state is QuizState.FINISHED


def test_offline_session_skips_completion_write(context_factory) -> None:
    ctx = context_factory()
    engine.start(ctx, None)
    assert ctx.is_offline

    _ticks(ctx, 10)
    engine.on_answer(ctx, "B")
    _ticks(ctx, 20)
    engine.on_answer(ctx, "A")
    transition = engine.on_playback_ended(ctx)

    assert transition.intents == ()
    assert ctx.passed is True


def test_backward_seek_drops_queued_checkpoint_until_reentered(context_factory) -> None:
    rows = [
        {"id": "a", "timestamp": 10, "question": "A?", "options": ["A", "B"], "correct_answer": 0},
        {"id": "b", "timestamp": 10.3, "question": "B?", "options": ["A", "B"], "correct_answer": 0},
    ]
    ctx = context_factory(rows)
    engine.start(ctx, 1)
    _ticks(ctx, 10.4)
    engine.on_answer(ctx, "A")

    _ticks(ctx, 2)
    assert ctx.pending == []
    assert ctx.state is QuizState.AWAITING_PLAYBACK

    _ticks(ctx, 10.3)
    assert ctx.current_checkpoint_id == "b"


def test_ended_asks_queued_questions_before_finishing(context_factory) -> None:
    rows = [
        {"id": "a", "timestamp": 59.9, "question": "A?", "options": ["A", "B"], "correct_answer": 0},
        {"id": "b", "timestamp": 60.0, "question": "B?", "options": ["A", "B"], "correct_answer": 0},
    ]
    ctx = context_factory(rows)
    engine.start(ctx, 1)
    _ticks(ctx, 59.8, 60.0)
    engine.on_answer(ctx, "A")
    assert ctx.pending == ["b"]

    transition = engine.on_playback_ended(ctx)

    assert transition.intents == ()
    assert ctx.state is QuizState.QUESTION_OPEN
    assert ctx.current_checkpoint_id == "b"
    assert ctx.pending == []

    engine.on_answer(ctx, "A")
    finished = engine.on_playback_ended(ctx)

    assert ctx.state is QuizState.FINISHED
    assert ctx.score == 1.0
    assert ctx.passed is True
    assert [type(i) for i in finished.intents] == [UpsertSessionCompletion]
