from __future__ import annotations

import pytest

from lights_out.recorder import (
    AttemptOutcome,
    BestTimePolicy,
    InvalidMeasurement,
    ReactionRecorder,
)


def test_record_returns_whole_ms_and_tracks_best() -> None:
    rec = ReactionRecorder()
    assert rec.best_time_ms is None

    assert rec.record(1.5, 1.68) == 180
    assert rec.best_time_ms == 180

    assert rec.record(10.0, 10.25) == 250
    assert rec.best_time_ms == 180

    assert rec.record(20.0, 20.1234) == 123
    assert rec.best_time_ms == 123


def test_zero_reaction_time_is_valid() -> None:
    rec = ReactionRecorder()
    assert rec.record(3.0, 3.0) == 0
    assert rec.best_time_ms == 0


def test_missing_go_timestamp_raises_invalid_measurement() -> None:
    rec = ReactionRecorder()
    with pytest.raises(InvalidMeasurement):
        rec.record(None, 2.0)
    assert rec.best_time_ms is None
    assert rec.events() == []


def test_react_before_go_raises_invalid_measurement() -> None:
    rec = ReactionRecorder()
    with pytest.raises(InvalidMeasurement):
        rec.record(2.0, 1.9)


def test_event_log_and_summary() -> None:
    rec = ReactionRecorder()
    rec.record(0.0, 0.3, generation=1)
    rec.record_false_start(generation=2)
    rec.record(0.0, 0.22, generation=3)

    events = rec.events()
    assert [e.outcome for e in events] == [
        AttemptOutcome.RESULT,
        AttemptOutcome.FALSE_START,
        AttemptOutcome.RESULT,
    ]
    assert [e.generation for e in events] == [1, 2, 3]
    assert events[0].is_new_best is True
    assert events[1].reaction_time_ms is None
    assert events[1].best_time_ms == 300
    assert events[2].is_new_best is True

    s = rec.summary()
    assert s.attempts == 3
    assert s.results == 2
    assert s.false_starts == 1
    assert s.best_time_ms == 220
    assert s.mean_time_ms == pytest.approx(260.0)
    assert s.last_time_ms == 220


def test_summary_with_no_results() -> None:
    s = ReactionRecorder().summary()
    assert s.attempts == 0
    assert s.best_time_ms is None
    assert s.mean_time_ms is None
    assert s.last_time_ms is None


def test_new_session_keeps_best_time_by_default() -> None:
    rec = ReactionRecorder()
    rec.record(0.0, 0.2)
    rec.new_session()

    assert rec.events() == []
    assert rec.best_time_ms == 200


def test_new_session_resets_best_time_when_configured() -> None:
    rec = ReactionRecorder(policy=BestTimePolicy.RESET_ON_SESSION)
    rec.record(0.0, 0.2)
    rec.new_session()

    assert rec.best_time_ms is None
