from __future__ import annotations

from dataclasses import dataclass

from lights_out.reaction_core import GamePhase, Message, build_lights_out_game
from lights_out.recorder import AttemptOutcome

EPS = 1e-6


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def test_successful_run_measures_reaction_from_lights_out() -> None:
    clock = FakeClock(t=100.0)
    game = build_lights_out_game(clock=clock, seed=1234)

    game.start()
    assert game.phase is GamePhase.SEQUENCING
    assert game.snapshot().message is Message.GET_READY
    plan = game.plan
    assert plan is not None

    for idx, fire_ms in enumerate(plan.light_fire_times_ms):
        clock.t = 100.0 + fire_ms / 1000.0 + EPS
        game.update()
        assert game.lights == tuple(i <= idx for i in range(5))
        assert game.phase is GamePhase.SEQUENCING

    clock.t = 100.0 + plan.go_fire_time_ms / 1000.0 + EPS
    game.update()
    assert game.phase is GamePhase.AWAITING_REACTION
    go_ts = game.go_timestamp_s
    assert go_ts == clock.t

    assert game.react(go_ts + 0.180) is True

    snap = game.snapshot()
    assert snap.phase is GamePhase.RESULT
    assert snap.message is Message.WELL_DONE
    assert snap.reaction_time_ms == 180
    assert snap.best_time_ms == 180
    assert snap.lights == (False,) * 5


def test_react_during_sequence_is_false_start() -> None:
    clock = FakeClock()
    game = build_lights_out_game(clock=clock, seed=77)

    game.start()
    plan = game.plan
    assert plan is not None

    clock.t = plan.light_fire_times_ms[0] / 1000.0 + EPS
    game.update()
    assert game.lights == (True, False, False, False, False)

    assert game.react() is True
    snap = game.snapshot()
    assert snap.phase is GamePhase.FALSE_START
    assert snap.message is Message.TOO_SOON
    assert snap.reaction_time_ms is None
    assert snap.best_time_ms is None
    assert snap.lights == (False,) * 5

    # The cancelled sequence never comes back.
    clock.t = 60.0
    game.update()
    assert game.phase is GamePhase.FALSE_START
    assert game.lights == (False,) * 5
    assert game.go_timestamp_s is None


def _play_to_result(game, clock: FakeClock, reaction_s: float) -> None:
    game.start()
    plan = game.plan
    assert plan is not None
    clock.advance(plan.go_fire_time_ms / 1000.0 + EPS)
    game.update()
    assert game.phase is GamePhase.AWAITING_REACTION
    clock.advance(reaction_s)
    game.react()
    assert game.phase is GamePhase.RESULT


def test_best_time_is_running_minimum_across_games() -> None:
    clock = FakeClock()
    game = build_lights_out_game(clock=clock, seed=31)

    _play_to_result(game, clock, 0.300)
    assert game.reaction_time_ms == 300
    assert game.best_time_ms == 300

    _play_to_result(game, clock, 0.220)
    assert game.reaction_time_ms == 220
    assert game.best_time_ms == 220

    _play_to_result(game, clock, 0.260)
    assert game.reaction_time_ms == 260
    assert game.best_time_ms == 220

    # A false start does not touch the best time.
    game.start()
    game.react()
    assert game.phase is GamePhase.FALSE_START
    assert game.best_time_ms == 220

    outcomes = [e.outcome for e in game.recorder.events()]
    assert outcomes == [
        AttemptOutcome.RESULT,
        AttemptOutcome.RESULT,
        AttemptOutcome.RESULT,
        AttemptOutcome.FALSE_START,
    ]


def test_restart_mid_sequence_ignores_previous_generation() -> None:
    clock = FakeClock()
    game = build_lights_out_game(clock=clock, seed=2024)

    game.start()
    old_plan = game.plan
    assert old_plan is not None
    old_gen = game.snapshot().generation

    clock.t = old_plan.light_fire_times_ms[1] / 1000.0 + EPS
    game.update()
    assert sum(game.lights) == 2

    restart_at = clock.t
    game.start()
    new_plan = game.plan
    assert new_plan is not None
    assert new_plan is not old_plan
    assert game.snapshot().generation > old_gen
    assert game.phase is GamePhase.SEQUENCING
    assert game.lights == (False,) * 5
    assert game.reaction_time_ms is None

    # Walk through every moment the old plan would have fired something.
    old_moments = list(old_plan.light_fire_times_ms[2:]) + [old_plan.go_fire_time_ms]
    for moment_ms in old_moments:
        clock.t = moment_ms / 1000.0 + EPS
        game.update()

        elapsed_new_ms = (clock.t - restart_at) * 1000.0
        go_done = elapsed_new_ms >= new_plan.go_fire_time_ms
        if go_done:
            assert game.phase is GamePhase.AWAITING_REACTION
            assert game.lights == (False,) * 5
        else:
            expected = tuple(elapsed_new_ms >= ft for ft in new_plan.light_fire_times_ms)
            assert game.phase is GamePhase.SEQUENCING
            assert game.lights == expected

    # The new sequence still completes normally.
    clock.t = restart_at + new_plan.go_fire_time_ms / 1000.0 + EPS
    game.update()
    assert game.phase is GamePhase.AWAITING_REACTION
    assert game.go_timestamp_s is not None
    assert game.go_timestamp_s >= restart_at + new_plan.go_fire_time_ms / 1000.0


def test_restart_while_awaiting_reaction_starts_clean() -> None:
    clock = FakeClock()
    game = build_lights_out_game(clock=clock, seed=99)

    game.start()
    assert game.plan is not None
    clock.advance(game.plan.go_fire_time_ms / 1000.0 + EPS)
    game.update()
    assert game.phase is GamePhase.AWAITING_REACTION

    game.start()
    assert game.phase is GamePhase.SEQUENCING
    assert game.go_timestamp_s is None

    # Reacting now is a false start, not a measurement against the old go.
    game.react()
    assert game.phase is GamePhase.FALSE_START
    assert game.best_time_ms is None
