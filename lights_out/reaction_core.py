from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from .clock import Clock
from .recorder import BestTimePolicy, ReactionRecorder
from .scheduler import SequenceHandle, TimerScheduler
from .timing import SeededRng, SequenceGenerator, TimingBounds, TimingPlan

logger = logging.getLogger(__name__)


class GamePhase(StrEnum):
    IDLE = "idle"
    SEQUENCING = "sequencing"
    AWAITING_REACTION = "awaiting_reaction"
    FALSE_START = "false_start"
    RESULT = "result"


class GameEvent(StrEnum):
    START = "start"
    LIGHT = "light"
    GO = "go"
    REACT = "react"
    # A react whose input timestamp predates the go signal.
    EARLY_REACT = "early_react"
    RESET = "reset"


class Message(StrEnum):
    PRESS_START = "press_start"
    GET_READY = "get_ready"
    GO = "go"
    TOO_SOON = "too_soon"
    WELL_DONE = "well_done"


_MESSAGE_BY_PHASE: dict[GamePhase, Message] = {
    GamePhase.IDLE: Message.PRESS_START,
    GamePhase.SEQUENCING: Message.GET_READY,
    GamePhase.AWAITING_REACTION: Message.GO,
    GamePhase.FALSE_START: Message.TOO_SOON,
    GamePhase.RESULT: Message.WELL_DONE,
}

ACTIVE_PHASES = frozenset({GamePhase.SEQUENCING, GamePhase.AWAITING_REACTION})


def next_phase(phase: GamePhase, event: GameEvent) -> GamePhase:
    """Transition table. Events that are not meaningful in ``phase`` leave it unchanged."""

    if event is GameEvent.START:
        return GamePhase.SEQUENCING
    if event is GameEvent.RESET:
        return GamePhase.IDLE
    if phase is GamePhase.SEQUENCING:
        if event is GameEvent.GO:
            return GamePhase.AWAITING_REACTION
        if event in (GameEvent.REACT, GameEvent.EARLY_REACT):
            return GamePhase.FALSE_START
        return phase
    if phase is GamePhase.AWAITING_REACTION:
        if event is GameEvent.REACT:
            return GamePhase.RESULT
        if event is GameEvent.EARLY_REACT:
            return GamePhase.FALSE_START
        return phase
    # IDLE / FALSE_START / RESULT ignore timer and react events.
    return phase


@dataclass(frozen=True, slots=True)
class LightsOutConfig:
    light_count: int = 5
    bounds: TimingBounds = field(default_factory=TimingBounds)
    best_time_policy: BestTimePolicy = BestTimePolicy.KEEP

    def __post_init__(self) -> None:
        self.bounds.check_light_count(self.light_count)


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """View model for the UI (pure data)."""

    phase: GamePhase
    lights: tuple[bool, ...]
    message: Message
    reaction_time_ms: int | None
    best_time_ms: int | None
    generation: int


class LightsOutGame:
    """Start-lights reaction test: lights on one by one, all out, react.

    - All time comes from the injected Clock; timers only advance in ``update()``.
    - Best time lives in the recorder and survives ``start()`` and ``reset()``.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        generator: SequenceGenerator,
        scheduler: TimerScheduler,
        recorder: ReactionRecorder,
        config: LightsOutConfig,
        listener: Callable[[GameSnapshot], None] | None = None,
    ) -> None:
        self._clock = clock
        self._generator = generator
        self._scheduler = scheduler
        self._recorder = recorder
        self._config = config
        self._listener = listener

        self._phase: GamePhase = GamePhase.IDLE
        self._lights: tuple[bool, ...] = self._all_off()
        self._plan: TimingPlan | None = None
        self._handle: SequenceHandle | None = None
        self._go_timestamp_s: float | None = None
        self._reaction_time_ms: int | None = None

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def lights(self) -> tuple[bool, ...]:
        return self._lights

    @property
    def plan(self) -> TimingPlan | None:
        return self._plan

    @property
    def go_timestamp_s(self) -> float | None:
        return self._go_timestamp_s

    @property
    def reaction_time_ms(self) -> int | None:
        return self._reaction_time_ms

    @property
    def best_time_ms(self) -> int | None:
        return self._recorder.best_time_ms

    @property
    def recorder(self) -> ReactionRecorder:
        return self._recorder

    @property
    def config(self) -> LightsOutConfig:
        return self._config

    def is_active(self) -> bool:
        return self._phase in ACTIVE_PHASES

    def start(self) -> None:
        if self.is_active():
            logger.info("start received while %s; restarting", self._phase.value)
        self._scheduler.cancel_all()

        self._lights = self._all_off()
        self._go_timestamp_s = None
        self._reaction_time_ms = None
        self._plan = self._generator.generate(self._config.light_count, self._config.bounds)
        self._phase = next_phase(self._phase, GameEvent.START)
        self._handle = self._scheduler.schedule_sequence(
            self._plan,
            on_light=self._on_light,
            on_go=self._on_go,
        )
        self._emit()

    def react(self, timestamp_s: float | None = None) -> bool:
        """Handle a player input. Returns True if it changed the game state."""

        if not self.is_active():
            return False

        ts = self._clock.now() if timestamp_s is None else float(timestamp_s)
        early = self._go_timestamp_s is None or ts < self._go_timestamp_s
        event = GameEvent.EARLY_REACT if early else GameEvent.REACT
        target = next_phase(self._phase, event)
        generation = self._scheduler.generation if self._handle is None else self._handle.generation

        self._scheduler.cancel_all(self._handle)
        self._handle = None
        self._lights = self._all_off()

        if target is GamePhase.FALSE_START:
            self._reaction_time_ms = None
            self._recorder.record_false_start(generation=generation)
            logger.info("false start")
        else:
            self._reaction_time_ms = self._recorder.record(
                self._go_timestamp_s,
                ts,
                generation=generation,
            )
            logger.info("reaction time %d ms (best %s ms)", self._reaction_time_ms, self.best_time_ms)

        self._phase = target
        self._emit()
        return True

    def reset(self) -> None:
        """Abandon any run and return to IDLE. Best time is kept."""

        self._scheduler.cancel_all()
        self._handle = None
        self._phase = next_phase(self._phase, GameEvent.RESET)
        self._lights = self._all_off()
        self._go_timestamp_s = None
        self._reaction_time_ms = None
        self._emit()

    def close(self) -> None:
        self._scheduler.cancel_all()
        self._handle = None

    def update(self) -> None:
        self._scheduler.run_due()

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            phase=self._phase,
            lights=self._lights,
            message=_MESSAGE_BY_PHASE[self._phase],
            reaction_time_ms=self._reaction_time_ms,
            best_time_ms=self.best_time_ms,
            generation=self._scheduler.generation,
        )

    def _on_light(self, index: int) -> None:
        if next_phase(self._phase, GameEvent.LIGHT) is not GamePhase.SEQUENCING:
            return
        lights = list(self._lights)
        lights[index] = True
        self._lights = tuple(lights)
        self._emit()

    def _on_go(self) -> None:
        target = next_phase(self._phase, GameEvent.GO)
        if target is not GamePhase.AWAITING_REACTION:
            return
        self._lights = self._all_off()
        self._go_timestamp_s = self._clock.now()
        self._phase = target
        self._emit()

    def _all_off(self) -> tuple[bool, ...]:
        return (False,) * self._config.light_count

    def _emit(self) -> None:
        if self._listener is not None:
            self._listener(self.snapshot())


def build_lights_out_game(
    *,
    clock: Clock,
    seed: int,
    config: LightsOutConfig | None = None,
    recorder: ReactionRecorder | None = None,
    listener: Callable[[GameSnapshot], None] | None = None,
) -> LightsOutGame:
    cfg = config or LightsOutConfig()
    return LightsOutGame(
        clock=clock,
        generator=SequenceGenerator(rng=SeededRng(seed)),
        scheduler=TimerScheduler(clock=clock),
        recorder=recorder or ReactionRecorder(policy=cfg.best_time_policy),
        config=cfg,
        listener=listener,
    )
