from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .clock import s_to_ms

logger = logging.getLogger(__name__)


class InvalidMeasurement(ValueError):
    """A reaction was recorded without a usable go timestamp."""


class BestTimePolicy(StrEnum):
    KEEP = "keep"  # best time lives as long as the recorder
    RESET_ON_SESSION = "reset_on_session"


class AttemptOutcome(StrEnum):
    RESULT = "result"
    FALSE_START = "false_start"


@dataclass(frozen=True, slots=True)
class AttemptEvent:
    index: int
    generation: int
    outcome: AttemptOutcome
    reaction_time_ms: int | None
    best_time_ms: int | None
    is_new_best: bool = False


@dataclass(frozen=True, slots=True)
class SessionSummary:
    attempts: int
    results: int
    false_starts: int
    best_time_ms: int | None
    mean_time_ms: float | None
    last_time_ms: int | None


class ReactionRecorder:
    def __init__(self, *, policy: BestTimePolicy = BestTimePolicy.KEEP) -> None:
        self._policy = policy
        self._best_time_ms: int | None = None
        self._events: list[AttemptEvent] = []

    @property
    def policy(self) -> BestTimePolicy:
        return self._policy

    @property
    def best_time_ms(self) -> int | None:
        return self._best_time_ms

    def events(self) -> list[AttemptEvent]:
        return list(self._events)

    def record(
        self,
        go_timestamp_s: float | None,
        react_timestamp_s: float,
        *,
        generation: int = 0,
    ) -> int:
        """Return the reaction time in whole ms and fold it into the best time."""

        if go_timestamp_s is None:
            raise InvalidMeasurement("react recorded before any go signal")
        if react_timestamp_s < go_timestamp_s:
            raise InvalidMeasurement(
                f"react timestamp {react_timestamp_s:.4f}s precedes go timestamp {go_timestamp_s:.4f}s"
            )

        elapsed_ms = s_to_ms(react_timestamp_s - go_timestamp_s)
        is_new_best = self._best_time_ms is None or elapsed_ms < self._best_time_ms
        if is_new_best:
            self._best_time_ms = elapsed_ms
            logger.info("new best reaction time: %d ms", elapsed_ms)

        self._events.append(
            AttemptEvent(
                index=len(self._events),
                generation=generation,
                outcome=AttemptOutcome.RESULT,
                reaction_time_ms=elapsed_ms,
                best_time_ms=self._best_time_ms,
                is_new_best=is_new_best,
            )
        )
        return elapsed_ms

    def record_false_start(self, *, generation: int = 0) -> None:
        self._events.append(
            AttemptEvent(
                index=len(self._events),
                generation=generation,
                outcome=AttemptOutcome.FALSE_START,
                reaction_time_ms=None,
                best_time_ms=self._best_time_ms,
            )
        )

    def new_session(self) -> None:
        """Clear the attempt log; best time is cleared only under RESET_ON_SESSION."""

        self._events = []
        if self._policy is BestTimePolicy.RESET_ON_SESSION:
            self._best_time_ms = None

    def summary(self) -> SessionSummary:
        times = [
            e.reaction_time_ms
            for e in self._events
            if e.outcome is AttemptOutcome.RESULT and e.reaction_time_ms is not None
        ]
        false_starts = sum(1 for e in self._events if e.outcome is AttemptOutcome.FALSE_START)
        mean = None if not times else float(sum(times)) / float(len(times))
        return SessionSummary(
            attempts=len(self._events),
            results=len(times),
            false_starts=false_starts,
            best_time_ms=self._best_time_ms,
            mean_time_ms=mean,
            last_time_ms=times[-1] if times else None,
        )
