from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)


@dataclass(frozen=True, slots=True)
class TimingBounds:
    # Per-light gap between activations.
    min_light_delay_ms: float = 200.0
    max_light_delay_ms: float = 600.0
    # Hold with all lights on before they go out.
    min_go_delay_ms: float = 500.0
    max_go_delay_ms: float = 2000.0
    # Whole sequence, first light gap through lights out.
    max_total_delay_ms: float = 4500.0
    min_total_delay_ms: float = 0.0

    def __post_init__(self) -> None:
        if self.min_light_delay_ms <= 0:
            raise ValueError("min_light_delay_ms must be > 0")
        if self.max_light_delay_ms < self.min_light_delay_ms:
            raise ValueError("max_light_delay_ms must be >= min_light_delay_ms")
        if self.min_go_delay_ms <= 0:
            raise ValueError("min_go_delay_ms must be > 0")
        if self.max_go_delay_ms < self.min_go_delay_ms:
            raise ValueError("max_go_delay_ms must be >= min_go_delay_ms")
        if self.min_total_delay_ms < 0:
            raise ValueError("min_total_delay_ms must be >= 0")
        if self.max_total_delay_ms < self.min_total_delay_ms:
            raise ValueError("max_total_delay_ms must be >= min_total_delay_ms")

    def check_light_count(self, light_count: int) -> None:
        """Raise ValueError if ``light_count`` lights cannot fit under the total ceiling."""

        if light_count < 1:
            raise ValueError("light_count must be >= 1")
        worst = light_count * self.max_light_delay_ms + self.min_go_delay_ms
        if worst > self.max_total_delay_ms:
            raise ValueError(
                f"{light_count} lights at up to {self.max_light_delay_ms:g} ms plus "
                f"{self.min_go_delay_ms:g} ms go delay exceed max_total_delay_ms="
                f"{self.max_total_delay_ms:g}"
            )


@dataclass(frozen=True, slots=True)
class TimingPlan:
    """Immutable schedule for one run, all values in ms relative to start."""

    light_delays_ms: tuple[float, ...]
    go_delay_ms: float

    @property
    def light_count(self) -> int:
        return len(self.light_delays_ms)

    @property
    def light_fire_times_ms(self) -> tuple[float, ...]:
        out: list[float] = []
        acc = 0.0
        for delay in self.light_delays_ms:
            acc += delay
            out.append(acc)
        return tuple(out)

    @property
    def go_fire_time_ms(self) -> float:
        fire_times = self.light_fire_times_ms
        last = fire_times[-1] if fire_times else 0.0
        return last + self.go_delay_ms

    @property
    def total_ms(self) -> float:
        return self.go_fire_time_ms


class SequenceGenerator:
    """Draws randomized light and go delays within ``TimingBounds``."""

    def __init__(self, *, rng: RandomSource) -> None:
        self._rng = rng

    def generate(self, light_count: int, bounds: TimingBounds) -> TimingPlan:
        bounds.check_light_count(light_count)

        delays = tuple(
            float(self._rng.uniform(bounds.min_light_delay_ms, bounds.max_light_delay_ms))
            for _ in range(light_count)
        )
        last_light_ms = sum(delays)

        go_delay = float(self._rng.uniform(bounds.min_go_delay_ms, bounds.max_go_delay_ms))
        if last_light_ms + go_delay > bounds.max_total_delay_ms:
            go_delay = max(bounds.min_go_delay_ms, bounds.max_total_delay_ms - last_light_ms)
        if last_light_ms + go_delay < bounds.min_total_delay_ms:
            go_delay = bounds.min_total_delay_ms - last_light_ms

        plan = TimingPlan(light_delays_ms=delays, go_delay_ms=go_delay)
        logger.debug(
            "generated plan: lights=%s go_delay=%.1fms total=%.1fms",
            [round(t, 1) for t in plan.light_fire_times_ms],
            plan.go_delay_ms,
            plan.total_ms,
        )
        return plan
