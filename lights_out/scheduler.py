from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .clock import Clock, ms_to_s
from .timing import TimingPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SequenceHandle:
    generation: int
    started_at_s: float


@dataclass(frozen=True, slots=True)
class _PendingTimer:
    fire_at_s: float
    order: int  # lights are 0..N-1, go is N
    generation: int
    label: str
    action: Callable[[], None]


class TimerScheduler:
    """Owns every pending delayed action of the game.

    Timers are not real OS timers: the owner calls ``run_due()`` once per frame
    and every entry whose fire time has passed runs in fire-time order.

    - At most one sequence is outstanding; scheduling a new one cancels the old.
    - Each entry captures the generation it was scheduled under and is a no-op
      if the generation has moved on by the time it comes due.
    """

    def __init__(self, *, clock: Clock) -> None:
        self._clock = clock
        self._generation = 0
        self._active: SequenceHandle | None = None
        self._pending: list[_PendingTimer] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active(self) -> SequenceHandle | None:
        return self._active

    def pending_count(self) -> int:
        return len(self._pending)

    def schedule_sequence(
        self,
        plan: TimingPlan,
        *,
        on_light: Callable[[int], None],
        on_go: Callable[[], None],
    ) -> SequenceHandle:
        self.cancel_all()

        self._generation += 1
        gen = self._generation
        started_at_s = self._clock.now()
        handle = SequenceHandle(generation=gen, started_at_s=started_at_s)

        pending: list[_PendingTimer] = []
        for idx, fire_ms in enumerate(plan.light_fire_times_ms):
            pending.append(
                _PendingTimer(
                    fire_at_s=started_at_s + ms_to_s(fire_ms),
                    order=idx,
                    generation=gen,
                    label=f"light[{idx}]",
                    action=lambda i=idx: on_light(i),
                )
            )
        pending.append(
            _PendingTimer(
                fire_at_s=started_at_s + ms_to_s(plan.go_fire_time_ms),
                order=plan.light_count,
                generation=gen,
                label="go",
                action=on_go,
            )
        )
        pending.sort(key=lambda p: (p.fire_at_s, p.order))

        self._pending = pending
        self._active = handle
        logger.debug("scheduled generation %d with %d timers", gen, len(pending))
        return handle

    def cancel_all(self, handle: SequenceHandle | None = None) -> None:
        """Drop every pending timer of the current sequence.

        Passing a handle from an older generation does nothing, as does
        cancelling when no sequence is outstanding.
        """

        if self._active is None:
            return
        if handle is not None and handle.generation != self._active.generation:
            return

        dropped = len(self._pending)
        self._generation += 1
        self._pending = []
        self._active = None
        logger.debug("cancelled sequence, dropped %d timers (generation now %d)", dropped, self._generation)

    def run_due(self, now_s: float | None = None) -> int:
        """Fire every timer due at ``now_s`` (default: clock.now()). Returns count fired."""

        now = self._clock.now() if now_s is None else float(now_s)
        fired = 0
        while self._pending and self._pending[0].fire_at_s <= now:
            timer = self._pending.pop(0)
            if timer.generation != self._generation:
                logger.debug("skipping stale timer %s from generation %d", timer.label, timer.generation)
                continue
            if not self._pending:
                # Sequence finished naturally; nothing left to cancel.
                self._active = None
            logger.debug("firing %s (generation %d)", timer.label, timer.generation)
            timer.action()
            fired += 1
        return fired
