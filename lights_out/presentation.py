"""Pure projection from a game snapshot to what the screen shows.

Nothing here holds state; the reaction screen calls ``present()`` every frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .reaction_core import GamePhase, GameSnapshot, Message


class UiAction(StrEnum):
    START = "start"
    REACT = "react"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class ButtonSpec:
    label: str
    action: UiAction


@dataclass(frozen=True, slots=True)
class ViewModel:
    headline: str
    detail: str
    lights: tuple[bool, ...]
    buttons: tuple[ButtonSpec, ...]
    go: bool = False


_HEADLINES: dict[Message, str] = {
    Message.PRESS_START: "Press Start when you are ready.",
    Message.GET_READY: "Get ready...",
    Message.GO: "GO!",
    Message.TOO_SOON: "Too soon! You jumped the start.",
    Message.WELL_DONE: "Well done!",
}


def format_ms(ms: int | None) -> str:
    return "--" if ms is None else f"{int(ms)} ms"


def buttons_for(phase: GamePhase) -> tuple[ButtonSpec, ...]:
    if phase is GamePhase.IDLE:
        return (ButtonSpec("Start", UiAction.START),)
    if phase in (GamePhase.SEQUENCING, GamePhase.AWAITING_REACTION):
        return (ButtonSpec("Click!", UiAction.REACT),)
    return (
        ButtonSpec("Try Again", UiAction.START),
        ButtonSpec("Restart Game", UiAction.RESET),
    )


def present(snapshot: GameSnapshot) -> ViewModel:
    headline = _HEADLINES[snapshot.message]
    if snapshot.phase is GamePhase.RESULT:
        headline = f"{headline} Your reaction time: {format_ms(snapshot.reaction_time_ms)}"

    detail = "" if snapshot.best_time_ms is None else f"Best time: {format_ms(snapshot.best_time_ms)}"

    return ViewModel(
        headline=headline,
        detail=detail,
        lights=snapshot.lights,
        buttons=buttons_for(snapshot.phase),
        go=snapshot.phase is GamePhase.AWAITING_REACTION,
    )
