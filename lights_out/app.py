"""Pygame UI shell for the Lights Out reaction trainer.

Screens:
- Reaction Test (five start lights, react when they go out)
- About / Privacy (static text)

Timing, RNG and game state live in lights_out/* (core modules); this module
only forwards input and draws snapshots.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import Clock, RealClock
from .presentation import UiAction, ViewModel, format_ms, present
from .reaction_core import LightsOutConfig, LightsOutGame, build_lights_out_game
from .recorder import ReactionRecorder

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (12, 12, 16)
TEXT_MAIN = (238, 238, 245)
TEXT_MUTED = (170, 170, 185)
LIGHT_OFF = (48, 16, 16)
LIGHT_ON = (232, 28, 36)
HOUSING = (28, 28, 32)
GO_ACCENT = (60, 220, 90)


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class InfoScreen:
    def __init__(self, app: App, title: str, lines: list[str]) -> None:
        self._app = app
        self._title = title
        self._lines = lines
        self._body_font = pygame.font.Font(None, 28)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN:
            self._app.pop()
            return
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_RETURN):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        title = self._app.font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, (40, 40))
        y = 100
        for line in self._lines:
            txt = self._body_font.render(line, True, TEXT_MAIN)
            surface.blit(txt, (40, y))
            y += 32
        hint = self._hint_font.render("Esc/Enter: Back", True, TEXT_MUTED)
        surface.blit(hint, (40, surface.get_height() - 40))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)

        title = self._title_font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(w // 2, 40)))

        row_h = 44
        y = max(110, (h - row_h * len(self._items)) // 2)
        for idx, item in enumerate(self._items):
            row = pygame.Rect(w // 2 - 180, y, 360, row_h - 6)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, TEXT_MAIN, row)
            else:
                pygame.draw.rect(surface, HOUSING, row)
            color = BG if selected else TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += row_h

        footer = "Up/Down: Move  |  Enter/Space: Select  |  Esc: Back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 14)))


class ReactionTestScreen:
    """Lights row, message line, and Start/Click/Restart buttons.

    Space or Enter starts when idle and reacts while the lights are running.
    A mouse click anywhere outside the buttons also counts as a reaction.
    """

    def __init__(self, app: App, *, game_factory: Callable[[], LightsOutGame]) -> None:
        self._app = app
        self._game = game_factory()
        self._button_hitboxes: list[tuple[pygame.Rect, UiAction]] = []

        self._big_font = pygame.font.Font(None, 64)
        self._small_font = pygame.font.Font(None, 28)
        self._tiny_font = pygame.font.Font(None, 20)

    @property
    def game(self) -> LightsOutGame:
        return self._game

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._leave()
            elif event.key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER):
                self._primary()
            elif event.key == pygame.K_r:
                self._game.reset()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            if pos is not None:
                for rect, action in self._button_hitboxes:
                    if rect.collidepoint(pos):
                        self._dispatch(action)
                        return
            if self._game.is_active():
                self._game.react()

    def _primary(self) -> None:
        if self._game.is_active():
            self._game.react()
        else:
            self._game.start()

    def _dispatch(self, action: UiAction) -> None:
        if action is UiAction.START:
            self._game.start()
        elif action is UiAction.REACT:
            self._game.react()
        elif action is UiAction.RESET:
            self._game.reset()

    def _leave(self) -> None:
        self._game.close()
        self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        self._game.update()
        view = present(self._game.snapshot())

        w, h = surface.get_size()
        surface.fill(BG)

        title = self._app.font.render("Lights Out Reaction Test", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(w // 2, 24)))

        self._render_lights(surface, view)

        color = GO_ACCENT if view.go else TEXT_MAIN
        headline = self._big_font.render(view.headline, True, color)
        surface.blit(headline, headline.get_rect(center=(w // 2, int(h * 0.62))))

        if view.detail:
            detail = self._small_font.render(view.detail, True, TEXT_MUTED)
            surface.blit(detail, detail.get_rect(center=(w // 2, int(h * 0.62) + 44)))

        self._render_buttons(surface, view)

        summary = self._game.recorder.summary()
        stats = (
            f"Runs: {summary.results}  False starts: {summary.false_starts}  "
            f"Last: {format_ms(summary.last_time_ms)}"
        )
        foot = self._tiny_font.render(stats + "  |  Space: Start/React  R: Restart  Esc: Back", True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))

    def _render_lights(self, surface: pygame.Surface, view: ViewModel) -> None:
        w, h = surface.get_size()
        count = max(1, len(view.lights))
        radius = max(14, min(44, w // (count * 5)))
        gap = radius
        total_w = count * radius * 2 + (count - 1) * gap
        x0 = (w - total_w) // 2
        cy = int(h * 0.34)

        housing = pygame.Rect(x0 - gap, cy - radius - gap, total_w + gap * 2, radius * 2 + gap * 2)
        pygame.draw.rect(surface, HOUSING, housing, border_radius=12)

        for idx, lit in enumerate(view.lights):
            cx = x0 + radius + idx * (radius * 2 + gap)
            pygame.draw.circle(surface, LIGHT_ON if lit else LIGHT_OFF, (cx, cy), radius)

    def _render_buttons(self, surface: pygame.Surface, view: ViewModel) -> None:
        w, h = surface.get_size()
        btn_w, btn_h, gap = 200, 48, 24
        total_w = len(view.buttons) * btn_w + max(0, len(view.buttons) - 1) * gap
        x = (w - total_w) // 2
        y = int(h * 0.78)

        self._button_hitboxes = []
        for button in view.buttons:
            rect = pygame.Rect(x, y, btn_w, btn_h)
            pygame.draw.rect(surface, HOUSING, rect, border_radius=8)
            pygame.draw.rect(surface, TEXT_MUTED, rect, 2, border_radius=8)
            label = self._small_font.render(button.label, True, TEXT_MAIN)
            surface.blit(label, label.get_rect(center=rect.center))
            self._button_hitboxes.append((rect, button.action))
            x += btn_w + gap


ABOUT_LINES = [
    "See how fast you react to a racing start.",
    "Five red lights come on one after another.",
    "When they all go out, react as quickly as you can.",
    "React before they go out and it is a false start.",
]

PRIVACY_LINES = [
    "Nothing you do here leaves this computer.",
    "Reaction times are kept in memory only and are gone when you quit.",
]


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: LightsOutConfig | None = None,
    clock: Clock | None = None,
) -> int:
    cfg = config or LightsOutConfig()
    game_clock = clock or RealClock()

    pygame.init()
    pygame.display.set_caption("Lights Out Reaction Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    # One recorder for the whole process so the best time outlives each visit.
    recorder = ReactionRecorder(policy=cfg.best_time_policy)

    def open_reaction_test() -> None:
        recorder.new_session()
        seed = _new_seed()
        logger.debug("opening reaction test with seed %d", seed)
        app.push(
            ReactionTestScreen(
                app,
                game_factory=lambda: build_lights_out_game(
                    clock=game_clock,
                    seed=seed,
                    config=cfg,
                    recorder=recorder,
                ),
            )
        )

    main_items = [
        MenuItem("Reaction Test", open_reaction_test),
        MenuItem("About", lambda: app.push(InfoScreen(app, "About", ABOUT_LINES))),
        MenuItem("Privacy", lambda: app.push(InfoScreen(app, "Privacy", PRIVACY_LINES))),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
