"""Pygame UI shell for Guess the Airline.

Deterministic question/scoring/preference state lives in airline_quiz/* (core
modules). This module only renders RoundEngine snapshots and relays input:
- 1-4 or mouse click: pick an option
- Enter / Space / N: next question once answered
- M: mute, T: light/dark theme, Esc: quit
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

import pygame

from .airline_question import build_airline_round
from .catalog import Airline, catalog_from_env
from .errors import QuizError
from .persistence import open_preference_store
from .preferences import (
    BooleanPreference,
    PreferenceStore,
    build_mute_preference,
    build_theme_preference,
)
from .quiz_core import FeedbackKind, OptionMark, RoundEngine, RoundSnapshot

logger = logging.getLogger(__name__)

SEED_ENV = "AIRLINE_QUIZ_SEED"
LOG_LEVEL_ENV = "AIRLINE_QUIZ_LOG_LEVEL"

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def seed_from_env() -> int | None:
    raw = os.environ.get(SEED_ENV, "").strip()
    if raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", SEED_ENV, raw)
        return None


@dataclass(frozen=True, slots=True)
class Palette:
    bg: tuple[int, int, int]
    panel: tuple[int, int, int]
    border: tuple[int, int, int]
    text: tuple[int, int, int]
    muted_text: tuple[int, int, int]
    accent: tuple[int, int, int]
    option_bg: tuple[int, int, int]
    correct: tuple[int, int, int]
    incorrect: tuple[int, int, int]


DARK_PALETTE = Palette(
    bg=(10, 10, 46),
    panel=(18, 18, 72),
    border=(226, 236, 255),
    text=(238, 245, 255),
    muted_text=(150, 160, 200),
    accent=(255, 214, 0),
    option_bg=(28, 30, 96),
    correct=(0, 200, 110),
    incorrect=(230, 60, 80),
)

LIGHT_PALETTE = Palette(
    bg=(240, 240, 250),
    panel=(255, 255, 255),
    border=(40, 40, 90),
    text=(20, 20, 60),
    muted_text=(100, 100, 130),
    accent=(200, 90, 0),
    option_bg=(226, 230, 246),
    correct=(0, 150, 80),
    incorrect=(200, 40, 60),
)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


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


class ErrorScreen:
    """Shown instead of the round UI when a round cannot start."""

    def __init__(self, app: App, message: str) -> None:
        self._app = app
        self._message = message
        self._small = pygame.font.Font(None, 24)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_RETURN):
            self._app.quit()

    def render(self, surface: pygame.Surface) -> None:
        p = DARK_PALETTE
        surface.fill(p.bg)
        title = self._app.font.render("CANNOT START GAME", True, p.incorrect)
        surface.blit(title, (40, 40))
        y = 100
        for line in _wrap(self._small, self._message, surface.get_width() - 80):
            surface.blit(self._small.render(line, True, p.text), (40, y))
            y += self._small.get_linesize()
        hint = self._small.render("Press Esc to quit.", True, p.muted_text)
        surface.blit(hint, (40, y + 20))


class GameScreen:
    def __init__(
        self,
        app: App,
        *,
        engine: RoundEngine,
        muted: BooleanPreference,
        light_theme: BooleanPreference,
    ) -> None:
        self._app = app
        self._engine = engine
        self._muted = muted
        self._light_theme = light_theme

        self._snapshot: RoundSnapshot = engine.snapshot()
        self._palette = LIGHT_PALETTE if light_theme.value else DARK_PALETTE
        self._is_muted = muted.value

        engine.subscribe(self._on_snapshot)
        light_theme.subscribe(self._on_theme)
        muted.subscribe(self._on_mute)

        self._title_font = pygame.font.Font(None, 44)
        self._code_font = pygame.font.Font(None, 120)
        self._option_font = pygame.font.Font(None, 32)
        self._small_font = pygame.font.Font(None, 24)

        self._option_rects: list[pygame.Rect] = []
        self._next_rect: pygame.Rect | None = None
        self._mute_rect: pygame.Rect | None = None
        self._theme_rect: pygame.Rect | None = None

    @property
    def snapshot(self) -> RoundSnapshot:
        return self._snapshot

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def is_muted(self) -> bool:
        return self._is_muted

    def _on_snapshot(self, snap: RoundSnapshot) -> None:
        self._snapshot = snap

    def _on_theme(self, light: bool) -> None:
        self._palette = LIGHT_PALETTE if light else DARK_PALETTE

    def _on_mute(self, muted: bool) -> None:
        self._is_muted = muted

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._handle_click(event.pos)

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4):
            self._engine.answer_option(key - pygame.K_1)
        elif key in (pygame.K_KP1, pygame.K_KP2, pygame.K_KP3, pygame.K_KP4):
            self._engine.answer_option(key - pygame.K_KP1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE, pygame.K_n):
            self._engine.next()
        elif key == pygame.K_m:
            self._muted.toggle()
        elif key == pygame.K_t:
            self._light_theme.toggle()
        elif key == pygame.K_ESCAPE:
            self._app.quit()

    def _handle_click(self, pos: tuple[int, int]) -> None:
        if self._mute_rect is not None and self._mute_rect.collidepoint(pos):
            self._muted.toggle()
            return
        if self._theme_rect is not None and self._theme_rect.collidepoint(pos):
            self._light_theme.toggle()
            return
        if self._next_rect is not None and self._snapshot.next_visible and self._next_rect.collidepoint(pos):
            self._engine.next()
            return
        for idx, rect in enumerate(self._option_rects):
            if rect.collidepoint(pos):
                self._engine.answer_option(idx)
                return

    def render(self, surface: pygame.Surface) -> None:
        p = self._palette
        snap = self._snapshot
        w, h = surface.get_size()
        surface.fill(p.bg)

        title = self._title_font.render("GUESS THE AIRLINE", True, p.accent)
        surface.blit(title, title.get_rect(midtop=(w // 2, 14)))

        hi = self._small_font.render(f"HI-SCORE: {snap.hi_score}", True, p.text)
        surface.blit(hi, (20, 20))
        score = self._small_font.render(snap.score_text, True, p.text)
        surface.blit(score, (20, 20 + hi.get_height() + 6))

        self._mute_rect = self._draw_toggle(surface, "MUTED" if self._is_muted else "SOUND", w - 20, 14)
        self._theme_rect = self._draw_toggle(
            surface,
            "DARK" if self._light_theme.value else "LIGHT",
            self._mute_rect.x - 10,
            14,
        )

        prompt = self._small_font.render("Identify the airline from the IATA code", True, p.muted_text)
        surface.blit(prompt, prompt.get_rect(midtop=(w // 2, 70)))
        code = self._code_font.render(snap.iata_code or "--", True, p.text)
        code_rect = code.get_rect(midtop=(w // 2, 96))
        surface.blit(code, code_rect)

        self._option_rects = []
        cols = 2
        gap = 14
        row_h = 54
        grid_w = min(w - 80, 720)
        cell_w = (grid_w - gap) // cols
        left = (w - grid_w) // 2
        top = code_rect.bottom + 18
        for idx, view in enumerate(snap.options):
            row, col = divmod(idx, cols)
            rect = pygame.Rect(left + col * (cell_w + gap), top + row * (row_h + gap), cell_w, row_h)
            self._option_rects.append(rect)

            fill = p.option_bg
            if view.mark is OptionMark.CORRECT:
                fill = p.correct
            elif view.mark is OptionMark.INCORRECT:
                fill = p.incorrect
            pygame.draw.rect(surface, fill, rect)
            pygame.draw.rect(surface, p.border, rect, 2)

            label = f"{idx + 1}. {view.airline.name}"
            color = p.text if view.enabled or view.mark is not OptionMark.NONE else p.muted_text
            text = self._option_font.render(label, True, color)
            surface.blit(text, text.get_rect(midleft=(rect.x + 14, rect.centery)))

        bottom = top + 2 * row_h + gap + 16
        if snap.feedback:
            color = p.correct if snap.feedback_kind is FeedbackKind.CORRECT else p.incorrect
            fb = self._option_font.render(snap.feedback, True, color)
            surface.blit(fb, fb.get_rect(midtop=(w // 2, bottom)))

        self._next_rect = None
        if snap.next_visible:
            nxt = self._option_font.render("NEXT >>", True, p.accent)
            self._next_rect = nxt.get_rect(midtop=(w // 2, min(h - 40, bottom + 40))).inflate(24, 12)
            pygame.draw.rect(surface, p.panel, self._next_rect)
            pygame.draw.rect(surface, p.accent, self._next_rect, 2)
            surface.blit(nxt, nxt.get_rect(center=self._next_rect.center))

        footer = "1-4: Answer  |  Enter: Next  |  M: Mute  |  T: Theme  |  Esc: Quit"
        foot = self._small_font.render(footer, True, p.muted_text)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 8)))

    def _draw_toggle(self, surface: pygame.Surface, label: str, right: int, top: int) -> pygame.Rect:
        p = self._palette
        text = self._small_font.render(label, True, p.text)
        rect = text.get_rect(topright=(right, top)).inflate(16, 10)
        rect.topright = (right, top)
        pygame.draw.rect(surface, p.panel, rect)
        pygame.draw.rect(surface, p.border, rect, 1)
        surface.blit(text, text.get_rect(center=rect.center))
        return rect


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if current == "" else f"{current} {word}"
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    store: PreferenceStore | None = None,
    catalog: Sequence[Airline] | None = None,
    seed: int | None = None,
    on_start: Callable[[GameScreen], None] | None = None,
) -> int:
    """Run the game window. Returns 0 on a normal exit, 1 if no round could start."""

    pygame.init()
    pygame.display.set_caption("Guess the Airline")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    exit_code = 0

    try:
        prefs = open_preference_store() if store is None else store
        airlines = catalog_from_env() if catalog is None else catalog
        engine = build_airline_round(
            catalog=airlines,
            store=prefs,
            seed=seed_from_env() if seed is None else seed,
        )
    except QuizError as e:
        logger.error("Cannot start a round: %s", e)
        app.push(ErrorScreen(app, str(e)))
        exit_code = 1
    else:
        screen = GameScreen(
            app,
            engine=engine,
            muted=build_mute_preference(prefs),
            light_theme=build_theme_preference(prefs),
        )
        app.push(screen)
        if on_start is not None:
            on_start(screen)
        logger.info("Started round with %d airlines (hi-score %d)", len(airlines), engine.hi_score)

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

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return exit_code
