"""Collaborator boundary — what the flow needs from UI and audio.

The orchestrator drives the screen through the ``Presenter`` protocol and the
speakers through ``AudioCues``. Rendering, widgets and crossfades live on the
other side of these calls; the core never touches them.

Implementations provided here:

    ScreenState  — keeps the latest screen content as a pydantic model. The
                   HTTP API serves it to the frontend.
    SilentAudio  — accepts every cue and plays nothing.

Tests use unittest.mock objects for both protocols.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, Field

from memory_lane.affection import AffectionTracker
from memory_lane.dialogue import DialoguePlayer
from memory_lane.events import Subscription
from memory_lane.models import Band, Question, Scene

logger = logging.getLogger(__name__)

# Track and effect names passed to AudioCues
MUSIC_IN_GAME = "in_game"
MUSIC_QUESTIONS = "questions"
SOUND_CORRECT = "correct_answer"
SOUND_WRONG = "wrong_answer"


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class Presenter(Protocol):
    def show_scene(self, scene: Scene, day: int) -> None: ...

    def show_question(self, question: Question, number: int, total: int) -> None: ...

    def show_result(self, correct: bool, text: str, delta: int) -> None: ...

    def show_game_over(self) -> None: ...

    def show_error(self, message: str) -> None: ...


class AudioCues(Protocol):
    def play_music(self, track: str) -> None: ...

    def play_sound(self, effect: str) -> None: ...


class SilentAudio:
    def play_music(self, track: str) -> None:
        logger.debug("music cue %s (silent)", track)

    def play_sound(self, effect: str) -> None:
        logger.debug("sound cue %s (silent)", effect)


# ---------------------------------------------------------------------------
# ScreenState: presenter backing the HTTP API
# ---------------------------------------------------------------------------

class QuestionView(BaseModel):
    number: int
    total: int
    text: str
    choices: list[str]


class ResultView(BaseModel):
    correct: bool
    text: str
    delta: int


class Screen(BaseModel):
    scene_name: str = ""
    scene_title: str = ""
    background: str = ""
    day: int = 1
    dialogue_text: str = ""
    dialogue_line: int = 0  # 1-based, 0 when no dialogue is showing
    dialogue_total: int = 0
    question: QuestionView | None = None
    result: ResultView | None = None
    affection: int = 0
    max_affection: int = 100
    band: Band = "neutral"
    game_over: bool = False
    error: str | None = None
    history: list[str] = Field(default_factory=list)  # dialogue lines shown this scene


class ScreenState:
    """Presenter that records what a frontend should currently display."""

    def __init__(self) -> None:
        self.screen = Screen()
        self._subs: list[Subscription] = []

    def attach(self, dialogue: DialoguePlayer, affection: AffectionTracker) -> None:
        """Follow dialogue text and affection changes until detach()."""
        self.screen.affection = affection.current
        self.screen.max_affection = affection.max_affection
        self.screen.band = affection.band

        def on_changed(old: int, new: int) -> None:
            self.screen.affection = new
            self.screen.band = affection.band_for(new)

        def on_line_shown(index: int, total: int) -> None:
            self.screen.dialogue_line = index + 1
            self.screen.dialogue_total = total

        def on_line_completed(index: int, total: int) -> None:
            self.screen.history.append(self.screen.dialogue_text)

        def on_text(text: str) -> None:
            self.screen.dialogue_text = text

        self._subs += [
            affection.changed.connect(on_changed),
            dialogue.line_shown.connect(on_line_shown),
            dialogue.line_completed.connect(on_line_completed),
            dialogue.text_changed.connect(on_text),
        ]

    def detach(self) -> None:
        for sub in self._subs:
            sub.disconnect()
        self._subs.clear()

    # -- Presenter protocol ---------------------------------------------

    def show_scene(self, scene: Scene, day: int) -> None:
        s = self.screen
        s.scene_name = scene.scene_name
        s.scene_title = scene.title
        s.background = scene.background_sprite
        s.day = day
        s.dialogue_text = ""
        s.dialogue_line = 0
        s.dialogue_total = len(scene.dialogue_lines)
        s.question = None
        s.result = None
        s.error = None
        s.history = []

    def show_question(self, question: Question, number: int, total: int) -> None:
        self.screen.result = None
        self.screen.question = QuestionView(
            number=number,
            total=total,
            text=question.question_text,
            choices=list(question.choices),
        )

    def show_result(self, correct: bool, text: str, delta: int) -> None:
        self.screen.result = ResultView(correct=correct, text=text, delta=delta)

    def show_game_over(self) -> None:
        self.screen.game_over = True
        self.screen.question = None

    def show_error(self, message: str) -> None:
        self.screen.error = message

    def reset(self) -> None:
        self.screen = Screen(
            affection=self.screen.affection,
            max_affection=self.screen.max_affection,
            band=self.screen.band,
        )
