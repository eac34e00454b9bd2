"""Game flow orchestrator — drives one scene after another until game over.

Phase flow:
  idle          start() spawns the run task.
  scene_setup   Pull a scene from the bank, reset per-scene counters, hand the
                scene to the presenter, cue in-game music.
  dialogue      Play the dialogue (first scene of a run waits
                first_dialogue_delay), wait for completion, then
                delay_after_dialogue. No lines → straight to questions.
  question_loop For each question: show it, wait for submit_answer(), score it,
                show the result, wait for continue_clicked(), then
                delay_after_question. Repeat clicks during that delay are
                dropped (single-flight).
  transitioning Wait delay_before_next_scene. Affection at 0 → game_over,
                otherwise autosave hook and back to scene_setup.
  game_over     Terminal until restart(), or a load that restores affection.

Game over has two entry points — the transition check above and the tracker's
``depleted`` signal, which can fire mid-scene — and both go through
``_enter_game_over()``, which only acts once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel

from memory_lane.affection import AffectionTracker
from memory_lane.bank import SceneBank, SceneBankError
from memory_lane.config import ConfigurationError, GameSettings
from memory_lane.dialogue import DialoguePlayer, Sleep
from memory_lane.events import Signal, Subscription
from memory_lane.flow.scoring import apply_answer
from memory_lane.models import Band, Phase, Question, Scene
from memory_lane.presenter import (
    MUSIC_IN_GAME,
    MUSIC_QUESTIONS,
    SOUND_CORRECT,
    SOUND_WRONG,
    AudioCues,
    Presenter,
    SilentAudio,
)
from memory_lane.text import TextTemplateError, build_context, render_text

logger = logging.getLogger(__name__)

Awaiting = Literal["answer", "continue"]


class FlowStatus(BaseModel):
    """Snapshot of the orchestrator for UIs and debugging."""

    phase: Phase
    scene_name: str | None = None
    question_number: int = 0
    question_total: int = 0
    correct_count: int = 0
    day: int
    affection: int
    band: Band
    awaiting: Awaiting | None = None
    error: str | None = None


class GameFlow:
    def __init__(
        self,
        *,
        bank: SceneBank,
        affection: AffectionTracker,
        dialogue: DialoguePlayer,
        presenter: Presenter,
        settings: GameSettings | None = None,
        audio: AudioCues | None = None,
        sleep: Sleep = asyncio.sleep,
        after_scene: Callable[[], None] | None = None,
    ) -> None:
        missing = [
            name for name, value in (
                ("bank", bank),
                ("affection", affection),
                ("dialogue", dialogue),
                ("presenter", presenter),
            )
            if value is None
        ]
        if missing:
            logger.error("Game flow missing collaborator(s): %s", ", ".join(missing))
            raise ConfigurationError(f"Missing collaborator(s): {', '.join(missing)}")

        self._bank = bank
        self._affection = affection
        self._dialogue = dialogue
        self._presenter = presenter
        self._settings = settings or GameSettings()
        self._audio = audio or SilentAudio()
        self._sleep = sleep
        self._after_scene = after_scene

        self.phase_changed = Signal("flow.phase_changed")
        self._phase: Phase = "idle"
        self._task: asyncio.Task[None] | None = None
        self._game_over = False
        self._first_scene = True
        self._error: str | None = None

        # Per-scene run state
        self._scene: Scene | None = None
        self._questions: list[Question] = []
        self._question_index = 0
        self._correct_count = 0

        # Pending player input
        self._answer: asyncio.Future[int] | None = None
        self._continue: asyncio.Future[None] | None = None
        self._transitioning = False

        self._subs: list[Subscription] = [
            affection.depleted.connect(self._on_depleted),
        ]

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_game_over(self) -> bool:
        return self._game_over

    @property
    def current_scene(self) -> Scene | None:
        return self._scene

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def awaiting(self) -> Awaiting | None:
        if self._answer is not None and not self._answer.done():
            return "answer"
        if self._continue is not None and not self._continue.done() and not self._transitioning:
            return "continue"
        return None

    def status(self) -> FlowStatus:
        return FlowStatus(
            phase=self._phase,
            scene_name=self._scene.scene_name if self._scene else None,
            question_number=self._question_index + 1 if self._questions else 0,
            question_total=len(self._questions),
            correct_count=self._correct_count,
            day=self._bank.day,
            affection=self._affection.current,
            band=self._affection.band,
            awaiting=self.awaiting,
            error=self._error,
        )

    def describe(self) -> str:
        name = self._scene.scene_name if self._scene else None
        return (
            f"State: {self._phase} | Scene: {name}"
            f" | Question: {self._question_index + 1}/{len(self._questions)}"
        )

    async def wait_for_phase(self, *phases: Phase) -> Phase:
        if self._phase in phases:
            return self._phase
        reached: asyncio.Future[Phase] = asyncio.get_running_loop().create_future()

        def on_change(old: Phase, new: Phase) -> None:
            if new in phases and not reached.done():
                reached.set_result(new)

        with self.phase_changed.connect(on_change):
            return await reached

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin the game loop on the running event loop."""
        if self.is_running:
            logger.debug("Game loop already running")
            return
        if self._game_over:
            logger.info("Game is over; restart() to play again")
            return
        if self._bank.total_scenes == 0:
            self._fail("No scenes registered; the game cannot start")
            raise ConfigurationError("No scenes registered")
        self._error = None
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._on_run_done)

    def reset(self) -> None:
        """Stop the run and go back to idle. Affection and day progress are kept."""
        self._cancel_run()
        self._dialogue.stop()
        self._game_over = False
        self._first_scene = True
        self._transitioning = False
        self._answer = None
        self._continue = None
        self._reset_scene_state(None)
        self._set_phase("idle")

    def restart(self) -> None:
        self.reset()
        self._affection.reset()
        self._bank.reset_daily_progress()
        logger.info("Game restarted")
        self.start()

    def close(self) -> None:
        self._cancel_run()
        self._dialogue.stop()
        for sub in self._subs:
            sub.disconnect()
        self._subs.clear()

    # ------------------------------------------------------------------
    # Player input
    # ------------------------------------------------------------------

    def next_dialogue_clicked(self) -> bool:
        if self._phase != "dialogue" or not self._dialogue.is_active:
            logger.debug("Next-dialogue ignored in phase %s", self._phase)
            return False
        self._dialogue.advance()
        return True

    def skip_dialogue(self) -> bool:
        if self._phase != "dialogue" or not self._dialogue.is_active:
            logger.debug("Skip-dialogue ignored in phase %s", self._phase)
            return False
        self._dialogue.skip_all()
        return True

    def submit_answer(self, index: int) -> bool:
        pending = self._answer
        if self._phase != "question_loop" or pending is None or pending.done():
            logger.debug("Answer %d ignored in phase %s", index, self._phase)
            return False
        pending.set_result(index)
        return True

    def continue_clicked(self) -> bool:
        if self._transitioning:
            logger.debug("Already transitioning, ignoring continue")
            return False
        pending = self._continue
        if pending is None or pending.done():
            logger.debug("Continue ignored in phase %s", self._phase)
            return False
        pending.set_result(None)
        return True

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        while True:
            try:
                await self._play_scene()
            except SceneBankError as e:
                self._fail(f"Cannot load a scene: {e}")
                return
            if self._game_over:
                return

            self._set_phase("transitioning")
            await self._sleep(self._settings.delay_before_next_scene)
            if self._affection.current <= 0:
                self._enter_game_over()
                return
            if self._after_scene is not None:
                self._after_scene()

    async def _play_scene(self) -> None:
        self._set_phase("scene_setup")
        scene = self._bank.select_random_unplayed()
        self._reset_scene_state(scene)
        self._presenter.show_scene(scene, self._bank.day)
        self._audio.play_music(MUSIC_IN_GAME)
        logger.info("Scene setup: %s (%s)", scene.scene_name, self._bank.describe())

        await self._play_dialogue(scene)
        if self._game_over:
            return
        await self._ask_questions(scene)

    async def _play_dialogue(self, scene: Scene) -> None:
        self._set_phase("dialogue")
        if not scene.dialogue_lines:
            logger.warning("Scene %s has no dialogue lines, skipping to questions", scene.scene_name)
            return

        if self._first_scene:
            self._first_scene = False
            await self._sleep(self._settings.first_dialogue_delay)

        finished: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def on_completed() -> None:
            if not finished.done():
                finished.set_result(None)

        with self._dialogue.completed.connect(on_completed):
            self._dialogue.start([self._render(line) for line in scene.dialogue_lines])
            await finished
        logger.info("Dialogue phase completed")
        await self._sleep(self._settings.delay_after_dialogue)

    async def _ask_questions(self, scene: Scene) -> None:
        self._set_phase("question_loop")
        self._audio.play_music(MUSIC_QUESTIONS)
        self._questions = self._playable_questions(scene)
        if not self._questions:
            logger.warning("Scene %s has no questions, moving on", scene.scene_name)
            return

        total = len(self._questions)
        for index, question in enumerate(self._questions):
            self._question_index = index
            logger.info("Question %d/%d", index + 1, total)
            await self._ask(scene, question, index + 1, total)
            if self._game_over:
                return
        logger.info("Question phase completed: %d/%d correct", self._correct_count, total)

    async def _ask(self, scene: Scene, question: Question, number: int, total: int) -> None:
        loop = asyncio.get_running_loop()
        self._presenter.show_question(self._render_question(question), number, total)

        self._answer = answer = loop.create_future()
        chosen = await answer
        self._answer = None

        result = apply_answer(self._affection, scene, question, chosen)
        if result.correct:
            self._correct_count += 1
        self._audio.play_sound(SOUND_CORRECT if result.correct else SOUND_WRONG)
        if self._game_over:
            return
        self._presenter.show_result(result.correct, self._render(result.response), result.delta)

        self._continue = proceed = loop.create_future()
        await proceed
        self._continue = None

        self._transitioning = True
        await self._sleep(self._settings.delay_after_question)
        self._transitioning = False

    def _playable_questions(self, scene: Scene) -> list[Question]:
        playable = []
        for question in scene.questions:
            if len(question.choices) < 2:
                logger.warning(
                    "Scene %s: skipping question %r with %d choice(s)",
                    scene.scene_name, question.question_text, len(question.choices),
                )
                continue
            playable.append(question)
        if not self._settings.ask_all_questions:
            playable = playable[: self._settings.questions_per_scene]
        return playable

    # ------------------------------------------------------------------
    # Game over
    # ------------------------------------------------------------------

    def _on_depleted(self) -> None:
        self._enter_game_over()

    def _enter_game_over(self) -> None:
        if self._game_over:
            return
        self._game_over = True
        logger.warning("Game over: affection depleted")
        if self._task is not _current_task():
            self._cancel_run()
        self._dialogue.stop()
        self._set_phase("game_over")
        self._presenter.show_game_over()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_phase(self, phase: Phase) -> None:
        old, self._phase = self._phase, phase
        if old != phase:
            logger.debug("Phase %s -> %s", old, phase)
            self.phase_changed.emit(old, phase)

    def _reset_scene_state(self, scene: Scene | None) -> None:
        self._scene = scene
        self._questions = []
        self._question_index = 0
        self._correct_count = 0

    def _cancel_run(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _fail(self, message: str) -> None:
        logger.error(message)
        self._error = message
        self._presenter.show_error(message)

    def _on_run_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Game loop crashed", exc_info=exc)
            self._fail(f"Game loop crashed: {exc}")

    def _render(self, text: str) -> str:
        ctx = build_context(
            self._settings.character_name,
            self._settings.player_name,
            day=self._bank.day,
            scene_name=self._scene.title if self._scene else "",
        )
        try:
            return render_text(text, ctx)
        except TextTemplateError as e:
            logger.warning("Using raw text, %s", e)
            return text

    def _render_question(self, question: Question) -> Question:
        return question.model_copy(update={
            "question_text": self._render(question.question_text),
            "choices": [self._render(c) for c in question.choices],
        })


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
