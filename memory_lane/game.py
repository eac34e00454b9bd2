"""Composition root.

build_game() constructs the scene bank, affection tracker, dialogue player and
orchestrator from one GameSettings object and wires them together explicitly.
The returned Game owns all of them plus the optional save store.

    game = build_game(settings, load_scene_dir(content_dir), store=SaveStore(data_dir))
    game.load()
    game.start()          # inside a running event loop
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Iterable

from memory_lane.affection import AffectionTracker
from memory_lane.bank import SceneBank
from memory_lane.config import GameSettings
from memory_lane.dialogue import DialoguePlayer, Sleep
from memory_lane.flow import GameFlow
from memory_lane.models import SaveData, Scene
from memory_lane.presenter import AudioCues, Presenter, ScreenState
from memory_lane.storage import SaveStore

logger = logging.getLogger(__name__)


class Game:
    def __init__(
        self,
        *,
        settings: GameSettings,
        bank: SceneBank,
        affection: AffectionTracker,
        dialogue: DialoguePlayer,
        presenter: Presenter,
        store: SaveStore | None = None,
        audio: AudioCues | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.bank = bank
        self.affection = affection
        self.dialogue = dialogue
        self.presenter = presenter
        self.store = store
        self._sleep = sleep
        self.flow = GameFlow(
            bank=bank,
            affection=affection,
            dialogue=dialogue,
            presenter=presenter,
            settings=settings,
            audio=audio,
            sleep=sleep,
            after_scene=self._autosave if settings.autosave else None,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.flow.start()

    def restart(self) -> None:
        if isinstance(self.presenter, ScreenState):
            self.presenter.reset()
        self.flow.restart()

    def close(self) -> None:
        self.flow.close()
        if isinstance(self.presenter, ScreenState):
            self.presenter.detach()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> SaveData:
        current = self.bank.current_scene
        return SaveData(
            affection=self.affection.current,
            day=self.bank.day,
            last_scene=current.scene_name if current else "",
            played_scenes=sorted(self.bank.played_today),
        )

    def save(self) -> SaveData | None:
        if self.store is None:
            logger.warning("No save store configured; nothing saved")
            return None
        data = self.snapshot()
        self.store.save(data)
        return data

    def load(self) -> bool:
        """Apply the stored save, if any. Returns whether one was applied."""
        if self.store is None:
            return False
        data = self.store.load()
        if data is None:
            return False
        self.bank.restore(data.day, data.played_scenes, data.last_scene)
        if self.flow.is_game_over and data.affection > 0:
            # The save outlives this game over; resume from idle.
            self.flow.reset()
            if isinstance(self.presenter, ScreenState):
                self.presenter.reset()
        self.affection.set(data.affection)
        logger.info("Game loaded (affection=%d, day=%d)", data.affection, data.day)
        return True

    async def autosave_loop(self) -> None:
        """Save every ``autosave_interval`` seconds while the game loop runs."""
        while True:
            await self._sleep(self.settings.autosave_interval)
            if self.flow.is_running:
                self._autosave()

    def _autosave(self) -> None:
        if self.store is None:
            return
        try:
            self.save()
        except OSError as e:
            logger.error("Autosave failed: %s", e)


def build_game(
    settings: GameSettings | None = None,
    scenes: Iterable[Scene] = (),
    *,
    store: SaveStore | None = None,
    presenter: Presenter | None = None,
    audio: AudioCues | None = None,
    rng: random.Random | None = None,
    sleep: Sleep = asyncio.sleep,
) -> Game:
    settings = settings or GameSettings()
    bank = SceneBank(scenes, rng=rng)
    affection = AffectionTracker(
        max_affection=settings.max_affection,
        starting_affection=settings.starting_affection,
        thresholds=settings.thresholds,
    )
    dialogue = DialoguePlayer(
        char_delay=settings.char_delay,
        allow_skip=settings.allow_skip,
        sleep=sleep,
    )
    if presenter is None:
        presenter = ScreenState()
    if isinstance(presenter, ScreenState):
        presenter.attach(dialogue, affection)

    logger.info("Game built with %d scene(s)", bank.total_scenes)
    return Game(
        settings=settings,
        bank=bank,
        affection=affection,
        dialogue=dialogue,
        presenter=presenter,
        store=store,
        audio=audio,
        sleep=sleep,
    )
