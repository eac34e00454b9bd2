"""Scene bank — owns the authored scenes and decides which one plays next.

Two selection policies share the same day counter:

  random-unplayed   select_random_unplayed() picks uniformly among scenes not
                    yet played today. Once every scene has been played the
                    played-today set is cleared and the day advances.
  shuffled queue    shuffle_daily_queue() stores a random permutation;
                    pop_next_from_queue() takes from its front and reshuffles
                    (advancing the day) when it runs dry.

All randomness goes through the injected ``random.Random`` so a seeded bank
selects reproducibly. Nothing here does I/O.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Iterable

from memory_lane.models import Question, Scene

logger = logging.getLogger(__name__)


class SceneBankError(LookupError):
    """Base class for scene bank failures."""


class DuplicateSceneError(SceneBankError):
    """Raised when registering a scene whose identifier is already taken."""


class EmptyBankError(SceneBankError):
    """Raised when selecting from a bank with no scenes registered."""


class SceneNotFoundError(SceneBankError):
    """Raised when looking up an identifier the bank does not hold."""


class SceneBank:
    def __init__(self, scenes: Iterable[Scene] = (), rng: random.Random | None = None) -> None:
        self._scenes: dict[str, Scene] = {}
        self._rng = rng or random.Random()
        self._played_today: set[str] = set()
        self._day = 1
        self._current: Scene | None = None
        self._queue: deque[Scene] = deque()
        self._rotation_started = False
        for scene in scenes:
            self.register(scene)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def current_scene(self) -> Scene | None:
        return self._current

    @property
    def day(self) -> int:
        return self._day

    @property
    def total_scenes(self) -> int:
        return len(self._scenes)

    @property
    def played_today(self) -> frozenset[str]:
        return frozenset(self._played_today)

    @property
    def scenes(self) -> list[Scene]:
        return list(self._scenes.values())

    def describe(self) -> str:
        current = self._current.scene_name if self._current else "None"
        return (
            f"Day: {self._day} | Scenes Played: {len(self._played_today)}/{len(self._scenes)}"
            f" | Current: {current}"
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, scene: Scene) -> None:
        if scene.scene_name in self._scenes:
            raise DuplicateSceneError(f"Scene {scene.scene_name!r} already exists in bank")
        self._scenes[scene.scene_name] = scene
        logger.debug("Registered scene %s", scene.scene_name)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_random_unplayed(self) -> Scene:
        if not self._scenes:
            raise EmptyBankError("No scenes registered")

        available = [s for name, s in self._scenes.items() if name not in self._played_today]
        if not available:
            self._played_today.clear()
            self._day += 1
            available = list(self._scenes.values())
            logger.info("Day %d started, all scenes available again", self._day)

        scene = self._rng.choice(available)
        self._played_today.add(scene.scene_name)
        self._current = scene
        logger.info(
            "Selected scene %s (%d/%d played today)",
            scene.scene_name, len(self._played_today), len(self._scenes),
        )
        return scene

    def select_by_identifier(self, scene_id: str) -> Scene:
        scene = self.get(scene_id)
        self._current = scene
        return scene

    def get(self, scene_id: str) -> Scene:
        """Look up a scene without touching the current-scene pointer."""
        try:
            return self._scenes[scene_id]
        except KeyError:
            raise SceneNotFoundError(f"Scene {scene_id!r} not found") from None

    def questions_for(self, scene_id: str) -> list[Question]:
        return list(self.select_by_identifier(scene_id).questions)

    def current_questions(self) -> list[Question]:
        if self._current is None:
            logger.warning("No current scene set")
            return []
        return list(self._current.questions)

    # ------------------------------------------------------------------
    # Shuffled rotation
    # ------------------------------------------------------------------

    def shuffle_daily_queue(self) -> list[Scene]:
        order = list(self._scenes.values())
        self._rng.shuffle(order)  # Fisher-Yates
        self._queue = deque(order)
        self._rotation_started = True
        return order

    def pop_next_from_queue(self) -> Scene:
        if not self._scenes:
            raise EmptyBankError("No scenes registered")
        if not self._queue:
            # Draining a rotation ends the day; the very first fill does not.
            if self._rotation_started:
                self._day += 1
                logger.info("Day %d started, scene queue reshuffled", self._day)
            self.shuffle_daily_queue()
        self._current = self._queue.popleft()
        return self._current

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def reset_daily_progress(self) -> None:
        self._played_today.clear()
        self._day = 1
        self._current = None
        self._queue.clear()
        self._rotation_started = False
        logger.info("Daily progress reset")

    def restore(
        self,
        day: int,
        played_today: Iterable[str] = (),
        current_scene_id: str = "",
    ) -> None:
        """Restore tracking state from a save. Unknown identifiers are dropped."""
        self._day = max(day, 1)
        self._played_today.clear()
        for name in played_today:
            if name in self._scenes:
                self._played_today.add(name)
            else:
                logger.warning("Saved scene %r no longer exists; dropped from progress", name)
        self._current = self._scenes.get(current_scene_id) if current_scene_id else None
        if current_scene_id and self._current is None:
            logger.warning("Saved current scene %r no longer exists", current_scene_id)
