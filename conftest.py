import asyncio
import random
from unittest.mock import MagicMock

import pytest

from memory_lane.config import GameSettings
from memory_lane.game import build_game
from memory_lane.models import Question, Scene
from memory_lane.presenter import AudioCues, Presenter
from memory_lane.storage import SaveStore


def _make_scene(name, lines=("Hello.", "Do you remember?"), questions=None, bonus=10, penalty=5):
    """Build a scene with one well-formed question (correct index 0) by default."""
    if questions is None:
        questions = [Question(question_text=f"{name}?", choices=["Yes", "No"], correct_answer_index=0)]
    return Scene(
        scene_name=name,
        display_name=name.title(),
        dialogue_lines=list(lines),
        questions=questions,
        perfect_affection_bonus=bonus,
        wrong_answer_penalty=penalty,
    )


@pytest.fixture
def make_scene():
    return _make_scene


@pytest.fixture
def settings():
    """Settings with every delay at zero and autosave off."""
    return GameSettings(
        char_delay=0,
        first_dialogue_delay=0,
        delay_after_dialogue=0,
        delay_after_question=0,
        delay_before_next_scene=0,
        autosave=False,
    )


@pytest.fixture
def scenes():
    return [_make_scene("cafe"), _make_scene("park"), _make_scene("rooftop")]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def presenter():
    return MagicMock(spec=Presenter)


@pytest.fixture
def audio():
    return MagicMock(spec=AudioCues)


@pytest.fixture
def store(tmp_path):
    return SaveStore(tmp_path / "data")


@pytest.fixture
async def game(settings, scenes, rng, presenter, audio, store):
    g = build_game(settings, scenes, store=store, presenter=presenter, audio=audio, rng=rng)
    yield g
    g.close()
    await asyncio.sleep(0)


@pytest.fixture
def until():
    """Yield to the event loop until ``predicate()`` holds."""

    async def wait(predicate, limit=10_000):
        for _ in range(limit):
            if predicate():
                return
            await asyncio.sleep(0)
        raise AssertionError("condition not reached")

    return wait
