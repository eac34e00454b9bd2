"""End-to-end game flow tests with a mocked presenter and zero delays.

Each test drives the orchestrator the way a UI would: wait for the flow to
ask for input (``awaiting``), then send the click.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from memory_lane.config import ConfigurationError
from memory_lane.flow import GameFlow
from memory_lane.game import build_game
from memory_lane.models import Question
from memory_lane.presenter import MUSIC_IN_GAME, MUSIC_QUESTIONS, SOUND_CORRECT, SOUND_WRONG


@pytest.fixture
async def build(settings, presenter, audio, rng, store):
    """Build games from custom scene lists; closed after the test."""
    built = []

    def make(scenes, **overrides):
        s = settings.model_copy(update=overrides)
        g = build_game(s, scenes, store=store, presenter=presenter, audio=audio, rng=rng)
        built.append(g)
        return g

    yield make
    for g in built:
        g.close()
    await asyncio.sleep(0)


def _record_phases(flow):
    phases = []
    flow.phase_changed.connect(lambda old, new: phases.append(new))
    return phases


async def _through_dialogue(game, until):
    await until(lambda: game.flow.phase == "dialogue" and game.dialogue.is_active)
    assert game.flow.skip_dialogue()


# ── Scene loop ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_correct_answer_loops_to_next_scene(build, make_scene, until):
    game = build([make_scene("cafe", lines=["Hi", "Bye"], bonus=10, penalty=5)])
    phases = _record_phases(game.flow)
    game.start()

    await _through_dialogue(game, until)
    await until(lambda: game.flow.awaiting == "answer")
    assert game.flow.submit_answer(0)

    await until(lambda: game.flow.awaiting == "continue")
    assert game.affection.current == 60
    assert game.flow.correct_count == 1
    assert game.flow.continue_clicked()

    await until(lambda: phases.count("scene_setup") == 2)
    assert phases[:5] == ["scene_setup", "dialogue", "question_loop", "transitioning", "scene_setup"]
    assert game.bank.day == 2
    assert not game.flow.is_game_over


@pytest.mark.asyncio
async def test_wrong_answer_to_zero_is_game_over(build, make_scene, presenter, until):
    game = build([make_scene("cafe", bonus=10, penalty=5)], starting_affection=3)
    phases = _record_phases(game.flow)
    game.start()

    await _through_dialogue(game, until)
    await until(lambda: game.flow.awaiting == "answer")
    game.flow.submit_answer(1)

    await until(lambda: not game.flow.is_running)
    assert game.affection.current == 0
    assert game.flow.phase == "game_over"
    assert game.flow.is_game_over
    assert phases.count("scene_setup") == 1
    presenter.show_game_over.assert_called_once()
    presenter.show_result.assert_not_called()


@pytest.mark.asyncio
async def test_click_through_dialogue_line_by_line(build, make_scene, presenter, until):
    game = build([make_scene("cafe", lines=["One", "Two"])])
    game.start()
    await until(lambda: game.flow.phase == "dialogue" and game.dialogue.is_active)

    await game.dialogue.wait_typing()
    assert game.flow.next_dialogue_clicked()
    assert game.dialogue.current_index == 1
    await game.dialogue.wait_typing()
    assert game.flow.next_dialogue_clicked()

    await until(lambda: game.flow.awaiting == "answer")
    presenter.show_question.assert_called_once()
    question, number, total = presenter.show_question.call_args.args
    assert (number, total) == (1, 1)


@pytest.mark.asyncio
async def test_empty_dialogue_goes_straight_to_questions(build, make_scene, until):
    game = build([make_scene("quiet", lines=[])])
    game.start()
    await until(lambda: game.flow.awaiting == "answer")
    assert game.flow.phase == "question_loop"


@pytest.mark.asyncio
async def test_scene_without_questions_moves_on(build, make_scene, until):
    game = build([make_scene("a", lines=[], questions=[]), make_scene("b", lines=[], questions=[])])
    phases = _record_phases(game.flow)
    game.start()
    await until(lambda: phases.count("scene_setup") >= 3)
    assert game.bank.day >= 2


@pytest.mark.asyncio
async def test_malformed_questions(build, make_scene, until):
    questions = [
        Question(question_text="One choice", choices=["Only"]),
        Question(question_text="Bad index", choices=["A", "B"], correct_answer_index=5),
    ]
    game = build([make_scene("odd", lines=[], questions=questions)])
    game.start()
    await until(lambda: game.flow.awaiting == "answer")
    assert game.flow.status().question_total == 1

    game.flow.submit_answer(5)
    await until(lambda: game.flow.awaiting == "continue")
    assert game.affection.current == 45


@pytest.mark.asyncio
async def test_questions_per_scene_limit(build, make_scene, until):
    questions = [Question(question_text=f"Q{i}", choices=["A", "B"]) for i in range(5)]
    game = build([make_scene("quiz", lines=[], questions=questions)],
                 ask_all_questions=False, questions_per_scene=2)
    game.start()
    await until(lambda: game.flow.awaiting == "answer")
    assert game.flow.status().question_total == 2


@pytest.mark.asyncio
async def test_multiple_questions_in_order(build, make_scene, presenter, until):
    questions = [
        Question(question_text="First", choices=["A", "B"], correct_answer_index=0),
        Question(question_text="Second", choices=["A", "B"], correct_answer_index=1),
    ]
    game = build([make_scene("quiz", lines=[], questions=questions)])
    game.start()

    for answer in (0, 0):
        await until(lambda: game.flow.awaiting == "answer")
        game.flow.submit_answer(answer)
        await until(lambda: game.flow.awaiting == "continue")
        game.flow.continue_clicked()

    texts = [c.args[0].question_text for c in presenter.show_question.call_args_list]
    assert texts[:2] == ["First", "Second"]
    assert [c.args[0] for c in presenter.show_result.call_args_list[:2]] == [True, False]
    assert game.affection.current == 55


# ── Input handling ───────────────────────────────────────


@pytest.mark.asyncio
async def test_repeat_continue_is_dropped(build, make_scene, until):
    questions = [Question(question_text=f"Q{i}", choices=["A", "B"]) for i in range(2)]
    game = build([make_scene("quiz", lines=[], questions=questions)])
    game.start()

    await until(lambda: game.flow.awaiting == "answer")
    game.flow.submit_answer(0)
    await until(lambda: game.flow.awaiting == "continue")
    assert game.flow.continue_clicked()
    assert not game.flow.continue_clicked()

    await until(lambda: game.flow.awaiting == "answer")
    assert game.flow.status().question_number == 2


@pytest.mark.asyncio
async def test_continue_ignored_during_transition_delay(settings, make_scene, presenter, until):
    gate = asyncio.Event()

    async def sleep(seconds):
        if seconds == 9:
            await gate.wait()
        await asyncio.sleep(0)

    game = build_game(
        settings.model_copy(update={"delay_after_question": 9}),
        [make_scene("quiz", lines=[])],
        presenter=presenter,
        sleep=sleep,
    )
    game.start()

    await until(lambda: game.flow.awaiting == "answer")
    game.flow.submit_answer(0)
    await until(lambda: game.flow.awaiting == "continue")
    assert game.flow.continue_clicked()
    await until(lambda: game.flow._transitioning)
    assert game.flow.awaiting is None
    assert not game.flow.continue_clicked()

    gate.set()
    await until(lambda: game.flow.phase == "transitioning")
    game.close()


@pytest.mark.asyncio
async def test_input_ignored_in_wrong_phase(build, make_scene, until):
    game = build([make_scene("cafe")])
    assert not game.flow.submit_answer(0)
    assert not game.flow.continue_clicked()
    assert not game.flow.next_dialogue_clicked()

    game.start()
    await until(lambda: game.flow.awaiting == "answer" or game.dialogue.is_active)
    assert not game.flow.submit_answer(0)


# ── Game over ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_depleted_during_dialogue_preempts_scene(build, make_scene, presenter, until):
    game = build([make_scene("cafe", lines=["A rather long line of dialogue"])])
    game.start()
    await until(lambda: game.flow.phase == "dialogue" and game.dialogue.is_active)

    game.affection.subtract(100)
    assert game.flow.phase == "game_over"
    assert not game.dialogue.is_active
    await until(lambda: not game.flow.is_running)

    # A second depletion does not re-enter game over.
    game.affection.set(0)
    presenter.show_game_over.assert_called_once()
    assert not game.flow.next_dialogue_clicked()


@pytest.mark.asyncio
async def test_start_after_game_over_is_noop(build, make_scene, until):
    game = build([make_scene("cafe")])
    game.start()
    await until(lambda: game.flow.phase == "dialogue")
    game.affection.set(0)
    game.start()
    assert not game.flow.is_running


@pytest.mark.asyncio
async def test_restart_after_game_over(build, make_scene, presenter, until):
    game = build([make_scene("cafe")])
    game.start()
    await until(lambda: game.flow.phase == "dialogue")
    game.affection.set(0)
    assert game.flow.is_game_over

    game.restart()
    assert not game.flow.is_game_over
    assert game.affection.current == 50
    assert game.bank.day == 1
    await until(lambda: game.flow.phase == "dialogue" and game.dialogue.is_active)
    assert game.flow.is_running


# ── Configuration errors ─────────────────────────────────


@pytest.mark.asyncio
async def test_empty_bank_cannot_start(build, presenter):
    game = build([])
    with pytest.raises(ConfigurationError):
        game.start()
    presenter.show_error.assert_called_once()
    assert game.flow.status().error
    assert not game.flow.is_running


def test_missing_collaborator(presenter):
    with pytest.raises(ConfigurationError, match="bank"):
        GameFlow(bank=None, affection=MagicMock(), dialogue=MagicMock(), presenter=presenter)


@pytest.mark.asyncio
async def test_crash_in_run_loop_is_reported(build, make_scene, presenter, until):
    presenter.show_scene.side_effect = RuntimeError("screen gone")
    game = build([make_scene("cafe")])
    game.start()
    await until(lambda: presenter.show_error.called)
    assert "screen gone" in game.flow.status().error


# ── Presentation ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_text_is_rendered_with_names(build, make_scene, presenter, until):
    question = Question(question_text="Do you like {{character}}?", choices=["Yes, {{player}} does", "No"])
    game = build([make_scene("cafe", lines=["Hi {{player}}"], questions=[question])],
                 character_name="Aria", player_name="Kai")
    game.start()
    await until(lambda: game.flow.phase == "dialogue" and game.dialogue.is_active)
    await game.dialogue.wait_typing()
    assert game.dialogue.visible_text == "Hi Kai"

    game.flow.skip_dialogue()
    await until(lambda: game.flow.awaiting == "answer")
    shown = presenter.show_question.call_args.args[0]
    assert shown.question_text == "Do you like Aria?"
    assert shown.choices == ["Yes, Kai does", "No"]


@pytest.mark.asyncio
async def test_audio_cues(build, make_scene, audio, until):
    game = build([make_scene("cafe", lines=[])])
    game.start()
    await until(lambda: game.flow.awaiting == "answer")
    game.flow.submit_answer(0)
    await until(lambda: game.flow.awaiting == "continue")
    game.flow.submit_answer(1)

    music = [c.args[0] for c in audio.play_music.call_args_list]
    assert music[:2] == [MUSIC_IN_GAME, MUSIC_QUESTIONS]
    audio.play_sound.assert_called_once_with(SOUND_CORRECT)
    assert SOUND_WRONG not in [c.args[0] for c in audio.play_sound.call_args_list]


@pytest.mark.asyncio
async def test_status_and_wait_for_phase(build, make_scene):
    game = build([make_scene("cafe")])
    assert game.flow.status().phase == "idle"
    game.start()
    assert await game.flow.wait_for_phase("dialogue") == "dialogue"
    status = game.flow.status()
    assert status.scene_name == "cafe"
    assert status.day == 1
    assert status.affection == 50
    assert status.band == "neutral"
    assert "State: dialogue" in game.flow.describe()


@pytest.mark.asyncio
async def test_autosave_after_scene(build, make_scene, store, until):
    game = build([make_scene("cafe", lines=[])], autosave=True)
    phases = _record_phases(game.flow)
    game.start()
    await until(lambda: game.flow.awaiting == "answer")
    game.flow.submit_answer(0)
    await until(lambda: game.flow.awaiting == "continue")
    game.flow.continue_clicked()
    await until(lambda: phases.count("scene_setup") == 2)
    assert store.load().affection == 60
