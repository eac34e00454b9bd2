"""Game session endpoints: state, player input, save/load."""

from fastapi import APIRouter, Depends, HTTPException

from memory_lane.config import ConfigurationError
from memory_lane.game import Game
from memory_lane.presenter import ScreenState

from .deps import get_game
from .models import AffectionBody, AnswerBody, GameView, InputResult

router = APIRouter()


def _view(game: Game) -> GameView:
    screen = game.presenter.screen if isinstance(game.presenter, ScreenState) else None
    return GameView(status=game.flow.status(), screen=screen)


@router.get("/game")
async def get_game_state(game: Game = Depends(get_game)) -> GameView:
    """Current phase, affection and what the screen should show."""
    return _view(game)


@router.post("/game/start")
async def start_game(game: Game = Depends(get_game)) -> GameView:
    """Start the game loop (no-op if already running)."""
    try:
        game.start()
    except ConfigurationError as e:
        raise HTTPException(409, f"Cannot start: {e}")
    return _view(game)


@router.post("/game/restart")
async def restart_game(game: Game = Depends(get_game)) -> GameView:
    """Reset affection and day progress and start over."""
    try:
        game.restart()
    except ConfigurationError as e:
        raise HTTPException(409, f"Cannot start: {e}")
    return _view(game)


@router.post("/game/next-dialogue")
async def next_dialogue(game: Game = Depends(get_game)) -> InputResult:
    """Finish the line being typed, or show the next one."""
    accepted = game.flow.next_dialogue_clicked()
    return InputResult(accepted=accepted, status=game.flow.status())


@router.post("/game/skip-dialogue")
async def skip_dialogue(game: Game = Depends(get_game)) -> InputResult:
    """Skip the rest of the dialogue."""
    accepted = game.flow.skip_dialogue()
    return InputResult(accepted=accepted, status=game.flow.status())


@router.post("/game/answer")
async def submit_answer(body: AnswerBody, game: Game = Depends(get_game)) -> InputResult:
    """Submit the chosen answer index for the current question."""
    accepted = game.flow.submit_answer(body.index)
    return InputResult(accepted=accepted, status=game.flow.status())


@router.post("/game/continue")
async def continue_after_result(game: Game = Depends(get_game)) -> InputResult:
    """Move on after the answer feedback. Repeat clicks are ignored."""
    accepted = game.flow.continue_clicked()
    return InputResult(accepted=accepted, status=game.flow.status())


@router.post("/game/save")
async def save_game(game: Game = Depends(get_game)):
    """Write the current affection and day progress to the save slot."""
    data = game.save()
    if data is None:
        raise HTTPException(409, "No save store configured")
    return data


@router.post("/game/load")
async def load_game(game: Game = Depends(get_game)) -> GameView:
    """Apply the stored save to the running session."""
    if not game.load():
        raise HTTPException(404, "No save data")
    return _view(game)


@router.post("/game/debug/affection")
async def adjust_affection(body: AffectionBody, game: Game = Depends(get_game)) -> GameView:
    """Debug: add (positive delta) or subtract (negative delta) affection."""
    if body.delta > 0:
        game.affection.add(body.delta)
    elif body.delta < 0:
        game.affection.subtract(-body.delta)
    return _view(game)
