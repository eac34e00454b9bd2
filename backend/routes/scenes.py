"""Read-only scene content endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from memory_lane.bank import SceneNotFoundError
from memory_lane.content import lint_scene
from memory_lane.game import Game

from .deps import get_game

router = APIRouter()


@router.get("/scenes")
async def list_scenes(game: Game = Depends(get_game)):
    """List all registered scenes with their content warnings."""
    return [
        {
            "scene_name": scene.scene_name,
            "display_name": scene.display_name,
            "questions": len(scene.questions),
            "warnings": lint_scene(scene),
        }
        for scene in game.bank.scenes
    ]


@router.get("/scenes/{scene_name}")
async def get_scene(scene_name: str, game: Game = Depends(get_game)):
    """Get a single scene in its authoring format."""
    try:
        scene = game.bank.get(scene_name)
    except SceneNotFoundError:
        raise HTTPException(404, "Scene not found")
    return scene.model_dump(by_alias=True)
