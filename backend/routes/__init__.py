"""FastAPI API endpoints under /api.

Endpoint groups: health + settings, scenes (read-only content browser), and
game (the running session: state, player input, save/load). The game routes
are the UI boundary of the orchestrator: every click in the frontend maps to
one POST here.
"""

from fastapi import APIRouter

from .game import router as game_router
from .scenes import router as scenes_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(scenes_router)
router.include_router(game_router)
