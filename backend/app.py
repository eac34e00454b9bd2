import asyncio
import contextlib
import random
from collections.abc import AsyncIterator
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.routes import router
from memory_lane.config import (
    GameSettings,
    content_dir_from_env,
    data_dir_from_env,
    load_settings,
    seed_from_env,
)
from memory_lane.content import load_scene_dir
from memory_lane.game import build_game
from memory_lane.storage import SaveStore

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONTENT_DIR = Path(__file__).parent.parent / "content" / "scenes"


def create_app(
    data_dir: Path | None = None,
    content_dir: Path | None = None,
    settings: GameSettings | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    resolved_data = data_dir or data_dir_from_env(DEFAULT_DATA_DIR)
    resolved_content = content_dir or content_dir_from_env(DEFAULT_CONTENT_DIR)
    if settings is None:
        settings = load_settings(resolved_data)
    if rng is None:
        rng = random.Random(seed_from_env())

    game = build_game(
        settings,
        load_scene_dir(resolved_content),
        store=SaveStore(resolved_data),
        rng=rng,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        autosave = None
        if settings.autosave:
            autosave = asyncio.create_task(game.autosave_loop())
        try:
            yield
        finally:
            if autosave is not None:
                autosave.cancel()
            game.close()

    app = FastAPI(title="Memory Lane", lifespan=lifespan)
    app.state.game = game
    app.state.data_dir = resolved_data
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR / CONTENT_DIR env vars or defaults)
app = create_app()
