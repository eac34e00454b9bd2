"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException, Request

from memory_lane.config import ConfigurationError, load_settings, update_settings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(request: Request):
    """Get stored game settings (defaults merged with settings.json)."""
    return load_settings(request.app.state.data_dir)


@router.patch("/settings")
async def patch_settings(request: Request, body: dict):
    """Update game settings (partial merge). Applied the next time the app starts."""
    try:
        return update_settings(request.app.state.data_dir, body)
    except ConfigurationError as e:
        raise HTTPException(400, str(e))
