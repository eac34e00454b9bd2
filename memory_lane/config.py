"""Game settings (pacing, delays, affection bounds and thresholds).

Settings are a pydantic model with defaults for every field. A settings file
(``settings.json`` in the data directory) stores only what the player or
integrator changed; ``load_settings()`` merges it over the defaults and
``update_settings()`` applies a partial update and persists the result.

Environment variables (read from ``.env`` at the repo root by the launcher and
the app factory):

  DATA_DIR     save file + settings.json      (default ./data)
  CONTENT_DIR  scene JSON files               (default ./content/scenes)
  RANDOM_SEED  seed for scene selection       (default: unseeded)
  LOG_LEVEL    logging level for main.py      (default INFO)
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


class AffectionThresholds(BaseModel):
    """Lower bounds of the affection bands (depleted is always exactly 0)."""

    perfect: int = 90
    happy: int = 70
    neutral: int = 40

    @model_validator(mode="after")
    def _descending(self) -> AffectionThresholds:
        if not self.perfect > self.happy > self.neutral > 0:
            raise ValueError("thresholds must satisfy perfect > happy > neutral > 0")
        return self


class GameSettings(BaseModel):
    max_affection: int = Field(default=100, gt=0)
    starting_affection: int = Field(default=50, ge=0)
    thresholds: AffectionThresholds = Field(default_factory=AffectionThresholds)

    # Dialogue reveal
    char_delay: float = Field(default=0.05, ge=0)
    allow_skip: bool = True

    # Phase pacing (seconds)
    first_dialogue_delay: float = Field(default=1.4, ge=0)
    delay_after_dialogue: float = Field(default=1.0, ge=0)
    delay_after_question: float = Field(default=1.5, ge=0)
    delay_before_next_scene: float = Field(default=2.0, ge=0)

    # Question flow
    ask_all_questions: bool = True
    questions_per_scene: int = Field(default=3, gt=0)

    # Persistence
    autosave: bool = True
    autosave_interval: float = Field(default=60.0, gt=0)

    # Text templating
    character_name: str = "Aria"
    player_name: str = ""

    @model_validator(mode="after")
    def _thresholds_within_max(self) -> GameSettings:
        if self.thresholds.perfect > self.max_affection:
            raise ValueError(
                f"thresholds.perfect ({self.thresholds.perfect}) exceeds max_affection ({self.max_affection})"
            )
        return self


class ConfigurationError(RuntimeError):
    """Raised when the game cannot start: missing collaborator, empty bank, bad settings."""


def load_settings(path: Path) -> GameSettings:
    """Read settings, returning defaults merged with stored values.

    ``path`` is the data directory. A missing file yields pure defaults.
    """
    file = path / SETTINGS_FILE
    if not file.is_file():
        return GameSettings()
    try:
        stored = json.loads(file.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{file} is not valid JSON: {e}") from e
    return _validated(GameSettings().model_dump(), stored)


def update_settings(path: Path, fields: dict[str, Any]) -> GameSettings:
    """Merge fields into the stored settings and persist. Returns the full settings."""
    current = load_settings(path).model_dump()
    settings = _validated(current, fields)
    path.mkdir(parents=True, exist_ok=True)
    (path / SETTINGS_FILE).write_text(settings.model_dump_json(indent=2))
    return settings


def _validated(base: dict[str, Any], fields: dict[str, Any]) -> GameSettings:
    merged = dict(base)
    for key, value in fields.items():
        if key not in GameSettings.model_fields:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        if key == "thresholds" and isinstance(value, dict):
            merged["thresholds"] = {**merged["thresholds"], **value}
        else:
            merged[key] = value
    try:
        return GameSettings.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def data_dir_from_env(default: Path) -> Path:
    return Path(os.getenv("DATA_DIR", str(default)))


def content_dir_from_env(default: Path) -> Path:
    return Path(os.getenv("CONTENT_DIR", str(default)))


def seed_from_env() -> int | None:
    raw = os.getenv("RANDOM_SEED", "")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("RANDOM_SEED=%r is not an integer; selection will be unseeded", raw)
        return None
