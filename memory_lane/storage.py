"""JSON file save store.

The persistence boundary of the game: one save slot, stored as a flat JSON
file under a configurable base directory. There is no database — reads and
writes go through plain helper methods that load and dump JSON.

Directory layout:

    {base}/
      save.json        ← SaveData (affection, day, last scene, played today)
      settings.json    ← GameSettings overrides (see memory_lane.config)
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from memory_lane.models import SaveData

logger = logging.getLogger(__name__)

SAVE_FILE = "save.json"


class SaveStore:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._base / SAVE_FILE

    def has_save(self) -> bool:
        return self.path.is_file()

    def load(self) -> SaveData | None:
        """Read the save slot. A missing or corrupt file reads as no save."""
        if not self.path.is_file():
            return None
        try:
            return SaveData.model_validate_json(self.path.read_text())
        except ValidationError as e:
            logger.error("Save file %s is corrupt, ignoring it: %s", self.path, e)
            return None

    def save(self, data: SaveData) -> None:
        # The slot is replaced atomically.
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(data.model_dump_json(indent=2))
        tmp.replace(self.path)
        logger.info("Game saved (affection=%d, day=%d)", data.affection, data.day)

    def delete(self) -> bool:
        if not self.path.is_file():
            return False
        self.path.unlink()
        logger.info("Save data deleted")
        return True
