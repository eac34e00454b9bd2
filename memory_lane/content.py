"""Scene content files.

Scenes are authored as JSON, one scene object per file or a list of scene
objects:

    {
      "sceneName": "rooftop",
      "displayName": "The Rooftop",
      "backgroundSprite": "bg/rooftop",
      "dialogueLines": ["...", "..."],
      "questions": [
        {"questionText": "...", "choices": ["A", "B", "C"],
         "correctAnswerIndex": 1,
         "correctResponse": "...", "wrongResponse": "..."}
      ],
      "perfectAffectionBonus": 10,
      "wrongAnswerPenalty": 5
    }

Malformed JSON or a schema violation raises ContentError. Authoring defects
that still parse (no dialogue, a bad correct index, too few choices) are only
reported by lint_scene(); the game tolerates them at play time.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from memory_lane.models import Scene

logger = logging.getLogger(__name__)

_scene_list = TypeAdapter(list[Scene])


class ContentError(ValueError):
    """Raised when a content file cannot be decoded into scenes."""


def parse_scenes(text: str, source: str = "<string>") -> list[Scene]:
    """Parse one scene object or a list of them."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentError(f"{source}: invalid JSON: {e}") from e
    if isinstance(data, dict):
        data = [data]
    try:
        return _scene_list.validate_python(data)
    except ValidationError as e:
        raise ContentError(f"{source}: {e}") from e


def parse_scene(text: str) -> Scene:
    scenes = parse_scenes(text)
    if len(scenes) != 1:
        raise ContentError(f"Expected exactly one scene, got {len(scenes)}")
    return scenes[0]


def load_scene_file(path: Path) -> list[Scene]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ContentError(f"{path}: not valid UTF-8: {e}") from e
    return parse_scenes(text, source=str(path))


def load_scene_dir(path: Path) -> list[Scene]:
    """Load every ``*.json`` under ``path`` (sorted by name) and lint the result."""
    if not path.is_dir():
        logger.error("Content directory %s does not exist", path)
        return []
    scenes: list[Scene] = []
    for file in sorted(path.glob("*.json")):
        loaded = load_scene_file(file)
        for scene in loaded:
            for warning in lint_scene(scene):
                logger.warning("%s: %s", file.name, warning)
        scenes.extend(loaded)
    logger.info("Loaded %d scene(s) from %s", len(scenes), path)
    return scenes


def dump_scene(scene: Scene) -> str:
    """Serialise a scene back to the authoring JSON format."""
    return scene.model_dump_json(by_alias=True, indent=2)


def lint_scene(scene: Scene) -> list[str]:
    """Return human-readable content warnings for a scene (empty if clean)."""
    warnings: list[str] = []
    name = scene.scene_name
    if not scene.display_name:
        warnings.append(f"Scene '{name}' has no display name")
    if not scene.dialogue_lines:
        warnings.append(f"Scene '{name}' has no dialogue lines")
    if not scene.questions:
        warnings.append(f"Scene '{name}' has no questions")
    for i, q in enumerate(scene.questions, start=1):
        if not q.question_text.strip():
            warnings.append(f"Scene '{name}' question {i} has no text")
        if len(q.choices) < 2:
            warnings.append(f"Scene '{name}' question {i} has {len(q.choices)} choice(s); it will be skipped")
        elif not 0 <= q.correct_answer_index < len(q.choices):
            warnings.append(
                f"Scene '{name}' question {i} correct index {q.correct_answer_index} "
                f"is out of range for {len(q.choices)} choices; it can never be answered correctly"
            )
    return warnings
