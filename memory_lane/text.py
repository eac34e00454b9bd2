"""Handlebars rendering for authored scene text.

Dialogue lines, question prompts, choices and responses may reference the
play context:

  {{character}}  the speaking character's name (settings.character_name)
  {{player}}     the player's name, "you" when unset
  {{day}}        current day number
  {{scene}}      display name of the current scene

Plain text without ``{{`` is returned untouched and never compiled.
"""

from collections.abc import Callable
from typing import Any

import pybars

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class TextTemplateError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_text(template_str: str, context: dict[str, Any]) -> str:
    """Render authored text against the play context (compiled once per source)."""
    if "{{" not in template_str:
        return template_str
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise TextTemplateError(f"Template error: {e}") from e


def build_context(
    character_name: str,
    player_name: str = "",
    day: int = 1,
    scene_name: str = "",
) -> dict[str, Any]:
    return {
        "character": character_name,
        "player": player_name or "you",
        "day": day,
        "scene": scene_name,
    }
