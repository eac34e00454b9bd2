"""Core domain models.

Scenes and questions are authored content: immutable once loaded, owned by
the scene bank. Pydantic is used for validation and serialisation at every
data boundary (content files, save files, API responses).

JSON uses the camelCase field names of the content format
(``sceneName``, ``dialogueLines``, ``correctAnswerIndex`` ...); Python code
uses the snake_case attribute names. Both are accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Band = Literal["depleted", "fading", "neutral", "happy", "perfect"]

Phase = Literal[
    "idle",
    "scene_setup",
    "dialogue",
    "question_loop",
    "transitioning",
    "game_over",
]

DEFAULT_CORRECT_RESPONSE = "You remember! That makes me so happy!"
DEFAULT_WRONG_RESPONSE = "You... you don't remember?"


class _ContentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Question(_ContentModel):
    """A single recall question with multiple choices.

    The correct index is not validated against the choices here: a bad index
    is a content defect that must not stop a scene from loading. Use
    ``is_well_formed`` or ``content.lint_scene`` to find those.
    """

    question_text: str
    choices: list[str] = Field(default_factory=list)
    correct_answer_index: int = 0
    correct_response: str = DEFAULT_CORRECT_RESPONSE
    wrong_response: str = DEFAULT_WRONG_RESPONSE

    @property
    def is_well_formed(self) -> bool:
        return len(self.choices) >= 2 and 0 <= self.correct_answer_index < len(self.choices)

    def is_correct(self, index: int) -> bool:
        if not 0 <= self.correct_answer_index < len(self.choices):
            return False
        return index == self.correct_answer_index

    def response_for(self, correct: bool) -> str:
        return self.correct_response if correct else self.wrong_response


class Scene(_ContentModel):
    """One authored unit of dialogue, questions and reward parameters."""

    scene_name: str  # unique identifier
    display_name: str = ""
    background_sprite: str = ""  # asset reference, resolved by the UI
    background_music: str = ""
    dialogue_lines: list[str] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)
    perfect_affection_bonus: int = Field(default=10, ge=0)
    wrong_answer_penalty: int = Field(default=5, ge=0)

    @property
    def title(self) -> str:
        return self.display_name or self.scene_name


class AnswerResult(BaseModel):
    """Outcome of scoring one submitted answer."""

    correct: bool
    chosen_index: int
    delta: int  # +bonus or -penalty as requested from the tracker
    response: str


class SaveData(BaseModel):
    """Snapshot written by the persistence boundary."""

    affection: int
    day: int = 1
    last_scene: str = ""
    played_scenes: list[str] = Field(default_factory=list)
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
