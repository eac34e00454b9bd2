"""Answer scoring.

One rule, applied once per submitted answer: the chosen index either equals
the question's correct index (affection += scene bonus) or it does not
(affection -= scene penalty). Out-of-range choices are simply wrong, and a
question whose own correct index is out of range can never be answered
correctly. Nothing here raises on bad content.
"""

from __future__ import annotations

import logging

from memory_lane.affection import AffectionTracker
from memory_lane.models import AnswerResult, Question, Scene

logger = logging.getLogger(__name__)


def is_correct_answer(question: Question, chosen: int) -> bool:
    return question.is_correct(chosen)


def apply_answer(
    tracker: AffectionTracker,
    scene: Scene,
    question: Question,
    chosen: int,
) -> AnswerResult:
    """Score ``chosen`` against ``question`` and push the change into ``tracker``."""
    if not question.is_well_formed:
        logger.warning(
            "Scene %s: question %r is malformed (correct index %d, %d choices); scoring as wrong",
            scene.scene_name, question.question_text,
            question.correct_answer_index, len(question.choices),
        )

    correct = is_correct_answer(question, chosen)
    if correct:
        delta = scene.perfect_affection_bonus
        tracker.add(delta)
    else:
        delta = -scene.wrong_answer_penalty
        tracker.subtract(scene.wrong_answer_penalty)

    logger.info("Answer %d is %s (%+d)", chosen, "correct" if correct else "wrong", delta)
    return AnswerResult(
        correct=correct,
        chosen_index=chosen,
        delta=delta,
        response=question.response_for(correct),
    )
