"""Pure scoring functions for the quiz and the classification phase."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import math

from proctor_app.core.models import Question


def percentage(correct: int, total: int) -> int:
    """Return ``round(100 * correct / total)`` rounding halves up; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(math.floor(100.0 * correct / total + 0.5))


def corrections(answers: Sequence[int], questions: Sequence[Question]) -> list[bool]:
    """Per-question correctness, index-aligned with ``questions``.

    A missing answer or a recorded ``-1`` is never correct.
    """
    result: list[bool] = []
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        result.append(answer is not None and answer >= 0 and answer == question.correct_answer)
    return result


def quiz_score(answers: Sequence[int], questions: Sequence[Question]) -> tuple[int, int]:
    """Return ``(correct_count, score)`` for a set of answers."""
    correct = sum(corrections(answers, questions))
    return correct, percentage(correct, len(questions))


def classification_score(
    assignments: Mapping[str, str],
    expected: Mapping[str, str],
) -> tuple[int, int]:
    """Return ``(correctly_placed, score)``; unassigned terms count as incorrect."""
    correct = sum(1 for term_id, category in expected.items() if assignments.get(term_id) == category)
    return correct, percentage(correct, len(expected))
