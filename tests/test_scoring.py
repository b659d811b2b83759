from __future__ import annotations

from proctor_app.core.scoring import classification_score, corrections, percentage, quiz_score
from tests.conftest import make_question


def test_percentage_rounds_halves_up() -> None:
    assert percentage(1, 8) == 13
    assert percentage(2, 3) == 67
    assert percentage(1, 3) == 33
    assert percentage(5, 12) == 42
    assert percentage(3, 3) == 100


def test_percentage_of_empty_total_is_zero() -> None:
    assert percentage(0, 0) == 0


def test_missing_or_skipped_answers_are_never_correct() -> None:
    questions = [make_question("Q1", 0), make_question("Q2", 1), make_question("Q3", 2)]
    assert corrections([0, -1], questions) == [True, False, False]
    assert quiz_score([0, 1, -1], questions) == (2, 67)


def test_classification_score_counts_unassigned_as_wrong() -> None:
    expected = {"1": "asset", "2": "liability", "3": "revenue", "4": "expense"}
    assert classification_score({"1": "asset", "2": "asset"}, expected) == (1, 25)
    assert classification_score({}, expected) == (0, 0)
