from __future__ import annotations

import pytest

from proctor_app.core.classification_game import CLASSIFICATION_TERMS, Category, ClassificationGame
from proctor_app.core.clock import ManualScheduler
from proctor_app.core.errors import ClassificationIncompleteError, SessionStateError


def _game(scheduler: ManualScheduler, results: list, **kwargs) -> ClassificationGame:
    game = ClassificationGame(scheduler, on_complete=results.append, duration_s=10, feedback_s=3, **kwargs)
    game.start()
    return game


def _place_all_correctly(game: ClassificationGame) -> None:
    for term in CLASSIFICATION_TERMS:
        game.assign(term.id, term.correct_category)


def test_validation_requires_every_term() -> None:
    game = _game(ManualScheduler(), [])
    game.assign("1", Category.LIABILITY)

    assert game.can_validate is False
    with pytest.raises(ClassificationIncompleteError):
        game.validate()


def test_manual_validation_reports_after_feedback_delay() -> None:
    scheduler = ManualScheduler()
    results: list = []
    game = _game(scheduler, results)
    _place_all_correctly(game)
    game.assign("6", Category.REVENUE)

    result = game.validate()
    assert result.correct == 11
    assert result.score == 92
    assert result.forced is False
    assert game.is_term_correct("6") is False
    assert game.is_term_correct("5") is True

    scheduler.advance(2)
    assert results == []
    assert game.feedback_remaining == 1
    scheduler.advance(1)
    assert results == [result]


def test_board_is_locked_after_validation() -> None:
    game = _game(ManualScheduler(), [])
    _place_all_correctly(game)
    game.validate()

    with pytest.raises(SessionStateError):
        game.assign("1", Category.ASSET)
    with pytest.raises(SessionStateError):
        game.validate()


def test_timeout_forces_validation_of_partial_board() -> None:
    scheduler = ManualScheduler()
    results: list = []
    game = _game(scheduler, results)
    game.assign("2", Category.ASSET)
    game.assign("2", None)
    game.assign("12", Category.ASSET)

    scheduler.advance(10)
    assert game.result is not None
    assert game.result.forced is True
    assert game.result.correct == 1
    assert game.result.score == 8
    scheduler.advance(3)
    assert len(results) == 1


def test_unknown_term_is_rejected() -> None:
    game = _game(ManualScheduler(), [])
    with pytest.raises(ValueError):
        game.assign("99", Category.ASSET)


def test_cancel_stops_both_countdowns() -> None:
    scheduler = ManualScheduler()
    results: list = []
    game = _game(scheduler, results)
    _place_all_correctly(game)
    game.validate()
    game.cancel()

    scheduler.advance(20)
    assert results == []


def test_restored_assignments_are_kept() -> None:
    game = _game(ManualScheduler(), [], assignments={"3": "liability", "bogus": "asset"})
    assert game.assignments == {"3": "liability"}
    assert len(game.unassigned_terms()) == 11
    assert [term.id for term in game.terms_in(Category.LIABILITY)] == ["3"]


def test_identical_boards_give_equal_results() -> None:
    first = _game(ManualScheduler(), [])
    second = _game(ManualScheduler(), [])
    for game in (first, second):
        _place_all_correctly(game)

    assert first.validate() == second.validate()
