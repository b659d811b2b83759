"""Accounting-term classification phase played after the quiz.

The candidate sorts twelve terms into a 2x2 board: asset/liability under the
balance sheet, revenue/expense under the income statement. Validation is only
offered once every term is placed, except when the phase countdown runs out,
which validates whatever is on the board. After validation the board shows
per-term feedback for a few seconds before handing the result back.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from proctor_app.constants.assessment_constants import (
    CLASSIFICATION_DURATION_S,
    CLASSIFICATION_FEEDBACK_S,
)
from proctor_app.core.clock import Countdown, Scheduler
from proctor_app.core.errors import ClassificationIncompleteError, SessionStateError
from proctor_app.core.scoring import classification_score

logger = logging.getLogger(__name__)


class Category(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    REVENUE = "revenue"
    EXPENSE = "expense"


CATEGORY_LABELS: dict[Category, str] = {
    Category.ASSET: "Assets",
    Category.LIABILITY: "Liabilities & equity",
    Category.REVENUE: "Revenue",
    Category.EXPENSE: "Expenses",
}

CATEGORY_GROUPS: dict[str, tuple[Category, Category]] = {
    "Balance sheet": (Category.ASSET, Category.LIABILITY),
    "Income statement": (Category.REVENUE, Category.EXPENSE),
}


@dataclass(frozen=True, slots=True)
class ClassificationTerm:
    id: str
    term: str
    correct_category: Category


CLASSIFICATION_TERMS: tuple[ClassificationTerm, ...] = (
    ClassificationTerm("1", "Share capital", Category.LIABILITY),
    ClassificationTerm("2", "Trade receivables", Category.ASSET),
    ClassificationTerm("3", "Bank overdraft", Category.LIABILITY),
    ClassificationTerm("4", "IT equipment", Category.ASSET),
    ClassificationTerm("5", "Sales revenue", Category.REVENUE),
    ClassificationTerm("6", "Salaries", Category.EXPENSE),
    ClassificationTerm("7", "Trade payables", Category.LIABILITY),
    ClassificationTerm("8", "Merchandise inventory", Category.ASSET),
    ClassificationTerm("9", "Social security charges", Category.EXPENSE),
    ClassificationTerm("10", "Financial income", Category.REVENUE),
    ClassificationTerm("11", "Bank loans", Category.LIABILITY),
    ClassificationTerm("12", "Cash at bank", Category.ASSET),
)


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    assignments: dict[str, str]
    per_term: dict[str, bool]
    correct: int
    score: int
    forced: bool


class ClassificationGame:
    """Board state, phase countdown and feedback countdown for one candidate."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        on_complete: Callable[[ClassificationResult], None],
        on_tick: Callable[[int], None] | None = None,
        duration_s: int = CLASSIFICATION_DURATION_S,
        feedback_s: int = CLASSIFICATION_FEEDBACK_S,
        terms: Sequence[ClassificationTerm] = CLASSIFICATION_TERMS,
        assignments: dict[str, str] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_complete = on_complete
        self._on_tick = on_tick
        self._terms = {term.id: term for term in terms}
        self._assignments: dict[str, Category] = {}
        for term_id, category in (assignments or {}).items():
            if term_id in self._terms:
                self._assignments[term_id] = Category(category)
        self._phase_timer = Countdown(scheduler, duration_s, on_tick=self._handle_tick, on_expire=self._handle_expired)
        self._feedback_s = feedback_s
        self._feedback_timer: Countdown | None = None
        self._result: ClassificationResult | None = None
        self._finished = False

    # --- Board ---

    @property
    def terms(self) -> list[ClassificationTerm]:
        return list(self._terms.values())

    @property
    def assignments(self) -> dict[str, str]:
        return {term_id: category.value for term_id, category in self._assignments.items()}

    def unassigned_terms(self) -> list[ClassificationTerm]:
        return [term for term in self._terms.values() if term.id not in self._assignments]

    def terms_in(self, category: Category) -> list[ClassificationTerm]:
        return [term for term in self._terms.values() if self._assignments.get(term.id) is category]

    @property
    def is_complete(self) -> bool:
        return len(self._assignments) == len(self._terms)

    @property
    def validated(self) -> bool:
        return self._result is not None

    @property
    def can_validate(self) -> bool:
        return not self.validated and self.is_complete

    @property
    def result(self) -> ClassificationResult | None:
        return self._result

    @property
    def time_remaining(self) -> int:
        return self._phase_timer.remaining

    @property
    def feedback_remaining(self) -> int | None:
        return None if self._feedback_timer is None else self._feedback_timer.remaining

    def assign(self, term_id: str, category: Category | str | None) -> None:
        """Place a term in a category, or back in the unclassified pile when ``category`` is None."""
        if self.validated:
            raise SessionStateError("Classification has already been validated.")
        if term_id not in self._terms:
            raise ValueError(f"Unknown term '{term_id}'.")
        if category is None:
            self._assignments.pop(term_id, None)
            return
        self._assignments[term_id] = Category(category)

    def is_term_correct(self, term_id: str) -> bool | None:
        if self._result is None:
            return None
        return self._result.per_term.get(term_id, False)

    # --- Lifecycle ---

    def start(self) -> None:
        if self._finished or self.validated:
            return
        self._phase_timer.start()

    def validate(self, *, forced: bool = False) -> ClassificationResult:
        if self.validated:
            raise SessionStateError("Classification has already been validated.")
        if not forced and not self.is_complete:
            raise ClassificationIncompleteError("Please classify every term before validating.")

        self._phase_timer.cancel()
        expected = {term.id: term.correct_category.value for term in self._terms.values()}
        assignments = self.assignments
        correct, score = classification_score(assignments, expected)
        self._result = ClassificationResult(
            assignments=assignments,
            per_term={term_id: assignments.get(term_id) == category for term_id, category in expected.items()},
            correct=correct,
            score=score,
            forced=forced,
        )
        logger.info("Classification validated (%s): %d/%d -> %d%%", "forced" if forced else "manual", correct, len(expected), score)

        self._feedback_timer = Countdown(self._scheduler, self._feedback_s, on_expire=self._handle_feedback_done)
        self._feedback_timer.start()
        return self._result

    def cancel(self) -> None:
        """Stop every pending countdown; the completion callback will never fire."""
        self._finished = True
        self._phase_timer.cancel()
        if self._feedback_timer is not None:
            self._feedback_timer.cancel()

    def _handle_tick(self, remaining: int) -> None:
        if self._on_tick is not None:
            self._on_tick(remaining)

    def _handle_expired(self) -> None:
        if self._finished or self.validated:
            return
        self.validate(forced=True)

    def _handle_feedback_done(self) -> None:
        if self._finished or self._result is None:
            return
        self._finished = True
        self._on_complete(self._result)
