from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from proctor_app.core.clock import ManualScheduler
from proctor_app.core.models import CandidateInfo, Question, Quiz
from proctor_app.core.services.candidate_roster import CandidateRoster
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.services.question_store import QuestionStore
from proctor_app.core.session_engine import SessionEngine


@dataclass
class RecordingNotifier:
    payloads: list[dict[str, Any]] = field(default_factory=list)

    def notify(self, payload: dict[str, Any]) -> None:
        self.payloads.append(payload)


@dataclass
class SteppingClock:
    """Wall clock for timestamps; moves one second per reading."""

    t: datetime = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.t += timedelta(seconds=1)
        return self.t


def make_question(prompt: str, correct: int, time_per_question: int | None = None) -> Question:
    return Question(
        id="",
        prompt=prompt,
        choices=[f"{prompt} A", f"{prompt} B", f"{prompt} C"],
        correct_answer=correct,
        time_per_question=time_per_question,
    )


def make_identity(email: str = "ada.lovelace@example.com") -> CandidateInfo:
    return CandidateInfo(
        first_name="Ada",
        last_name="Lovelace",
        email=email,
        manager="Charles Babbage",
        department="Finance",
        level="C2",
        role="Accountant",
    )


@pytest.fixture
def store() -> KeyValueStore:
    return KeyValueStore()


@pytest.fixture
def questions(store: KeyValueStore) -> QuestionStore:
    return QuestionStore(store)


@pytest.fixture
def roster(store: KeyValueStore) -> CandidateRoster:
    return CandidateRoster(store)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def candidate_code(roster: CandidateRoster) -> str:
    return roster.register(make_identity(), access_code="CAND0001").access_code


@pytest.fixture
def quiz(questions: QuestionStore) -> Quiz:
    """Three questions whose correct answers are 0, 1, 2; 5 seconds each."""
    return questions.create_quiz(
        "Bookkeeping basics",
        [make_question("Q1", 0), make_question("Q2", 1), make_question("Q3", 2)],
        seconds_per_question=5,
        access_code="QUIZ0001",
    )


@pytest.fixture
def classification_quiz(questions: QuestionStore) -> Quiz:
    return questions.create_quiz(
        "Bookkeeping with classification",
        [make_question("Q1", 0)],
        seconds_per_question=5,
        has_classification_game=True,
        access_code="CLASS001",
    )


@pytest.fixture
def make_engine(store, questions, roster, scheduler, notifier):
    def factory(pointer_key: str = "currentSession:test", **kwargs: Any) -> SessionEngine:
        options: dict[str, Any] = {
            "classification_duration_s": 10,
            "classification_feedback_s": 3,
            "now": SteppingClock(),
            "notifier": notifier,
        }
        options.update(kwargs)
        return SessionEngine(
            store=store,
            questions=questions,
            roster=roster,
            scheduler=scheduler,
            pointer_key=pointer_key,
            **options,
        )

    return factory
