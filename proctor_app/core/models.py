"""Domain models for the assessment engine.

Records are plain dataclasses. Anything that goes through the key-value store
is converted with ``to_dict``/``from_dict`` so readers always receive a full,
JSON-friendly copy of the record instead of a live object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from proctor_app.constants.assessment_constants import (
    CHOICES_PER_QUESTION,
    DEFAULT_SECONDS_PER_QUESTION,
)


class QuizStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    CLASSIFICATION_GAME = "classification_game"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


class SignalType(str, Enum):
    """Integrity signals reported by the candidate page."""

    TAB_SWITCH = "tab_switch"
    WINDOW_BLUR = "window_blur"
    FOCUS_REGAINED = "focus_regained"
    RIGHT_CLICK = "right_click"
    DEV_TOOLS = "dev_tools"


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _parse_iso(value: str | None) -> datetime | None:
    return None if not value else datetime.fromisoformat(value)


@dataclass(slots=True)
class Question:
    """Multiple-choice question with exactly three choices."""

    id: str
    prompt: str
    choices: list[str]
    correct_answer: int
    category: str | None = None
    time_per_question: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "choices": list(self.choices),
            "correct_answer": self.correct_answer,
            "category": self.category,
            "time_per_question": self.time_per_question,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            id=str(data["id"]),
            prompt=str(data["prompt"]),
            choices=[str(choice) for choice in data["choices"]],
            correct_answer=int(data["correct_answer"]),
            category=data.get("category"),
            time_per_question=data.get("time_per_question"),
        )


@dataclass(slots=True)
class Quiz:
    id: str
    name: str
    question_ids: list[str]
    access_code: str
    status: QuizStatus = QuizStatus.ACTIVE
    seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION
    has_classification_game: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "question_ids": list(self.question_ids),
            "access_code": self.access_code,
            "status": self.status.value,
            "seconds_per_question": self.seconds_per_question,
            "has_classification_game": self.has_classification_game,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quiz":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            question_ids=[str(qid) for qid in data.get("question_ids", [])],
            access_code=str(data["access_code"]),
            status=QuizStatus(data.get("status", QuizStatus.ACTIVE.value)),
            seconds_per_question=int(data.get("seconds_per_question", DEFAULT_SECONDS_PER_QUESTION)),
            has_classification_game=bool(data.get("has_classification_game", False)),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True, slots=True)
class CandidateInfo:
    """Identity snapshot copied into a session when it is created."""

    first_name: str
    last_name: str
    email: str
    manager: str
    department: str
    level: str
    role: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "manager": self.manager,
            "department": self.department,
            "level": self.level,
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CandidateInfo":
        return cls(**{key: str(data.get(key, "")) for key in _CANDIDATE_FIELDS})


_CANDIDATE_FIELDS = ("first_name", "last_name", "email", "manager", "department", "level", "role")


@dataclass(slots=True)
class Candidate:
    """Roster entry owned by the admin side."""

    id: str
    info: CandidateInfo
    access_code: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "access_code": self.access_code, **self.info.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Candidate":
        return cls(
            id=str(data["id"]),
            info=CandidateInfo.from_dict(data),
            access_code=str(data["access_code"]),
        )


@dataclass(frozen=True, slots=True)
class CheatingAttempt:
    type: SignalType
    timestamp: datetime
    warning: bool
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": _iso(self.timestamp),
            "warning": self.warning,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CheatingAttempt":
        return cls(
            type=SignalType(data["type"]),
            timestamp=_parse_iso(data["timestamp"]),  # type: ignore[arg-type]
            warning=bool(data.get("warning", False)),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(slots=True)
class Session:
    """One candidate's attempt at one quiz."""

    id: str
    quiz_id: str
    candidate_info: CandidateInfo
    status: SessionStatus
    started_at: datetime
    completed_at: datetime | None = None
    completion_time: int = 0
    answers: list[int] = field(default_factory=list)
    score: int | None = None
    classification_score: int | None = None
    classification_answers: dict[str, str] = field(default_factory=dict)
    cheating_attempts: list[CheatingAttempt] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "candidate_info": self.candidate_info.to_dict(),
            "status": self.status.value,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "completion_time": self.completion_time,
            "answers": list(self.answers),
            "score": self.score,
            "classification_score": self.classification_score,
            "classification_answers": dict(self.classification_answers),
            "cheating_attempts": [attempt.to_dict() for attempt in self.cheating_attempts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            id=str(data["id"]),
            quiz_id=str(data["quiz_id"]),
            candidate_info=CandidateInfo.from_dict(data["candidate_info"]),
            status=SessionStatus(data["status"]),
            started_at=_parse_iso(data["started_at"]),  # type: ignore[arg-type]
            completed_at=_parse_iso(data.get("completed_at")),
            completion_time=int(data.get("completion_time") or 0),
            answers=[int(answer) for answer in data.get("answers", [])],
            score=data.get("score"),
            classification_score=data.get("classification_score"),
            classification_answers=dict(data.get("classification_answers") or {}),
            cheating_attempts=[
                CheatingAttempt.from_dict(item) for item in data.get("cheating_attempts", [])
            ],
        )


def validate_question(question: Question) -> None:
    """Raise ValueError when a question breaks the choice or answer rules."""
    if not question.prompt.strip():
        raise ValueError("Question text must not be empty.")
    if len(question.choices) != CHOICES_PER_QUESTION:
        raise ValueError("Each question must have exactly three choices.")
    if any(not choice.strip() for choice in question.choices):
        raise ValueError("Choice text cannot be empty.")
    if not 0 <= question.correct_answer < CHOICES_PER_QUESTION:
        raise ValueError("Correct answer index must be between 0 and 2.")
    if question.time_per_question is not None and question.time_per_question <= 0:
        raise ValueError("Time per question must be a positive integer.")
