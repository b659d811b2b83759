"""Passive reporting over persisted sessions.

Nothing here writes to the store. The console polls these views; every read
works on deep copies handed out by the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from proctor_app.constants.assessment_constants import SESSIONS_KEY
from proctor_app.core.models import Session, SessionStatus, SignalType
from proctor_app.core.services.kv_store import KeyValueStore
from proctor_app.core.services.question_store import QuestionStore

FAST_COMPLETION_MINUTES = 5.0
SLOW_COMPLETION_MINUTES = 60.0

SCORE_RANGES: tuple[tuple[str, int, int], ...] = (
    ("0-49", 0, 49),
    ("50-69", 50, 69),
    ("70-79", 70, 79),
    ("80-89", 80, 89),
    ("90-100", 90, 100),
)

_SIGNAL_DESCRIPTIONS = {
    SignalType.WINDOW_BLUR: "Window lost focus",
    SignalType.FOCUS_REGAINED: "Window regained focus",
    SignalType.RIGHT_CLICK: "Right-click blocked",
    SignalType.DEV_TOOLS: "Developer tools shortcut blocked",
}


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class SessionFilter:
    """Case-insensitive substring filters; empty fields match everything."""

    manager: str = ""
    department: str = ""
    name: str = ""

    def matches(self, session: Session) -> bool:
        info = session.candidate_info
        if self.manager and self.manager.strip().lower() not in info.manager.lower():
            return False
        if self.department and self.department.strip().lower() not in info.department.lower():
            return False
        if self.name:
            needle = self.name.strip().lower()
            if needle not in info.first_name.lower() and needle not in info.last_name.lower():
                return False
        return True


@dataclass(frozen=True, slots=True)
class SessionStats:
    total: int
    completed: int
    in_progress: int
    cancelled: int
    average_score: float


@dataclass(frozen=True, slots=True)
class Incident:
    session_id: str
    candidate_name: str
    email: str
    description: str
    timestamp: datetime
    severity: Severity


@dataclass(frozen=True, slots=True)
class ClassificationStats:
    count: int
    average_classification_score: float
    average_quiz_score: float
    at_least_70: int
    at_least_80: int
    histogram: dict[str, int]


def performance_label(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Good"
    if score >= 70:
        return "Average"
    return "Needs work"


def _average(values: list[int]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def incidents_for(session: Session) -> list[Incident]:
    """Cheating attempts and duration anomalies for one session."""
    info = session.candidate_info
    incidents: list[Incident] = []

    def add(description: str, timestamp: datetime, severity: Severity) -> None:
        incidents.append(
            Incident(
                session_id=session.id,
                candidate_name=info.display_name,
                email=info.email,
                description=description,
                timestamp=timestamp,
                severity=severity,
            )
        )

    for attempt in session.cheating_attempts:
        if attempt.type is SignalType.TAB_SWITCH:
            if attempt.warning:
                add("Tab switch (first warning)", attempt.timestamp, Severity.MEDIUM)
            else:
                add("Tab switch (test cancelled)", attempt.timestamp, Severity.HIGH)
        else:
            add(_SIGNAL_DESCRIPTIONS.get(attempt.type, attempt.type.value), attempt.timestamp, Severity.LOW)

    if session.status is SessionStatus.COMPLETED and session.completed_at is not None:
        minutes = (session.completed_at - session.started_at).total_seconds() / 60
        if minutes < FAST_COMPLETION_MINUTES:
            add(f"Finished unusually fast ({minutes:.1f} min)", session.completed_at, Severity.MEDIUM)
        elif minutes > SLOW_COMPLETION_MINUTES:
            add(f"Unusually long test ({minutes:.1f} min)", session.completed_at, Severity.LOW)
    return incidents


class ReportingService:
    """Read-only views over the ``testSessions`` collection."""

    def __init__(self, store: KeyValueStore, questions: QuestionStore | None = None) -> None:
        self._store = store
        self._questions = questions or QuestionStore(store)

    def sessions(self, session_filter: SessionFilter | None = None) -> list[Session]:
        sessions = [Session.from_dict(record) for record in self._store.list_records(SESSIONS_KEY)]
        if session_filter is not None:
            sessions = [session for session in sessions if session_filter.matches(session)]
        return sorted(sessions, key=lambda session: session.started_at, reverse=True)

    def quiz_name(self, quiz_id: str) -> str:
        quiz = self._questions.get_quiz(quiz_id)
        return quiz.name if quiz is not None else "(deleted quiz)"

    def session_stats(self, session_filter: SessionFilter | None = None) -> SessionStats:
        sessions = self.sessions(session_filter)
        completed = [session for session in sessions if session.status is SessionStatus.COMPLETED]
        return SessionStats(
            total=len(sessions),
            completed=len(completed),
            in_progress=sum(1 for session in sessions if not session.status.is_terminal),
            cancelled=sum(1 for session in sessions if session.status is SessionStatus.CANCELLED),
            average_score=_average([session.score for session in completed if session.score is not None]),
        )

    def incident_log(self, session_filter: SessionFilter | None = None) -> list[Incident]:
        incidents = [incident for session in self.sessions(session_filter) for incident in incidents_for(session)]
        return sorted(incidents, key=lambda incident: incident.timestamp, reverse=True)

    def classification_sessions(self, session_filter: SessionFilter | None = None) -> list[Session]:
        return [
            session
            for session in self.sessions(session_filter)
            if session.status is SessionStatus.COMPLETED and session.classification_score is not None
        ]

    def classification_stats(self, session_filter: SessionFilter | None = None) -> ClassificationStats:
        sessions = self.classification_sessions(session_filter)
        scores = [session.classification_score or 0 for session in sessions]
        histogram = {
            label: sum(1 for score in scores if low <= score <= high) for label, low, high in SCORE_RANGES
        }
        return ClassificationStats(
            count=len(sessions),
            average_classification_score=_average(scores),
            average_quiz_score=_average([session.score or 0 for session in sessions]),
            at_least_70=sum(1 for score in scores if score >= 70),
            at_least_80=sum(1 for score in scores if score >= 80),
            histogram=histogram,
        )
