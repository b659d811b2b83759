from __future__ import annotations

from datetime import datetime, timedelta, timezone

from proctor_app.constants.assessment_constants import SESSIONS_KEY
from proctor_app.core.models import CandidateInfo, CheatingAttempt, Session, SessionStatus, SignalType
from proctor_app.core.services.reporting import (
    ReportingService,
    SessionFilter,
    Severity,
    incidents_for,
    performance_label,
)

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _session(
    session_id: str,
    *,
    first_name: str = "Ada",
    manager: str = "Charles Babbage",
    department: str = "Finance",
    status: SessionStatus = SessionStatus.COMPLETED,
    minutes: float = 20,
    started_offset: int = 0,
    score: int | None = 80,
    classification_score: int | None = None,
    attempts: list[CheatingAttempt] | None = None,
    quiz_id: str = "quiz-1",
) -> Session:
    started_at = START + timedelta(hours=started_offset)
    return Session(
        id=session_id,
        quiz_id=quiz_id,
        candidate_info=CandidateInfo(
            first_name=first_name,
            last_name="Tester",
            email=f"{first_name.lower()}@example.com",
            manager=manager,
            department=department,
            level="C1",
            role="Analyst",
        ),
        status=status,
        started_at=started_at,
        completed_at=None if status is SessionStatus.IN_PROGRESS else started_at + timedelta(minutes=minutes),
        score=score,
        classification_score=classification_score,
        cheating_attempts=attempts or [],
    )


def _reporting(store, *sessions: Session) -> ReportingService:
    for session in sessions:
        store.put_record(SESSIONS_KEY, session.id, session.to_dict())
    return ReportingService(store)


def _tab_switch(warning: bool) -> CheatingAttempt:
    return CheatingAttempt(type=SignalType.TAB_SWITCH, timestamp=START + timedelta(minutes=1), warning=warning)


def test_performance_labels() -> None:
    assert performance_label(95) == "Excellent"
    assert performance_label(80) == "Good"
    assert performance_label(70) == "Average"
    assert performance_label(69) == "Needs work"


def test_session_stats(store) -> None:
    reporting = _reporting(
        store,
        _session("a", score=80),
        _session("b", score=67),
        _session("c", status=SessionStatus.IN_PROGRESS, score=None),
        _session("d", status=SessionStatus.CLASSIFICATION_GAME, score=50),
        _session("e", status=SessionStatus.CANCELLED, score=None),
    )

    stats = reporting.session_stats()
    assert stats.total == 5
    assert stats.completed == 2
    assert stats.in_progress == 2
    assert stats.cancelled == 1
    assert stats.average_score == 73.5


def test_sessions_are_filtered_and_newest_first(store) -> None:
    reporting = _reporting(
        store,
        _session("old", first_name="Ada", started_offset=0),
        _session("new", first_name="Grace", manager="Alan Turing", started_offset=2),
        _session("mid", first_name="Emmy", department="Audit", started_offset=1),
    )

    assert [session.id for session in reporting.sessions()] == ["new", "mid", "old"]
    assert [session.id for session in reporting.sessions(SessionFilter(manager="turing"))] == ["new"]
    assert [session.id for session in reporting.sessions(SessionFilter(department=" AUD "))] == ["mid"]
    assert [session.id for session in reporting.sessions(SessionFilter(name="tester"))] == ["new", "mid", "old"]
    assert reporting.sessions(SessionFilter(name="nobody")) == []


def test_tab_switch_incident_severity() -> None:
    session = _session(
        "a",
        status=SessionStatus.CANCELLED,
        attempts=[
            _tab_switch(warning=True),
            _tab_switch(warning=False),
            CheatingAttempt(type=SignalType.RIGHT_CLICK, timestamp=START, warning=False),
        ],
    )

    severities = [(incident.description, incident.severity) for incident in incidents_for(session)]
    assert severities == [
        ("Tab switch (first warning)", Severity.MEDIUM),
        ("Tab switch (test cancelled)", Severity.HIGH),
        ("Right-click blocked", Severity.LOW),
    ]


def test_duration_anomalies_apply_to_completed_sessions_only() -> None:
    fast = incidents_for(_session("fast", minutes=3))
    slow = incidents_for(_session("slow", minutes=75))
    normal = incidents_for(_session("normal", minutes=30))
    cancelled_fast = incidents_for(_session("cancelled", status=SessionStatus.CANCELLED, minutes=1))

    assert [(incident.description, incident.severity) for incident in fast] == [
        ("Finished unusually fast (3.0 min)", Severity.MEDIUM)
    ]
    assert [incident.severity for incident in slow] == [Severity.LOW]
    assert normal == []
    assert cancelled_fast == []


def test_incident_log_is_newest_first(store) -> None:
    reporting = _reporting(
        store,
        _session("a", minutes=2, attempts=[_tab_switch(warning=True)]),
    )
    log = reporting.incident_log()
    assert [incident.description for incident in log] == [
        "Finished unusually fast (2.0 min)",
        "Tab switch (first warning)",
    ]


def test_classification_stats(store) -> None:
    reporting = _reporting(
        store,
        _session("a", score=90, classification_score=92),
        _session("b", score=70, classification_score=75),
        _session("c", score=60, classification_score=42),
        _session("d", score=100),
        _session("e", status=SessionStatus.CLASSIFICATION_GAME, classification_score=None),
    )

    stats = reporting.classification_stats()
    assert stats.count == 3
    assert stats.average_classification_score == 69.7
    assert stats.average_quiz_score == 73.3
    assert stats.at_least_70 == 2
    assert stats.at_least_80 == 1
    assert stats.histogram == {"0-49": 1, "50-69": 0, "70-79": 1, "80-89": 0, "90-100": 1}


def test_quiz_name_of_deleted_quiz(store, quiz) -> None:
    reporting = ReportingService(store)
    assert reporting.quiz_name(quiz.id) == "Bookkeeping basics"
    assert reporting.quiz_name("gone") == "(deleted quiz)"
