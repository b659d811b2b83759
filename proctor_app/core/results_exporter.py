"""Export session results to CSV for spreadsheet review."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from proctor_app.core.models import Session
from proctor_app.core.services.reporting import ReportingService, SessionFilter

RESULT_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "manager",
    "department",
    "level",
    "role",
    "quiz",
    "status",
    "score",
    "classification_score",
    "duration_s",
    "started_at",
    "completed_at",
    "incidents",
)


def save_results_to_file(
    file_path: Path,
    reporting: ReportingService,
    session_filter: SessionFilter | None = None,
) -> int:
    """Write every matching session to ``file_path``; returns the row count."""

    sessions = reporting.sessions(session_filter)
    if not sessions:
        raise ValueError("There are no results to export.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_results(sessions, reporting), encoding="utf-8")
    return len(sessions)


def serialize_results(sessions: list[Session], reporting: ReportingService) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(RESULT_COLUMNS)
    for session in sessions:
        writer.writerow(_serialize_session(session, reporting))
    return buffer.getvalue()


def _serialize_session(session: Session, reporting: ReportingService) -> list[object]:
    info = session.candidate_info
    return [
        info.first_name,
        info.last_name,
        info.email,
        info.manager,
        info.department,
        info.level,
        info.role,
        reporting.quiz_name(session.quiz_id),
        session.status.value,
        "" if session.score is None else session.score,
        "" if session.classification_score is None else session.classification_score,
        session.completion_time,
        session.started_at.isoformat(),
        "" if session.completed_at is None else session.completed_at.isoformat(),
        len(session.cheating_attempts),
    ]
