"""Component listing every session with its live status."""

from __future__ import annotations

from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from proctor_app.constants.ui_constants import SESSION_COLUMNS, STATS_TEMPLATE
from proctor_app.core.models import SessionStatus
from proctor_app.core.services.reporting import ReportingService, SessionFilter
from proctor_app.styling.color_palette import ColorPalette, Theme
from proctor_app.ui.components.table_utils import fill_table, format_duration, make_table

_STATUS_LABELS = {
    SessionStatus.IN_PROGRESS: "In progress",
    SessionStatus.CLASSIFICATION_GAME: "Classification",
    SessionStatus.COMPLETED: "Completed",
    SessionStatus.CANCELLED: "Cancelled",
}


class SessionsPanel(QWidget):
    """Statistics line plus one table row per session."""

    def __init__(self, reporting: ReportingService, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.reporting = reporting
        self._last_rows: list[tuple[object, ...]] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.stats_label = QLabel(self)
        layout.addWidget(self.stats_label)

        self.table = make_table(SESSION_COLUMNS, self)
        layout.addWidget(self.table, stretch=1)

    def refresh(self, session_filter: SessionFilter | None = None) -> None:
        stats = self.reporting.session_stats(session_filter)
        self.stats_label.setText(
            STATS_TEMPLATE.format(
                total=stats.total,
                completed=stats.completed,
                in_progress=stats.in_progress,
                cancelled=stats.cancelled,
                average=stats.average_score,
            )
        )

        sessions = self.reporting.sessions(session_filter)
        rows = [
            (
                session.candidate_info.display_name,
                session.candidate_info.email,
                self.reporting.quiz_name(session.quiz_id),
                _STATUS_LABELS[session.status],
                "" if session.score is None else f"{session.score}%",
                "" if session.classification_score is None else f"{session.classification_score}%",
                format_duration(session.completion_time),
                len(session.cheating_attempts),
            )
            for session in sessions
        ]
        if rows == self._last_rows:
            return
        self._last_rows = rows
        colors = [
            ColorPalette.SEVERITY_HIGH.get(Theme.LIGHT) if session.status is SessionStatus.CANCELLED else None
            for session in sessions
        ]
        fill_table(self.table, rows, colors)
