"""Component showing the integrity incident log, newest first."""

from __future__ import annotations

from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from proctor_app.constants.ui_constants import INCIDENT_COLUMNS
from proctor_app.core.services.reporting import ReportingService, SessionFilter, Severity
from proctor_app.styling.styles import Styles
from proctor_app.ui.components.table_utils import fill_table, make_table


class IncidentPanel(QWidget):
    def __init__(self, reporting: ReportingService, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.reporting = reporting
        self._last_rows: list[tuple[object, ...]] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.summary_label = QLabel(self)
        layout.addWidget(self.summary_label)

        self.table = make_table(INCIDENT_COLUMNS, self)
        layout.addWidget(self.table, stretch=1)

    def refresh(self, session_filter: SessionFilter | None = None) -> None:
        incidents = self.reporting.incident_log(session_filter)
        high = sum(1 for incident in incidents if incident.severity is Severity.HIGH)
        medium = sum(1 for incident in incidents if incident.severity is Severity.MEDIUM)
        self.summary_label.setText(f"{len(incidents)} incident(s) | {high} critical | {medium} warning(s)")

        rows = [
            (
                incident.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
                incident.candidate_name,
                incident.description,
                incident.severity.value,
            )
            for incident in incidents
        ]
        if rows == self._last_rows:
            return
        self._last_rows = rows
        fill_table(self.table, rows, [Styles.get_severity_color(incident.severity.value) for incident in incidents])
