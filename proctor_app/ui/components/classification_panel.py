"""Component summarising classification-game results."""

from __future__ import annotations

from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from proctor_app.constants.ui_constants import CLASSIFICATION_COLUMNS
from proctor_app.core.services.reporting import ReportingService, SessionFilter, performance_label
from proctor_app.ui.components.table_utils import fill_table, make_table


class ClassificationPanel(QWidget):
    def __init__(self, reporting: ReportingService, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.reporting = reporting
        self._last_rows: list[tuple[object, ...]] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.stats_label = QLabel(self)
        self.stats_label.setWordWrap(True)
        layout.addWidget(self.stats_label)

        self.histogram_label = QLabel(self)
        layout.addWidget(self.histogram_label)

        self.table = make_table(CLASSIFICATION_COLUMNS, self)
        layout.addWidget(self.table, stretch=1)

    def refresh(self, session_filter: SessionFilter | None = None) -> None:
        stats = self.reporting.classification_stats(session_filter)
        self.stats_label.setText(
            f"{stats.count} result(s) | average classification {stats.average_classification_score:.0f}% | "
            f"average quiz {stats.average_quiz_score:.0f}% | {stats.at_least_70} at 70%+ | "
            f"{stats.at_least_80} at 80%+"
        )
        self.histogram_label.setText(
            "Distribution: " + ", ".join(f"{label}%: {count}" for label, count in stats.histogram.items())
        )

        rows = [
            (
                session.candidate_info.display_name,
                self.reporting.quiz_name(session.quiz_id),
                f"{session.score or 0}%",
                f"{session.classification_score}%",
                performance_label(session.classification_score or 0),
            )
            for session in self.reporting.classification_sessions(session_filter)
        ]
        if rows == self._last_rows:
            return
        self._last_rows = rows
        fill_table(self.table, rows)
