"""Qt main window: live sessions, incident log, classification results and setup."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from proctor_app.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from proctor_app.constants.ui_constants import (
    AUTOSAVE_INTERVAL_MS,
    BUTTON_ABOUT,
    BUTTON_ADD_CANDIDATE,
    BUTTON_EXPORT_RESULTS,
    BUTTON_HELP,
    BUTTON_IMPORT_QUESTIONS,
    CANDIDATE_URL_PLACEHOLDER,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    FILTER_DEPARTMENT_PLACEHOLDER,
    FILTER_MANAGER_PLACEHOLDER,
    FILTER_NAME_PLACEHOLDER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    REFRESH_INTERVAL_MS,
    TAB_CLASSIFICATION,
    TAB_INCIDENTS,
    TAB_SESSIONS,
    TAB_SETUP,
    WINDOW_TITLE,
)
from proctor_app.core.errors import QuestionImportError
from proctor_app.core.services.reporting import SessionFilter
from proctor_app.core.session_manager import SessionManager
from proctor_app.styling.styles import Styles
from proctor_app.ui.candidate_dialog import CandidateDialog
from proctor_app.ui.components.classification_panel import ClassificationPanel
from proctor_app.ui.components.incident_panel import IncidentPanel
from proctor_app.ui.components.sessions_panel import SessionsPanel
from proctor_app.ui.components.setup_panel import SetupPanel
from proctor_app.ui.dialog_helpers import show_error, show_info
from proctor_app.ui.quiz_import_dialog import QuizImportDialog


class ProctorMainWindow(QMainWindow):
    """Main Qt window. It polls the store; candidates never talk to it directly."""

    def __init__(self, session_manager: SessionManager, candidate_url: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.session_manager = session_manager
        self.candidate_url = candidate_url or CANDIDATE_URL_PLACEHOLDER
        self._last_export_path: Path | None = None

        self._build_ui()
        self._configure_timers()
        self.setStyleSheet(Styles.get_main_window_style())
        self._refresh_state()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_action_buttons(root_layout)
        self._build_filter_row(root_layout)

        reporting = self.session_manager.reporting
        self.tabs = QTabWidget(self)
        self.sessions_panel = SessionsPanel(reporting, self)
        self.incident_panel = IncidentPanel(reporting, self)
        self.classification_panel = ClassificationPanel(reporting, self)
        self.setup_panel = SetupPanel(self.session_manager, self.candidate_url, self)
        self.tabs.addTab(self.sessions_panel, TAB_SESSIONS)
        self.tabs.addTab(self.incident_panel, TAB_INCIDENTS)
        self.tabs.addTab(self.classification_panel, TAB_CLASSIFICATION)
        self.tabs.addTab(self.setup_panel, TAB_SETUP)
        self.tabs.currentChanged.connect(lambda _index: self._refresh_state())
        root_layout.addWidget(self.tabs, stretch=1)

    def _build_action_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.import_button = QPushButton(BUTTON_IMPORT_QUESTIONS, self)
        self.import_button.clicked.connect(self._handle_import_questions)
        button_row.addWidget(self.import_button)

        self.add_candidate_button = QPushButton(BUTTON_ADD_CANDIDATE, self)
        self.add_candidate_button.clicked.connect(self._handle_add_candidate)
        button_row.addWidget(self.add_candidate_button)

        self.export_button = QPushButton(BUTTON_EXPORT_RESULTS, self)
        self.export_button.clicked.connect(self._handle_export_results)
        button_row.addWidget(self.export_button)

        button_row.addStretch()

        self.about_button = QPushButton(BUTTON_ABOUT, self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton(BUTTON_HELP, self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _build_filter_row(self, layout: QVBoxLayout) -> None:
        filter_row = QHBoxLayout()
        self.manager_filter = QLineEdit(self)
        self.manager_filter.setPlaceholderText(FILTER_MANAGER_PLACEHOLDER)
        self.department_filter = QLineEdit(self)
        self.department_filter.setPlaceholderText(FILTER_DEPARTMENT_PLACEHOLDER)
        self.name_filter = QLineEdit(self)
        self.name_filter.setPlaceholderText(FILTER_NAME_PLACEHOLDER)
        for line_edit in (self.manager_filter, self.department_filter, self.name_filter):
            line_edit.textChanged.connect(lambda _text: self._refresh_state())
            filter_row.addWidget(line_edit)
        layout.addLayout(filter_row)

    def _configure_timers(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()

        self.autosave_timer = QTimer(self)
        self.autosave_timer.setInterval(AUTOSAVE_INTERVAL_MS)
        self.autosave_timer.timeout.connect(self._save_store)
        self.autosave_timer.start()

    def _current_filter(self) -> SessionFilter:
        return SessionFilter(
            manager=self.manager_filter.text(),
            department=self.department_filter.text(),
            name=self.name_filter.text(),
        )

    def _refresh_state(self) -> None:
        current = self.tabs.currentWidget()
        if current is self.setup_panel:
            self.setup_panel.refresh()
        elif current is not None:
            current.refresh(self._current_filter())

    def _save_store(self) -> None:
        try:
            self.session_manager.save()
        except OSError as exc:
            self.autosave_timer.stop()
            show_error(self, "Save failed", f"Could not write the data file: {exc}")

    def _handle_import_questions(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return

        dialog = QuizImportDialog(Path(file_path), self)
        if not dialog.exec():
            return

        try:
            quiz = self.session_manager.import_quiz(
                Path(file_path),
                dialog.get_quiz_name(),
                seconds_per_question=dialog.get_seconds_per_question(),
                has_classification_game=dialog.get_has_classification_game(),
                description=dialog.get_description(),
            )
        except (OSError, QuestionImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return
        except ValueError as exc:
            show_error(self, "Quiz rejected", str(exc))
            return

        self._save_store()
        self.tabs.setCurrentWidget(self.setup_panel)
        self.setup_panel.refresh()
        show_info(
            self,
            "Quiz imported",
            f"Created '{quiz.name}' with {len(quiz.question_ids)} questions.\nAccess code: {quiz.access_code}",
        )

    def _handle_add_candidate(self) -> None:
        dialog = CandidateDialog(self)
        if not dialog.exec():
            return
        try:
            candidate = self.session_manager.register_candidate(dialog.get_candidate_info())
        except ValueError as exc:
            show_error(self, "Candidate rejected", str(exc))
            return

        self._save_store()
        self.tabs.setCurrentWidget(self.setup_panel)
        self.setup_panel.refresh()
        show_info(
            self,
            "Candidate added",
            f"{candidate.info.display_name} can log in with code {candidate.access_code}.",
        )

    def _handle_export_results(self) -> None:
        default_path = self._last_export_path or (Path.cwd() / "results.csv")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            EXPORT_DIALOG_TITLE,
            str(default_path),
            EXPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            count = self.session_manager.export_results(Path(file_path), self._current_filter())
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return

        self._last_export_path = Path(file_path)
        show_info(self, "Results exported", f"Exported {count} session(s) to {file_path}.")

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802 - Qt override
        self.refresh_timer.stop()
        self.autosave_timer.stop()
        self._save_store()
        super().closeEvent(event)
