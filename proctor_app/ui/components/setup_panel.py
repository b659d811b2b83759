"""Component for quizzes, their access codes and the candidate roster."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from proctor_app.constants.ui_constants import (
    BUTTON_DELETE_QUIZ,
    BUTTON_REMOVE_CANDIDATE,
    BUTTON_ROTATE_CODE,
    BUTTON_TOGGLE_QUIZ,
    CANDIDATE_COLUMNS,
    NO_CANDIDATE_SELECTED_MESSAGE,
    NO_QUIZ_SELECTED_MESSAGE,
    QUIZ_COLUMNS,
)
from proctor_app.core.models import QuizStatus
from proctor_app.core.session_manager import SessionManager
from proctor_app.styling.styles import Styles
from proctor_app.ui.components.table_utils import fill_table, make_table
from proctor_app.ui.dialog_helpers import (
    confirm_delete_quiz,
    confirm_remove_candidate,
    show_warning,
)


class SetupPanel(QWidget):
    """Quiz activation and candidate roster management."""

    def __init__(self, session_manager: SessionManager, candidate_url: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session_manager = session_manager
        self.candidate_url = candidate_url
        self._quiz_ids: list[str] = []
        self._candidate_ids: list[str] = []
        self._last_quiz_rows: list[tuple[object, ...]] = []
        self._last_candidate_rows: list[tuple[object, ...]] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.network_label = QLabel(f"Candidates connect to: {self.candidate_url}", self)
        self.network_label.setWordWrap(True)
        self.network_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.network_label)

        quiz_group = QGroupBox("Quizzes", self)
        quiz_layout = QVBoxLayout()
        quiz_group.setLayout(quiz_layout)
        self.quiz_table = make_table(QUIZ_COLUMNS, quiz_group)
        quiz_layout.addWidget(self.quiz_table)

        quiz_buttons = QHBoxLayout()
        self.toggle_button = QPushButton(BUTTON_TOGGLE_QUIZ, quiz_group)
        self.toggle_button.clicked.connect(self._handle_toggle_quiz)
        quiz_buttons.addWidget(self.toggle_button)
        self.rotate_button = QPushButton(BUTTON_ROTATE_CODE, quiz_group)
        self.rotate_button.clicked.connect(self._handle_rotate_code)
        quiz_buttons.addWidget(self.rotate_button)
        self.delete_button = QPushButton(BUTTON_DELETE_QUIZ, quiz_group)
        self.delete_button.clicked.connect(self._handle_delete_quiz)
        quiz_buttons.addWidget(self.delete_button)
        quiz_buttons.addStretch()
        quiz_layout.addLayout(quiz_buttons)
        layout.addWidget(quiz_group, stretch=1)

        candidate_group = QGroupBox("Candidates", self)
        candidate_layout = QVBoxLayout()
        candidate_group.setLayout(candidate_layout)
        self.candidate_table = make_table(CANDIDATE_COLUMNS, candidate_group)
        candidate_layout.addWidget(self.candidate_table)

        candidate_buttons = QHBoxLayout()
        self.remove_button = QPushButton(BUTTON_REMOVE_CANDIDATE, candidate_group)
        self.remove_button.clicked.connect(self._handle_remove_candidate)
        candidate_buttons.addWidget(self.remove_button)
        candidate_buttons.addStretch()
        candidate_layout.addLayout(candidate_buttons)
        layout.addWidget(candidate_group, stretch=1)

    def refresh(self) -> None:
        quizzes = self.session_manager.list_quizzes()
        quiz_rows = [
            (
                quiz.name,
                quiz.access_code,
                "Active" if quiz.status is QuizStatus.ACTIVE else "Inactive",
                len(quiz.question_ids),
                f"{quiz.seconds_per_question} s",
                "Yes" if quiz.has_classification_game else "No",
            )
            for quiz in quizzes
        ]
        if quiz_rows != self._last_quiz_rows:
            self._last_quiz_rows = quiz_rows
            self._quiz_ids = [quiz.id for quiz in quizzes]
            fill_table(self.quiz_table, quiz_rows)

        candidates = self.session_manager.list_candidates()
        candidate_rows = [
            (
                candidate.info.display_name,
                candidate.info.email,
                candidate.info.department,
                candidate.info.level,
                candidate.access_code,
            )
            for candidate in candidates
        ]
        if candidate_rows != self._last_candidate_rows:
            self._last_candidate_rows = candidate_rows
            self._candidate_ids = [candidate.id for candidate in candidates]
            fill_table(self.candidate_table, candidate_rows)

    def _selected_quiz_id(self) -> str | None:
        row = self.quiz_table.currentRow()
        if row < 0 or row >= len(self._quiz_ids):
            show_warning(self, "No quiz", NO_QUIZ_SELECTED_MESSAGE)
            return None
        return self._quiz_ids[row]

    def _handle_toggle_quiz(self) -> None:
        quiz_id = self._selected_quiz_id()
        if quiz_id is None:
            return
        active = self.quiz_table.item(self.quiz_table.currentRow(), 2).text() == "Active"
        self.session_manager.set_quiz_active(quiz_id, not active)
        self.refresh()

    def _handle_rotate_code(self) -> None:
        quiz_id = self._selected_quiz_id()
        if quiz_id is None:
            return
        self.session_manager.rotate_quiz_code(quiz_id)
        self.refresh()

    def _handle_delete_quiz(self) -> None:
        quiz_id = self._selected_quiz_id()
        if quiz_id is None:
            return
        name = self.quiz_table.item(self.quiz_table.currentRow(), 0).text()
        if confirm_delete_quiz(self, name):
            self.session_manager.delete_quiz(quiz_id)
            self.refresh()

    def _handle_remove_candidate(self) -> None:
        row = self.candidate_table.currentRow()
        if row < 0 or row >= len(self._candidate_ids):
            show_warning(self, "No candidate", NO_CANDIDATE_SELECTED_MESSAGE)
            return
        name = self.candidate_table.item(row, 0).text()
        if confirm_remove_candidate(self, name):
            self.session_manager.remove_candidate(self._candidate_ids[row])
            self.refresh()
