"""Dialog for the quiz settings that accompany a question import."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)

from proctor_app.constants.assessment_constants import DEFAULT_SECONDS_PER_QUESTION


class QuizImportDialog(QDialog):
    """Names the quiz created from an imported question file."""

    def __init__(self, source_path: Path, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("New Quiz")
        self.setModal(True)
        self.setMinimumWidth(400)
        self._source_path = source_path
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.name_edit = QLineEdit(self._source_path.stem, self)
        self.description_edit = QLineEdit(self)
        self.seconds_spinbox = QSpinBox(self)
        self.seconds_spinbox.setRange(5, 3600)
        self.seconds_spinbox.setValue(DEFAULT_SECONDS_PER_QUESTION)
        self.seconds_spinbox.setSuffix(" s")
        self.seconds_spinbox.setToolTip("Used for questions whose file row has no time value.")
        self.classification_checkbox = QCheckBox("Add the classification game after the quiz", self)

        form.addRow("Quiz name:", self.name_edit)
        form.addRow("Description:", self.description_edit)
        form.addRow("Seconds per question:", self.seconds_spinbox)
        form.addRow("", self.classification_checkbox)
        layout.addLayout(form)

        button_row = QHBoxLayout()
        button_row.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)  # type: ignore[arg-type]
        button_row.addWidget(self.cancel_button)

        self.import_button = QPushButton("Create Quiz")
        self.import_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        self.import_button.setDefault(True)
        button_row.addWidget(self.import_button)

        layout.addLayout(button_row)

    def get_quiz_name(self) -> str:
        return self.name_edit.text().strip()

    def get_description(self) -> str:
        return self.description_edit.text().strip()

    def get_seconds_per_question(self) -> int:
        return self.seconds_spinbox.value()

    def get_has_classification_game(self) -> bool:
        return self.classification_checkbox.isChecked()
