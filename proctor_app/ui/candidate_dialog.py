"""Dialog for registering a candidate on the roster."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from proctor_app.constants.assessment_constants import CANDIDATE_LEVELS
from proctor_app.core.models import CandidateInfo


class CandidateDialog(QDialog):
    """Collects the identity fields of a new candidate."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Add Candidate")
        self.setModal(True)
        self.setMinimumWidth(400)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.first_name_edit = QLineEdit(self)
        self.last_name_edit = QLineEdit(self)
        self.email_edit = QLineEdit(self)
        self.manager_edit = QLineEdit(self)
        self.department_edit = QLineEdit(self)
        self.level_combo = QComboBox(self)
        self.level_combo.addItems(list(CANDIDATE_LEVELS))
        self.role_edit = QLineEdit(self)

        form.addRow("First name:", self.first_name_edit)
        form.addRow("Last name:", self.last_name_edit)
        form.addRow("Email:", self.email_edit)
        form.addRow("Manager:", self.manager_edit)
        form.addRow("Department:", self.department_edit)
        form.addRow("Level:", self.level_combo)
        form.addRow("Role:", self.role_edit)
        layout.addLayout(form)

        button_row = QHBoxLayout()
        button_row.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)  # type: ignore[arg-type]
        button_row.addWidget(self.cancel_button)

        self.add_button = QPushButton("Add")
        self.add_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        self.add_button.setDefault(True)
        button_row.addWidget(self.add_button)

        layout.addLayout(button_row)

    def get_candidate_info(self) -> CandidateInfo:
        return CandidateInfo(
            first_name=self.first_name_edit.text().strip(),
            last_name=self.last_name_edit.text().strip(),
            email=self.email_edit.text().strip().lower(),
            manager=self.manager_edit.text().strip(),
            department=self.department_edit.text().strip(),
            level=self.level_combo.currentText(),
            role=self.role_edit.text().strip(),
        )
