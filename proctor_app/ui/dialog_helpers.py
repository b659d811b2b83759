"""Helper functions for common dialog patterns in the proctor console."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def confirm_delete_quiz(parent: QWidget, quiz_name: str) -> bool:
    """Ask before deleting a quiz. Sessions already recorded for it are kept.

    Returns:
        True if user confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Confirm Delete",
        f"Delete quiz '{quiz_name}'? Recorded sessions are kept, but in-progress "
        "attempts on this quiz can no longer be resumed.",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def confirm_remove_candidate(parent: QWidget, candidate_name: str) -> bool:
    reply = QMessageBox.question(
        parent,
        "Confirm Remove",
        f"Remove {candidate_name} from the roster?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    """Show information dialog.

    Args:
        parent: Parent widget for the dialog
        title: Dialog title
        message: Information message
    """
    msg_box = QMessageBox(parent)
    msg_box.setIcon(QMessageBox.Information)
    msg_box.setWindowTitle(title)
    msg_box.setText(message)
    msg_box.setStandardButtons(QMessageBox.Ok)
    msg_box.exec()


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
