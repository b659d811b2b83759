"""Qt UI components for the proctor console."""

from .dialog_helpers import (
    confirm_delete_quiz,
    confirm_remove_candidate,
    show_error,
    show_info,
    show_warning,
)
from .proctor_main_window import ProctorMainWindow

__all__ = [
    "ProctorMainWindow",
    "confirm_delete_quiz",
    "confirm_remove_candidate",
    "show_error",
    "show_info",
    "show_warning",
]
