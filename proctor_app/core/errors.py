"""Exceptions raised by the assessment engine and its collaborators."""

from __future__ import annotations


class ProctorError(Exception):
    """Base class for assessment errors."""


class LoginRejectedError(ProctorError, ValueError):
    """Raised when access codes or identity fields are not accepted."""


class SessionStateError(ProctorError, RuntimeError):
    """Raised when an action does not apply to the current session phase."""


class ClassificationIncompleteError(SessionStateError):
    """Raised when classification is validated manually with unassigned terms."""


class QuestionImportError(ProctorError):
    """Raised when a question file cannot be parsed."""
