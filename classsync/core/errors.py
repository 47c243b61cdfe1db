class GradebookError(Exception):
    """Base class for errors raised by the gradebook engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GradebookError):
    """A referenced student, assignment, course or submission does not exist."""


class ValidationError(GradebookError):
    """A grade (or other input) is outside the accepted range."""


class ConflictError(GradebookError):
    """A submission already exists for the (student, assignment) pair."""
