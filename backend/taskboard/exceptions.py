"""Taskboard exceptions.

Services raise these; the application's exception handlers translate them
into the ``{"success": false, "message": ..., "error": ...}`` envelope.
"""

from fastapi import status


class TaskboardError(Exception):
    """Base exception for taskboard errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: str = "TASKBOARD_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(TaskboardError):
    """A required field is missing or a value is invalid."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundOrForbidden(TaskboardError):
    """The entity is absent, or the caller may not see it.

    Both cases produce the same status and message.
    """

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class Forbidden(TaskboardError):
    """The entity exists but the caller lacks the finer-grained permission."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN")


class InternalError(TaskboardError):
    """Store failure or any other unexpected error."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")
