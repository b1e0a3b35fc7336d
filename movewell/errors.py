# movewell/errors.py


class MoveWellError(Exception):
    """Base error rendered by the app as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MoveWellError):
    status_code = 400


class AuthError(MoveWellError):
    status_code = 401


class NotFoundError(MoveWellError):
    status_code = 404


class ConflictError(MoveWellError):
    status_code = 409


class StreakConflictError(MoveWellError):
    """Raised when the streak record kept changing under us."""

    status_code = 409
