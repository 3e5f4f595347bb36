"""Application error taxonomy.

Services raise these; the handler registered in main.py renders them as
``{"message": ...}`` with the matching status code.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Bad input, password policy violation, or an unusable token."""

    status_code = 400


class UnauthorizedError(AppError):
    """Missing or invalid session, wrong credentials, or insufficient rights."""

    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Unique constraint violation, e.g. an e-mail address already in use."""

    status_code = 409


class InternalError(AppError):
    status_code = 500
