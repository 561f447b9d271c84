from typing import Optional

from responses import ResponseCode


class AppError(Exception):
    """Base fault; each subclass maps to one catalog entry."""

    response = ResponseCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, response: Optional[ResponseCode] = None):
        super().__init__(message)
        self.message = message
        if response is not None:
            self.response = response


class ValidationError(AppError):
    response = ResponseCode.VALIDATION_ERROR


class NotFoundError(AppError):
    response = ResponseCode.NOT_FOUND


class UnauthorizedError(AppError):
    response = ResponseCode.UNAUTHORIZED


class ForbiddenError(AppError):
    response = ResponseCode.FORBIDDEN


class ConflictError(AppError):
    response = ResponseCode.DUPLICATE


class PersistenceError(AppError):
    response = ResponseCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Database error"):
        super().__init__(message)


class InvalidTokenError(Exception):
    """Token is malformed, badly signed, incomplete or expired."""
