from fastapi import status


class AppError(Exception):
    """Error that reaches the caller of a service operation."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT


class ValidationFailure(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class CacheUnavailable(Exception):
    """Raised inside the cache layer only; never escapes it."""


class PredictionUnavailable(Exception):
    """Raised inside the prediction generator only; never escapes it."""
