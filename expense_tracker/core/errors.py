"""
Typed application errors.

Services raise these; the exception handlers registered in ``main`` turn them
into ``{"status": "error", "message": ...}`` responses with the carried status.
"""
from typing import List, Optional


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{type(self).__name__} status={self.status_code} message={self.message!r}>"


class BadRequestError(AppError):
    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class UnprocessableError(AppError):
    status_code = 422


class InternalError(AppError):
    status_code = 500
