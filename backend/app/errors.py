"""Error taxonomy shared by services and routers.

Every error is an ``HTTPException`` so a service can raise it directly and
FastAPI renders the right status code without extra handlers.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """One or more fields failed validation. ``detail`` is a list of {field, message}."""

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


class NotFoundError(HTTPException):
    def __init__(self, entity: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


class ConflictError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


class BackendError(HTTPException):
    """The persistence backend failed (connection, constraint we did not expect, ...)."""

    def __init__(self, message: str = "Database operation failed", detail: Optional[Any] = None):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail or message)


class CascadeDeleteError(BackendError):
    """A step of a multi-table delete failed; the whole delete was rolled back."""

    def __init__(self, step: str):
        self.step = step
        super().__init__(detail={"message": "Cascade delete failed, nothing was deleted", "failed_step": step})


class AuthError(HTTPException):
    def __init__(self, message: str = "Not authenticated", status_code: int = status.HTTP_401_UNAUTHORIZED):
        headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
        super().__init__(status_code=status_code, detail=message, headers=headers)


class ForbiddenError(AuthError):
    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)
