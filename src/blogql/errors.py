"""
Error kinds raised by resolvers.

Every error carries an HTTP-style ``status_code`` and optional ``data``
(a list of field errors). graphql-core copies ``extensions`` from the
original exception into the formatted GraphQL error, so clients receive
``{"message": ..., "extensions": {"status": ..., "data": [...]}}``.
"""

from __future__ import annotations

from typing import Any, TypedDict


class FieldError(TypedDict):
    """A single violated input constraint."""

    message: str


class BlogError(Exception):
    """Base class for errors reported to GraphQL clients."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        data: list[FieldError] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data

    @property
    def extensions(self) -> dict[str, Any]:
        extensions: dict[str, Any] = {"status": self.status_code}
        if self.data is not None:
            extensions["data"] = list(self.data)
        return extensions


class InvalidInputError(BlogError):
    status_code = 422

    def __init__(self, data: list[FieldError], message: str = "Invalid input."):
        super().__init__(message, data=data)


class NotAuthenticatedError(BlogError):
    """Raised when a request without a valid token reaches a protected operation.

    The status differs per operation (401 or 403), so callers pass it explicitly.
    """

    status_code = 401

    def __init__(self, status_code: int, message: str = "Not authenticated."):
        super().__init__(message, status_code=status_code)


class NotAuthorizedError(BlogError):
    status_code = 403

    def __init__(self, message: str = "Not authorized."):
        super().__init__(message)


class NotFoundError(BlogError):
    status_code = 404


class UnauthorizedError(BlogError):
    """Wrong credentials on login."""

    status_code = 401


class ConflictError(BlogError):
    status_code = 500
