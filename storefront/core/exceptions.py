"""Typed API errors.

Each error carries its HTTP status, so handlers only have to raise; the
application-level exception handlers in ``storefront.main`` render them into
the JSON envelope.
"""

from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: dict | None = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND


class ServerError(StorefrontError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
