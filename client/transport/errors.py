from __future__ import annotations

from typing import Any


class ClientError(Exception):
    """Base class for every failure the client surfaces to its screens."""


class ApiError(ClientError):
    """Raised when a call to the remote API did not produce a usable payload."""


class HttpError(ApiError):
    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


class UnauthorizedError(HttpError):
    """The bearer token is missing, expired or revoked. Not recoverable locally."""


class NetworkError(ApiError):
    """The request failed before any response was received."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestEncodingError(ApiError):
    """The request body could not be encoded as JSON. Nothing was sent."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(ClientError):
    """Bad credentials or a rejected registration."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClientError):
    """Client-side pre-submit checks failed. Maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()) or "Invalid input")


class InvalidTransitionError(ClientError):
    """An operation was attempted from a state that does not allow it."""


def error_message(exc: Exception, fallback: str) -> str:
    """Server-supplied message carried by ``exc``, else ``fallback``."""
    if isinstance(exc, AuthError):
        return exc.message or fallback
    payload = getattr(exc, "payload", None)
    if isinstance(payload, dict):
        for key in ("message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback
