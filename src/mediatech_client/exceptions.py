from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None = None
    status_code: int = 0
    raw_payload: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class AuthError(ApiError):
    """Bad credentials, or a credential the server no longer accepts."""

    @property
    def no_response(self) -> bool:
        return self.status_code == 0


class PermissionDeniedError(AuthError):
    """403 from the server."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class RequestCancelledError(ApiError):
    """The response arrived after its screen was navigated away from."""


class ProtocolError(ApiError):
    """The server answered with a payload the client cannot interpret."""


class ValidationError(ApiError):
    pass


class TransitionError(ValidationError):
    """Status change on a terminal order, or by a role that may not transition."""


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class StockInsufficientError(ConflictError):
    pass


class ServerError(ApiError):
    """5xx server-side failures."""


def validation_error(code: str, message: str, **details: object) -> ValidationError:
    return ValidationError(code=code, message=message, details=details or None)
