from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, AuthError, TransportError

UNREACHABLE_MESSAGE = "Unable to reach the server. Is the backend running?"
BAD_CREDENTIALS_MESSAGE = "Invalid username or password"


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: Exception, *, during_login: bool = False) -> UserFacingError:
    if not isinstance(exc, ApiError):
        return UserFacingError(message=str(exc) or "Unexpected client error")
    details = f"{exc.code} (HTTP {exc.status_code})"
    if exc.details:
        details = f"{details}: {exc.details}"
    if isinstance(exc, TransportError) or (isinstance(exc, AuthError) and exc.no_response):
        return UserFacingError(message=UNREACHABLE_MESSAGE, details=details)
    if during_login and isinstance(exc, AuthError):
        return UserFacingError(message=BAD_CREDENTIALS_MESSAGE, details=details)
    primary = exc.message.strip() or f"Technical error (HTTP {exc.status_code})"
    return UserFacingError(message=primary, details=details)
