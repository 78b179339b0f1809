from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from .session import SessionStore

AUTH_PATHS: tuple[str, ...] = ("/auth/login", "/auth/register", "/auth/refresh")


def is_auth_endpoint(url: str, auth_paths: tuple[str, ...] = AUTH_PATHS) -> bool:
    path = urlsplit(url).path.rstrip("/")
    return any(f"{prefix}/" in f"{path}/" for prefix in auth_paths)


class RequestAuthenticator:
    """Pre-request hook attaching the stored credential as a bearer header.

    Calls to the login/register/refresh group go out untouched, as does every
    call made while nobody is logged in.
    """

    def __init__(self, session_store: SessionStore, auth_paths: tuple[str, ...] = AUTH_PATHS) -> None:
        self.session_store = session_store
        self.auth_paths = auth_paths

    def __call__(self, method: str, url: str, request_context: dict[str, Any]) -> None:
        credential = self.session_store.credential
        if not credential or is_auth_endpoint(url, self.auth_paths):
            return
        request_context["headers"]["Authorization"] = f"Bearer {credential}"
