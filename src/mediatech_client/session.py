from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError as ModelValidationError

from .auth_store import (
    ACCESS_TOKEN_KEY,
    CUSTOMER_ID_KEY,
    REFRESH_TOKEN_KEY,
    ROLE_KEY,
    SESSION_KEYS,
    TOKEN_KEY,
    USERNAME_KEY,
    KeyValueStore,
    MemoryKeyValueStore,
)
from .clients.auth import AuthClient
from .exceptions import ApiError, AuthError, ProtocolError, TransportError, validation_error
from .log import get_logger, log_action
from .models import LoginResponse, Role, Session

logger = logging.getLogger(__name__)
audit = get_logger("mediatech_client.audit")


def _parse_role(value: str | None) -> Role | None:
    if not value:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


class SessionStore:
    """Owns the authenticated identity and is the only writer of the session keys.

    The primary ``token`` key alone decides whether someone is logged in. The
    access/refresh pair is kept alongside it when the server issues one.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        storage: KeyValueStore | None = None,
        *,
        min_password_length: int = 6,
    ) -> None:
        self.auth_client = auth_client
        self.storage = storage if storage is not None else MemoryKeyValueStore()
        self.min_password_length = min_password_length

    @property
    def credential(self) -> str | None:
        return self.storage.get(TOKEN_KEY) or None

    @property
    def refresh_credential(self) -> str | None:
        return self.storage.get(REFRESH_TOKEN_KEY) or None

    @property
    def username(self) -> str | None:
        if not self.is_logged_in():
            return None
        return self.storage.get(USERNAME_KEY)

    @property
    def role(self) -> Role | None:
        if not self.is_logged_in():
            return None
        return _parse_role(self.storage.get(ROLE_KEY))

    def is_logged_in(self) -> bool:
        return bool(self.credential)

    def has_role(self, role: Role) -> bool:
        return self.role is role

    def has_any_role(self, roles: Iterable[Role]) -> bool:
        current = self.role
        return current is not None and current in set(roles)

    def get_customer_id(self) -> int | None:
        if not self.is_logged_in():
            return None
        raw = self.storage.get(CUSTOMER_ID_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def current(self) -> Session | None:
        role = self.role
        credential = self.credential
        if credential is None or role is None:
            return None
        try:
            return Session(
                credential=credential,
                username=self.username,
                role=role,
                customer_id=self.get_customer_id(),
                refresh_credential=self.refresh_credential,
            )
        except ModelValidationError:
            return None

    def login(self, username: str, password: str) -> Session:
        if not username or not password:
            raise validation_error("MISSING_FIELDS", "Username and password are required")
        logger.info("login_attempt", extra={"username": username})
        try:
            response = self.auth_client.login(username, password)
        except TransportError as exc:
            logger.warning("login_server_unreachable", extra={"username": username})
            raise AuthError(
                code="SERVER_UNREACHABLE",
                message="Unable to reach the server",
                details=exc.details,
                status_code=0,
            ) from exc
        except AuthError:
            logger.info("login_rejected", extra={"username": username})
            # A stale credential must not be retried after a rejection.
            self.invalidate("login_rejected")
            raise

        session = self._session_from(response, fallback_username=username)
        self._persist(session, access_credential=response.access_token)
        logger.info("login_success", extra={"username": session.username, "role": session.role.name})
        log_action(audit, "auth", "login", session.role.name, "success", username=session.username)
        return session

    def register(self, username: str, password: str, confirm_password: str, role: Role = Role.CUSTOMER) -> None:
        if not username or not password:
            raise validation_error("MISSING_FIELDS", "Username and password are required")
        if password != confirm_password:
            raise validation_error("PASSWORD_MISMATCH", "Passwords do not match")
        if len(password) < self.min_password_length:
            raise validation_error(
                "PASSWORD_TOO_SHORT",
                f"Password must be at least {self.min_password_length} characters",
                min_length=self.min_password_length,
            )
        logger.info("register_attempt", extra={"username": username, "role": role.name})
        self.auth_client.register(username, password, role)
        logger.info("register_success", extra={"username": username, "role": role.name})

    def refresh(self) -> Session:
        refresh_credential = self.refresh_credential
        current = self.current()
        if not refresh_credential or current is None:
            raise AuthError(code="NO_REFRESH_CREDENTIAL", message="No refresh credential available", status_code=401)
        try:
            response = self.auth_client.refresh(refresh_credential)
        except AuthError:
            self.invalidate("refresh_rejected")
            raise
        credential = response.credential
        if not credential:
            raise ProtocolError(code="MISSING_CREDENTIAL", message="Refresh response carried no credential")
        session = current.model_copy(
            update={
                "credential": credential,
                "refresh_credential": response.refresh_token or refresh_credential,
            }
        )
        self._persist(session, access_credential=response.access_token)
        logger.info("session_refreshed", extra={"username": session.username})
        return session

    def logout(self) -> None:
        role = self.role
        try:
            if self.is_logged_in():
                self.auth_client.logout()
        except ApiError as exc:
            logger.warning("logout_notify_failed", extra={"code": exc.code, "status_code": exc.status_code})
        finally:
            self._clear()
        logger.info("logout")
        log_action(audit, "auth", "logout", role.name if role else None, "success")

    def invalidate(self, reason: str) -> None:
        """Drop the session locally, without telling the server."""
        if self.is_logged_in():
            logger.info("session_invalidated", extra={"reason": reason})
        self._clear()

    def _session_from(self, response: LoginResponse, *, fallback_username: str) -> Session:
        credential = response.credential
        if not credential:
            raise ProtocolError(
                code="MISSING_CREDENTIAL",
                message="Login response carried neither an access credential nor a legacy token",
            )
        role = _parse_role(response.role)
        if role is None:
            raise ProtocolError(code="UNKNOWN_ROLE", message=f"Unsupported role: {response.role!r}")
        try:
            return Session(
                credential=credential,
                username=response.username or fallback_username,
                role=role,
                customer_id=response.customer_id,
                refresh_credential=response.refresh_token,
            )
        except ModelValidationError as exc:
            raise ProtocolError(
                code="MISSING_CUSTOMER_ID",
                message="Customer login response carried no customer identifier",
            ) from exc

    def _persist(self, session: Session, *, access_credential: str | None) -> None:
        self._clear()
        self.storage.set(TOKEN_KEY, session.credential)
        if access_credential:
            self.storage.set(ACCESS_TOKEN_KEY, access_credential)
        if session.refresh_credential:
            self.storage.set(REFRESH_TOKEN_KEY, session.refresh_credential)
        if session.username:
            self.storage.set(USERNAME_KEY, session.username)
        self.storage.set(ROLE_KEY, session.role.value)
        if session.customer_id is not None:
            self.storage.set(CUSTOMER_ID_KEY, str(session.customer_id))

    def _clear(self) -> None:
        for key in SESSION_KEYS:
            self.storage.remove(key)
