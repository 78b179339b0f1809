from __future__ import annotations

from dataclasses import dataclass

from ..models import LoginRequest, LoginResponse, RefreshRequest, RegisterRequest, Role
from .base import BaseClient, expect_object


@dataclass
class AuthClient(BaseClient):
    module: str = "auth"

    def login(self, username: str, password: str) -> LoginResponse:
        payload = LoginRequest(username=username, password=password)
        data = self._request("POST", "/auth/login", json_body=payload.model_dump(), operation="login")
        return LoginResponse.model_validate(expect_object(data, "login response"))

    def register(self, username: str, password: str, role: Role) -> None:
        payload = RegisterRequest(username=username, password=password)
        self._request(
            "POST",
            f"/auth/register/{role.register_path}",
            json_body=payload.model_dump(),
            operation="register",
        )

    def refresh(self, refresh_credential: str) -> LoginResponse:
        payload = RefreshRequest(refresh_token=refresh_credential)
        data = self._request(
            "POST",
            "/auth/refresh",
            json_body=payload.model_dump(by_alias=True),
            operation="refresh",
        )
        return LoginResponse.model_validate(expect_object(data, "refresh response"))

    def logout(self) -> None:
        self._request("POST", "/auth/logout", json_body={}, operation="logout")
