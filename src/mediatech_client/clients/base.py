from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..exceptions import ProtocolError
from ..http_client import HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    module: str = "api"

    def _request(self, method: str, path: str, **kwargs):
        kwargs.setdefault("module", self.module)
        return self.http.request(method, path, **kwargs)


def expect_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProtocolError(code="UNEXPECTED_PAYLOAD", message=f"Expected {what} to be a JSON object")
    return data


def expect_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProtocolError(code="UNEXPECTED_PAYLOAD", message=f"Expected {what} to be a JSON array")
    return data
