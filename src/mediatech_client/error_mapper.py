from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    StockInsufficientError,
    ValidationError,
)

_STOCK_MARKERS = ("stock insuffisant", "insufficient stock", "out of stock")


def _message_from(payload: Mapping[str, object]) -> str | None:
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _mentions_stock(message: str | None) -> bool:
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in _STOCK_MARKERS)


def map_error(status_code: int, payload: Mapping[str, object] | None) -> ApiError:
    payload = payload or {}
    server_message = _message_from(payload)
    message = server_message or f"Technical error (HTTP {status_code})"
    code = str(payload.get("code") or "HTTP_ERROR")
    details = payload.get("details")
    mapped: type[ApiError]
    if status_code == 401:
        mapped = AuthError
    elif status_code == 403:
        mapped = PermissionDeniedError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code == 409:
        mapped = StockInsufficientError if _mentions_stock(server_message) else ConflictError
    elif status_code in {400, 422}:
        mapped = StockInsufficientError if _mentions_stock(server_message) else ValidationError
    elif status_code >= 500:
        # The order endpoints report stock shortfalls as bare runtime failures.
        mapped = StockInsufficientError if _mentions_stock(server_message) else ServerError
    else:
        mapped = ApiError
    if mapped is StockInsufficientError and code == "HTTP_ERROR":
        code = "STOCK_INSUFFICIENT"
    return mapped(
        code=code,
        message=message,
        details=details,
        status_code=status_code,
        raw_payload=dict(payload),
    )
