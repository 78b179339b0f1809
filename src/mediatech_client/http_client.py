from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import AuthError, ProtocolError, RequestCancelledError, TransportError

logger = logging.getLogger(__name__)

RequestShaper = Callable[[str, str, dict[str, Any]], None]
AuthFailureHook = Callable[[AuthError], None]


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    status_code: int


@dataclass
class HttpClient:
    config: ClientConfig
    session: requests.Session | None = None
    request_shapers: list[RequestShaper] = field(default_factory=list)
    on_auth_failure: AuthFailureHook | None = None
    last_operation: LastOperation | None = None
    _context_versions: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def add_request_shaper(self, shaper: RequestShaper, *, first: bool = False) -> None:
        if first:
            self.request_shapers.insert(0, shaper)
        else:
            self.request_shapers.append(shaper)

    def build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> dict[str, Any] | list[Any] | None:
        response = self._send(
            method,
            path,
            accept="application/json",
            headers=headers,
            json_body=json_body,
            params=params,
            module=module,
            operation=operation,
            context_key=context_key,
            context_version=context_version,
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                code="UNEXPECTED_PAYLOAD",
                message="Server answered with a body that is not JSON",
                details={"operation": operation, "content_type": response.headers.get("Content-Type")},
                status_code=response.status_code,
            ) from exc

    def request_bytes(
        self,
        method: str,
        path: str,
        *,
        module: str = "unknown",
        operation: str = "unknown",
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> bytes:
        response = self._send(
            method,
            path,
            accept="*/*",
            module=module,
            operation=operation,
            context_key=context_key,
            context_version=context_version,
        )
        return response.content

    def _send(
        self,
        method: str,
        path: str,
        *,
        accept: str,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str,
        operation: str,
        context_key: str | None,
        context_version: int | None,
    ) -> requests.Response:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        request_headers = {"Accept": accept}
        if headers:
            request_headers.update(headers)

        normalized_method = method.upper()
        url = self.build_url(path)
        request_context: dict[str, Any] = {
            "headers": request_headers,
            "json_body": json_body,
            "params": params,
        }
        # Shapers run once so that every retry below reuses the shaped headers.
        for shaper in self.request_shapers:
            shaper(normalized_method, url, request_context)

        if context_key and context_version is None:
            context_version = self.get_context_version(context_key)
        self._ensure_current(context_key, context_version, "Request cancelled before dispatch")

        can_retry = normalized_method in {"GET", "HEAD"}
        attempts = self.config.retries + 1 if can_retry else 1
        started = time.monotonic()
        response: requests.Response | None = None
        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method=normalized_method,
                    url=url,
                    headers=request_context["headers"],
                    json=request_context["json_body"],
                    params=request_context["params"],
                    timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException as exc:
                self._record_operation(module, operation, started, "unreachable", 0)
                logger.warning(
                    "http_no_response",
                    extra={"api_module": module, "operation": operation, "error_type": type(exc).__name__},
                )
                raise TransportError(
                    code="SERVER_UNREACHABLE",
                    message="Unable to reach the server",
                    details={"type": type(exc).__name__},
                    status_code=0,
                ) from exc
            if response.status_code < 500 or attempt >= attempts - 1:
                break
            time.sleep(self.config.retry_backoff_seconds * (2**attempt))

        if response is None:
            raise RuntimeError("HTTP request finished without a response")

        if response.ok:
            self._ensure_current(context_key, context_version, "Request cancelled due to navigation")
            self._record_operation(module, operation, started, "success", response.status_code)
            return response

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            payload = {"message": response.text} if response.text.strip() else {}
        self._record_operation(module, operation, started, "error", response.status_code)
        error = map_error(response.status_code, payload if isinstance(payload, dict) else {})
        logger.info(
            "http_error",
            extra={
                "api_module": module,
                "operation": operation,
                "status_code": response.status_code,
                "code": error.code,
            },
        )
        # A rejected credential is dropped even when its screen has already been left.
        carried_credential = "Authorization" in request_context["headers"]
        if isinstance(error, AuthError) and carried_credential and self.on_auth_failure:
            self.on_auth_failure(error)
            raise error
        self._ensure_current(context_key, context_version, "Request cancelled due to navigation")
        raise error

    def switch_context(self, context_key: str) -> int:
        new_version = self.get_context_version(context_key) + 1
        self._context_versions[context_key] = new_version
        return new_version

    def get_context_version(self, context_key: str) -> int:
        return self._context_versions.get(context_key, 0)

    def _ensure_current(self, context_key: str | None, context_version: int | None, message: str) -> None:
        if not context_key or context_version is None:
            return
        if self.get_context_version(context_key) != context_version:
            raise RequestCancelledError(
                code="REQUEST_CANCELLED",
                message=message,
                details={"type": "context_switched", "context": context_key},
                status_code=0,
            )

    def _record_operation(self, module: str, operation: str, started: float, result: str, status_code: int) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            status_code=status_code,
        )

