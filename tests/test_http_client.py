from __future__ import annotations

import pytest
import requests
import responses

from mediatech_client import HttpClient, RequestCancelledError, SessionStore, TransportError
from mediatech_client.config import ClientConfig
from mediatech_client.exceptions import AuthError, ProtocolError, ServerError
from mediatech_client.clients.auth import AuthClient
from mediatech_client.interceptors import RequestAuthenticator, is_auth_endpoint

from portal_helpers import BASE_URL, login_payload


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (f"{BASE_URL}/auth/login", True),
        (f"{BASE_URL}/auth/register/client", True),
        (f"{BASE_URL}/auth/refresh", True),
        (f"{BASE_URL}/auth/logout", False),
        (f"{BASE_URL}/factures", False),
        (f"{BASE_URL}/auth/login-history", False),
    ],
)
def test_auth_endpoint_group(url: str, expected: bool) -> None:
    assert is_auth_endpoint(url) is expected


@responses.activate
def test_authenticator_attaches_bearer_after_login(session_store: SessionStore, http: HttpClient) -> None:
    responses.add(responses.POST, f"{BASE_URL}/auth/login", json=login_payload("VENDEUR"), status=200)
    responses.add(responses.GET, f"{BASE_URL}/factures", json=[], status=200)

    http.request("GET", "/factures")
    session_store.login("vendeur", "vendeur123")
    http.request("GET", "/factures")

    assert "Authorization" not in responses.calls[0].request.headers
    assert "Authorization" not in responses.calls[1].request.headers
    assert responses.calls[2].request.headers["Authorization"] == "Bearer access-1"


@responses.activate
def test_authenticator_runs_before_other_shapers(session_store: SessionStore, http: HttpClient, storage) -> None:
    storage.set("token", "stored-token")
    storage.set("role", "ADMIN")
    seen: list[str | None] = []
    http.add_request_shaper(lambda method, url, ctx: seen.append(ctx["headers"].get("Authorization")))
    responses.add(responses.GET, f"{BASE_URL}/clients", json=[], status=200)

    http.request("GET", "/clients")

    assert seen == ["Bearer stored-token"]


@responses.activate
def test_retried_reads_keep_the_credential(storage) -> None:
    retrying = HttpClient(config=ClientConfig(env_name="test", api_base_url=BASE_URL, retries=1, retry_backoff_seconds=0))
    store = SessionStore(AuthClient(http=retrying), storage)
    retrying.add_request_shaper(RequestAuthenticator(store), first=True)
    storage.set("token", "stored-token")
    responses.add(responses.GET, f"{BASE_URL}/produits", json={"message": "busy"}, status=503)
    responses.add(responses.GET, f"{BASE_URL}/produits", json=[], status=200)

    assert retrying.request("GET", "/produits") == []
    assert len(responses.calls) == 2
    assert all(call.request.headers["Authorization"] == "Bearer stored-token" for call in responses.calls)


@responses.activate
def test_unreachable_server_is_not_retried(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/factures", body=requests.ConnectionError("refused"))

    with pytest.raises(TransportError) as exc_info:
        http.request("GET", "/factures")
    assert exc_info.value.status_code == 0
    assert len(responses.calls) == 1


@responses.activate
def test_server_error_without_body_gets_technical_message(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/factures", body="", status=502)

    with pytest.raises(ServerError) as exc_info:
        http.request("GET", "/factures")
    assert exc_info.value.message == "Technical error (HTTP 502)"


@responses.activate
def test_auth_failure_hook_only_for_authenticated_calls(session_store: SessionStore, http: HttpClient, storage) -> None:
    failures: list[int] = []
    http.on_auth_failure = lambda error: failures.append(error.status_code)
    responses.add(responses.POST, f"{BASE_URL}/auth/login", json={"error": "Bad credentials"}, status=401)
    responses.add(responses.GET, f"{BASE_URL}/factures", json={"message": "Token revoked"}, status=403)

    with pytest.raises(AuthError):
        http.request("POST", "/auth/login", json_body={"username": "x", "password": "y"})
    storage.set("token", "stale")
    with pytest.raises(AuthError):
        http.request("GET", "/factures")

    assert failures == [403]


@responses.activate
def test_response_after_context_switch_is_abandoned(http: HttpClient) -> None:
    def _navigate_away(request):
        http.switch_context("screen")
        return (200, {}, "[]")

    responses.add_callback(responses.GET, f"{BASE_URL}/factures", callback=_navigate_away)
    version = http.get_context_version("screen")

    with pytest.raises(RequestCancelledError):
        http.request("GET", "/factures", context_key="screen", context_version=version)


def test_stale_context_is_cancelled_before_dispatch(http: HttpClient) -> None:
    version = http.get_context_version("screen")
    http.switch_context("screen")

    with responses.RequestsMock() as mock:
        with pytest.raises(RequestCancelledError):
            http.request("GET", "/factures", context_key="screen", context_version=version)
        assert len(mock.calls) == 0


@responses.activate
def test_request_bytes_returns_body_unchanged(http: HttpClient) -> None:
    pdf = b"%PDF-1.4\n\x00\xff binary"
    responses.add(responses.GET, f"{BASE_URL}/factures/1/pdf", body=pdf, status=200, content_type="application/pdf")

    assert http.request_bytes("GET", "/factures/1/pdf") == pdf
    assert http.last_operation is not None
    assert http.last_operation.result == "success"


@responses.activate
def test_non_json_success_body_is_protocol_error(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/produits", body="<html>maintenance</html>", content_type="text/html", status=200)

    with pytest.raises(ProtocolError) as exc_info:
        http.request("GET", "/produits")
    assert exc_info.value.code == "UNEXPECTED_PAYLOAD"
    assert exc_info.value.status_code == 200
