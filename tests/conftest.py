from __future__ import annotations

import pytest

from mediatech_client import HttpClient, MemoryKeyValueStore, PortalApp, SessionStore
from mediatech_client.clients.auth import AuthClient
from mediatech_client.config import ClientConfig
from mediatech_client.interceptors import RequestAuthenticator

from portal_helpers import BASE_URL


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL, retries=0, retry_backoff_seconds=0)


@pytest.fixture
def storage() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def http(config: ClientConfig) -> HttpClient:
    return HttpClient(config=config)


@pytest.fixture
def session_store(http: HttpClient, storage: MemoryKeyValueStore) -> SessionStore:
    store = SessionStore(AuthClient(http=http), storage)
    http.add_request_shaper(RequestAuthenticator(store), first=True)
    return store


@pytest.fixture
def portal(config: ClientConfig, storage: MemoryKeyValueStore) -> PortalApp:
    return PortalApp(config=config, storage=storage)
