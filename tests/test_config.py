from __future__ import annotations

import pytest

from mediatech_client.config import ConfigError, load_config

_ENV_KEYS = (
    "MEDIATECH_ENV",
    "MEDIATECH_API_BASE_URL",
    "MEDIATECH_API_BASE_URL_DEV",
    "MEDIATECH_RETRIES",
    "MEDIATECH_MIN_PASSWORD_LENGTH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_load_config_requires_base_url() -> None:
    with pytest.raises(ConfigError, match="MEDIATECH_API_BASE_URL"):
        load_config()


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIATECH_API_BASE_URL", "http://localhost:8090/api/")
    cfg = load_config()

    assert cfg.api_base_url == "http://localhost:8090/api"
    assert cfg.retries == 0
    assert cfg.min_password_length == 6
    assert cfg.normalized_env == "dev"


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIATECH_ENV", "staging")
    monkeypatch.setenv("MEDIATECH_API_BASE_URL_STAGING", "https://staging.example.com/api")
    cfg = load_config()

    assert cfg.api_base_url == "https://staging.example.com/api"
    assert cfg.env_name == "staging"


def test_load_config_from_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Registers the variable with monkeypatch so the value loaded from the file is undone afterwards.
    monkeypatch.setenv("MEDIATECH_API_BASE_URL", "placeholder")
    monkeypatch.delenv("MEDIATECH_API_BASE_URL")
    env_file = tmp_path / "portal.env"
    env_file.write_text("MEDIATECH_API_BASE_URL=https://file.example.com/api\n")

    assert load_config(str(env_file)).api_base_url == "https://file.example.com/api"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("MEDIATECH_RETRIES", "-1"),
        ("MEDIATECH_RETRIES", "abc"),
        ("MEDIATECH_MIN_PASSWORD_LENGTH", "0"),
        ("MEDIATECH_TIMEOUT_SECONDS", "0"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("MEDIATECH_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigError, match=key):
        load_config()
