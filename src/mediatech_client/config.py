from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable

from dotenv import load_dotenv

PREFIX = "MEDIATECH_"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    # Unreachable servers are reported straight away; retries only ever apply to 5xx reads.
    retries: int = 0
    retry_backoff_seconds: float = 0.3
    max_connections: int = 10
    verify_ssl: bool = True
    min_password_length: int = 6

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


@dataclass(frozen=True)
class _Setting:
    suffix: str
    parse: Callable[[str], float | int]
    minimum: float
    exclusive: bool = False

    @property
    def variable(self) -> str:
        return PREFIX + self.suffix

    def read(self, default: float | int) -> float | int:
        raw = os.getenv(self.variable)
        if raw is None or not raw.strip():
            value = default
        else:
            try:
                value = self.parse(raw.strip())
            except ValueError as exc:
                kind = "an integer" if self.parse is int else "a number"
                raise ConfigError(f"Invalid {self.variable}: expected {kind}, got {raw!r}") from exc
        too_small = value <= self.minimum if self.exclusive else value < self.minimum
        if too_small:
            bound = ">" if self.exclusive else ">="
            raise ConfigError(f"Invalid {self.variable}: expected {bound} {self.minimum:g}, got {value}")
        return value


TIMEOUT = _Setting("TIMEOUT_SECONDS", float, 0, exclusive=True)
CONNECT_TIMEOUT = _Setting("CONNECT_TIMEOUT_SECONDS", float, 0, exclusive=True)
READ_TIMEOUT = _Setting("READ_TIMEOUT_SECONDS", float, 0, exclusive=True)
RETRIES = _Setting("RETRIES", int, 0)
RETRY_BACKOFF = _Setting("RETRY_BACKOFF_SECONDS", float, 0)
MAX_CONNECTIONS = _Setting("MAX_CONNECTIONS", int, 1)
MIN_PASSWORD_LENGTH = _Setting("MIN_PASSWORD_LENGTH", int, 1)


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _base_url(env_name: str) -> str:
    for variable in (f"{PREFIX}API_BASE_URL_{env_name.upper()}", f"{PREFIX}API_BASE_URL"):
        value = (os.getenv(variable) or "").strip()
        if value:
            return value.rstrip("/")
    raise ConfigError(f"Missing required config values: {PREFIX}API_BASE_URL")


def load_config(env_file: str | None = None) -> ClientConfig:
    """Build the client config from ``MEDIATECH_*`` variables.

    A ``.env`` file (``env_file`` or the one found from the working directory)
    only fills variables that are not already set. ``MEDIATECH_TIMEOUT_SECONDS``
    is a shorthand that seeds both the connect and read timeouts.
    """
    load_dotenv(env_file)
    env_name = (os.getenv(PREFIX + "ENV") or "dev").strip()
    api_base_url = _base_url(env_name)

    overall = TIMEOUT.read(10.0)
    connect = CONNECT_TIMEOUT.read(min(overall, 5.0))
    read = READ_TIMEOUT.read(max(overall, connect))

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url,
        connect_timeout_seconds=float(connect),
        read_timeout_seconds=float(read),
        retries=int(RETRIES.read(0)),
        retry_backoff_seconds=float(RETRY_BACKOFF.read(0.3)),
        max_connections=int(MAX_CONNECTIONS.read(10)),
        verify_ssl=_flag("VERIFY_SSL", True),
        min_password_length=int(MIN_PASSWORD_LENGTH.read(6)),
    )
