from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

_FORBIDDEN_FIELDS = {"password", "credential", "token", "authorization", "refresh_token"}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    outcome: str,
    **fields: object,
) -> None:
    """Emit one JSON line describing a user action (login, checkout, status change...)."""
    leaked = sorted(key for key in fields if key.lower() in _FORBIDDEN_FIELDS)
    if leaked:
        raise ValueError(f"Secret-bearing fields are not allowed in audit lines: {leaked}")
    logger.info(
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": "INFO",
                "module": module,
                "action": action,
                "actor_role": actor_role,
                "outcome": outcome,
                **fields,
            },
            default=str,
        )
    )
