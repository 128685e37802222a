"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_SESSION_NAME = "client-one.sqlite3"


@dataclass
class GatewayConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    session_name: str = DEFAULT_SESSION_NAME
    log_level: str = "INFO"
    call_timeout_s: float | None = None


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    value = float(raw)
    if value <= 0:
        raise ValueError("WAGATE_CALL_TIMEOUT must be a positive number of seconds")
    return value


def config_from_env() -> GatewayConfig:
    return GatewayConfig(
        host=os.getenv("HOST", DEFAULT_HOST),
        port=int(os.getenv("PORT", str(DEFAULT_PORT))),
        session_name=os.getenv("WAGATE_SESSION", DEFAULT_SESSION_NAME),
        log_level=os.getenv("WAGATE_LOG_LEVEL", "INFO").upper(),
        call_timeout_s=_optional_float(os.getenv("WAGATE_CALL_TIMEOUT")),
    )
