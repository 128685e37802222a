"""Default configuration values for wagate."""

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SESSION_NAME, GatewayConfig, config_from_env

__all__ = ["DEFAULT_HOST", "DEFAULT_PORT", "DEFAULT_SESSION_NAME", "GatewayConfig", "config_from_env"]
