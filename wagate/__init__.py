"""HTTP gateway for sending WhatsApp group messages through a linked session."""

__version__ = "0.1.0"

__all__ = [
    "create_app",
    "GatewayRuntime",
    "GatewayConfig",
    "SessionManager",
    "SessionState",
    "LifecycleEvent",
    "LifecycleKind",
    "ChatSummary",
    "SentMessage",
]


def __getattr__(name: str) -> object:
    """Lazy exports so importing the package does not pull in Flask or the WhatsApp client."""
    if name in {"create_app", "GatewayRuntime"}:
        from .app.runtime import GatewayRuntime
        from .app.server import create_app

        return {"create_app": create_app, "GatewayRuntime": GatewayRuntime}[name]

    if name == "GatewayConfig":
        from .defaults.config import GatewayConfig

        return GatewayConfig

    if name in {"SessionManager", "SessionState"}:
        from .core.session import SessionManager, SessionState

        return {"SessionManager": SessionManager, "SessionState": SessionState}[name]

    if name in {"LifecycleEvent", "LifecycleKind"}:
        from .core.events import LifecycleEvent, LifecycleKind

        return {"LifecycleEvent": LifecycleEvent, "LifecycleKind": LifecycleKind}[name]

    if name in {"ChatSummary", "SentMessage"}:
        from .core.entities import ChatSummary, SentMessage

        return {"ChatSummary": ChatSummary, "SentMessage": SentMessage}[name]

    raise AttributeError(f"module 'wagate' has no attribute {name!r}")
