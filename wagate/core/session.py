"""Process-wide session state driven by messaging client lifecycle events."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace

from wagate.core.events import LifecycleEvent, LifecycleKind
from wagate.utils.qr import qr_data_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionState:
    qr_image: str | None = None
    ready: bool = False

    @property
    def needs_qr(self) -> bool:
        return not self.ready and self.qr_image is not None

    def to_status(self) -> dict[str, bool]:
        return {"ready": self.ready, "needsQR": self.needs_qr}


class SessionManager:
    """Owns the QR image and readiness flag.

    State only changes through :meth:`apply` (collaborator signals) and
    :meth:`reset` (logout). Readers get immutable :class:`SessionState`
    snapshots.
    """

    def __init__(self, render_qr: Callable[[str], str] = qr_data_url) -> None:
        self._render_qr = render_qr
        self._state = SessionState()
        self._lock = threading.Lock()

    def snapshot(self) -> SessionState:
        with self._lock:
            return self._state

    def apply(self, event: LifecycleEvent) -> SessionState:
        if event.kind is LifecycleKind.QR:
            logger.info("QR code received, scan it with your phone", extra={"event": event.kind.value})
            image = self._render_qr(event.payload or "")
            return self._update(qr_image=image)

        if event.kind is LifecycleKind.AUTHENTICATED:
            logger.info("client authenticated successfully", extra={"event": event.kind.value})
            return self.snapshot()

        if event.kind is LifecycleKind.READY:
            logger.info("WhatsApp client is ready", extra={"event": event.kind.value})
            return self._update(ready=True)

        if event.kind is LifecycleKind.DISCONNECTED:
            logger.warning(
                "client was disconnected: %s",
                event.payload,
                extra={"event": event.kind.value, "reason": event.payload},
            )
            return self.reset()

        raise ValueError(f"unknown lifecycle event kind: {event.kind!r}")

    async def handle(self, event: LifecycleEvent) -> None:
        """Async adapter so the manager can be registered as an ``on_lifecycle`` callback."""
        self.apply(event)

    def reset(self) -> SessionState:
        with self._lock:
            self._state = SessionState()
            return self._state

    def _update(self, **changes: object) -> SessionState:
        with self._lock:
            self._state = replace(self._state, **changes)
            return self._state
