"""Lifecycle signals raised by the messaging client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LifecycleKind(str, Enum):
    QR = "qr"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    kind: LifecycleKind
    payload: str | None = None

    @classmethod
    def qr(cls, code: str) -> LifecycleEvent:
        return cls(LifecycleKind.QR, code)

    @classmethod
    def authenticated(cls) -> LifecycleEvent:
        return cls(LifecycleKind.AUTHENTICATED)

    @classmethod
    def ready(cls) -> LifecycleEvent:
        return cls(LifecycleKind.READY)

    @classmethod
    def disconnected(cls, reason: str | None = None) -> LifecycleEvent:
        return cls(LifecycleKind.DISCONNECTED, reason)
