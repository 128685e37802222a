"""Contract the gateway expects from a messaging client."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

from wagate.core.entities import ChatSummary, SentMessage
from wagate.core.events import LifecycleEvent

LifecycleCallback = Callable[[LifecycleEvent], Awaitable[None]]


class MessagingClient(Protocol):
    on_lifecycle: LifecycleCallback

    async def initialize(self) -> None: ...

    async def send_message(self, target_id: str, text: str) -> SentMessage: ...

    async def get_chats(self) -> list[ChatSummary]: ...

    async def logout(self) -> None: ...

    async def destroy(self) -> None: ...
