"""Messaging client backed by neonize's asyncio WhatsApp client."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import Any

from wagate.core.entities import ChatSummary, SentMessage
from wagate.core.errors import ClientUnavailableError
from wagate.core.events import LifecycleEvent

logger = logging.getLogger(__name__)


def split_target(target_id: str) -> tuple[str, str]:
    user, sep, server = (target_id or "").strip().partition("@")
    if not sep or not user or not server:
        raise ValueError(
            f"Invalid chat id {target_id!r}. Use '<user>@<server>', e.g. '123456789-1234567890@g.us'."
        )
    return user, server


def _to_jid(target_id: str) -> Any:
    from neonize.utils import build_jid

    user, server = split_target(target_id)
    return build_jid(user, server)


def jid_to_str(jid: Any) -> str:
    user = getattr(jid, "User", "") or ""
    server = getattr(jid, "Server", "") or ""
    if not server:
        return user
    return f"{user}@{server}"


def normalize_timestamp(raw: Any) -> int:
    try:
        value = int(raw or 0)
    except (TypeError, ValueError):
        return 0
    # millisecond precision from some server paths
    if value >= 10**12:
        value //= 1000
    return value


def group_to_summary(info: Any) -> ChatSummary:
    group_name = getattr(info, "GroupName", None)
    announce = getattr(info, "GroupAnnounce", None)
    return ChatSummary(
        id=jid_to_str(getattr(info, "JID", None)),
        name=getattr(group_name, "Name", "") or "",
        is_group=True,
        participants=len(getattr(info, "Participants", None) or []),
        is_read_only=bool(getattr(announce, "IsAnnounce", False)),
    )


class NeonizeClient:
    """Adapts ``neonize.aioze.client.NewAClient`` to the gateway's messaging client contract.

    ``neonize`` is imported on :meth:`initialize` so the gateway can be
    imported (and tested) without loading the native library.
    """

    def __init__(self, session_name: str = "client-one.sqlite3") -> None:
        self.session_name = session_name
        self.on_lifecycle = self._default_lifecycle_handler
        self._client: Any = None
        self._idle_task: asyncio.Future[Any] | None = None

    async def initialize(self) -> None:
        from neonize.aioze import client as neonize_client
        from neonize.aioze import events as neonize_events
        from neonize.aioze.client import NewAClient

        # neonize holds module-level loop references in both modules.
        loop = asyncio.get_running_loop()
        neonize_events.event_global_loop = loop
        neonize_client.event_global_loop = loop

        client = NewAClient(self.session_name)
        self._register_handlers(client)
        self._client = client
        logger.info("connecting WhatsApp client", extra={"event": "connecting", "session": self.session_name})
        await client.connect()
        self._idle_task = asyncio.ensure_future(client.idle())

    def _register_handlers(self, client: Any) -> None:
        from neonize.events import ConnectedEv, ConnectFailureEv, DisconnectedEv, LoggedOutEv, PairStatusEv

        client.event.qr(self._on_qr)
        client.event(PairStatusEv)(self._on_pair_status)
        client.event(ConnectedEv)(self._on_connected)
        client.event(LoggedOutEv)(self._on_logged_out)
        client.event(ConnectFailureEv)(self._on_connect_failure)
        client.event(DisconnectedEv)(self._on_disconnected)

    async def send_message(self, target_id: str, text: str) -> SentMessage:
        client = self._require_client()
        response = await client.send_message(_to_jid(target_id), text)
        return SentMessage(
            id=str(getattr(response, "ID", "") or ""),
            timestamp=normalize_timestamp(getattr(response, "Timestamp", 0)),
        )

    async def get_chats(self) -> list[ChatSummary]:
        client = self._require_client()
        groups = await client.get_joined_groups()
        return [group_to_summary(info) for info in groups]

    async def logout(self) -> None:
        client = self._require_client()
        await client.logout()

    async def destroy(self) -> None:
        if self._idle_task is not None:
            self._idle_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._idle_task
            self._idle_task = None
        client, self._client = self._client, None
        if client is None:
            return
        result = client.disconnect()
        if inspect.isawaitable(result):
            await result

    def _require_client(self) -> Any:
        if self._client is None:
            raise ClientUnavailableError("WhatsApp client is not initialized.")
        return self._client

    async def _on_qr(self, _client: Any, qr_data: bytes | str) -> None:
        code = qr_data.decode("utf-8") if isinstance(qr_data, bytes) else str(qr_data)
        await self.on_lifecycle(LifecycleEvent.qr(code))

    async def _on_pair_status(self, _client: Any, event: Any) -> None:
        paired_id = getattr(event, "ID", None)
        logger.info("paired as %s", getattr(paired_id, "User", "?"))
        await self.on_lifecycle(LifecycleEvent.authenticated())

    async def _on_connected(self, _client: Any, _event: Any) -> None:
        await self.on_lifecycle(LifecycleEvent.ready())

    async def _on_logged_out(self, _client: Any, event: Any) -> None:
        reason = getattr(event, "Reason", None)
        await self.on_lifecycle(LifecycleEvent.disconnected(f"logged out ({reason})" if reason else "logged out"))

    async def _on_connect_failure(self, _client: Any, event: Any) -> None:
        reason = getattr(event, "Reason", None)
        await self.on_lifecycle(LifecycleEvent.disconnected(f"connect failure ({reason})" if reason else "connect failure"))

    async def _on_disconnected(self, _client: Any, _event: Any) -> None:
        await self.on_lifecycle(LifecycleEvent.disconnected("connection closed"))

    async def _default_lifecycle_handler(self, event: LifecycleEvent) -> None:
        del event
