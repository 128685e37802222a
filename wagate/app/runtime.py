from __future__ import annotations

import asyncio
import atexit
import concurrent.futures
import contextlib
import logging
import threading
from collections.abc import Callable
from typing import Any

from wagate.client.base import MessagingClient
from wagate.client.neonize_client import NeonizeClient
from wagate.core.entities import ChatSummary, SentMessage
from wagate.core.errors import ClientUnavailableError
from wagate.core.events import LifecycleEvent
from wagate.core.session import SessionManager, SessionState

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], MessagingClient]


class GatewayRuntime:
    """Owns the messaging client, its event loop thread and the session state.

    Lifecycle callbacks and every client call run on one background asyncio
    loop. HTTP worker threads submit coroutines to it and wait for the result.
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        *,
        session_name: str = "client-one.sqlite3",
        session: SessionManager | None = None,
        call_timeout_s: float | None = None,
    ) -> None:
        self._client_factory = client_factory or (lambda: NeonizeClient(session_name))
        self.session = session or SessionManager()
        self.call_timeout_s = call_timeout_s
        self._client: MessagingClient | None = None
        self._closed = False

        self._loop = asyncio.new_event_loop()
        self._started = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, name="wagate-client-loop", daemon=True)
        self._thread.start()
        self._started.wait(timeout=2.0)

        atexit.register(self.close)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._started.set()
        self._loop.run_forever()

    def _run_coro_sync(self, coro: Any) -> Any:
        fut = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return fut.result(timeout=self.call_timeout_s)
        except concurrent.futures.TimeoutError:
            # cancel so a call reported as failed cannot complete later
            fut.cancel()
            raise TimeoutError(f"client call timed out after {self.call_timeout_s}s") from None

    def start(self) -> concurrent.futures.Future[None]:
        """Create the client and schedule its initialization without waiting for it."""
        self._run_coro_sync(self._attach_client_async())
        return asyncio.run_coroutine_threadsafe(self._initialize_async(), self._loop)

    def session_state(self) -> SessionState:
        return self.session.snapshot()

    def dispatch(self, event: LifecycleEvent) -> SessionState:
        """Apply a lifecycle event on the client loop, as if the client had raised it."""
        return self._run_coro_sync(self._dispatch_async(event))

    def send_message(self, target_id: str, text: str) -> SentMessage:
        return self._run_coro_sync(self._send_message_async(target_id, text))

    def get_chats(self) -> list[ChatSummary]:
        return self._run_coro_sync(self._get_chats_async())

    def logout(self) -> SessionState:
        return self._run_coro_sync(self._logout_async())

    async def _attach_client_async(self) -> None:
        if self._client is not None:
            return
        client = self._client_factory()
        client.on_lifecycle = self.session.handle
        self._client = client

    async def _initialize_async(self) -> None:
        client = self._client
        if client is None:
            return
        try:
            await client.initialize()
        except Exception:
            logger.exception("WhatsApp client failed to initialize")

    async def _dispatch_async(self, event: LifecycleEvent) -> SessionState:
        return self.session.apply(event)

    async def _send_message_async(self, target_id: str, text: str) -> SentMessage:
        return await self._require_client().send_message(target_id, text)

    async def _get_chats_async(self) -> list[ChatSummary]:
        return await self._require_client().get_chats()

    async def _logout_async(self) -> SessionState:
        client = self._require_client()
        logger.info("logging out WhatsApp client")
        await client.logout()
        try:
            await client.destroy()
        finally:
            self._client = None
            state = self.session.reset()
            logger.info("logged out, session data cleared", extra={"event": "logout"})
        return state

    def _require_client(self) -> MessagingClient:
        if self._client is None:
            raise ClientUnavailableError("WhatsApp client is not running. Restart the server to reinitialize.")
        return self._client

    async def _teardown_client_async(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            with contextlib.suppress(Exception):
                await client.destroy()

    def close(self) -> None:
        if self._closed or not self._loop.is_running():
            return
        self._closed = True
        with contextlib.suppress(Exception):
            self._run_coro_sync(self._teardown_client_async())
        self._loop.call_soon_threadsafe(self._loop.stop)
