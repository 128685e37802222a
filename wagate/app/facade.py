"""Request handling for the gateway endpoints.

Every operation returns a :class:`Reply`; the HTTP layer turns replies into
responses in one place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from wagate.core.entities import ChatSummary, SentMessage
from wagate.core.session import SessionState

logger = logging.getLogger(__name__)

SEND_EXAMPLE = {
    "groupId": "123456789-1234567890@g.us",
    "message": "Hello from API!",
}
LOGOUT_MESSAGE = "Logged out successfully. Session data has been cleared."
LOGOUT_NOTE = "You will need to scan QR code again to reconnect. Restart the server to reinitialize."


class RuntimeLike(Protocol):
    def session_state(self) -> SessionState: ...

    def send_message(self, target_id: str, text: str) -> SentMessage: ...

    def get_chats(self) -> list[ChatSummary]: ...

    def logout(self) -> SessionState: ...


@dataclass(frozen=True)
class Reply:
    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 400


def success(body: dict[str, Any]) -> Reply:
    return Reply(200, body)


def failure(status: int, error: str, **extra: Any) -> Reply:
    return Reply(status, {"error": error, **extra})


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


class GatewayFacade:
    def __init__(self, runtime: RuntimeLike) -> None:
        self.runtime = runtime

    def state(self) -> SessionState:
        return self.runtime.session_state()

    def status(self) -> Reply:
        return success(self.state().to_status())

    def send_to_group(self, payload: Mapping[str, Any]) -> Reply:
        if not self.state().ready:
            return failure(503, "WhatsApp client is not ready. Please scan QR code first.", qrUrl="/qr")

        group_id = payload.get("groupId")
        message = payload.get("message")
        if not _present(group_id) or not _present(message):
            return failure(400, "Both groupId and message are required", example=dict(SEND_EXAMPLE))

        try:
            sent = self.runtime.send_message(group_id, message)
        except Exception as exc:
            logger.exception(
                "error sending message to %s", group_id, extra={"event": "send_failed", "group_id": group_id}
            )
            return failure(500, "Failed to send message", details=str(exc))

        logger.info("message sent to %s", group_id, extra={"event": "message_sent", "group_id": group_id})
        return success(
            {
                "success": True,
                "messageId": sent.id,
                "timestamp": sent.timestamp,
                "to": group_id,
            }
        )

    def list_groups(self) -> Reply:
        if not self.state().ready:
            return failure(503, "WhatsApp client is not ready")

        try:
            chats = self.runtime.get_chats()
        except Exception as exc:
            logger.exception("error fetching groups", extra={"event": "list_groups_failed"})
            return failure(500, "Failed to fetch groups", details=str(exc))

        return success({"groups": [chat.to_group_dict() for chat in chats if chat.is_group]})

    def logout(self) -> Reply:
        if not self.state().ready:
            return failure(400, "Client is not logged in", ready=False)

        try:
            self.runtime.logout()
        except Exception as exc:
            logger.exception("error during logout", extra={"event": "logout_failed"})
            return failure(500, "Failed to logout", details=str(exc))

        return success({"success": True, "message": LOGOUT_MESSAGE, "note": LOGOUT_NOTE})
