import pytest

from wagate.app.facade import LOGOUT_MESSAGE, LOGOUT_NOTE, SEND_EXAMPLE, GatewayFacade, Reply
from wagate.app.runtime import GatewayRuntime
from wagate.app.server import create_app
from wagate.core.entities import ChatSummary, SentMessage
from wagate.core.events import LifecycleEvent
from wagate.core.session import SessionManager, SessionState


class _FakeClient:
    def __init__(self) -> None:
        self.on_lifecycle = None
        self.sent: list[tuple[str, str]] = []
        self.chats = [
            ChatSummary(id="120363000000000001@g.us", name="Team", is_group=True, participants=4),
            ChatSummary(id="628111@s.whatsapp.net", name="Alice", is_group=False),
            ChatSummary(id="120363000000000002@g.us", name="News", is_group=True, participants=90, is_read_only=True),
        ]
        self.error: Exception | None = None
        self.logout_called = False
        self.destroy_called = False

    async def initialize(self) -> None:
        return None

    async def send_message(self, target_id: str, text: str) -> SentMessage:
        if self.error is not None:
            raise self.error
        self.sent.append((target_id, text))
        return SentMessage(id="3EB0ABC", timestamp=1700000000)

    async def get_chats(self) -> list[ChatSummary]:
        if self.error is not None:
            raise self.error
        return list(self.chats)

    async def logout(self) -> None:
        if self.error is not None:
            raise self.error
        self.logout_called = True

    async def destroy(self) -> None:
        self.destroy_called = True


@pytest.fixture
def fake_client():
    return _FakeClient()


@pytest.fixture
def runtime(fake_client):
    rt = GatewayRuntime(lambda: fake_client, session=SessionManager(render_qr=lambda code: f"data:image/png;base64,{code}"))
    rt.start().result(timeout=5.0)
    yield rt
    rt.close()


@pytest.fixture
def http(runtime):
    app = create_app(testing=True, runtime=runtime)
    with app.test_client() as client:
        yield client


def test_status_before_any_event(http) -> None:
    res = http.get("/status")
    assert res.status_code == 200
    assert res.get_json() == {"ready": False, "needsQR": False}


def test_qr_page_waits_for_code(http) -> None:
    res = http.get("/qr")
    assert res.status_code == 200
    assert res.mimetype == "text/html"
    body = res.get_data(as_text=True)
    assert "<h1>Waiting for QR code...</h1>" in body
    assert "Refresh in a few seconds." in body


def test_qr_event_requests_scan_until_ready(http, runtime) -> None:
    runtime.dispatch(LifecycleEvent.qr("ABC123"))

    assert http.get("/status").get_json() == {"ready": False, "needsQR": True}
    body = http.get("/qr").get_data(as_text=True)
    assert "Scan this QR Code with WhatsApp" in body
    assert '<img src="data:image/png;base64,ABC123" alt="QR Code" />' in body
    assert "Linked Devices" in body

    runtime.dispatch(LifecycleEvent.ready())
    assert http.get("/status").get_json() == {"ready": True, "needsQR": False}


def test_ready_shows_already_authenticated_page(http, runtime) -> None:
    runtime.dispatch(LifecycleEvent.qr("ABC123"))
    runtime.dispatch(LifecycleEvent.ready())
    body = http.get("/qr").get_data(as_text=True)
    assert "<h1>Client is already authenticated!</h1>" in body
    assert "<img" not in body
    assert http.get("/status").get_json()["ready"] is True


def test_disconnect_resets_status(http, runtime) -> None:
    runtime.dispatch(LifecycleEvent.qr("ABC123"))
    runtime.dispatch(LifecycleEvent.ready())
    runtime.dispatch(LifecycleEvent.disconnected("NAVIGATION"))
    assert http.get("/status").get_json() == {"ready": False, "needsQR": False}


@pytest.mark.parametrize(
    "body",
    [
        {"groupId": "120363000000000001@g.us", "message": "hi"},
        {},
        {"message": "hi"},
    ],
)
def test_send_requires_ready_regardless_of_body(http, fake_client, body) -> None:
    res = http.post("/send-to-group", json=body)
    assert res.status_code == 503
    assert res.get_json() == {
        "error": "WhatsApp client is not ready. Please scan QR code first.",
        "qrUrl": "/qr",
    }
    assert fake_client.sent == []


@pytest.mark.parametrize(
    "body",
    [
        {"groupId": "120363000000000001@g.us"},
        {"message": "hi"},
        {"groupId": "", "message": "hi"},
        {"groupId": "120363000000000001@g.us", "message": 42},
    ],
)
def test_send_with_missing_fields_returns_example(http, runtime, fake_client, body) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.post("/send-to-group", json=body)
    assert res.status_code == 400
    assert res.get_json() == {"error": "Both groupId and message are required", "example": SEND_EXAMPLE}
    assert fake_client.sent == []


def test_send_success(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.post("/send-to-group", json={"groupId": "120363000000000001@g.us", "message": "Hello from API!"})
    assert res.status_code == 200
    assert res.get_json() == {
        "success": True,
        "messageId": "3EB0ABC",
        "timestamp": 1700000000,
        "to": "120363000000000001@g.us",
    }
    assert fake_client.sent == [("120363000000000001@g.us", "Hello from API!")]


def test_send_failure_is_reported(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    fake_client.error = RuntimeError("chat not found")
    res = http.post("/send-to-group", json={"groupId": "1@g.us", "message": "x"})
    assert res.status_code == 500
    assert res.get_json() == {"error": "Failed to send message", "details": "chat not found"}
    assert http.get("/status").get_json()["ready"] is True


def test_malformed_json_send_is_treated_as_empty_body(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.post("/send-to-group", data="{not json", content_type="application/json")
    assert res.status_code == 400
    assert res.get_json() == {"error": "Both groupId and message are required", "example": SEND_EXAMPLE}
    assert fake_client.sent == []


def test_malformed_json_logout_still_logs_out(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.post("/logout", data="{not json", content_type="application/json")
    assert res.status_code == 200
    assert res.get_json() == {"success": True, "message": LOGOUT_MESSAGE, "note": LOGOUT_NOTE}
    assert fake_client.logout_called is True


def test_malformed_json_when_not_ready(http) -> None:
    res = http.post("/send-to-group", data="[1, 2", content_type="application/json")
    assert res.status_code == 503


def test_non_object_json_is_treated_as_empty_body(http, runtime) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.post("/send-to-group", json=["120363000000000001@g.us", "hi"])
    assert res.status_code == 400


def test_groups_requires_ready(http) -> None:
    res = http.get("/groups")
    assert res.status_code == 503
    assert res.get_json() == {"error": "WhatsApp client is not ready"}


def test_groups_lists_only_groups(http, runtime) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    res = http.get("/groups")
    assert res.status_code == 200
    assert res.get_json() == {
        "groups": [
            {"id": "120363000000000001@g.us", "name": "Team", "participants": 4, "isReadOnly": False},
            {"id": "120363000000000002@g.us", "name": "News", "participants": 90, "isReadOnly": True},
        ]
    }


def test_groups_failure_is_reported(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    fake_client.error = TimeoutError("query timed out")
    res = http.get("/groups")
    assert res.status_code == 500
    assert res.get_json() == {"error": "Failed to fetch groups", "details": "query timed out"}
    assert http.get("/status").get_json() == {"ready": True, "needsQR": False}


def test_logout_requires_ready(http, fake_client) -> None:
    res = http.post("/logout")
    assert res.status_code == 400
    assert res.get_json() == {"error": "Client is not logged in", "ready": False}
    assert fake_client.logout_called is False


def test_logout_resets_state(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.qr("ABC123"))
    runtime.dispatch(LifecycleEvent.ready())

    res = http.post("/logout")

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["message"] == "Logged out successfully. Session data has been cleared."
    assert "Restart the server" in body["note"]
    assert fake_client.logout_called is True
    assert fake_client.destroy_called is True
    assert http.get("/status").get_json() == {"ready": False, "needsQR": False}
    assert http.post("/logout").status_code == 400


def test_logout_failure_keeps_state(http, runtime, fake_client) -> None:
    runtime.dispatch(LifecycleEvent.ready())
    fake_client.error = RuntimeError("socket closed")
    res = http.post("/logout")
    assert res.status_code == 500
    assert res.get_json() == {"error": "Failed to logout", "details": "socket closed"}
    assert http.get("/status").get_json()["ready"] is True


class _FakeRuntime:
    def __init__(self, ready: bool = True) -> None:
        self.state = SessionState(ready=ready)
        self.send_calls: list[tuple[str, str]] = []

    def session_state(self) -> SessionState:
        return self.state

    def send_message(self, target_id: str, text: str) -> SentMessage:
        self.send_calls.append((target_id, text))
        return SentMessage(id="m1", timestamp=1)

    def get_chats(self) -> list[ChatSummary]:
        return []

    def logout(self) -> SessionState:
        self.state = SessionState()
        return self.state


def test_facade_returns_reply_values() -> None:
    facade = GatewayFacade(_FakeRuntime())
    assert facade.status() == Reply(200, {"ready": True, "needsQR": False})
    assert facade.list_groups() == Reply(200, {"groups": []})

    reply = facade.send_to_group({"groupId": "1@g.us", "message": "x"})
    assert reply.ok is True
    assert reply.body["to"] == "1@g.us"

    missing = facade.send_to_group({})
    assert missing.ok is False
    assert missing.status == 400


def test_facade_never_sends_when_not_ready() -> None:
    runtime = _FakeRuntime(ready=False)
    reply = GatewayFacade(runtime).send_to_group({"groupId": "1@g.us", "message": "x"})
    assert reply.status == 503
    assert runtime.send_calls == []
