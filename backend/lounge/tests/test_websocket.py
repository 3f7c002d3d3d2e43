"""End-to-end tests for the /ws chat endpoint through TestClient."""

from fastapi.testclient import TestClient


def _register(ws, name: str) -> dict:
    ws.send_json({"type": "register", "username": name})
    return ws.receive_json()


class TestChatWebSocket:
    def test_register_handshake(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            assert _register(ws, "alice") == {"type": "register-success", "username": "alice"}
            joined = ws.receive_json()
            assert joined["type"] == "user-joined"
            assert joined["username"] == "alice"
            assert joined["activeUsers"] == ["alice"]
            assert "timestamp" in joined

    def test_alice_and_bob(self, client: TestClient):
        with client.websocket_connect("/ws") as b:
            with client.websocket_connect("/ws") as a:
                assert _register(a, "alice")["type"] == "register-success"
                assert a.receive_json()["type"] == "user-joined"

                failed = _register(b, "alice")
                assert failed == {"type": "register-failed", "reason": "Username already taken"}

                assert _register(b, "bob")["type"] == "register-success"
                assert b.receive_json()["username"] == "bob"  # own join
                joined = a.receive_json()
                assert joined["type"] == "user-joined"
                assert sorted(joined["activeUsers"]) == ["alice", "bob"]

                a.send_json({"type": "send-message", "text": "hi"})
                for ws in (a, b):
                    event = ws.receive_json()
                    assert event["type"] == "new-message"
                    assert event["message"]["username"] == "alice"
                    assert event["message"]["text"] == "hi"

            left = b.receive_json()
            assert left["type"] == "user-left"
            assert left["username"] == "alice"
            assert left["activeUsers"] == ["bob"]

    def test_send_before_register_is_rejected(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "send-message", "text": "sneaky"})
            err = ws.receive_json()
            assert err["type"] == "error"
            assert err["code"] == "unauthorized"

            # Connection survives and can still register
            assert _register(ws, "late")["type"] == "register-success"

        assert client.get("/api/messages").json()["total"] == 0

    def test_non_json_frames_are_ignored(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            assert _register(ws, "alice")["type"] == "register-success"

    def test_typing_goes_to_others_only(self, client: TestClient):
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            _register(a, "typer1")
            a.receive_json()
            _register(b, "typer2")
            b.receive_json()
            a.receive_json()  # typer2 joined

            b.send_json({"type": "typing"})
            assert a.receive_json() == {"type": "user-typing", "username": "typer2"}

            b.send_json({"type": "stop-typing"})
            assert a.receive_json() == {"type": "user-stop-typing", "username": "typer2"}

            # b got nothing for its own typing: the next thing it sees is a's message
            a.send_json({"type": "send-message", "text": "done?"})
            assert b.receive_json()["type"] == "new-message"

    def test_sent_message_appears_in_history(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            _register(ws, "alice")
            ws.receive_json()
            ws.send_json({"type": "send-message", "text": "persist me"})
            sent = ws.receive_json()["message"]

        data = client.get("/api/messages?limit=5").json()
        assert data["total"] == 1
        assert data["messages"][0] == sent

    def test_name_reusable_after_disconnect(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            _register(ws, "alice")
        with client.websocket_connect("/ws") as ws:
            assert _register(ws, "alice")["type"] == "register-success"
