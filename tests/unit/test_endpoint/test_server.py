"""Tests for the relay dispatcher."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from splendid.backend.base import BackendActionError, BackendAuthError
from splendid.endpoint.server import ROUTE, STATUS_TEXT, create_app


@pytest.fixture
def client(mock_backend: AsyncMock) -> TestClient:
    """A test client with authorized keys {k1, k2} and a mock backend."""
    app = create_app(authorized_keys=["k1", "k2"], backend=mock_backend)
    return TestClient(app)


def assert_status(resp, status_code: int) -> None:
    assert resp.status_code == status_code
    assert resp.text == STATUS_TEXT[status_code]
    assert resp.headers["content-type"].startswith("text/plain")


class TestMethod:
    @pytest.mark.parametrize(
        "method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "FOO"]
    )
    def test_non_post_rejected(
        self, client: TestClient, mock_backend: AsyncMock, method: str
    ) -> None:
        resp = client.request(method, ROUTE)
        assert_status(resp, 405)
        mock_backend.login.assert_not_called()

    def test_head_rejected(self, client: TestClient, mock_backend: AsyncMock) -> None:
        resp = client.head(ROUTE)
        assert resp.status_code == 405
        mock_backend.login.assert_not_called()

    def test_subpath_non_post_rejected(self, client: TestClient) -> None:
        assert_status(client.request("TRACE", ROUTE + "lamp"), 405)


class TestMalformed:
    @pytest.mark.parametrize("body", ["", "not json", "[1, 2]", '{"Key": 5}'])
    def test_bad_body(self, client: TestClient, mock_backend: AsyncMock, body: str) -> None:
        resp = client.post(ROUTE, content=body)
        assert_status(resp, 400)
        mock_backend.login.assert_not_called()


class TestAuthorization:
    @pytest.mark.parametrize("device,value", [("switch", "1"), ("toaster", "x")])
    def test_unknown_key_forbidden(
        self, client: TestClient, mock_backend: AsyncMock, make_body, device: str, value: str
    ) -> None:
        resp = client.post(ROUTE, content=make_body(key="intruder", device=device, value=value))
        assert_status(resp, 403)
        mock_backend.login.assert_not_called()

    def test_second_key_accepted(
        self, client: TestClient, mock_session: AsyncMock, make_body
    ) -> None:
        resp = client.post(ROUTE, content=make_body(key="k2"))
        assert_status(resp, 200)
        mock_session.turn_on.assert_called_once_with("Lamp")


class TestSwitching:
    def test_switch_on(
        self, client: TestClient, mock_backend: AsyncMock, mock_session: AsyncMock,
        switch_on_body: str,
    ) -> None:
        resp = client.post(ROUTE, content=switch_on_body)
        assert_status(resp, 200)
        mock_backend.login.assert_called_once()
        mock_session.turn_on.assert_called_once_with("Lamp")
        mock_session.turn_off.assert_not_called()

    def test_switch_off(
        self, client: TestClient, mock_session: AsyncMock, switch_off_body: str
    ) -> None:
        resp = client.post(ROUTE, content=switch_off_body)
        assert_status(resp, 200)
        mock_session.turn_off.assert_called_once_with("Lamp")
        mock_session.turn_on.assert_not_called()

    def test_session_closed_after_request(
        self, client: TestClient, mock_session: AsyncMock, switch_on_body: str
    ) -> None:
        client.post(ROUTE, content=switch_on_body)
        mock_session.close.assert_called_once()

    def test_every_request_logs_in(
        self, client: TestClient, mock_backend: AsyncMock, switch_on_body: str
    ) -> None:
        client.post(ROUTE, content=switch_on_body)
        client.post(ROUTE, content=switch_on_body)
        assert mock_backend.login.call_count == 2

    def test_subpath_routed(
        self, client: TestClient, mock_session: AsyncMock, switch_on_body: str
    ) -> None:
        resp = client.post(ROUTE + "lamp", content=switch_on_body)
        assert_status(resp, 200)
        mock_session.turn_on.assert_called_once_with("Lamp")


class TestUnsupported:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"device": "dimmer"},
            {"action": "toggle"},
            {"value": "2"},
            {"value": ""},
        ],
    )
    def test_not_acceptable(
        self, client: TestClient, mock_backend: AsyncMock, mock_session: AsyncMock,
        make_body, overrides: dict,
    ) -> None:
        resp = client.post(ROUTE, content=make_body(**overrides))
        assert_status(resp, 406)
        # Login still happens before the grammar is checked.
        mock_backend.login.assert_called_once()
        mock_session.turn_on.assert_not_called()
        mock_session.turn_off.assert_not_called()
        mock_session.close.assert_called_once()


class TestBackendFailures:
    def test_login_failure(
        self, client: TestClient, mock_backend: AsyncMock, mock_session: AsyncMock,
        switch_on_body: str,
    ) -> None:
        mock_backend.login.side_effect = BackendAuthError("rejected")
        resp = client.post(ROUTE, content=switch_on_body)
        assert_status(resp, 500)
        mock_session.turn_on.assert_not_called()
        mock_session.turn_off.assert_not_called()

    def test_turn_on_failure(
        self, client: TestClient, mock_session: AsyncMock, switch_on_body: str
    ) -> None:
        mock_session.turn_on.side_effect = BackendActionError("No device named 'Lamp'")
        resp = client.post(ROUTE, content=switch_on_body)
        assert_status(resp, 406)
        mock_session.close.assert_called_once()

    def test_turn_off_failure(
        self, client: TestClient, mock_session: AsyncMock, switch_off_body: str
    ) -> None:
        mock_session.turn_off.side_effect = BackendActionError("setswitchoff returned 'inval'")
        resp = client.post(ROUTE, content=switch_off_body)
        assert_status(resp, 406)


class TestEndToEnd:
    def test_lamp_on(self, mock_backend: AsyncMock, mock_session: AsyncMock) -> None:
        client = TestClient(create_app(authorized_keys={"k1"}, backend=mock_backend))
        resp = client.post(
            "/gghr/",
            content='{"Key":"k1","Device":"switch","Name":"Lamp","Action":"set","Value":"1"}',
        )
        assert resp.status_code == 200
        assert resp.text == "200 - Ok"
        mock_session.turn_on.assert_called_once_with("Lamp")

    def test_key_never_logged(
        self, client: TestClient, switch_on_body: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("INFO", logger="splendid"):
            client.post(ROUTE, content=switch_on_body)
        assert "<VALID>" in caplog.text
        assert '"k1"' not in caplog.text


class TestBodyReadFailure:
    @pytest.mark.asyncio
    async def test_client_disconnect(self, mock_backend: AsyncMock) -> None:
        app = create_app(authorized_keys=["k1"], backend=mock_backend)
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "POST",
            "scheme": "https",
            "path": ROUTE,
            "raw_path": ROUTE.encode(),
            "root_path": "",
            "query_string": b"",
            "headers": [(b"content-type", b"application/json")],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 443),
        }
        sent: list[dict] = []

        async def receive() -> dict:
            return {"type": "http.disconnect"}

        async def send(message: dict) -> None:
            sent.append(message)

        await app(scope, receive, send)

        start = next(m for m in sent if m["type"] == "http.response.start")
        body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
        assert start["status"] == 400
        assert body == b"400 - Bad request"
        mock_backend.login.assert_not_called()


class TestUnexpectedErrors:
    def test_login_crash(
        self, client: TestClient, mock_backend: AsyncMock, switch_on_body: str
    ) -> None:
        mock_backend.login.side_effect = RuntimeError("boom")
        assert_status(client.post(ROUTE, content=switch_on_body), 500)

    def test_action_crash(
        self, client: TestClient, mock_session: AsyncMock, switch_on_body: str
    ) -> None:
        mock_session.turn_on.side_effect = RuntimeError("boom")
        assert_status(client.post(ROUTE, content=switch_on_body), 500)
        mock_session.close.assert_called_once()

    def test_close_crash(
        self, client: TestClient, mock_session: AsyncMock, switch_off_body: str
    ) -> None:
        mock_session.close.side_effect = RuntimeError("boom")
        assert_status(client.post(ROUTE, content=switch_off_body), 500)


class TestFieldNames:
    def test_upper_case_fields(
        self, client: TestClient, mock_session: AsyncMock
    ) -> None:
        resp = client.post(
            ROUTE,
            content='{"KEY":"k1","DEVICE":"switch","NAME":"Lamp","ACTION":"set","VALUE":"0"}',
        )
        assert_status(resp, 200)
        mock_session.turn_off.assert_called_once_with("Lamp")

    def test_null_body_is_empty_command(
        self, client: TestClient, mock_backend: AsyncMock
    ) -> None:
        assert_status(client.post(ROUTE, content="null"), 403)
        mock_backend.login.assert_not_called()
