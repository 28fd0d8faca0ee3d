from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fake_api import BASE_URL, FakeHealthApi  # noqa: E402
from transport.client import ApiTransport  # noqa: E402
from transport.errors import (  # noqa: E402
    HttpError,
    NetworkError,
    RequestEncodingError,
    UnauthorizedError,
    error_message,
)
from transport.token_store import FileTokenStore, MemoryTokenStore  # noqa: E402


def _transport(api: FakeHealthApi, tokens) -> ApiTransport:
    return ApiTransport(tokens, BASE_URL, transport=api.transport())


def test_bearer_token_is_attached_only_when_stored():
    api = FakeHealthApi()
    api.add_user("ana@example.com", "secret1")
    tokens = MemoryTokenStore()
    transport = _transport(api, tokens)

    async def scenario():
        with pytest.raises(UnauthorizedError):
            await transport.get("/api/workouts")
        tokens.set(api.issue_token("ana@example.com"))
        items = await transport.get("/api/workouts")
        await transport.aclose()
        return items

    assert asyncio.run(scenario()) == []
    assert api.auth_headers[0] is None
    assert api.auth_headers[1] == f"Bearer {tokens.get()}"


def test_unauthorized_response_clears_token_and_notifies_for_each_response():
    api = FakeHealthApi()
    api.add_user("ana@example.com", "secret1")
    tokens = MemoryTokenStore(api.issue_token("ana@example.com"))
    transport = _transport(api, tokens)
    fired: list[int] = []
    transport.on_unauthorized(lambda: fired.append(1))
    api.revoke_sessions("ana@example.com")

    async def scenario():
        results = await asyncio.gather(
            transport.get("/api/workouts"),
            transport.get("/api/sleep"),
            return_exceptions=True,
        )
        await transport.aclose()
        return results

    results = asyncio.run(scenario())
    assert all(isinstance(r, UnauthorizedError) for r in results)
    assert tokens.get() is None
    assert fired == [1, 1]


def test_unauthorized_without_a_token_still_notifies():
    api = FakeHealthApi()
    transport = _transport(api, MemoryTokenStore())
    fired: list[int] = []
    transport.on_unauthorized(lambda: fired.append(1))

    async def scenario():
        with pytest.raises(UnauthorizedError) as exc_info:
            await transport.post("/api/auth/login", {"email": "nobody@example.com", "password": "x"})
        await transport.aclose()
        return exc_info.value

    exc = asyncio.run(scenario())
    assert error_message(exc, "Login failed") == "Invalid credentials"
    assert fired == [1]


def test_http_error_carries_status_and_server_message():
    api = FakeHealthApi()
    api.add_user("ana@example.com", "secret1")
    api.fail("GET", "/api/workouts", 503)
    transport = _transport(api, MemoryTokenStore(api.issue_token("ana@example.com")))

    async def scenario():
        with pytest.raises(HttpError) as exc_info:
            await transport.get("/api/workouts")
        await transport.aclose()
        return exc_info.value

    exc = asyncio.run(scenario())
    assert exc.status_code == 503
    assert exc.message == "Injected failure"


def test_request_failure_before_response_raises_network_error():
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = ApiTransport(MemoryTokenStore("tok"), BASE_URL, transport=httpx.MockTransport(_refuse))

    async def scenario():
        with pytest.raises(NetworkError):
            await transport.get("/api/sleep")
        await transport.aclose()

    asyncio.run(scenario())


def test_unencodable_body_raises_encoding_error_without_sending():
    api = FakeHealthApi()
    api.add_user("ana@example.com", "secret1")
    transport = _transport(api, MemoryTokenStore(api.issue_token("ana@example.com")))

    async def scenario():
        with pytest.raises(RequestEncodingError):
            await transport.post("/api/sleep", {"date": "2026-10-01", "duration": float("nan")})
        with pytest.raises(RequestEncodingError):
            await transport.put("/api/sleep/s1", {"tags": {"a", "b"}})
        await transport.aclose()

    asyncio.run(scenario())
    assert api.calls == []


def test_file_token_store_survives_reload_and_clear(tmp_path):
    path = tmp_path / "state" / "session.json"
    store = FileTokenStore(path, "token")
    assert store.get() is None

    store.set("abc.def")
    assert json.loads(path.read_text()) == {"token": "abc.def"}
    assert FileTokenStore(path, "token").get() == "abc.def"

    assert store.clear() is True
    assert store.clear() is False
    assert not path.exists()
    assert FileTokenStore(path, "token").get() is None


def test_file_token_store_treats_malformed_file_as_empty(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    assert FileTokenStore(path, "token").get() is None
    path.write_text(json.dumps({"token": ""}))
    assert FileTokenStore(path, "token").get() is None
