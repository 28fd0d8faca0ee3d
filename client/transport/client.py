from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from config import settings
from transport.errors import HttpError, NetworkError, RequestEncodingError, UnauthorizedError
from transport.token_store import TokenStore

logger = logging.getLogger(__name__)

UnauthorizedListener = Callable[[], None]


def _safe_json(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def _extract_message(resp: httpx.Response, fallback: str) -> str:
    data = _safe_json(resp)
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


class ApiTransport:
    """Single choke point for every call to the remote API.

    A request hook attaches ``Authorization: Bearer <token>`` whenever the
    token store holds a token. A response hook intercepts every ``401``
    response: the stored token is cleared and the unauthorized listeners are
    notified, then the failure still propagates to the caller as
    ``UnauthorizedError``. Listeners must be idempotent, since concurrent
    ``401`` responses each notify.
    """

    def __init__(
        self,
        tokens: TokenStore,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._tokens = tokens
        self._listeners: list[UnauthorizedListener] = []
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
            headers={"User-Agent": settings.USER_AGENT, "Accept": "application/json"},
            event_hooks={
                "request": [self._attach_token],
                "response": [self._intercept_unauthorized],
            },
        )

    @property
    def tokens(self) -> TokenStore:
        return self._tokens

    def on_unauthorized(self, listener: UnauthorizedListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # hooks
    # ------------------------------------------------------------------
    async def _attach_token(self, request: httpx.Request) -> None:
        token = self._tokens.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        elif "Authorization" in request.headers:
            del request.headers["Authorization"]

    async def _intercept_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return
        had_token = self._tokens.clear()
        logger.warning(
            "Unauthorized response from %s %s%s",
            response.request.method,
            response.request.url.path,
            "; cleared session token" if had_token else "",
        )
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as exc:
                logger.error("Unauthorized listener failed: %s", exc)

    # ------------------------------------------------------------------
    # requests
    # ------------------------------------------------------------------
    async def send(self, method: str, path: str, body: Any = None) -> Any:
        method = method.upper()
        try:
            request = self._client.build_request(method, path, json=body)
        except (TypeError, ValueError) as exc:
            logger.warning("%s %s body could not be encoded: %s", method, path, exc)
            raise RequestEncodingError(f"Request body is not valid JSON: {exc}") from exc
        try:
            resp = await self._client.send(request)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed before a response: %s", method, path, exc)
            raise NetworkError(f"Network error: {exc}") from exc

        if resp.status_code == 401:
            raise UnauthorizedError(401, _extract_message(resp, "Unauthorized"), _safe_json(resp))
        if resp.status_code >= 400:
            logger.warning("%s %s returned %s", method, path, resp.status_code)
            raise HttpError(
                resp.status_code,
                _extract_message(resp, f"API error: {resp.status_code}"),
                _safe_json(resp),
            )
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise HttpError(resp.status_code, "Invalid JSON in API response", resp.text) from exc

    async def get(self, path: str) -> Any:
        return await self.send("GET", path)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.send("POST", path, body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.send("PUT", path, body)

    async def delete(self, path: str) -> Any:
        return await self.send("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
