from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from auth.models import AuthResponse, AuthResult, LoginRequest, RegistrationDraft
from auth.validation import validate_registration_form
from navigation.router import Navigator
from transport.client import ApiTransport
from transport.errors import ApiError, AuthError, error_message

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
PROFILE_PATH = "/api/auth/profile"


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Session:
    state: SessionState
    user: dict[str, Any] | None
    token: str | None

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return self.state in (SessionState.UNINITIALIZED, SessionState.CHECKING)


SessionListener = Callable[[Session], None]


def _rejected(message: str, errors: dict[str, str] | None = None) -> AuthResult:
    return AuthResult(success=False, message=message, errors=errors or {}, error=AuthError(message))


class SessionManager:
    """Owns the authentication state machine.

    uninitialized -> checking -> authenticated | anonymous on startup, then
    login/register move to authenticated and logout (or any intercepted 401)
    moves back to anonymous. The bearer token itself lives in the transport's
    token store; this class is its only writer apart from the 401 hook.
    """

    def __init__(self, transport: ApiTransport, navigator: Navigator | None = None):
        self._transport = transport
        self._tokens = transport.tokens
        self._navigator = navigator
        self._state = SessionState.UNINITIALIZED
        self._user: dict[str, Any] | None = None
        self._ready = asyncio.Event()
        self._listeners: list[SessionListener] = []
        self._unsubscribe = transport.on_unauthorized(self._handle_unauthorized)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session:
        user = copy.deepcopy(self._user) if self._user is not None else None
        return Session(state=self._state, user=user, token=self._tokens.get())

    @property
    def user(self) -> dict[str, Any] | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return self._state in (SessionState.UNINITIALIZED, SessionState.CHECKING)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def wait_until_ready(self) -> Session:
        await self._ready.wait()
        return self.session

    def _transition(self, state: SessionState, user: dict[str, Any] | None) -> None:
        previous = self._state
        self._state = state
        self._user = user
        if self.loading:
            self._ready.clear()
        else:
            self._ready.set()
        if previous != state:
            logger.info("Session %s -> %s", previous.value, state.value)
        snapshot = self.session
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    async def restore_session(self) -> Session:
        if not self._tokens.get():
            self._transition(SessionState.ANONYMOUS, None)
            return self.session

        self._transition(SessionState.CHECKING, None)
        try:
            user = await self._transport.get(PROFILE_PATH)
        except ApiError as exc:
            logger.warning("Session restore failed: %s", exc)
            self._tokens.clear()
            self._transition(SessionState.ANONYMOUS, None)
            return self.session

        if not isinstance(user, dict):
            logger.warning("Session restore returned an unexpected payload; discarding token")
            self._tokens.clear()
            self._transition(SessionState.ANONYMOUS, None)
            return self.session

        self._transition(SessionState.AUTHENTICATED, user)
        return self.session

    async def login(self, email: str, password: str) -> AuthResult:
        request = LoginRequest(email=email, password=password)
        logger.info("Attempting login for %s", request.email)
        return await self._authenticate(LOGIN_PATH, request.model_dump(), "Login failed")

    async def register(self, form: dict[str, Any]) -> AuthResult:
        errors = validate_registration_form(form)
        if errors:
            return _rejected(next(iter(errors.values())), errors)
        try:
            draft = RegistrationDraft.from_form(form)
        except (PydanticValidationError, TypeError, ValueError) as exc:
            logger.warning("Registration draft could not be built: %s", exc)
            return _rejected("Registration failed")
        logger.info("Attempting registration for %s", draft.email)
        return await self._authenticate(REGISTER_PATH, draft.to_payload(), "Registration failed")

    async def _authenticate(self, path: str, payload: dict[str, Any], fallback: str) -> AuthResult:
        try:
            data = await self._transport.post(path, payload)
            auth = AuthResponse.model_validate(data)
        except ApiError as exc:
            message = error_message(exc, fallback)
            logger.warning("%s: %s", fallback, message)
            return _rejected(message)
        except PydanticValidationError:
            logger.warning("%s: malformed auth response", fallback)
            return _rejected(fallback)

        self._tokens.set(auth.token)
        self._transition(SessionState.AUTHENTICATED, auth.user)
        return AuthResult(success=True)

    def logout(self) -> None:
        self._tokens.clear()
        self._transition(SessionState.ANONYMOUS, None)
        logger.info("Logged out")

    def update_user(self, patch: dict[str, Any]) -> None:
        merged = dict(self._user or {})
        merged.update(patch or {})
        self._user = merged
        snapshot = self.session
        for listener in list(self._listeners):
            listener(snapshot)

    def _handle_unauthorized(self) -> None:
        if self._state != SessionState.ANONYMOUS:
            logger.warning("Session token rejected by the server; signing out")
            self._transition(SessionState.ANONYMOUS, None)
        if self._navigator is not None:
            self._navigator.redirect_to_login()

    def close(self) -> None:
        self._unsubscribe()
