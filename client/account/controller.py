from __future__ import annotations

import copy
import logging
from typing import Any

from auth.session import SessionManager
from resources.controller import ListStatus, Notification
from transport.client import ApiTransport
from transport.errors import ApiError, InvalidTransitionError

logger = logging.getLogger(__name__)

PROFILE_PATH = "/api/profile"


class ProfileController:
    """Load and save the signed-in user's own profile."""

    def __init__(self, transport: ApiTransport, session: SessionManager):
        self._transport = transport
        self._session = session
        self.status = ListStatus.LOADING
        self.profile: dict[str, Any] | None = None
        self.form: dict[str, Any] | None = None
        self.notification: Notification | None = None
        self.saving = False
        self._disposed = False

    async def load(self) -> dict[str, Any] | None:
        try:
            data = await self._transport.get(PROFILE_PATH)
        except ApiError as exc:
            if self._disposed:
                return None
            logger.warning("Loading profile failed: %s", exc)
            self.status = ListStatus.FAILED
            self.notification = Notification("error", "Failed to load profile.")
            return None
        if self._disposed:
            return None
        if not isinstance(data, dict):
            self.status = ListStatus.FAILED
            self.notification = Notification("error", "Failed to load profile.")
            return None
        self.profile = data
        self.form = copy.deepcopy(data)
        self.status = ListStatus.READY
        return self.profile

    def update_field(self, name: str, value: Any) -> None:
        if self.form is None:
            raise InvalidTransitionError("Profile has not been loaded")
        if name == "email":
            raise InvalidTransitionError("Email cannot be changed from the profile screen")
        self.form[name] = value

    async def save(self) -> bool:
        if self.form is None:
            raise InvalidTransitionError("Profile has not been loaded")
        if self.saving:
            raise InvalidTransitionError("Profile save already in flight")
        self.saving = True
        self.notification = None
        try:
            data = await self._transport.put(PROFILE_PATH, copy.deepcopy(self.form))
        except ApiError as exc:
            if self._disposed:
                return False
            logger.warning("Saving profile failed: %s", exc)
            self.notification = Notification("error", "Failed to update profile.")
            return False
        finally:
            self.saving = False

        if self._disposed:
            return True
        if isinstance(data, dict):
            self.profile = data
            self.form = copy.deepcopy(data)
            self._session.update_user(data)
        self.notification = Notification("success", "Profile updated successfully!")
        return True

    def dispose(self) -> None:
        self._disposed = True
