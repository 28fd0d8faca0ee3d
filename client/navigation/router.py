from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config import settings

if TYPE_CHECKING:
    from auth.session import Session

logger = logging.getLogger(__name__)


class Navigator:
    """Tracks the active route and guards protected screens."""

    def __init__(
        self,
        login_route: str | None = None,
        public_routes: list[str] | None = None,
        protected_routes: list[str] | None = None,
        initial_route: str | None = None,
        home_route: str | None = None,
    ):
        self.login_route = login_route or settings.LOGIN_ROUTE
        self.home_route = home_route or settings.HOME_ROUTE
        self.public_routes = frozenset(public_routes or settings.PUBLIC_ROUTES) | {self.login_route}
        self.protected_routes = frozenset(protected_routes or settings.PROTECTED_ROUTES)
        self.current: str | None = initial_route
        self.history: list[str] = [initial_route] if initial_route else []
        self.redirect_count = 0
        self._redirecting = False

    def is_public(self, path: str) -> bool:
        return path in self.public_routes

    def navigate(self, path: str) -> None:
        if path == self.current:
            return
        self.current = path
        self.history.append(path)
        if path != self.login_route:
            self._redirecting = False

    def redirect_to_login(self) -> bool:
        """Force navigation to the login entry point.

        Returns False when already on (or already heading to) the login route.
        """
        if self._redirecting or self.current == self.login_route:
            return False
        self._redirecting = True
        self.redirect_count += 1
        logger.info("Redirecting to %s", self.login_route)
        self.navigate(self.login_route)
        return True

    def resolve(self, path: str, session: "Session") -> str | None:
        if self.is_public(path):
            return path
        if session.loading:
            return None
        if not session.is_authenticated:
            return self.login_route
        if path not in self.protected_routes:
            return self.home_route
        return path
