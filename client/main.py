from __future__ import annotations

import asyncio
import logging

import httpx

from config import Settings, settings as default_settings
from account.controller import ProfileController
from analytics.presenter import AnalyticsPresenter, DashboardPresenter
from auth.session import Session, SessionManager
from navigation.router import Navigator
from resources import resource_registry
from resources.controller import ResourceSyncController
from transport.client import ApiTransport
from transport.token_store import FileTokenStore, TokenStore

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or default_settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class HealthTrackerApp:
    """Wires the session, the transport and every screen controller together."""

    def __init__(
        self,
        config: Settings | None = None,
        *,
        tokens: TokenStore | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = config or default_settings
        self.settings.validate_configuration()
        self.tokens = tokens if tokens is not None else FileTokenStore(
            self.settings.token_path, self.settings.TOKEN_STORAGE_KEY
        )
        self.transport = ApiTransport(
            self.tokens,
            self.settings.API_BASE_URL,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            transport=http_transport,
        )
        self.navigator = Navigator(
            login_route=self.settings.LOGIN_ROUTE,
            public_routes=self.settings.PUBLIC_ROUTES,
            protected_routes=self.settings.PROTECTED_ROUTES,
            home_route=self.settings.HOME_ROUTE,
        )
        self.session = SessionManager(self.transport, self.navigator)
        self.resources: dict[str, ResourceSyncController] = {
            spec.name: ResourceSyncController(self.transport, spec)
            for spec in resource_registry.list_specs()
        }
        self.profile = ProfileController(self.transport, self.session)
        self.dashboard = DashboardPresenter(self.transport)
        self.analytics = AnalyticsPresenter(self.transport)

    @property
    def workouts(self) -> ResourceSyncController:
        return self.resources["workouts"]

    @property
    def diet_plans(self) -> ResourceSyncController:
        return self.resources["diet-plans"]

    @property
    def sleep(self) -> ResourceSyncController:
        return self.resources["sleep"]

    async def start(self) -> Session:
        session = await self.session.restore_session()
        logger.info("%s started (%s)", self.settings.APP_NAME, session.state.value)
        return session

    async def open(self, path: str) -> str | None:
        """Navigate to ``path`` once the session is settled, honoring the route guard."""
        session = await self.session.wait_until_ready()
        target = self.navigator.resolve(path, session)
        if target is not None:
            self.navigator.navigate(target)
        return target

    async def aclose(self) -> None:
        for controller in self.resources.values():
            controller.dispose()
        self.profile.dispose()
        self.dashboard.dispose()
        self.analytics.dispose()
        self.session.close()
        await self.transport.aclose()

    async def __aenter__(self) -> "HealthTrackerApp":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


async def _main() -> None:
    configure_logging()
    async with HealthTrackerApp() as app:
        logger.info("Session is %s", app.session.state.value)


if __name__ == "__main__":
    asyncio.run(_main())
