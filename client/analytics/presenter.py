from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from analytics.metrics import (
    BmiCategory,
    CompletionTier,
    as_number,
    bmi_category,
    bmi_color,
    completion_color,
    completion_tier,
)
from resources.controller import ListStatus
from transport.client import ApiTransport
from transport.errors import ApiError

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/api/analytics/dashboard"
HEALTH_SCORE_PATH = "/api/analytics/health-score"


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


@dataclass(frozen=True)
class DashboardSummary:
    """Read-only view over the server's dashboard payload."""

    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def bmi(self) -> float | None:
        return as_number(_section(self.raw, "bodyMetrics").get("bmi"))

    @property
    def bmi_label(self) -> str | None:
        label = _section(self.raw, "bodyMetrics").get("bmiCategory")
        return str(label) if label else None

    @property
    def bmi_category(self) -> BmiCategory | None:
        return bmi_category(self.bmi)

    @property
    def bmi_color(self) -> str:
        return bmi_color(self.bmi)

    @property
    def calories_burned(self) -> float:
        return as_number(_section(self.raw, "bodyMetrics").get("caloriesBurned")) or 0.0

    @property
    def average_sleep_hours(self) -> float:
        return as_number(_section(self.raw, "sleep").get("averageDuration")) or 0.0

    @property
    def completion_rate(self) -> float:
        return as_number(_section(self.raw, "progress").get("completionRate")) or 0.0

    @property
    def completion_tier(self) -> CompletionTier:
        return completion_tier(self.completion_rate)

    @property
    def completion_color(self) -> str:
        return completion_color(self.completion_rate)

    @property
    def recommendations(self) -> list[str]:
        return _string_list(self.raw.get("recommendations"))


@dataclass(frozen=True)
class HealthScore:
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def score(self) -> float | None:
        return as_number(self.raw.get("score"))

    @property
    def max_score(self) -> float | None:
        return as_number(self.raw.get("maxScore"))

    @property
    def overall_status(self) -> str | None:
        status = self.raw.get("overallStatus")
        return str(status) if status else None

    @property
    def breakdown(self) -> dict[str, Any]:
        return dict(_section(self.raw, "breakdown"))

    @property
    def recommendations(self) -> list[str]:
        return _string_list(self.raw.get("recommendations"))


class DashboardPresenter:
    """Home screen: a single fetch of the dashboard payload."""

    FAILURE_MESSAGE = "Failed to load dashboard data"

    def __init__(self, transport: ApiTransport):
        self._transport = transport
        self.status = ListStatus.LOADING
        self.summary: DashboardSummary | None = None
        self.error: str | None = None
        self._disposed = False

    async def load(self) -> DashboardSummary | None:
        try:
            data = await self._transport.get(DASHBOARD_PATH)
        except ApiError as exc:
            if self._disposed:
                return None
            logger.warning("Dashboard load failed: %s", exc)
            self.status = ListStatus.FAILED
            self.error = self.FAILURE_MESSAGE
            return None
        if self._disposed:
            return None
        if not isinstance(data, dict):
            self.status = ListStatus.FAILED
            self.error = self.FAILURE_MESSAGE
            return None
        self.summary = DashboardSummary(data)
        self.status = ListStatus.READY
        self.error = None
        return self.summary

    def dispose(self) -> None:
        self._disposed = True


class AnalyticsPresenter:
    """Analytics screen: dashboard and health score, fetched concurrently.

    Both payloads are exposed together or not at all.
    """

    FAILURE_MESSAGE = "Failed to load analytics."

    def __init__(self, transport: ApiTransport):
        self._transport = transport
        self.status = ListStatus.LOADING
        self.dashboard: DashboardSummary | None = None
        self.health_score: HealthScore | None = None
        self.error: str | None = None
        self._disposed = False

    async def load(self) -> bool:
        results = await asyncio.gather(
            self._transport.get(DASHBOARD_PATH),
            self._transport.get(HEALTH_SCORE_PATH),
            return_exceptions=True,
        )
        if self._disposed:
            return False

        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, ApiError):
                raise failure
        dashboard, score = results
        if failures or not isinstance(dashboard, dict) or not isinstance(score, dict):
            logger.warning("Analytics load failed: %s", failures[0] if failures else "unexpected payload")
            self.status = ListStatus.FAILED
            self.dashboard = None
            self.health_score = None
            self.error = self.FAILURE_MESSAGE
            return False

        self.dashboard = DashboardSummary(dashboard)
        self.health_score = HealthScore(score)
        self.status = ListStatus.READY
        self.error = None
        return True

    def dispose(self) -> None:
        self._disposed = True
