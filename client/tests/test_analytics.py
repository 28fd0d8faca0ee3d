from __future__ import annotations

import asyncio
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from analytics.metrics import (  # noqa: E402
    BmiCategory,
    CompletionTier,
    bmi_category,
    bmi_color,
    completion_color,
    completion_tier,
)
from analytics.presenter import AnalyticsPresenter, DashboardPresenter  # noqa: E402
from fake_api import BASE_URL, FakeHealthApi  # noqa: E402
from resources.controller import ListStatus  # noqa: E402
from transport.client import ApiTransport  # noqa: E402
from transport.token_store import MemoryTokenStore  # noqa: E402

EMAIL = "ana@example.com"


def _transport(api: FakeHealthApi) -> ApiTransport:
    api.add_user(EMAIL, "secret1", height=180, weight=81)
    return ApiTransport(MemoryTokenStore(api.issue_token(EMAIL)), BASE_URL, transport=api.transport())


def test_bmi_category_cut_points():
    assert bmi_category(17.9) == BmiCategory.UNDERWEIGHT
    assert bmi_category(18.5) == BmiCategory.NORMAL
    assert bmi_category(24.9) == BmiCategory.NORMAL
    assert bmi_category(29.9) == BmiCategory.OVERWEIGHT
    assert bmi_category(30.0) == BmiCategory.OBESE
    assert bmi_category("22.4") == BmiCategory.NORMAL
    assert bmi_category(None) is None


def test_bmi_color_selection():
    assert bmi_color(17.9) == "warning"
    assert bmi_color(22) == "success"
    assert bmi_color(27) == "warning"
    assert bmi_color(35) == "error"
    assert bmi_color("N/A") == "default"


def test_completion_tier_thresholds():
    assert completion_tier(80) == CompletionTier.GOOD
    assert completion_tier(79.9) == CompletionTier.WARNING
    assert completion_tier(60) == CompletionTier.WARNING
    assert completion_tier(59.9) == CompletionTier.POOR
    assert completion_tier(None) == CompletionTier.POOR
    assert completion_color(95) == "success"
    assert completion_color(10) == "error"


def test_analytics_presenter_exposes_both_payloads():
    api = FakeHealthApi()
    presenter = AnalyticsPresenter(_transport(api))

    assert asyncio.run(presenter.load()) is True
    assert presenter.status == ListStatus.READY
    assert presenter.dashboard.bmi == 25.0
    assert presenter.dashboard.bmi_label == "Normal weight"
    assert presenter.dashboard.bmi_category == BmiCategory.OVERWEIGHT
    assert presenter.dashboard.completion_tier == CompletionTier.GOOD
    assert presenter.dashboard.recommendations == ["Stay hydrated"]
    assert presenter.health_score.score == 72
    assert presenter.health_score.max_score == 100
    assert presenter.health_score.overall_status == "Good"
    assert presenter.health_score.breakdown["sleep"] == 20


def test_analytics_presenter_fetches_concurrently():
    api = FakeHealthApi()
    presenter = AnalyticsPresenter(_transport(api))

    async def scenario():
        gate = api.hold("GET", "/api/analytics/dashboard")
        pending = asyncio.create_task(presenter.load())
        await asyncio.sleep(0.05)
        # the health-score request went out while the dashboard one is still pending
        assert api.count("GET", "/api/analytics/health-score") == 1
        assert presenter.status == ListStatus.LOADING
        gate.set()
        return await pending

    assert asyncio.run(scenario()) is True


def test_analytics_presenter_reports_single_failure_when_one_fetch_fails():
    api = FakeHealthApi()
    api.fail("GET", "/api/analytics/health-score", 500)
    presenter = AnalyticsPresenter(_transport(api))

    assert asyncio.run(presenter.load()) is False
    assert presenter.status == ListStatus.FAILED
    assert presenter.error == "Failed to load analytics."
    assert presenter.dashboard is None
    assert presenter.health_score is None


def test_dashboard_presenter_loads_summary():
    api = FakeHealthApi()
    presenter = DashboardPresenter(_transport(api))

    async def scenario():
        first = await presenter.load()
        api.fail("GET", "/api/analytics/dashboard", 500)
        second = await presenter.load()
        return first, second

    summary, failed = asyncio.run(scenario())
    assert summary is not None
    assert summary.completion_color == "success"
    assert summary.average_sleep_hours == 7.5
    assert failed is None
    assert presenter.status == ListStatus.FAILED
    assert presenter.error == "Failed to load dashboard data"
