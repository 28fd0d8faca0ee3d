from __future__ import annotations

import json
import math
import re
from datetime import date
from typing import Any

from auth.models import WEEKDAYS
from resources.base import ResourceSpec, require_number, require_text
from resources.registry import ResourceRegistry

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

WORKOUT_TYPES = ("Cardio", "Strength", "Flexibility", "Mixed", "Sports")
DIET_PLAN_TYPES = ("Predefined", "Custom")
DIET_TYPES = ("Vegetarian", "Non-Vegetarian", "Vegan")
DIET_GOALS = ("Weight Loss", "Muscle Gain", "Maintenance")
SLEEP_QUALITIES = ("Poor", "Fair", "Good", "Excellent")


# ----------------------------------------------------------------------
# field parsers (raise ValueError with a user-facing message)
# ----------------------------------------------------------------------
def _number_parser(label: str, *, integer: bool = False):
    def _parse(value: Any) -> int | float | None:
        if value is None or isinstance(value, bool):
            raise ValueError(f"{label} must be a number")
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise ValueError(f"{label} must be a finite number")
            return int(value) if integer else value
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError as exc:
            raise ValueError(f"{label} must be a number") from exc
        if not math.isfinite(number):
            raise ValueError(f"{label} must be a finite number")
        if integer:
            return int(number)
        return int(number) if number.is_integer() and "." not in text else number

    return _parse


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Meals must not contain {name}")


def parse_meals(value: Any) -> list[dict[str, Any]]:
    """Meals are edited as JSON text. Anything but a JSON list of objects is rejected."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Meals must be valid JSON ({exc.msg})") from exc
    if not isinstance(value, list) or not all(isinstance(meal, dict) for meal in value):
        raise ValueError("Meals must be a JSON list of meal objects")
    return [dict(meal) for meal in value]


def parse_days(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    if not isinstance(value, (list, tuple)):
        raise ValueError("Days must be a comma separated list")
    days = [str(day).strip() for day in value if str(day).strip()]
    unknown = [day for day in days if day not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Unknown day: {unknown[0]}")
    return days


def parse_entry_date(value: Any) -> str:
    text = str(value or "").strip()[:10]
    if not text:
        return ""
    try:
        date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError("Date must be in YYYY-MM-DD format") from exc
    return text


def _check_time(draft: dict[str, Any], key: str, label: str, errors: dict[str, str]) -> None:
    value = draft.get(key)
    if not isinstance(value, str) or not TIME_RE.match(value.strip()):
        errors[key] = f"{label} must be a time in HH:MM format"


# ----------------------------------------------------------------------
# validators
# ----------------------------------------------------------------------
def validate_workout(draft: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    require_text(draft, "name", "Workout name is required", errors)
    _check_time(draft, "time", "Time", errors)
    require_number(draft, "duration", "Duration must be a positive number of minutes", errors, minimum=0, exclusive_minimum=True)
    return errors


def validate_diet_plan(draft: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    require_text(draft, "name", "Plan name is required", errors)
    require_number(draft, "dailyCalories", "Daily calories must be a positive number", errors, minimum=0, exclusive_minimum=True)
    meals = draft.get("meals")
    if not isinstance(meals, list) or not all(isinstance(meal, dict) for meal in meals):
        errors["meals"] = "Meals must be a JSON list of meal objects"
    return errors


def validate_sleep_entry(draft: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    require_text(draft, "date", "Date is required", errors)
    _check_time(draft, "sleepTime", "Sleep time", errors)
    _check_time(draft, "wakeUpTime", "Wake up time", errors)
    require_number(draft, "duration", "Duration must be between 0 and 24 hours", errors, minimum=0, maximum=24)
    return errors


WORKOUTS = ResourceSpec(
    name="workouts",
    base_path="/api/workouts",
    label="Workout",
    plural_label="workouts",
    default_draft={
        "name": "",
        "type": "Cardio",
        "day": "Monday",
        "time": "07:00",
        "duration": 60,
        "exercises": [],
        "notes": "",
    },
    field_parsers={"duration": _number_parser("Duration", integer=True)},
    validator=validate_workout,
    options={"type": WORKOUT_TYPES, "day": tuple(WEEKDAYS)},
)

DIET_PLANS = ResourceSpec(
    name="diet-plans",
    base_path="/api/diet-plans",
    label="Diet plan",
    plural_label="diet plans",
    default_draft={
        "name": "",
        "type": "Predefined",
        "dietType": "Non-Vegetarian",
        "goal": "Maintenance",
        "dailyCalories": 2000,
        "meals": [],
        "days": list(WEEKDAYS),
    },
    field_parsers={
        "dailyCalories": _number_parser("Daily calories", integer=True),
        "meals": parse_meals,
        "days": parse_days,
    },
    validator=validate_diet_plan,
    options={"type": DIET_PLAN_TYPES, "dietType": DIET_TYPES, "goal": DIET_GOALS},
)

SLEEP_ENTRIES = ResourceSpec(
    name="sleep",
    base_path="/api/sleep",
    label="Sleep entry",
    plural_label="sleep data",
    default_draft={
        "date": "",
        "sleepTime": "22:00",
        "wakeUpTime": "06:00",
        "duration": 8,
        "quality": "Good",
        "notes": "",
    },
    field_parsers={
        "date": parse_entry_date,
        "duration": _number_parser("Duration"),
    },
    validator=validate_sleep_entry,
    options={"quality": SLEEP_QUALITIES},
)


def register_resource_kinds(registry: ResourceRegistry) -> None:
    for spec in (WORKOUTS, DIET_PLANS, SLEEP_ENTRIES):
        registry.register(spec)
