from __future__ import annotations

import math
import re
from typing import Any

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

MIN_PASSWORD_LENGTH = 6
HEIGHT_RANGE_CM = (100.0, 250.0)
WEIGHT_RANGE_KG = (30.0, 300.0)


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_registration_form(form: dict[str, Any]) -> dict[str, str]:
    """Client-side guards run before the register call. Empty dict means valid."""
    errors: dict[str, str] = {}

    if _is_blank(form.get("name")):
        errors["name"] = "Name is required"

    email = str(form.get("email") or "")
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.search(email):
        errors["email"] = "Email is invalid"

    password = str(form.get("password") or "")
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if password != str(form.get("confirmPassword") or ""):
        errors["confirmPassword"] = "Passwords do not match"

    low, high = HEIGHT_RANGE_CM
    if _is_blank(form.get("height")):
        errors["height"] = "Height is required"
    else:
        height = _to_number(form.get("height"))
        if height is None or height < low or height > high:
            errors["height"] = "Height must be between 100 and 250 cm"

    low, high = WEIGHT_RANGE_KG
    if _is_blank(form.get("weight")):
        errors["weight"] = "Weight is required"
    else:
        weight = _to_number(form.get("weight"))
        if weight is None or weight < low or weight > high:
            errors["weight"] = "Weight must be between 30 and 300 kg"

    if not _is_blank(form.get("targetWeight")):
        target = _to_number(form.get("targetWeight"))
        if target is None or target < low or target > high:
            errors["targetWeight"] = "Target weight must be between 30 and 300 kg"

    if not _is_blank(form.get("workoutDuration")):
        duration = _to_number(form.get("workoutDuration"))
        if duration is None or duration <= 0:
            errors["workoutDuration"] = "Workout duration must be a positive number of minutes"

    return errors
