from __future__ import annotations

from enum import Enum
from typing import Any

BMI_UNDERWEIGHT_BELOW = 18.5
BMI_NORMAL_BELOW = 25.0
BMI_OVERWEIGHT_BELOW = 30.0

COMPLETION_GOOD_AT = 80.0
COMPLETION_WARNING_AT = 60.0


class BmiCategory(str, Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class CompletionTier(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"


BMI_COLORS = {
    BmiCategory.UNDERWEIGHT: "warning",
    BmiCategory.NORMAL: "success",
    BmiCategory.OVERWEIGHT: "warning",
    BmiCategory.OBESE: "error",
}

TIER_COLORS = {
    CompletionTier.GOOD: "success",
    CompletionTier.WARNING: "warning",
    CompletionTier.POOR: "error",
}


def as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def bmi_category(bmi: Any) -> BmiCategory | None:
    """Color bucket for a BMI value. The display label itself comes from the server."""
    value = as_number(bmi)
    if value is None:
        return None
    if value < BMI_UNDERWEIGHT_BELOW:
        return BmiCategory.UNDERWEIGHT
    if value < BMI_NORMAL_BELOW:
        return BmiCategory.NORMAL
    if value < BMI_OVERWEIGHT_BELOW:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def bmi_color(bmi: Any) -> str:
    category = bmi_category(bmi)
    return BMI_COLORS[category] if category else "default"


def completion_tier(rate: Any) -> CompletionTier:
    value = as_number(rate) or 0.0
    if value >= COMPLETION_GOOD_AT:
        return CompletionTier.GOOD
    if value >= COMPLETION_WARNING_AT:
        return CompletionTier.WARNING
    return CompletionTier.POOR


def completion_color(rate: Any) -> str:
    return TIER_COLORS[completion_tier(rate)]
