from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from transport.errors import AuthError

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

REGISTRATION_FORM_DEFAULTS: dict[str, Any] = {
    "name": "",
    "email": "",
    "password": "",
    "confirmPassword": "",
    "profession": "Other",
    "height": "",
    "weight": "",
    "bodyStructure": "Average",
    "goal": "General Fitness",
    "targetWeight": "",
    "wakeUpTime": "06:00",
    "sleepTime": "22:00",
    "dietType": "Non-Vegetarian",
    "dietPlanType": "Predefined",
    "activityLevel": "Moderately Active",
    "workoutDays": [],
    "workoutDuration": 60,
}


class LoginRequest(BaseModel):
    email: str
    password: str = Field(repr=False)


class RegistrationDraft(BaseModel):
    """Profile draft posted to the register endpoint, after validation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)

    name: str
    email: str
    password: str = Field(repr=False)
    profession: str = "Other"
    height: float
    weight: float
    body_structure: str = "Average"
    goal: str = "General Fitness"
    target_weight: float | None = None
    wake_up_time: str = "06:00"
    sleep_time: str = "22:00"
    diet_type: str = "Non-Vegetarian"
    diet_plan_type: str = "Predefined"
    activity_level: str = "Moderately Active"
    workout_days: list[str] = Field(default_factory=list)
    workout_duration: int = 60

    @classmethod
    def from_form(cls, form: dict[str, Any]) -> "RegistrationDraft":
        data = {k: v for k, v in form.items() if k != "confirmPassword"}
        data["name"] = str(data.get("name") or "").strip()
        if data.get("targetWeight") in ("", None):
            data["targetWeight"] = None
        if data.get("workoutDuration") in ("", None):
            data["workoutDuration"] = 60
        else:
            duration = float(data["workoutDuration"])
            if not math.isfinite(duration):
                raise ValueError("workoutDuration must be a finite number")
            data["workoutDuration"] = int(duration)
        return cls.model_validate(data)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class AuthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str = Field(min_length=1)
    user: dict[str, Any]


@dataclass
class AuthResult:
    success: bool
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    error: AuthError | None = None
