from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Callable

FieldParser = Callable[[Any], Any]
DraftValidator = Callable[[dict[str, Any]], dict[str, str]]

ID_FIELDS = ("_id", "id")


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    base_path: str
    label: str
    plural_label: str
    default_draft: dict[str, Any]
    field_parsers: dict[str, FieldParser] = field(default_factory=dict)
    validator: DraftValidator | None = None
    options: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def noun(self) -> str:
        return self.label.lower()

    def new_draft(self) -> dict[str, Any]:
        return copy.deepcopy(self.default_draft)

    def item_path(self, entity_id: str) -> str:
        return f"{self.base_path.rstrip('/')}/{entity_id}"

    def parse_field(self, name: str, value: Any) -> Any:
        parser = self.field_parsers.get(name)
        if parser is None:
            return value
        return parser(value)

    def validate(self, draft: dict[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        for key, allowed in self.options.items():
            value = draft.get(key)
            if value not in (None, "") and value not in allowed:
                errors[key] = f"{key} must be one of: {', '.join(allowed)}"
        if self.validator is not None:
            errors.update(self.validator(draft))
        return errors


def entity_id(entity: dict[str, Any] | None) -> str | None:
    if not entity:
        return None
    for key in ID_FIELDS:
        value = entity.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def require_text(draft: dict[str, Any], key: str, message: str, errors: dict[str, str]) -> None:
    value = draft.get(key)
    if not isinstance(value, str) or not value.strip():
        errors[key] = message


def require_number(
    draft: dict[str, Any],
    key: str,
    message: str,
    errors: dict[str, str],
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    exclusive_minimum: bool = False,
) -> None:
    value = draft.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        errors[key] = message
        return
    if minimum is not None and (value <= minimum if exclusive_minimum else value < minimum):
        errors[key] = message
    elif maximum is not None and value > maximum:
        errors[key] = message
