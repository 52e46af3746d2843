"""Payload contracts for the events the journey sources read.

Event data is user-authored JSON, so every payload is validated before it
contributes to an aggregate. Invalid payloads are skipped by the caller,
never fatal.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

MACRO_FIELDS: tuple[str, ...] = ("calories", "protein_g", "carbs_g", "fat_g")

# Plausible single-entry body weight, kg.
BODYWEIGHT_RANGE_KG: tuple[float, float] = (20.0, 400.0)


def _coerce_decimal(value: Any) -> Any:
    """Accept locale decimals like "82,5" alongside numbers."""
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.count(",") == 1 and "." not in raw:
            raw = raw.replace(",", ".")
        return raw
    return value


class MealLoggedData(BaseModel):
    """Data of a meal.logged event. Missing macros count as zero."""

    model_config = ConfigDict(extra="ignore")

    calories: float = Field(default=0.0, ge=0)
    protein_g: float = Field(default=0.0, ge=0)
    carbs_g: float = Field(default=0.0, ge=0)
    fat_g: float = Field(default=0.0, ge=0)

    @field_validator(*MACRO_FIELDS, mode="before")
    @classmethod
    def coerce_macro(cls, value: Any) -> Any:
        value = _coerce_decimal(value)
        return 0.0 if value is None else value


class NutritionTargetData(BaseModel):
    """Data of a nutrition_target.set event. A ``None`` macro has no target."""

    model_config = ConfigDict(extra="ignore")

    calories: float | None = Field(default=None, gt=0)
    protein_g: float | None = Field(default=None, gt=0)
    carbs_g: float | None = Field(default=None, gt=0)
    fat_g: float | None = Field(default=None, gt=0)

    @field_validator(*MACRO_FIELDS, mode="before")
    @classmethod
    def coerce_target(cls, value: Any) -> Any:
        return _coerce_decimal(value)

    @model_validator(mode="after")
    def require_some_target(self) -> NutritionTargetData:
        if all(getattr(self, f) is None for f in MACRO_FIELDS):
            raise ValueError("nutrition target must set at least one macro")
        return self


class BodyweightLoggedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    weight_kg: float

    @field_validator("weight_kg", mode="before")
    @classmethod
    def coerce_weight(cls, value: Any) -> Any:
        return _coerce_decimal(value)

    @field_validator("weight_kg")
    @classmethod
    def plausible_weight(cls, value: float) -> float:
        low, high = BODYWEIGHT_RANGE_KG
        if not low <= value <= high:
            raise ValueError(f"weight_kg must be within [{low}, {high}]")
        return value


def parse_payload(model: type[BaseModel], data: Any) -> BaseModel | None:
    """Validate ``data`` against ``model``; ``None`` when it does not fit."""
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError:
        return None
