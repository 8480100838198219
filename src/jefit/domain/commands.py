"""Validated payloads for profile edits and sync push commands."""

from datetime import UTC, date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jefit.domain.reference import ACTIVITY_LEVELS, GENDERS, GOALS

MAX_WATER_LITERS = 5.0


def clamp_water(liters: float) -> float:
    """Clamp a water volume into the allowed [0, 5] liters range."""
    return min(max(liters, 0.0), MAX_WATER_LITERS)


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


Timestamp = Annotated[datetime, AfterValidator(_aware)]


class ProfileUpdate(_Payload):
    """Full replacement of the user profile."""

    weight: float = Field(gt=0, allow_inf_nan=False)
    height: float = Field(gt=0, allow_inf_nan=False)
    age: int = Field(gt=0)
    gender: str
    activity_level: str
    goal: str

    @field_validator("gender")
    @classmethod
    def _known_gender(cls, value: str) -> str:
        if value not in GENDERS:
            raise ValueError(f"unknown gender: {value}")
        return value

    @field_validator("activity_level")
    @classmethod
    def _known_activity(cls, value: str) -> str:
        if value not in ACTIVITY_LEVELS:
            raise ValueError(f"unknown activity level: {value}")
        return value

    @field_validator("goal")
    @classmethod
    def _known_goal(cls, value: str) -> str:
        if value not in GOALS:
            raise ValueError(f"unknown goal: {value}")
        return value


class FoodPayload(_Payload):
    """Food entry embedded in a meal."""

    id: str | None = None
    name: str = Field(min_length=1)
    kcal: int = Field(ge=0)
    protein: int = Field(ge=0)
    carbs: int = Field(ge=0)
    fat: int = Field(ge=0)
    portion: int = Field(gt=0)


class MealCreate(_Payload):
    """Payload for the ``addMeal`` command."""

    meal_type: str = Field(min_length=1)
    time: Timestamp
    foods: list[FoodPayload] = Field(min_length=1)
    total_kcal: int = Field(ge=0)
    total_protein: int = Field(ge=0)
    total_carbs: int = Field(ge=0)
    total_fat: int = Field(ge=0)


class WorkoutCreate(_Payload):
    """Payload for the ``addWorkout`` command."""

    workout_type: str = Field(min_length=1)
    time: Timestamp
    duration: int = Field(gt=0)
    distance: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    kcal_burned: int = Field(ge=0)


class EntryDelete(_Payload):
    """Payload for ``deleteMeal`` and ``deleteWorkout``."""

    id: str = Field(min_length=1)


class WaterUpdate(_Payload):
    """Payload for ``updateWater``; liters are clamped, not rejected."""

    liters: float = Field(allow_inf_nan=False)
    day: date | None = Field(default=None, alias="date")

    @field_validator("liters")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_water(value)
