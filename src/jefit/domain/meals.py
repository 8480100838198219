"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FoodEntry:
    """Portion-scaled nutrients of a reference food."""

    id: str
    name: str
    kcal: int
    protein: int
    carbs: int
    fat: int
    portion: int


@dataclass(frozen=True)
class Meal:
    """A saved selection of foods with precomputed totals."""

    id: str
    meal_type: str
    time: datetime
    foods: list[FoodEntry]
    total_kcal: int
    total_protein: int
    total_carbs: int
    total_fat: int
