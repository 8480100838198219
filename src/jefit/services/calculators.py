"""Nutrient and energy calculators backed by the reference tables."""

from uuid import uuid4

from jefit.domain.errors import NotFoundError, ValidationError
from jefit.domain.meals import FoodEntry
from jefit.domain.reference import FOOD_DATABASE, WORKOUT_DATABASE
from jefit.services.targets import round_half_up


def resolve_food_portion(food_key: str, portion_multiplier: float = 1) -> FoodEntry:
    """Scale a reference food to ``portion_multiplier`` default portions.

    Every field is rounded on its own, so totals may drift by a unit from a
    computation over raw grams.
    """
    if portion_multiplier <= 0:
        raise ValidationError("Portion multiplier must be positive")
    food = FOOD_DATABASE.get(food_key)
    if food is None:
        raise NotFoundError(f"Unknown food: {food_key}")
    factor = (food.portion / 100) * portion_multiplier
    return FoodEntry(
        id=uuid4().hex,
        name=food_key,
        kcal=round_half_up(food.kcal * factor),
        protein=round_half_up(food.protein * factor),
        carbs=round_half_up(food.carbs * factor),
        fat=round_half_up(food.fat * factor),
        portion=round_half_up(food.portion * portion_multiplier),
    )


def resolve_workout_energy(
    workout_key: str, duration_minutes: int, *, strict: bool = True
) -> int:
    """Return kcal burned; unknown keys raise unless ``strict`` is False."""
    if duration_minutes <= 0:
        raise ValidationError("Duration must be positive")
    workout = WORKOUT_DATABASE.get(workout_key)
    if workout is None:
        if strict:
            raise NotFoundError(f"Unknown workout: {workout_key}")
        return 0
    return round_half_up(workout.kcal_per_min * duration_minutes)
