"""JSON-friendly encoding of domain models.

The same camelCase layout is used by the local ledger and by the sync
protocol, so a pulled snapshot can be written to the ledger unchanged.
"""

import math
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from jefit.domain.commands import ProfileUpdate
from jefit.domain.errors import ValidationError
from jefit.domain.meals import FoodEntry, Meal
from jefit.domain.models import UserProfile
from jefit.domain.sync import SyncSnapshot
from jefit.domain.workouts import WorkoutEntry


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO-8601 string into an aware datetime (naive means UTC)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    else:
        raise ValidationError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def profile_to_dict(profile: UserProfile) -> dict[str, object]:
    return {
        "weight": profile.weight,
        "height": profile.height,
        "age": profile.age,
        "gender": profile.gender,
        "activityLevel": profile.activity_level,
        "goal": profile.goal,
    }


def profile_from_dict(data: object) -> UserProfile:
    """Validate and build a profile; raises ``ValidationError`` on bad input."""
    try:
        payload = ProfileUpdate.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid profile: {exc.error_count()} error(s)") from exc
    return profile_from_update(payload)


def profile_from_update(payload: ProfileUpdate) -> UserProfile:
    return UserProfile(
        weight=payload.weight,
        height=payload.height,
        age=payload.age,
        gender=payload.gender,
        activity_level=payload.activity_level,
        goal=payload.goal,
    )


def food_to_dict(food: FoodEntry) -> dict[str, object]:
    return {
        "id": food.id,
        "name": food.name,
        "kcal": food.kcal,
        "protein": food.protein,
        "carbs": food.carbs,
        "fat": food.fat,
        "portion": food.portion,
    }


def food_from_dict(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=str(row.get("id") or ""),
        name=str(row.get("name", "")),
        kcal=int(row.get("kcal", 0)),
        protein=int(row.get("protein", 0)),
        carbs=int(row.get("carbs", 0)),
        fat=int(row.get("fat", 0)),
        portion=int(row.get("portion", 0)),
    )


def meal_to_dict(meal: Meal) -> dict[str, object]:
    return {
        "id": meal.id,
        "mealType": meal.meal_type,
        "time": meal.time.isoformat(),
        "foods": [food_to_dict(food) for food in meal.foods],
        "totalKcal": meal.total_kcal,
        "totalProtein": meal.total_protein,
        "totalCarbs": meal.total_carbs,
        "totalFat": meal.total_fat,
    }


def meal_from_dict(row: dict[str, object]) -> Meal:
    foods = row.get("foods") or []
    return Meal(
        id=str(row["id"]),
        meal_type=str(row.get("mealType", "")),
        time=parse_timestamp(row.get("time")),
        foods=[food_from_dict(food) for food in foods if isinstance(food, dict)],
        total_kcal=int(row.get("totalKcal", 0)),
        total_protein=int(row.get("totalProtein", 0)),
        total_carbs=int(row.get("totalCarbs", 0)),
        total_fat=int(row.get("totalFat", 0)),
    )


def workout_to_dict(workout: WorkoutEntry) -> dict[str, object]:
    return {
        "id": workout.id,
        "workoutType": workout.workout_type,
        "time": workout.time.isoformat(),
        "duration": workout.duration,
        "distance": workout.distance,
        "kcalBurned": workout.kcal_burned,
    }


def workout_from_dict(row: dict[str, object]) -> WorkoutEntry:
    distance = row.get("distance")
    return WorkoutEntry(
        id=str(row["id"]),
        workout_type=str(row.get("workoutType", "")),
        time=parse_timestamp(row.get("time")),
        duration=int(row.get("duration", 0)),
        distance=float(distance) if isinstance(distance, int | float) else None,
        kcal_burned=int(row.get("kcalBurned", 0)),
    )


def snapshot_to_dict(snapshot: SyncSnapshot) -> dict[str, object]:
    return {
        "user": {"id": snapshot.user_id, **profile_to_dict(snapshot.profile)},
        "meals": [meal_to_dict(meal) for meal in snapshot.meals],
        "workouts": [workout_to_dict(workout) for workout in snapshot.workouts],
        "water": snapshot.water,
    }


def snapshot_from_dict(payload: dict[str, object]) -> SyncSnapshot:
    """Parse a pull response; raises ``ValidationError`` when malformed."""
    user = payload.get("user")
    if not isinstance(user, dict):
        raise ValidationError("Snapshot is missing the user")
    try:
        meals = [meal_from_dict(row) for row in payload.get("meals") or []]
        workouts = [workout_from_dict(row) for row in payload.get("workouts") or []]
        water = float(payload.get("water") or 0.0)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError("Malformed snapshot") from exc
    if not math.isfinite(water):
        raise ValidationError("Snapshot water must be finite")
    return SyncSnapshot(
        user_id=str(user.get("id", "")),
        profile=profile_from_dict(user),
        meals=meals,
        workouts=workouts,
        water=water,
    )
