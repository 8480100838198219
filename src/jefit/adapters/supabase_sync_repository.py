"""Supabase repositories for device users and their synced entries."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from jefit.domain.commands import MealCreate, WorkoutCreate
from jefit.domain.meals import Meal
from jefit.domain.models import RemoteUser, UserProfile
from jefit.domain.serialization import food_from_dict, parse_timestamp
from jefit.domain.workouts import WorkoutEntry
from jefit.services.sync import SyncRepository, UserDataRepository

_USER_COLUMNS = "id, device_id, weight, height, age, gender, activity_level, goal"
_MEAL_COLUMNS = (
    "id, meal_type, time, foods, total_kcal, total_protein, total_carbs, total_fat"
)
_WORKOUT_COLUMNS = "id, workout_type, time, duration, distance, kcal_burned"


@dataclass
class SupabaseSyncRepository(SyncRepository):
    """Supabase implementation for device-keyed users."""

    client: Client

    def get_by_device_id(self, device_id: str) -> RemoteUser | None:
        """Return the user for a device id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("device_id", device_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def create_user(self, device_id: str) -> RemoteUser:
        """Insert a user row; profile columns take their database defaults."""
        response = self.client.table("users").insert({"device_id": device_id}).execute()
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def for_user(self, user: RemoteUser) -> "SupabaseUserDataRepository":
        """Return a repository whose queries are filtered by the user id."""
        return SupabaseUserDataRepository(client=self.client, user_id=user.id)


@dataclass(frozen=True)
class SupabaseUserDataRepository(UserDataRepository):
    """Supabase data access bound to a single user row."""

    client: Client
    user_id: UUID

    def update_profile(self, profile: UserProfile) -> None:
        """Overwrite the profile columns of the bound user."""
        self.client.table("users").update(
            {
                "weight": profile.weight,
                "height": profile.height,
                "age": profile.age,
                "gender": profile.gender,
                "activity_level": profile.activity_level,
                "goal": profile.goal,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(self.user_id)).execute()

    def list_meals(self, since: datetime) -> list[Meal]:
        """Return recent meals, newest first."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("user_id", str(self.user_id))
            .gt("time", since.isoformat())
            .order("time", desc=True)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def list_workouts(self, since: datetime) -> list[WorkoutEntry]:
        """Return recent workouts, newest first."""
        response = (
            self.client.table("workouts")
            .select(_WORKOUT_COLUMNS)
            .eq("user_id", str(self.user_id))
            .gt("time", since.isoformat())
            .order("time", desc=True)
            .execute()
        )
        return [_parse_workout(row) for row in response.data or []]

    def get_water(self, day: date) -> float | None:
        """Return the logged liters for a date."""
        response = (
            self.client.table("water_logs")
            .select("liters")
            .eq("user_id", str(self.user_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return float(response.data[0].get("liters") or 0.0)

    def create_meal(self, payload: MealCreate) -> str:
        """Insert a meal row and return the generated id."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(self.user_id),
                    "meal_type": payload.meal_type,
                    "time": payload.time.isoformat(),
                    "foods": [
                        food.model_dump(by_alias=True) for food in payload.foods
                    ],
                    "total_kcal": payload.total_kcal,
                    "total_protein": payload.total_protein,
                    "total_carbs": payload.total_carbs,
                    "total_fat": payload.total_fat,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return str(response.data[0]["id"])

    def delete_meal(self, meal_id: str) -> None:
        """Delete a meal owned by the bound user."""
        if _as_uuid(meal_id) is None:
            return
        self.client.table("meals").delete().eq("id", meal_id).eq(
            "user_id", str(self.user_id)
        ).execute()

    def create_workout(self, payload: WorkoutCreate) -> str:
        """Insert a workout row and return the generated id."""
        response = (
            self.client.table("workouts")
            .insert(
                {
                    "user_id": str(self.user_id),
                    "workout_type": payload.workout_type,
                    "time": payload.time.isoformat(),
                    "duration": payload.duration,
                    "distance": payload.distance,
                    "kcal_burned": payload.kcal_burned,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create workout")
        return str(response.data[0]["id"])

    def delete_workout(self, workout_id: str) -> None:
        """Delete a workout owned by the bound user."""
        if _as_uuid(workout_id) is None:
            return
        self.client.table("workouts").delete().eq("id", workout_id).eq(
            "user_id", str(self.user_id)
        ).execute()

    def upsert_water(self, day: date, liters: float) -> None:
        """Insert or overwrite the day's liters."""
        self.client.table("water_logs").upsert(
            {"user_id": str(self.user_id), "date": day.isoformat(), "liters": liters},
            on_conflict="user_id,date",
        ).execute()


def _as_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


def _parse_user(row: dict[str, object]) -> RemoteUser:
    return RemoteUser(
        id=UUID(str(row["id"])),
        device_id=str(row["device_id"]),
        profile=UserProfile(
            weight=float(row.get("weight", 75)),
            height=float(row.get("height", 178)),
            age=int(row.get("age", 30)),
            gender=str(row.get("gender", "male")),
            activity_level=str(row.get("activity_level", "moderate")),
            goal=str(row.get("goal", "cut")),
        ),
    )


def _parse_meal(row: dict[str, object]) -> Meal:
    foods = row.get("foods") or []
    return Meal(
        id=str(row["id"]),
        meal_type=str(row.get("meal_type", "")),
        time=parse_timestamp(row.get("time")),
        foods=[food_from_dict(food) for food in foods if isinstance(food, dict)],
        total_kcal=int(row.get("total_kcal", 0)),
        total_protein=int(row.get("total_protein", 0)),
        total_carbs=int(row.get("total_carbs", 0)),
        total_fat=int(row.get("total_fat", 0)),
    )


def _parse_workout(row: dict[str, object]) -> WorkoutEntry:
    distance = row.get("distance")
    return WorkoutEntry(
        id=str(row["id"]),
        workout_type=str(row.get("workout_type", "")),
        time=parse_timestamp(row.get("time")),
        duration=int(row.get("duration", 0)),
        distance=float(distance) if isinstance(distance, int | float) else None,
        kcal_burned=int(row.get("kcal_burned", 0)),
    )
