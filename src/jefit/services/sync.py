"""Remote side of the sync protocol: bootstrap, pull and push."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from jefit.domain.commands import (
    EntryDelete,
    MealCreate,
    ProfileUpdate,
    WaterUpdate,
    WorkoutCreate,
)
from jefit.domain.errors import JefitError, NotFoundError, StorageError, ValidationError
from jefit.domain.meals import Meal
from jefit.domain.models import RemoteUser, UserProfile
from jefit.domain.serialization import profile_from_update
from jefit.domain.sync import PushResult, SyncSnapshot
from jefit.domain.workouts import WorkoutEntry

RETENTION = timedelta(days=7)
MAX_DEVICE_ID_LENGTH = 128

_logger = logging.getLogger(__name__)


class UserDataRepository(Protocol):
    """Data access bound to a single resolved user."""

    def update_profile(self, profile: UserProfile) -> None:
        """Overwrite the user's profile columns."""

    def list_meals(self, since: datetime) -> list[Meal]:
        """Return meals newer than ``since``, newest first."""

    def list_workouts(self, since: datetime) -> list[WorkoutEntry]:
        """Return workouts newer than ``since``, newest first."""

    def get_water(self, day: date) -> float | None:
        """Return the water value for a date, if logged."""

    def create_meal(self, payload: MealCreate) -> str:
        """Insert a meal and return its new id."""

    def delete_meal(self, meal_id: str) -> None:
        """Delete one of the user's meals; foreign ids match nothing."""

    def create_workout(self, payload: WorkoutCreate) -> str:
        """Insert a workout and return its new id."""

    def delete_workout(self, workout_id: str) -> None:
        """Delete one of the user's workouts; foreign ids match nothing."""

    def upsert_water(self, day: date, liters: float) -> None:
        """Insert or overwrite the water value for a date."""


class SyncRepository(Protocol):
    """Persistence interface for device-keyed users."""

    def get_by_device_id(self, device_id: str) -> RemoteUser | None:
        """Return the user for a device id, if present."""

    def create_user(self, device_id: str) -> RemoteUser:
        """Create a user with the default profile and return it."""

    def for_user(self, user: RemoteUser) -> UserDataRepository:
        """Return a repository scoped to the given user."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except JefitError:
        raise
    except Exception as exc:
        _logger.exception("Sync %s failed", operation)
        raise StorageError("Database error") from exc


@dataclass
class SyncService:
    """Applies pulls and pushes against the remote store."""

    repository: SyncRepository
    timezone: str = "UTC"
    clock: Callable[[], datetime] = _utc_now

    def bootstrap(self, device_id: str) -> RemoteUser:
        """Return the user for a device, creating it on first contact."""
        device_id = _require_device_id(device_id)
        with _storage_errors("bootstrap"):
            existing = self.repository.get_by_device_id(device_id)
            if existing:
                return existing
            try:
                created = self.repository.create_user(device_id)
            except Exception:
                # Another request may have created the row concurrently.
                existing = self.repository.get_by_device_id(device_id)
                if existing is None:
                    raise
                return existing
        _logger.info("Created remote user for new device")
        return created

    def pull(self, device_id: str, day: date | None = None) -> SyncSnapshot:
        """Return the profile, the last 7 days of entries and the day's water."""
        user = self.bootstrap(device_id)
        since = self.clock() - RETENTION
        target_day = day or self.today()
        with _storage_errors("pull"):
            scoped = self.repository.for_user(user)
            meals = scoped.list_meals(since)
            workouts = scoped.list_workouts(since)
            water = scoped.get_water(target_day)
        return SyncSnapshot(
            user_id=str(user.id),
            profile=user.profile,
            meals=sorted(meals, key=lambda meal: meal.time, reverse=True),
            workouts=sorted(workouts, key=lambda w: w.time, reverse=True),
            water=water or 0.0,
        )

    def push(self, device_id: str, action: str, data: object) -> PushResult:
        """Apply one tagged mutation for the device's user."""
        device_id = _require_device_id(device_id)
        command = _COMMANDS.get(action)
        if command is None:
            raise ValidationError(f"Unknown action: {action}")
        payload_type, handler = command
        payload = _validate(payload_type, data)
        with _storage_errors(action):
            user = self.repository.get_by_device_id(device_id)
            if user is None:
                raise NotFoundError("User not found")
            return handler(self, self.repository.for_user(user), payload)

    def today(self) -> date:
        """Return today's date in the configured timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone)).date()

    def _update_profile(
        self, scoped: UserDataRepository, payload: ProfileUpdate
    ) -> PushResult:
        scoped.update_profile(profile_from_update(payload))
        return PushResult()

    def _add_meal(self, scoped: UserDataRepository, payload: MealCreate) -> PushResult:
        return PushResult(id=scoped.create_meal(payload))

    def _delete_meal(
        self, scoped: UserDataRepository, payload: EntryDelete
    ) -> PushResult:
        scoped.delete_meal(payload.id)
        return PushResult()

    def _add_workout(
        self, scoped: UserDataRepository, payload: WorkoutCreate
    ) -> PushResult:
        return PushResult(id=scoped.create_workout(payload))

    def _delete_workout(
        self, scoped: UserDataRepository, payload: EntryDelete
    ) -> PushResult:
        scoped.delete_workout(payload.id)
        return PushResult()

    def _update_water(
        self, scoped: UserDataRepository, payload: WaterUpdate
    ) -> PushResult:
        scoped.upsert_water(payload.day or self.today(), payload.liters)
        return PushResult()


_COMMANDS: dict[str, tuple[type[BaseModel], Callable]] = {
    "updateProfile": (ProfileUpdate, SyncService._update_profile),
    "updateUser": (ProfileUpdate, SyncService._update_profile),
    "addMeal": (MealCreate, SyncService._add_meal),
    "deleteMeal": (EntryDelete, SyncService._delete_meal),
    "addWorkout": (WorkoutCreate, SyncService._add_workout),
    "deleteWorkout": (EntryDelete, SyncService._delete_workout),
    "updateWater": (WaterUpdate, SyncService._update_water),
}


def _require_device_id(device_id: str | None) -> str:
    cleaned = (device_id or "").strip()
    if not cleaned:
        raise ValidationError("Device ID required")
    if len(cleaned) > MAX_DEVICE_ID_LENGTH:
        raise ValidationError("Device ID too long")
    return cleaned


def _validate(payload_type: type[BaseModel], data: object) -> BaseModel:
    try:
        return payload_type.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid payload: {exc.error_count()} error(s)"
        ) from exc
