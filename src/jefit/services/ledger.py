"""Device-side ledger of the profile, meals, workouts and daily water."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol, TypeVar
from uuid import uuid4
from zoneinfo import ZoneInfo

from jefit.domain.commands import clamp_water
from jefit.domain.errors import StorageError, ValidationError
from jefit.domain.meals import FoodEntry, Meal
from jefit.domain.models import DEFAULT_PROFILE, DailyTarget, UserProfile
from jefit.domain.serialization import (
    meal_from_dict,
    meal_to_dict,
    parse_timestamp,
    profile_from_dict,
    profile_to_dict,
    workout_from_dict,
    workout_to_dict,
)
from jefit.domain.sync import SyncSnapshot
from jefit.domain.workouts import WorkoutEntry
from jefit.services.calculators import resolve_workout_energy
from jefit.services.targets import compute_daily_target

PROFILE_KEY = "user"
MEALS_KEY = "meals"
WORKOUTS_KEY = "workouts"
PENDING_KEY = "pending"
RETENTION = timedelta(days=7)

_logger = logging.getLogger(__name__)

_Row = TypeVar("_Row")


class KeyValueStore(Protocol):
    """Durable key to JSON-value storage."""

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: object) -> None:
        """Durably store a value; raises ``StorageError`` on failure."""


def water_key(day: date) -> str:
    """Return the storage key of the water log for a calendar date."""
    return f"water_{day.isoformat()}"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LocalLedger:
    """Local source of truth for one device, usable offline.

    Meals and workouts created here stay *pending* until the remote store
    has acknowledged them and their server id was adopted. Pending entries
    survive a rehydrate so an offline log is never lost.
    """

    store: KeyValueStore
    timezone: str = "UTC"
    clock: Callable[[], datetime] = _utc_now
    profile: UserProfile = field(default=DEFAULT_PROFILE, init=False)
    meals: list[Meal] = field(default_factory=list, init=False)
    workouts: list[WorkoutEntry] = field(default_factory=list, init=False)
    pending: frozenset[str] = field(default_factory=frozenset, init=False)

    def now(self) -> datetime:
        """Return the current instant in the ledger's timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone))

    def today(self) -> date:
        """Return today's calendar date, recomputed on every call."""
        return self.now().date()

    def load(self) -> None:
        """Read persisted state and drop entries older than the retention window."""
        raw_profile = self.store.get(PROFILE_KEY)
        profile = DEFAULT_PROFILE
        if raw_profile is not None:
            try:
                profile = profile_from_dict(raw_profile)
            except ValidationError:
                _logger.warning("Stored profile is invalid, using defaults")
        meals = _load_rows(self.store.get(MEALS_KEY), meal_from_dict, MEALS_KEY)
        workouts = _load_rows(
            self.store.get(WORKOUTS_KEY), workout_from_dict, WORKOUTS_KEY
        )
        pending = _load_pending(self.store.get(PENDING_KEY))
        self.profile = profile
        self.meals = meals
        self.workouts = workouts
        self.pending = pending
        self.prune()

    def prune(self) -> None:
        """Remove meals and workouts whose time is 7 days old or more."""
        cutoff = self.clock() - RETENTION
        meals = [meal for meal in self.meals if meal.time > cutoff]
        workouts = [workout for workout in self.workouts if workout.time > cutoff]
        if len(meals) != len(self.meals):
            self._commit_meals(meals)
        if len(workouts) != len(self.workouts):
            self._commit_workouts(workouts)

    def update_profile(self, profile: UserProfile) -> UserProfile:
        """Validate and replace the stored profile."""
        validated = profile_from_dict(profile_to_dict(profile))
        self.store.set(PROFILE_KEY, profile_to_dict(validated))
        self.profile = validated
        return validated

    def add_meal(
        self,
        meal_type: str,
        foods: list[FoodEntry],
        time: datetime | None = None,
    ) -> Meal:
        """Save a meal built from a non-empty food selection."""
        if not foods:
            raise ValidationError("A meal needs at least one food")
        if not meal_type:
            raise ValidationError("Meal type is required")
        meal = Meal(
            id=self._new_id(),
            meal_type=meal_type,
            time=self._entry_time(time),
            foods=list(foods),
            total_kcal=sum(food.kcal for food in foods),
            total_protein=sum(food.protein for food in foods),
            total_carbs=sum(food.carbs for food in foods),
            total_fat=sum(food.fat for food in foods),
        )
        self._commit_pending(self.pending | {meal.id})
        self._commit_meals([*self.meals, meal])
        return meal

    def delete_meal(self, meal_id: str) -> bool:
        """Delete a meal by id; unknown ids leave the ledger unchanged."""
        remaining = [meal for meal in self.meals if meal.id != meal_id]
        if len(remaining) == len(self.meals):
            return False
        self._commit_meals(remaining)
        self._forget_pending(meal_id)
        return True

    def add_workout(
        self,
        workout_type: str,
        duration: int,
        distance: float | None = None,
        time: datetime | None = None,
    ) -> WorkoutEntry:
        """Save a workout; unknown workout types burn 0 kcal."""
        if not workout_type:
            raise ValidationError("Workout type is required")
        kcal_burned = resolve_workout_energy(workout_type, duration, strict=False)
        workout = WorkoutEntry(
            id=self._new_id(),
            workout_type=workout_type,
            time=self._entry_time(time),
            duration=duration,
            distance=distance,
            kcal_burned=kcal_burned,
        )
        self._commit_pending(self.pending | {workout.id})
        self._commit_workouts([*self.workouts, workout])
        return workout

    def delete_workout(self, workout_id: str) -> bool:
        """Delete a workout by id; unknown ids leave the ledger unchanged."""
        remaining = [w for w in self.workouts if w.id != workout_id]
        if len(remaining) == len(self.workouts):
            return False
        self._commit_workouts(remaining)
        self._forget_pending(workout_id)
        return True

    def get_water(self) -> float:
        """Return today's water in liters, 0 when nothing was logged."""
        value = self.store.get(water_key(self.today()))
        if isinstance(value, int | float) and math.isfinite(value):
            return float(value)
        return 0.0

    def set_water(self, liters: float) -> float:
        """Overwrite today's water value, clamped to [0, 5] liters."""
        if not math.isfinite(liters):
            raise ValidationError("Water must be a finite number of liters")
        clamped = clamp_water(liters)
        self.store.set(water_key(self.today()), clamped)
        return clamped

    def add_water(self, delta: float) -> float:
        """Add to today's water value and return the clamped total."""
        if not math.isfinite(delta):
            raise ValidationError("Water must be a finite number of liters")
        return self.set_water(self.get_water() + delta)

    def today_meals(self) -> list[Meal]:
        """Return meals logged on today's local date."""
        today = self.today()
        return [meal for meal in self.meals if self._local_date(meal.time) == today]

    def today_workouts(self) -> list[WorkoutEntry]:
        """Return workouts logged on today's local date."""
        today = self.today()
        return [w for w in self.workouts if self._local_date(w.time) == today]

    def today_workout_kcal(self) -> int:
        """Return the energy burned by today's workouts."""
        return sum(workout.kcal_burned for workout in self.today_workouts())

    def daily_target(self) -> DailyTarget:
        """Recompute today's target from the profile and today's workouts."""
        return compute_daily_target(self.profile, self.today_workout_kcal())

    def pending_meals(self) -> list[Meal]:
        """Return meals the remote store has not acknowledged yet."""
        return [meal for meal in self.meals if meal.id in self.pending]

    def pending_workouts(self) -> list[WorkoutEntry]:
        """Return workouts the remote store has not acknowledged yet."""
        return [w for w in self.workouts if w.id in self.pending]

    def adopt_meal_id(self, local_id: str, remote_id: str) -> Meal | None:
        """Replace a locally generated meal id with the server-assigned one."""
        meals, adopted = _adopt(self.meals, local_id, remote_id)
        if adopted is None:
            return None
        if meals != self.meals:
            self._commit_meals(meals)
        self._commit_pending(self.pending - {local_id, remote_id})
        return adopted

    def adopt_workout_id(self, local_id: str, remote_id: str) -> WorkoutEntry | None:
        """Replace a locally generated workout id with the server-assigned one."""
        workouts, adopted = _adopt(self.workouts, local_id, remote_id)
        if adopted is None:
            return None
        if workouts != self.workouts:
            self._commit_workouts(workouts)
        self._commit_pending(self.pending - {local_id, remote_id})
        return adopted

    def rehydrate(self, snapshot: SyncSnapshot) -> None:
        """Replace local state with a remote snapshot, keeping pending entries."""
        remote_ids = {m.id for m in snapshot.meals} | {w.id for w in snapshot.workouts}
        kept_meals = [m for m in self.pending_meals() if m.id not in remote_ids]
        kept_workouts = [w for w in self.pending_workouts() if w.id not in remote_ids]
        meals = sorted([*snapshot.meals, *kept_meals], key=lambda meal: meal.time)
        workouts = sorted(
            [*snapshot.workouts, *kept_workouts], key=lambda workout: workout.time
        )
        pending = frozenset(entry.id for entry in [*kept_meals, *kept_workouts])
        writes: list[tuple[str, object]] = [
            (PROFILE_KEY, profile_to_dict(snapshot.profile)),
            (MEALS_KEY, [meal_to_dict(meal) for meal in meals]),
            (WORKOUTS_KEY, [workout_to_dict(workout) for workout in workouts]),
            (PENDING_KEY, sorted(pending)),
            (water_key(self.today()), clamp_water(snapshot.water)),
        ]
        previous = {key: self.store.get(key) for key, _ in writes}
        written: list[str] = []
        try:
            for key, value in writes:
                self.store.set(key, value)
                written.append(key)
        except StorageError:
            for key in written:
                self._restore(key, previous[key])
            raise
        self.profile = snapshot.profile
        self.meals = meals
        self.workouts = workouts
        self.pending = pending
        self.prune()

    def _restore(self, key: str, value: object | None) -> None:
        try:
            self.store.set(key, value)
        except StorageError:
            _logger.exception("Failed to roll back ledger key %s", key)

    def _commit_meals(self, meals: list[Meal]) -> None:
        self.store.set(MEALS_KEY, [meal_to_dict(meal) for meal in meals])
        self.meals = meals

    def _commit_workouts(self, workouts: list[WorkoutEntry]) -> None:
        self.store.set(WORKOUTS_KEY, [workout_to_dict(w) for w in workouts])
        self.workouts = workouts

    def _commit_pending(self, pending: frozenset[str]) -> None:
        # Written before the entry lists; a stale id here matches nothing.
        self.store.set(PENDING_KEY, sorted(pending))
        self.pending = pending

    def _forget_pending(self, entry_id: str) -> None:
        if entry_id in self.pending:
            self._commit_pending(self.pending - {entry_id})

    def _entry_time(self, time: datetime | None) -> datetime:
        if time is None:
            return self.clock()
        return parse_timestamp(time)

    def _local_date(self, moment: datetime) -> date:
        return moment.astimezone(ZoneInfo(self.timezone)).date()

    def _new_id(self) -> str:
        taken = {meal.id for meal in self.meals} | {w.id for w in self.workouts}
        while True:
            candidate = uuid4().hex
            if candidate not in taken:
                return candidate


_Entry = TypeVar("_Entry", Meal, WorkoutEntry)


def _adopt(
    entries: list[_Entry], local_id: str, remote_id: str
) -> tuple[list[_Entry], _Entry | None]:
    """Rename ``local_id`` to ``remote_id``, dropping it if the id is taken."""
    if local_id == remote_id or any(entry.id == remote_id for entry in entries):
        kept = entries
        if local_id != remote_id:
            kept = [entry for entry in entries if entry.id != local_id]
        return kept, next((e for e in kept if e.id == remote_id), None)
    renamed: list[_Entry] = []
    adopted: _Entry | None = None
    for entry in entries:
        if entry.id == local_id:
            adopted = replace(entry, id=remote_id)
            renamed.append(adopted)
        else:
            renamed.append(entry)
    return renamed, adopted


def _load_rows(
    raw: object, parser: Callable[[dict[str, object]], _Row], key: str
) -> list[_Row]:
    if not isinstance(raw, list):
        return []
    rows: list[_Row] = []
    for row in raw:
        try:
            rows.append(parser(row))
        except (KeyError, TypeError, ValueError, ValidationError):
            _logger.warning("Skipping malformed %s entry: %r", key, row)
    return rows


def _load_pending(raw: object) -> frozenset[str]:
    if not isinstance(raw, list):
        return frozenset()
    return frozenset(entry_id for entry_id in raw if isinstance(entry_id, str))
