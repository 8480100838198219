"""Device side of sync: mirrors ledger mutations to the remote store."""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime

from jefit.adapters.sync_client import SyncClient
from jefit.domain.errors import JefitError, StorageError
from jefit.domain.meals import FoodEntry, Meal
from jefit.domain.models import UserProfile
from jefit.domain.serialization import (
    meal_to_dict,
    profile_to_dict,
    snapshot_from_dict,
    workout_to_dict,
)
from jefit.domain.sync import SyncSnapshot
from jefit.domain.workouts import WorkoutEntry
from jefit.services.ledger import LocalLedger

_logger = logging.getLogger(__name__)


@dataclass
class SyncReconciler:
    """Keeps the local ledger and the remote store consistent.

    Mutations are committed to the ledger first, then pushed. A failed push
    raises ``StorageError`` but keeps the local commit, so the ledger stays
    usable offline. On a successful create the server id replaces the local
    one. Entries whose push failed stay pending in the ledger and are sent
    again on the next successful refresh.
    """

    ledger: LocalLedger
    client: SyncClient
    device_id: str

    async def refresh(self) -> SyncSnapshot:
        """Pull the snapshot, rehydrate the ledger and push pending entries."""
        payload = await self._call(
            "pull", self.client.pull(self.device_id, self.ledger.today())
        )
        snapshot = snapshot_from_dict(payload)
        self.ledger.rehydrate(snapshot)
        await self.flush_pending()
        return snapshot

    async def flush_pending(self) -> int:
        """Push entries logged while offline; returns how many were accepted."""
        flushed = 0
        for meal in self.ledger.pending_meals():
            await self._push_meal(meal)
            flushed += 1
        for workout in self.ledger.pending_workouts():
            await self._push_workout(workout)
            flushed += 1
        if flushed:
            _logger.info("Flushed %d pending entries", flushed)
        return flushed

    async def push_profile(self, profile: UserProfile) -> UserProfile:
        validated = self.ledger.update_profile(profile)
        await self._push("updateProfile", profile_to_dict(validated))
        return validated

    async def log_meal(
        self, meal_type: str, foods: list[FoodEntry], time: datetime | None = None
    ) -> Meal:
        """Save a meal locally, push it and adopt the server id."""
        meal = self.ledger.add_meal(meal_type, foods, time=time)
        return await self._push_meal(meal)

    async def remove_meal(self, meal_id: str) -> bool:
        removed = self.ledger.delete_meal(meal_id)
        await self._push("deleteMeal", {"id": meal_id})
        return removed

    async def log_workout(
        self,
        workout_type: str,
        duration: int,
        distance: float | None = None,
        time: datetime | None = None,
    ) -> WorkoutEntry:
        """Save a workout locally, push it and adopt the server id."""
        workout = self.ledger.add_workout(
            workout_type, duration, distance=distance, time=time
        )
        return await self._push_workout(workout)

    async def remove_workout(self, workout_id: str) -> bool:
        removed = self.ledger.delete_workout(workout_id)
        await self._push("deleteWorkout", {"id": workout_id})
        return removed

    async def add_water(self, delta: float) -> float:
        liters = self.ledger.add_water(delta)
        await self._push_water(liters)
        return liters

    async def set_water(self, liters: float) -> float:
        stored = self.ledger.set_water(liters)
        await self._push_water(stored)
        return stored

    async def _push_meal(self, meal: Meal) -> Meal:
        result = await self._push("addMeal", meal_to_dict(meal))
        remote_id = result.get("id")
        if isinstance(remote_id, str) and remote_id:
            return self.ledger.adopt_meal_id(meal.id, remote_id) or meal
        return meal

    async def _push_workout(self, workout: WorkoutEntry) -> WorkoutEntry:
        result = await self._push("addWorkout", workout_to_dict(workout))
        remote_id = result.get("id")
        if isinstance(remote_id, str) and remote_id:
            return self.ledger.adopt_workout_id(workout.id, remote_id) or workout
        return workout

    async def _push_water(self, liters: float) -> None:
        await self._push(
            "updateWater", {"liters": liters, "date": self.ledger.today().isoformat()}
        )

    async def _push(self, action: str, data: dict[str, object]) -> dict[str, object]:
        return await self._call(action, self.client.push(self.device_id, action, data))

    async def _call(
        self, operation: str, request: Awaitable[dict[str, object]]
    ) -> dict[str, object]:
        try:
            return await request
        except JefitError:
            _logger.warning("Sync %s rejected", operation)
            raise
        except Exception as exc:
            _logger.warning("Sync %s failed: %s", operation, exc)
            raise StorageError(f"Sync {operation} failed") from exc
