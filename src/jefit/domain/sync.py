"""Domain models exchanged by the sync reconciler."""

from dataclasses import dataclass

from jefit.domain.meals import Meal
from jefit.domain.models import UserProfile
from jefit.domain.workouts import WorkoutEntry


@dataclass(frozen=True)
class SyncSnapshot:
    """Authoritative state returned by a pull."""

    user_id: str
    profile: UserProfile
    meals: list[Meal]
    workouts: list[WorkoutEntry]
    water: float


@dataclass(frozen=True)
class PushResult:
    """Outcome of a push; ``id`` is set for create commands."""

    id: str | None = None
