"""Domain models for workout logging."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorkoutEntry:
    """A logged workout with its derived energy burn."""

    id: str
    workout_type: str
    time: datetime
    duration: int
    distance: float | None
    kcal_burned: int
