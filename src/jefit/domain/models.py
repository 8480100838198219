"""Domain models for user profiles and computed targets."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserProfile:
    """Body metrics and preferences driving the target engine."""

    weight: float
    height: float
    age: int
    gender: str
    activity_level: str
    goal: str


DEFAULT_PROFILE = UserProfile(
    weight=75,
    height=178,
    age=30,
    gender="male",
    activity_level="moderate",
    goal="cut",
)


@dataclass(frozen=True)
class DailyTarget:
    """Energy and macro targets for the current day."""

    bmr: int
    base_tdee: int
    extra_workout_bonus: int
    dynamic_tdee: int
    target_kcal: int
    protein: int
    fat: int
    carbs: int


@dataclass(frozen=True)
class RemoteUser:
    """User row held by the remote store."""

    id: UUID
    device_id: str
    profile: UserProfile
