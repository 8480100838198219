"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import httpx
import pytest

from jefit.adapters.sync_client import SyncClient
from jefit.config import Settings
from jefit.containers import AppContainer
from jefit.domain.advice import AdviceSnapshot
from jefit.domain.commands import MealCreate, WorkoutCreate
from jefit.domain.errors import StorageError
from jefit.domain.meals import FoodEntry, Meal
from jefit.domain.models import DEFAULT_PROFILE, RemoteUser, UserProfile
from jefit.domain.serialization import snapshot_to_dict
from jefit.domain.workouts import WorkoutEntry
from jefit.services.advisory import AdviceClient, AdvisoryService
from jefit.services.ledger import KeyValueStore, LocalLedger
from jefit.services.sync import SyncRepository, SyncService, UserDataRepository

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Settable clock for time-dependent services."""

    current: datetime = NOW

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory JSON store for tests; ``failing`` makes every write fail."""

    values: dict[str, object] = field(default_factory=dict)
    failing: bool = False
    fail_on: set[str] = field(default_factory=set)
    writes: list[str] = field(default_factory=list)

    def get(self, key: str) -> object | None:
        return self.values.get(key)

    def set(self, key: str, value: object) -> None:
        if self.failing or key in self.fail_on:
            raise StorageError(f"Cannot write ledger key {key}")
        self.values[key] = json.loads(json.dumps(value))
        self.writes.append(key)


@dataclass
class InMemoryUserData(UserDataRepository):
    """User-scoped view over an ``InMemorySyncRepository``."""

    owner: "InMemorySyncRepository"
    user_id: UUID

    def update_profile(self, profile: UserProfile) -> None:
        for device_id, user in self.owner.users.items():
            if user.id == self.user_id:
                self.owner.users[device_id] = replace(user, profile=profile)

    def list_meals(self, since: datetime) -> list[Meal]:
        return [
            meal
            for user_id, meal in self.owner.meals
            if user_id == self.user_id and meal.time > since
        ]

    def list_workouts(self, since: datetime) -> list[WorkoutEntry]:
        return [
            workout
            for user_id, workout in self.owner.workouts
            if user_id == self.user_id and workout.time > since
        ]

    def get_water(self, day: date) -> float | None:
        return self.owner.water.get((self.user_id, day))

    def create_meal(self, payload: MealCreate) -> str:
        meal_id = str(uuid4())
        meal = Meal(
            id=meal_id,
            meal_type=payload.meal_type,
            time=payload.time,
            foods=[
                FoodEntry(
                    id=food.id or "",
                    name=food.name,
                    kcal=food.kcal,
                    protein=food.protein,
                    carbs=food.carbs,
                    fat=food.fat,
                    portion=food.portion,
                )
                for food in payload.foods
            ],
            total_kcal=payload.total_kcal,
            total_protein=payload.total_protein,
            total_carbs=payload.total_carbs,
            total_fat=payload.total_fat,
        )
        self.owner.meals.append((self.user_id, meal))
        return meal_id

    def delete_meal(self, meal_id: str) -> None:
        self.owner.meals = [
            (user_id, meal)
            for user_id, meal in self.owner.meals
            if not (user_id == self.user_id and meal.id == meal_id)
        ]

    def create_workout(self, payload: WorkoutCreate) -> str:
        workout_id = str(uuid4())
        self.owner.workouts.append(
            (
                self.user_id,
                WorkoutEntry(
                    id=workout_id,
                    workout_type=payload.workout_type,
                    time=payload.time,
                    duration=payload.duration,
                    distance=payload.distance,
                    kcal_burned=payload.kcal_burned,
                ),
            )
        )
        return workout_id

    def delete_workout(self, workout_id: str) -> None:
        self.owner.workouts = [
            (user_id, workout)
            for user_id, workout in self.owner.workouts
            if not (user_id == self.user_id and workout.id == workout_id)
        ]

    def upsert_water(self, day: date, liters: float) -> None:
        self.owner.water[(self.user_id, day)] = liters


@dataclass
class InMemorySyncRepository(SyncRepository):
    """In-memory remote store keyed by device id."""

    users: dict[str, RemoteUser] = field(default_factory=dict)
    meals: list[tuple[UUID, Meal]] = field(default_factory=list)
    workouts: list[tuple[UUID, WorkoutEntry]] = field(default_factory=list)
    water: dict[tuple[UUID, date], float] = field(default_factory=dict)
    fail_reads: bool = False

    def get_by_device_id(self, device_id: str) -> RemoteUser | None:
        if self.fail_reads:
            raise RuntimeError("connection refused")
        return self.users.get(device_id)

    def create_user(self, device_id: str) -> RemoteUser:
        user = RemoteUser(id=uuid4(), device_id=device_id, profile=DEFAULT_PROFILE)
        self.users[device_id] = user
        return user

    def for_user(self, user: RemoteUser) -> InMemoryUserData:
        return InMemoryUserData(owner=self, user_id=user.id)


@dataclass
class ServiceSyncClient(SyncClient):
    """Sync client that calls a ``SyncService`` in-process."""

    service: SyncService
    offline: bool = False
    pushes: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    async def pull(self, device_id: str, day: date | None = None) -> dict[str, object]:
        if self.offline:
            raise httpx.ConnectError("offline")
        return snapshot_to_dict(self.service.pull(device_id, day))

    async def push(
        self, device_id: str, action: str, data: dict[str, object]
    ) -> dict[str, object]:
        if self.offline:
            raise httpx.ConnectError("offline")
        self.pushes.append((action, data))
        result = self.service.push(device_id, action, data)
        if result.id is not None:
            return {"id": result.id}
        return {"success": True}


@dataclass
class FakeAdviceClient(AdviceClient):
    """Advice client returning a canned reply, an error, or waiting on a gate."""

    reply: str = "Ottimo lavoro! 💪"
    error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: list[tuple[AdviceSnapshot, str | None]] = field(default_factory=list)

    async def get_advice(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str:
        self.calls.append((snapshot, question))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


def make_snapshot(**overrides: object) -> AdviceSnapshot:
    values: dict[str, object] = {
        "weight": 75,
        "height": 178,
        "age": 30,
        "goal": "Definizione",
        "today_kcal": 1200,
        "target_kcal": 2263,
        "today_protein": 90,
        "target_protein": 165,
        "workout_done": False,
    }
    values.update(overrides)
    return AdviceSnapshot(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store: InMemoryKeyValueStore, clock: FakeClock) -> LocalLedger:
    ledger = LocalLedger(store=store, clock=clock)
    ledger.load()
    return ledger


@pytest.fixture
def sync_repository() -> InMemorySyncRepository:
    return InMemorySyncRepository()


@pytest.fixture
def sync_service(
    sync_repository: InMemorySyncRepository, clock: FakeClock
) -> SyncService:
    return SyncService(repository=sync_repository, clock=clock)


@pytest.fixture
def advice_client() -> FakeAdviceClient:
    return FakeAdviceClient()


@pytest.fixture
def container(
    settings: Settings,
    sync_service: SyncService,
    advice_client: FakeAdviceClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        sync_service=sync_service,
        advisory_service=AdvisoryService(advice_client),
        close_resources=close_resources,
    )
