"""Tests for the device-side ledger."""

from datetime import UTC, date, datetime, timedelta

import pytest

from jefit.domain.errors import StorageError, ValidationError
from jefit.domain.models import DEFAULT_PROFILE, UserProfile
from jefit.domain.sync import SyncSnapshot
from jefit.domain.workouts import WorkoutEntry
from jefit.services.calculators import resolve_food_portion
from jefit.services.ledger import (
    MEALS_KEY,
    PENDING_KEY,
    PROFILE_KEY,
    WORKOUTS_KEY,
    LocalLedger,
    water_key,
)
from tests.conftest import NOW, FakeClock, InMemoryKeyValueStore


def test_empty_store_loads_default_profile(ledger: LocalLedger) -> None:
    assert ledger.profile == DEFAULT_PROFILE
    assert ledger.meals == []
    assert ledger.workouts == []
    assert ledger.get_water() == 0.0


def test_meal_round_trips_through_store(
    ledger: LocalLedger, store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    meal = ledger.add_meal(
        "Colazione", [resolve_food_portion("Banana"), resolve_food_portion("Latte")]
    )

    reloaded = LocalLedger(store=store, clock=clock)
    reloaded.load()

    assert reloaded.meals == [meal]
    assert meal.total_kcal == 107 + 84
    assert meal.time == NOW


def test_empty_meal_is_rejected(ledger: LocalLedger, store) -> None:
    with pytest.raises(ValidationError):
        ledger.add_meal("Pranzo", [])

    assert MEALS_KEY not in store.values


def test_delete_unknown_meal_is_noop(ledger: LocalLedger) -> None:
    meal = ledger.add_meal("Cena", [resolve_food_portion("Pasta")])

    assert ledger.delete_meal("missing") is False
    assert ledger.meals == [meal]
    assert ledger.delete_meal(meal.id) is True
    assert ledger.meals == []


def test_unknown_workout_type_burns_nothing(ledger: LocalLedger) -> None:
    workout = ledger.add_workout("Curling", 40)

    assert workout.kcal_burned == 0
    assert ledger.workouts == [workout]


def test_daily_target_uses_todays_workouts(ledger: LocalLedger) -> None:
    ledger.add_workout("Corsa", 30)
    ledger.add_workout("Camminata", 60, time=NOW - timedelta(days=2))

    target = ledger.daily_target()

    assert ledger.today_workout_kcal() == 360
    assert target.dynamic_tdee == 2843
    assert target.target_kcal == 2443


def test_load_prunes_entries_older_than_retention(
    store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    first = LocalLedger(store=store, clock=clock)
    first.load()
    old = first.add_meal(
        "Colazione",
        [resolve_food_portion("Uova")],
        time=NOW - timedelta(days=7, seconds=1),
    )
    recent = first.add_meal(
        "Pranzo",
        [resolve_food_portion("Pollo")],
        time=NOW - timedelta(days=6, hours=23),
    )
    first.add_workout("Nuoto", 30, time=NOW - timedelta(days=8))

    second = LocalLedger(store=store, clock=clock)
    second.load()

    assert old not in second.meals
    assert second.meals == [recent]
    assert second.workouts == []
    assert [row["id"] for row in store.values[MEALS_KEY]] == [recent.id]


def test_water_is_clamped_and_keyed_by_date(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    assert ledger.add_water(0.25) == 0.25
    assert ledger.add_water(10) == 5.0
    assert ledger.set_water(-2) == 0.0
    assert store.values[water_key(date(2026, 3, 10))] == 0.0


def test_water_key_follows_midnight(
    ledger: LocalLedger, clock: FakeClock, store: InMemoryKeyValueStore
) -> None:
    clock.current = datetime(2026, 3, 10, 23, 59, tzinfo=UTC)
    ledger.set_water(1.5)

    clock.advance(timedelta(minutes=2))

    assert ledger.get_water() == 0.0
    ledger.add_water(0.25)
    assert store.values["water_2026-03-10"] == 1.5
    assert store.values["water_2026-03-11"] == 0.25


def test_today_follows_ledger_timezone(store: InMemoryKeyValueStore) -> None:
    clock = FakeClock(datetime(2026, 3, 10, 23, 30, tzinfo=UTC))
    ledger = LocalLedger(store=store, timezone="Europe/Rome", clock=clock)

    assert ledger.today() == date(2026, 3, 11)


def test_invalid_stored_profile_falls_back_to_default(
    store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    store.values[PROFILE_KEY] = {"weight": "heavy"}
    store.values[WORKOUTS_KEY] = [{"time": "not a time"}]
    ledger = LocalLedger(store=store, clock=clock)

    ledger.load()

    assert ledger.profile == DEFAULT_PROFILE
    assert ledger.workouts == []


def test_failed_write_leaves_state_unchanged(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    meal = ledger.add_meal("Cena", [resolve_food_portion("Salmone")])
    store.failing = True

    with pytest.raises(StorageError):
        ledger.add_meal("Spuntino", [resolve_food_portion("Mela")])
    with pytest.raises(StorageError):
        ledger.update_profile(
            UserProfile(80, 180, 40, "male", "active", "bulk"),
        )

    assert ledger.meals == [meal]
    assert ledger.profile == DEFAULT_PROFILE


def test_adopt_meal_id_replaces_local_id(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    meal = ledger.add_meal("Pranzo", [resolve_food_portion("Riso integrale")])

    adopted = ledger.adopt_meal_id(meal.id, "server-1")

    assert adopted is not None
    assert adopted.id == "server-1"
    assert [m.id for m in ledger.meals] == ["server-1"]
    assert [row["id"] for row in store.values[MEALS_KEY]] == ["server-1"]


def test_adopt_meal_id_drops_duplicate(ledger: LocalLedger) -> None:
    first = ledger.add_meal("Pranzo", [resolve_food_portion("Pasta")])
    second = ledger.add_meal("Pranzo", [resolve_food_portion("Pasta")])
    ledger.adopt_meal_id(first.id, "server-1")

    adopted = ledger.adopt_meal_id(second.id, "server-1")

    assert adopted is not None
    assert [m.id for m in ledger.meals] == ["server-1"]


def test_adopt_unknown_workout_returns_none(ledger: LocalLedger) -> None:
    assert ledger.adopt_workout_id("missing", "server-1") is None


def test_rehydrate_replaces_state(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    synced = ledger.add_meal("Cena", [resolve_food_portion("Manzo")])
    ledger.adopt_meal_id(synced.id, "m-old")
    profile = UserProfile(68, 170, 28, "female", "light", "maintain")
    newer = WorkoutEntry("w2", "Yoga", NOW - timedelta(hours=1), 30, None, 90)
    older = WorkoutEntry("w1", "Corsa", NOW - timedelta(days=1), 30, 5.0, 360)
    expired = WorkoutEntry("w0", "Corsa", NOW - timedelta(days=9), 30, None, 360)

    ledger.rehydrate(
        SyncSnapshot(
            user_id="u1",
            profile=profile,
            meals=[],
            workouts=[newer, older, expired],
            water=7.0,
        )
    )

    assert ledger.profile == profile
    assert ledger.meals == []
    assert [w.id for w in ledger.workouts] == ["w1", "w2"]
    assert ledger.get_water() == 5.0


def test_rehydrate_rolls_back_on_write_failure(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    meal = ledger.add_meal("Cena", [resolve_food_portion("Tonno")])
    store.fail_on = {WORKOUTS_KEY}

    with pytest.raises(StorageError):
        ledger.rehydrate(
            SyncSnapshot(
                user_id="u1",
                profile=UserProfile(90, 185, 35, "male", "active", "bulk"),
                meals=[],
                workouts=[],
                water=1.0,
            )
        )

    assert ledger.meals == [meal]
    assert ledger.profile == DEFAULT_PROFILE
    assert [row["id"] for row in store.values[MEALS_KEY]] == [meal.id]
    assert store.values[PROFILE_KEY] is None


def test_invalid_profile_is_rejected_before_writing(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    with pytest.raises(ValidationError):
        ledger.update_profile(UserProfile(-5, 178, 30, "x", "moderate", "keto"))

    assert ledger.profile == DEFAULT_PROFILE
    assert PROFILE_KEY not in store.values


def test_valid_profile_is_stored(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    profile = UserProfile(68, 170, 28, "female", "light", "maintain")

    assert ledger.update_profile(profile) == profile
    assert store.values[PROFILE_KEY]["activityLevel"] == "light"


@pytest.mark.parametrize("liters", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_water_is_rejected(
    ledger: LocalLedger, store: InMemoryKeyValueStore, liters: float
) -> None:
    ledger.set_water(1.5)

    with pytest.raises(ValidationError):
        ledger.set_water(liters)
    with pytest.raises(ValidationError):
        ledger.add_water(liters)

    assert ledger.get_water() == 1.5


def test_naive_time_is_read_as_utc(
    ledger: LocalLedger, store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    meal = ledger.add_meal(
        "Merenda",
        [resolve_food_portion("Yogurt greco")],
        time=datetime(2026, 3, 10, 9, 0),
    )
    workout = ledger.add_workout("Corsa", 30, time=datetime(2026, 3, 2, 9, 0))

    assert meal.time == datetime(2026, 3, 10, 9, 0, tzinfo=UTC)
    assert workout.time.tzinfo is not None

    ledger.prune()
    reloaded = LocalLedger(store=store, clock=clock)
    reloaded.load()

    assert reloaded.meals == [meal]
    assert reloaded.workouts == []
    assert reloaded.today_meals() == [meal]


def test_workout_distance_round_trips(
    ledger: LocalLedger, store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    indoor = ledger.add_workout("Pesi - Upper", 45)
    outdoor = ledger.add_workout("Ciclismo", 60, distance=21.4)

    reloaded = LocalLedger(store=store, clock=clock)
    reloaded.load()

    assert reloaded.workouts == [indoor, outdoor]
    assert reloaded.workouts[0].distance is None
    assert reloaded.workouts[1].distance == 21.4


def test_entries_reload_in_chronological_order(
    ledger: LocalLedger, store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    times = [NOW - timedelta(days=3), NOW - timedelta(days=1), NOW - timedelta(hours=2)]
    meals = [
        ledger.add_meal("Pranzo", [resolve_food_portion("Pasta")], time=moment)
        for moment in times
    ]

    reloaded = LocalLedger(store=store, clock=clock)
    reloaded.load()

    assert reloaded.meals == meals
    assert [meal.time for meal in reloaded.meals] == times


def test_new_entries_are_pending_until_adopted(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    meal = ledger.add_meal("Cena", [resolve_food_portion("Salmone")])
    workout = ledger.add_workout("Corsa", 30)

    assert ledger.pending_meals() == [meal]
    assert ledger.pending_workouts() == [workout]

    ledger.adopt_workout_id(workout.id, "server-w")

    assert ledger.pending_workouts() == []
    assert store.values[PENDING_KEY] == [meal.id]


def test_rehydrate_keeps_pending_entries(
    ledger: LocalLedger, store: InMemoryKeyValueStore, clock: FakeClock
) -> None:
    offline = ledger.add_workout("Corsa", 30)
    remote = WorkoutEntry("w1", "Yoga", NOW - timedelta(hours=3), 30, None, 90)

    ledger.rehydrate(
        SyncSnapshot(
            user_id="u1",
            profile=DEFAULT_PROFILE,
            meals=[],
            workouts=[remote],
            water=0.0,
        )
    )

    assert ledger.workouts == [remote, offline]
    assert ledger.pending_workouts() == [offline]
    assert ledger.today_workout_kcal() == 450

    reloaded = LocalLedger(store=store, clock=clock)
    reloaded.load()
    assert reloaded.pending_workouts() == [offline]


def test_deleting_pending_entry_forgets_it(
    ledger: LocalLedger, store: InMemoryKeyValueStore
) -> None:
    meal = ledger.add_meal("Spuntino", [resolve_food_portion("Mela")])

    ledger.delete_meal(meal.id)

    assert ledger.pending == frozenset()
    assert store.values[PENDING_KEY] == []
