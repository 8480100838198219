"""Tests for the file-backed ledger store."""

from pathlib import Path

import pytest

from jefit.adapters.json_file_store import JsonFileStore
from jefit.domain.errors import StorageError
from jefit.services.calculators import resolve_food_portion
from jefit.services.ledger import LocalLedger
from tests.conftest import FakeClock


def test_create_makes_directory(tmp_path: Path) -> None:
    store = JsonFileStore.create(tmp_path / "ledger")

    assert (tmp_path / "ledger").is_dir()
    assert store.get("user") is None


def test_set_then_get(tmp_path: Path) -> None:
    store = JsonFileStore.create(tmp_path)

    store.set("water_2026-03-10", 1.75)
    store.set("meals", [{"id": "a"}])

    assert store.get("water_2026-03-10") == 1.75
    assert store.get("meals") == [{"id": "a"}]
    assert not list(tmp_path.glob("*.tmp"))


def test_corrupt_file_raises_storage_error(tmp_path: Path) -> None:
    (tmp_path / "user.json").write_text("{not json", encoding="utf-8")
    store = JsonFileStore.create(tmp_path)

    with pytest.raises(StorageError):
        store.get("user")


def test_unserializable_value_keeps_previous_file(tmp_path: Path) -> None:
    store = JsonFileStore.create(tmp_path)
    store.set("user", {"weight": 75})

    with pytest.raises(StorageError):
        store.set("user", {"weight": object()})

    assert store.get("user") == {"weight": 75}
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.parametrize("key", ["", "../escape", ".hidden"])
def test_invalid_keys_are_rejected(tmp_path: Path, key: str) -> None:
    store = JsonFileStore.create(tmp_path)

    with pytest.raises(StorageError):
        store.set(key, 1)


def test_ledger_survives_restart(tmp_path: Path, clock: FakeClock) -> None:
    ledger = LocalLedger(store=JsonFileStore.create(tmp_path), clock=clock)
    ledger.load()
    meal = ledger.add_meal("Colazione", [resolve_food_portion("Yogurt greco")])
    ledger.add_workout("HIIT", 20)

    restarted = LocalLedger(store=JsonFileStore.create(tmp_path), clock=clock)
    restarted.load()

    assert restarted.meals == [meal]
    assert restarted.today_workout_kcal() == 280
