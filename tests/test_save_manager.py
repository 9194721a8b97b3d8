import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pepper.engine import PlayerState, SceneEngine
from pepper.save_manager import DeserializationError, SaveManager
from pepper.storage import FileStorage, MemoryStorage, StorageError, WebStorage, open_storage
from pepper.world import Choice, Effect, Scene

FIXED_TIME = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class NeverRandom:
    def random(self) -> float:
        return 1.0


class BrokenStorage(MemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise StorageError("disk full")


def build_manager(storage=None) -> SaveManager:
    scenes = {
        "start": Scene("Start", (Choice("Roll", "roll", Effect(health=-5, money=7)),)),
        "roll": Scene("Roll", (Choice("Back", "start"),)),
    }
    engine = SceneEngine(scenes, rng=NeverRandom(), print_func=lambda _message: None)
    printed = []
    manager = SaveManager(
        engine,
        storage if storage is not None else MemoryStorage(),
        print_func=printed.append,
        clock=lambda: FIXED_TIME,
    )
    manager.printed = printed
    return manager


def test_save_writes_state_and_timestamp_under_fixed_key() -> None:
    manager = build_manager()
    manager.engine.choose(0)
    manager.save()

    payload = json.loads(manager.storage.get_item("textGameSave"))
    assert payload == {
        "state": {"health": 95, "money": 57, "day": 2, "currentScene": "roll"},
        "timestamp": "2024-05-01T12:30:00+00:00",
    }
    assert manager.printed[-1].startswith("[Saved]")


def test_save_then_load_restores_identical_state() -> None:
    manager = build_manager()
    manager.engine.choose(0)
    saved = PlayerState(**vars(manager.engine.state))
    manager.save(quiet=True)

    manager.engine.reset_state()
    assert manager.engine.state != saved

    assert manager.load() is True
    assert manager.engine.state == saved


def test_load_without_save_is_a_no_op() -> None:
    manager = build_manager()
    before = PlayerState(**vars(manager.engine.state))
    assert manager.load() is False
    assert manager.engine.state == before
    assert manager.printed == ["[!] No saved game found."]


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"timestamp": "2024-01-01T00:00:00Z"}',
        '{"state": {"health": 5, "money": 1, "day": 2}}',
        '{"state": {"health": 5, "money": 1, "day": 2, "currentScene": "roll"}, "timestamp": 3}',
    ],
)
def test_malformed_save_raises_and_preserves_state(raw: str) -> None:
    manager = build_manager()
    manager.engine.choose(0)
    before = PlayerState(**vars(manager.engine.state))
    manager.storage.set_item(manager.key, raw)

    with pytest.raises(DeserializationError):
        manager.load()
    assert manager.engine.state == before


def test_reset_clears_storage_and_restores_defaults() -> None:
    manager = build_manager()
    manager.engine.choose(0)
    manager.save(quiet=True)

    manager.reset()

    assert manager.engine.state == PlayerState(health=100, money=50, day=1, current_scene="start")
    assert manager.storage.get_item(manager.key) is None
    assert not manager.has_save()


def test_write_failure_is_reported() -> None:
    manager = build_manager(BrokenStorage())
    with pytest.raises(StorageError, match="disk full"):
        manager.save()


def test_autosave_skips_when_game_is_over() -> None:
    manager = build_manager()
    manager.engine.state.health = 0
    assert manager.autosave() is None
    assert not manager.has_save()


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path / "saves")
    manager = build_manager(storage)
    manager.engine.choose(0)
    manager.save(quiet=True)

    save_path = tmp_path / "saves" / "textGameSave.json"
    assert save_path.exists()
    assert "currentScene" in save_path.read_text(encoding="utf-8")

    fresh = build_manager(FileStorage(tmp_path / "saves"))
    assert fresh.load() is True
    assert fresh.engine.state == manager.engine.state

    fresh.reset()
    assert not save_path.exists()


def test_file_storage_rejects_empty_keys(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    with pytest.raises(StorageError):
        storage.set_item("../", "{}")


def test_open_storage_uses_files_outside_the_browser(tmp_path: Path) -> None:
    storage = open_storage(tmp_path / "saves")
    assert isinstance(storage, FileStorage)
    assert storage.base_path == tmp_path / "saves"


def test_web_storage_prefixes_keys_and_wraps_browser_errors() -> None:
    class FakeLocalStorage:
        def __init__(self) -> None:
            self.items = {}

        def getItem(self, key):
            return self.items.get(key)

        def setItem(self, key, value):
            if len(value) > 10_000:
                raise RuntimeError("QuotaExceededError")
            self.items[key] = value

        def removeItem(self, key):
            self.items.pop(key, None)

    backend = FakeLocalStorage()
    manager = build_manager(WebStorage(backend))
    manager.save(quiet=True)
    assert "pepper:textGameSave" in backend.items
    assert manager.load() is True

    with pytest.raises(StorageError, match="QuotaExceededError"):
        manager.storage.set_item("big", "x" * 20_000)

    manager.reset()
    assert backend.items == {}
