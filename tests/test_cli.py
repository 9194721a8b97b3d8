import asyncio
import json
from pathlib import Path

from pepper import cli
from pepper.engine import PlayerState, SceneEngine
from pepper.save_manager import SaveManager
from pepper.settings import Settings, load_settings
from pepper.storage import MemoryStorage
from pepper.world import Choice, Effect, Scene


class NeverRandom:
    def random(self) -> float:
        return 1.0


def scripted(*answers: str):
    queue = list(answers)
    prompts = []

    def input_func(prompt: str) -> str:
        prompts.append(prompt)
        return queue.pop(0) if queue else "q"

    input_func.prompts = prompts
    return input_func


def build_session(storage=None):
    scenes = {
        "start": Scene(
            "You wake up as a pepper.",
            (
                Choice("Roll", "roll", Effect(health=-5)),
                Choice("Fall off the stall", "start", Effect(health=-100)),
                Choice("Get bought", "sold", Effect(money=10)),
            ),
        ),
        "roll": Scene("Rolling is hard.", (Choice("Rest", "start", Effect(health=10)),)),
        "sold": Scene("Into the bag you go."),
    }
    engine = SceneEngine(scenes, rng=NeverRandom(), print_func=lambda _message: None)
    output = []
    manager = SaveManager(engine, storage or MemoryStorage(), print_func=output.append)
    return engine, manager, output


def play(engine, manager, output, inputs, settings=None, **kwargs) -> None:
    asyncio.run(
        cli.play(
            engine,
            manager,
            settings or Settings(),
            game_over_text="Game over!",
            input_func=inputs,
            print_func=output.append,
            **kwargs,
        )
    )


def test_choice_renders_next_scene_and_autosaves() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("1", "q"))

    assert engine.state == PlayerState(health=95, money=50, day=2, current_scene="roll")
    assert "Rolling is hard." in output
    assert "Day 2 | Health 95 | Money 50" in output
    saved = json.loads(manager.storage.get_item(manager.key))
    assert saved["state"]["currentScene"] == "roll"


def test_autosave_can_be_disabled() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("1", "q"), Settings(autosave=False))
    assert not manager.has_save()


def test_game_over_resets_state_and_clears_save() -> None:
    engine, manager, output = build_session()
    manager.save(quiet=True)

    play(engine, manager, output, scripted("n", "2", "q"))

    assert "\n*** Game over! ***" in output
    assert engine.state == PlayerState()
    assert not manager.has_save()


def test_saved_game_is_offered_on_start() -> None:
    storage = MemoryStorage()
    storage.set_item(
        SaveManager.SAVE_KEY,
        json.dumps(
            {
                "state": {"health": 42, "money": 7, "day": 5, "currentScene": "roll"},
                "timestamp": "2024-01-01T00:00:00+00:00",
            }
        ),
    )
    engine, manager, output = build_session(storage)
    inputs = scripted("y", "q")

    play(engine, manager, output, inputs)

    assert inputs.prompts[0].startswith("Saved game found.")
    assert engine.state == PlayerState(health=42, money=7, day=5, current_scene="roll")


def test_corrupt_save_is_reported_and_state_kept() -> None:
    storage = MemoryStorage({SaveManager.SAVE_KEY: "{corrupt"})
    engine, manager, output = build_session(storage)

    play(engine, manager, output, scripted("y", "q"))

    assert any(line.startswith("[!] Load failed: Invalid JSON") for line in output)
    assert engine.state == PlayerState()


def test_restart_requires_confirmation() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("1", "r", "n", "q"))
    assert engine.state.current_scene == "roll"

    play(engine, manager, output, scripted("n", "r", "y", "q"))
    assert engine.state == PlayerState()
    assert not manager.has_save()


def test_manual_save_and_load_commands() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("1", "s", "1", "l", "q"), Settings(autosave=False))
    assert engine.state == PlayerState(health=95, money=50, day=2, current_scene="roll")
    assert any(line.startswith("[Saved]") for line in output)
    assert any(line.startswith("[Loaded]") for line in output)


def test_invalid_input_is_rejected() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("hello", "9", "q"))
    assert cli.COMMAND_HINT in output
    assert "Pick a valid choice number." in output
    assert engine.state == PlayerState()


def test_dead_end_offers_continue_back_to_start() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("3", "1", "q"))
    assert "  1. 继续" in output
    assert engine.state == PlayerState(health=100, money=60, day=2, current_scene="start")


def test_autosave_toggle_persists_settings(tmp_path: Path) -> None:
    engine, manager, output = build_session()
    settings_path = tmp_path / "settings.json"
    play(engine, manager, output, scripted("a", "q"), settings_path=settings_path)
    assert "[Settings] Autosave disabled." in output
    assert load_settings(settings_path).autosave is False


def test_main_reports_unloadable_world(tmp_path: Path, capsys) -> None:
    missing = tmp_path / "missing.json"
    assert asyncio.run(cli.main([str(missing)])) == 1
    assert "Could not load world" in capsys.readouterr().out


def test_non_ascii_digits_are_rejected_without_crashing() -> None:
    engine, manager, output = build_session()
    play(engine, manager, output, scripted("²", "³", "q"))
    assert output.count(cli.COMMAND_HINT) == 2
    assert engine.state == PlayerState()
