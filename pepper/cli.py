#!/usr/bin/env python3
"""
Pepper Tale: terminal front end for the scene graph engine.
- Numbered choices move between authored scenes; every choice is one day.
- Random events fire independently after each choice.
- Save/Load/Restart go through a single save key.
Usage: python3 -m pepper.cli [world.json] [--seed N]
"""

from __future__ import annotations

import argparse
import asyncio
import inspect
import random
import sys
import textwrap
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from .engine import SceneEngine
from .save_manager import DeserializationError, SaveManager
from .settings import SETTINGS_PATH, Settings, load_settings, save_settings
from .storage import StorageError, open_storage
from .world import DEFAULT_WORLD_PATH, load_world
from .world_schema import DEFAULT_GAME_OVER_TEXT

InputFunc = Callable[[str], str | Awaitable[str]]
PrintFunc = Callable[[str], None]

COMMAND_HINT = "Enter a number or S(ave)/L(oad)/R(estart)/A(utosave)/Q(uit)."


def emit_print(*args, **kwargs) -> None:
    print(*args, **kwargs)


async def read_input(prompt: str = "") -> str:
    return await asyncio.to_thread(input, prompt)


async def _resolve_input(input_func: InputFunc, prompt: str) -> str:
    result = input_func(prompt)
    if inspect.isawaitable(result):
        result = await result
    return result or ""


async def confirm(input_func: InputFunc, prompt: str) -> bool:
    response = (await _resolve_input(input_func, prompt)).strip().lower()
    return response in {"y", "yes"}


def render_scene(engine: SceneEngine, settings: Settings) -> List[str]:
    state = engine.state
    width = settings.line_width
    lines = [
        "",
        "=" * width,
        f"Day {state.day} | Health {state.health} | Money {state.money}",
        "-" * width,
    ]
    lines.extend(textwrap.wrap(engine.current_scene.text, width=width) or [""])
    lines.append("")
    for index, choice in enumerate(engine.available_choices(), start=1):
        lines.append(f"  {index}. {choice.label}")
    if engine.is_halted:
        lines.append("*** The End. Press R to start over or Q to quit. ***")
    return lines


async def play(
    engine: SceneEngine,
    save_manager: SaveManager,
    settings: Settings,
    *,
    game_over_text: str = DEFAULT_GAME_OVER_TEXT,
    settings_path: Optional[Path] = None,
    input_func: InputFunc = read_input,
    print_func: PrintFunc = emit_print,
) -> None:
    """Run the read-choose-render loop until the player quits."""

    def try_load() -> None:
        try:
            save_manager.load()
        except (DeserializationError, StorageError) as exc:
            print_func(f"[!] Load failed: {exc}")

    def try_save(*, autosave: bool = False) -> None:
        try:
            if autosave:
                save_manager.autosave()
            else:
                save_manager.save()
        except StorageError as exc:
            print_func(f"[!] Save failed: {exc}")

    def reset_everything() -> None:
        try:
            save_manager.reset()
        except StorageError as exc:
            print_func(f"[!] Could not clear saved game: {exc}")
            engine.reset_state()

    if settings.prompt_load_on_start and save_manager.has_save():
        if await confirm(input_func, "Saved game found. Load it? [y/N]: "):
            try_load()

    while True:
        if engine.is_game_over:
            print_func(f"\n*** {game_over_text} ***")
            reset_everything()

        for line in render_scene(engine, settings):
            print_func(line)

        command = (await _resolve_input(input_func, "> ")).strip().lower()
        if command in {"q", "quit"}:
            return
        if command == "s":
            try_save()
            continue
        if command == "l":
            try_load()
            continue
        if command == "r":
            if not settings.confirm_reset or await confirm(
                input_func, "Start over? Current progress will be lost. [y/N]: "
            ):
                reset_everything()
            continue
        if command == "a":
            settings.autosave = not settings.autosave
            if settings_path is not None:
                save_settings(settings, settings_path)
            print_func(f"[Settings] Autosave {'enabled' if settings.autosave else 'disabled'}.")
            continue
        if not command.isdecimal():
            print_func(COMMAND_HINT)
            continue

        choices = engine.available_choices()
        index = int(command)
        if not 1 <= index <= len(choices):
            print_func("Pick a valid choice number.")
            continue

        if engine.is_dead_end:
            result = engine.continue_from_dead_end()
        else:
            result = engine.choose(index - 1)
        for message in result.messages:
            print_func(f"[Event] {message}")
        if result.error:
            print_func(f"[!] {result.error} Staying put.")
        if not result.game_over and settings.autosave:
            try_save(autosave=True)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Pepper Tale in the terminal.")
    parser.add_argument("world", nargs="?", default=str(DEFAULT_WORLD_PATH))
    parser.add_argument("--settings", default=str(SETTINGS_PATH), help="Settings JSON path.")
    parser.add_argument("--save-dir", default=None, help="Directory for saved games.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for random events.")
    return parser.parse_args(argv)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        world = load_world(args.world)
    except (OSError, ValueError) as exc:
        emit_print(f"[!] Could not load world '{args.world}': {exc}")
        return 1

    settings_path = Path(args.settings)
    settings = load_settings(settings_path)
    if args.save_dir:
        settings.save_dir = args.save_dir

    engine = SceneEngine.from_world(world, rng=random.Random(args.seed))
    storage = open_storage(settings.save_dir, print_func=emit_print)
    save_manager = SaveManager(engine, storage, print_func=emit_print)

    emit_print(f"\n=== {world.title} ===")
    emit_print(COMMAND_HINT)
    await play(
        engine,
        save_manager,
        settings,
        game_over_text=world.game_over_text,
        settings_path=settings_path,
    )
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        emit_print("\n[Interrupted] Bye.")


if __name__ == "__main__":
    run()
