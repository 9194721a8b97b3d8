"""World data: scenes, choices, effects and random events."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .schema import validate_world
from .world_schema import (
    DEFAULT_CONTINUE_LABEL,
    DEFAULT_GAME_OVER_TEXT,
    DEFAULT_START_SCENE,
    normalize_scenes,
)

_BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_WORLD_PATH = _BASE_DIR / "world" / "world.json"


@dataclass(frozen=True)
class Effect:
    health: int = 0
    money: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["Effect"]:
        if not data:
            return None
        return cls(health=int(data.get("health", 0)), money=int(data.get("money", 0)))


@dataclass(frozen=True)
class Choice:
    label: str
    next_scene: str
    effect: Optional[Effect] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Choice":
        return cls(
            label=data["text"],
            next_scene=data["next"],
            effect=Effect.from_dict(data.get("effect")),
        )


@dataclass(frozen=True)
class Scene:
    text: str
    choices: Tuple[Choice, ...] = ()

    @property
    def is_dead_end(self) -> bool:
        return not self.choices

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scene":
        return cls(
            text=data["text"],
            choices=tuple(Choice.from_dict(choice) for choice in data.get("choices") or []),
        )


@dataclass(frozen=True)
class RandomEvent:
    probability: float
    text: str
    effect: Effect

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RandomEvent":
        return cls(
            probability=float(data["chance"]),
            text=data["text"],
            effect=Effect.from_dict(data.get("effect")) or Effect(),
        )


@dataclass(frozen=True)
class World:
    """Everything authored for one game; never mutated at runtime."""

    title: str
    scenes: Mapping[str, Scene]
    random_events: Tuple[RandomEvent, ...] = ()
    start: str = DEFAULT_START_SCENE
    dead_end_policy: str = "restart"
    continue_label: str = DEFAULT_CONTINUE_LABEL
    game_over_text: str = DEFAULT_GAME_OVER_TEXT


def _raise_world_validation(errors):
    raise ValueError("Invalid world.json:\n- " + "\n- ".join(errors))


def world_from_dict(data: Any) -> World:
    if not isinstance(data, dict):
        _raise_world_validation(["World data must be a JSON object."])

    errors = validate_world(data)
    if errors:
        _raise_world_validation(errors)

    raw_scenes, scene_errors = normalize_scenes(data.get("scenes"))
    if scene_errors:
        _raise_world_validation(scene_errors)

    dead_end = data.get("dead_end") or {}
    return World(
        title=data["title"],
        scenes={scene_id: Scene.from_dict(scene) for scene_id, scene in raw_scenes.items()},
        random_events=tuple(
            RandomEvent.from_dict(event) for event in data.get("random_events", [])
        ),
        start=data.get("start", DEFAULT_START_SCENE),
        dead_end_policy=dead_end.get("policy", "restart"),
        continue_label=dead_end.get("label", DEFAULT_CONTINUE_LABEL),
        game_over_text=data.get("game_over_text", DEFAULT_GAME_OVER_TEXT),
    )


def load_world(path: Path | str = DEFAULT_WORLD_PATH) -> World:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return world_from_dict(data)
