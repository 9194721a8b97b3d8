"""Machine-readable schema helpers for Pepper Tale worlds."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, MutableMapping, Sequence, Tuple

EFFECT_FIELDS: Tuple[str, ...] = ("health", "money")
DEAD_END_POLICIES: Tuple[str, ...] = ("restart", "halt")
DEFAULT_START_SCENE = "start"
DEFAULT_CONTINUE_LABEL = "继续"
DEFAULT_GAME_OVER_TEXT = "Game over! You have lost all your strength..."


def path(*parts: object) -> str:
    """Render ``("scenes", "start", "choices", 0)`` as ``scenes.start.choices[0]``."""
    path_str = ""
    for part in parts:
        if isinstance(part, int):
            path_str = f"{path_str}[{part}]"
        else:
            path_str = f"{path_str}.{part}" if path_str else str(part)
    return path_str


def format_validation_message(path_str: str, context: str, message: str) -> str:
    if context:
        return f"{path_str}: {context}: {message}"
    return f"{path_str}: {message}"


def is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid delta.
    return isinstance(value, int) and not isinstance(value, bool)


def is_probability(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0.0 <= float(value) <= 1.0


def normalize_scenes(
    raw_scenes: Any, ctx: Any | None = None
) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
    """Accept scenes as an ``{id: scene}`` object or a list of ``{"id": ...}`` entries."""
    scenes: Dict[str, Dict[str, Any]] = {}
    errors: List[str] = []
    scene_ids: List[str] = []

    def add_error(context: str, path_parts: Sequence[object], message: str) -> None:
        path_str = path(*path_parts)
        errors.append(format_validation_message(path_str, context, message))
        if ctx is not None:
            ctx.add(context, path_str, message)

    if isinstance(raw_scenes, dict):
        for scene_id, payload in raw_scenes.items():
            if not is_non_empty_str(scene_id):
                add_error("Scenes", ("scenes",), "scene identifiers must be non-empty strings.")
                continue
            if not isinstance(payload, dict):
                add_error(
                    "Scenes",
                    ("scenes", scene_id),
                    f"scene '{scene_id}' must be an object.",
                )
                continue
            scenes[scene_id] = payload
        scene_ids = list(scenes.keys())
    elif isinstance(raw_scenes, list):
        for idx, entry in enumerate(raw_scenes, start=1):
            if not isinstance(entry, MutableMapping):
                add_error(
                    f"Scene entry {idx}",
                    ("scenes", idx - 1),
                    "must be an object.",
                )
                continue
            scene_id = entry.get("id")
            if not is_non_empty_str(scene_id):
                add_error(
                    f"Scene entry {idx}",
                    ("scenes", idx - 1, "id"),
                    "is missing a valid 'id'.",
                )
                continue
            scene_ids.append(scene_id)
            payload = dict(entry)
            payload.pop("id", None)
            scenes[scene_id] = payload
    else:
        add_error(
            "World data",
            ("scenes",),
            "must be an object mapping IDs to scene definitions or a list of scene entries.",
        )

    duplicates = [scene_id for scene_id, count in Counter(scene_ids).items() if count > 1]
    if duplicates:
        dup_list = ", ".join(sorted(set(duplicates)))
        add_error("Scenes", ("scenes",), f"duplicate scene IDs found: {dup_list}.")

    return scenes, errors
