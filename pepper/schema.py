"""Shared schema validation utilities for Pepper Tale worlds."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from pepper.world_schema import (
    DEAD_END_POLICIES,
    EFFECT_FIELDS,
    format_validation_message,
    is_int,
    is_non_empty_str,
    is_probability,
    normalize_scenes,
    path,
)


class ValidationContext:
    """Utility container for accumulating validation errors."""

    def __init__(self) -> None:
        self.errors: List[str] = []

    def add(self, context: str, path_str: str, message: str) -> None:
        self.errors.append(format_validation_message(path_str, context, message))


def require(condition: bool, context: str, path_str: str, message: str, ctx: ValidationContext) -> None:
    if not condition:
        ctx.add(context, path_str, message)


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def validate_effect(
    effect: Any, context: str, path_parts: Sequence[object], ctx: ValidationContext
) -> None:
    if effect is None:
        return
    if not isinstance(effect, Mapping):
        ctx.add(context, path(*path_parts), "effect must be an object.")
        return
    for key, value in effect.items():
        if key not in EFFECT_FIELDS:
            ctx.add(
                context,
                path(*path_parts, key),
                f"unsupported effect field '{key}' (expected one of {', '.join(EFFECT_FIELDS)}).",
            )
            continue
        if not is_int(value):
            ctx.add(context, path(*path_parts, key), f"'{key}' must be an integer delta.")


def validate_choice(
    choice: Any,
    scene_id: str,
    index: int,
    scenes: Mapping[str, Any],
    path_parts: Sequence[object],
    ctx: ValidationContext,
) -> None:
    context = f"Choice {index} in scene '{scene_id}'"
    if not isinstance(choice, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return

    require(
        is_non_empty_str(choice.get("text")),
        context,
        path(*path_parts, "text"),
        "requires non-empty 'text'.",
        ctx,
    )

    target = choice.get("next")
    if target is None:
        ctx.add(context, path(*path_parts, "next"), "is missing a 'next' scene.")
    elif not is_non_empty_str(target):
        ctx.add(context, path(*path_parts, "next"), "must use a non-empty string 'next'.")
    elif target not in scenes:
        ctx.add(context, path(*path_parts, "next"), f"targets unknown scene '{target}'.")

    validate_effect(choice.get("effect"), context, (*path_parts, "effect"), ctx)


def validate_random_event(
    event: Any, index: int, path_parts: Sequence[object], ctx: ValidationContext
) -> None:
    context = f"Random event {index}"
    if not isinstance(event, Mapping):
        ctx.add(context, path(*path_parts), "must be an object.")
        return
    require(
        is_probability(event.get("chance")),
        context,
        path(*path_parts, "chance"),
        "'chance' must be a number between 0 and 1.",
        ctx,
    )
    require(
        is_non_empty_str(event.get("text")),
        context,
        path(*path_parts, "text"),
        "requires non-empty 'text'.",
        ctx,
    )
    effect = event.get("effect")
    if effect is None:
        ctx.add(context, path(*path_parts, "effect"), "requires an 'effect' object.")
        return
    validate_effect(effect, context, (*path_parts, "effect"), ctx)


def validate_world(world: Mapping[str, Any]) -> List[str]:
    ctx = ValidationContext()

    require(
        is_non_empty_str(world.get("title")),
        "World data",
        path("title"),
        "must include a non-empty 'title'.",
        ctx,
    )
    require(
        "scenes" in world,
        "World data",
        path("scenes"),
        "must include a 'scenes' section.",
        ctx,
    )

    scenes, _scene_errors = normalize_scenes(world.get("scenes"), ctx)

    start = world.get("start", "start")
    if not is_non_empty_str(start):
        ctx.add("World data", path("start"), "'start' must be a non-empty scene ID.")
    elif "scenes" in world and start not in scenes:
        ctx.add("World data", path("start"), f"start scene '{start}' is not defined.")

    game_over_text = world.get("game_over_text")
    if game_over_text is not None and not is_non_empty_str(game_over_text):
        ctx.add("World data", path("game_over_text"), "must be a non-empty string if present.")

    dead_end = world.get("dead_end")
    if dead_end is not None:
        if not isinstance(dead_end, Mapping):
            ctx.add("World data", path("dead_end"), "'dead_end' must be an object.")
        else:
            policy = dead_end.get("policy", "restart")
            if policy not in DEAD_END_POLICIES:
                ctx.add(
                    "Dead end",
                    path("dead_end", "policy"),
                    f"policy must be one of {', '.join(DEAD_END_POLICIES)}.",
                )
            label = dead_end.get("label")
            if label is not None and not is_non_empty_str(label):
                ctx.add("Dead end", path("dead_end", "label"), "label must be a non-empty string.")

    events = world.get("random_events", [])
    if _is_list(events):
        for index, event in enumerate(events, start=1):
            validate_random_event(event, index, ("random_events", index - 1), ctx)
    else:
        ctx.add("World data", path("random_events"), "'random_events' must be a list if present.")

    for scene_id, scene in scenes.items():
        require(
            is_non_empty_str(scene.get("text")),
            f"Scene '{scene_id}'",
            path("scenes", scene_id, "text"),
            "requires non-empty 'text'.",
            ctx,
        )
        choices = scene.get("choices")
        if choices is None:
            continue
        if not _is_list(choices):
            ctx.add(
                f"Scene '{scene_id}'",
                path("scenes", scene_id, "choices"),
                "choices must be provided as a list.",
            )
            continue
        for index, choice in enumerate(choices, start=1):
            validate_choice(
                choice,
                scene_id,
                index,
                scenes,
                ("scenes", scene_id, "choices", index - 1),
                ctx,
            )

    return ctx.errors
