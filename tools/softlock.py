"""Soft-lock analysis helpers for Pepper Tale validation."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Dict, List, Mapping, Set

from pepper.world_schema import DEFAULT_START_SCENE, normalize_scenes, path


def _edges(scenes: Mapping[str, Any]) -> Dict[str, List[str]]:
    graph: Dict[str, List[str]] = {}
    for scene_id, scene in scenes.items():
        targets = []
        for choice in scene.get("choices") or []:
            if isinstance(choice, Mapping) and isinstance(choice.get("next"), str):
                targets.append(choice["next"])
        graph[scene_id] = targets
    return graph


def _can_reach(goals: Set[str], graph: Mapping[str, List[str]]) -> Set[str]:
    reverse: Dict[str, List[str]] = defaultdict(list)
    for origin, targets in graph.items():
        for target in targets:
            reverse[target].append(origin)
    seen = set(goals)
    queue = deque(goals)
    while queue:
        current = queue.popleft()
        for origin in reverse.get(current, []):
            if origin not in seen:
                seen.add(origin)
                queue.append(origin)
    return seen


def analyze_softlocks(world: Mapping[str, Any]) -> List[str]:
    """Warn about dead ends and loops that never lead back to the start or an ending."""
    scenes, _ = normalize_scenes(world.get("scenes"))
    dead_end = world.get("dead_end")
    policy = dead_end.get("policy", "restart") if isinstance(dead_end, Mapping) else "restart"
    start = world.get("start", DEFAULT_START_SCENE)
    graph = _edges(scenes)
    warnings: List[str] = []

    dead_ends = sorted(scene_id for scene_id, targets in graph.items() if not targets)
    if policy == "restart":
        for scene_id in dead_ends:
            warnings.append(
                f"{path('scenes', scene_id, 'choices')}: scene '{scene_id}' has no choices; "
                f"players return to '{start}' through the implicit continue choice."
            )

    goals = {start} | set(dead_ends)
    escapable = _can_reach(goals, graph)
    for scene_id in sorted(set(graph) - escapable):
        warnings.append(
            f"{path('scenes', scene_id)}: scene '{scene_id}' can never lead back to "
            f"'{start}' or an ending."
        )
    return warnings
