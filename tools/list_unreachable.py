#!/usr/bin/env python3
"""List scenes that cannot be reached from the world's start scene."""

from __future__ import annotations

import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_WORLD_PATH = REPO_ROOT / "world" / "world.json"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from pepper.world_schema import DEFAULT_START_SCENE, normalize_scenes


def load_world(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def build_graph(world: dict) -> tuple[dict[str, list[str]], list[str]]:
    scenes, _ = normalize_scenes(world.get("scenes", {}))
    graph = {scene_id: [] for scene_id in scenes}
    missing_targets: list[str] = []
    for scene_id, scene in scenes.items():
        choices = scene.get("choices") or []
        dead_end = world.get("dead_end") or {}
        if not choices and dead_end.get("policy", "restart") == "restart":
            # The implicit continue choice returns to the start scene.
            graph[scene_id].append(world.get("start", DEFAULT_START_SCENE))
        for choice in choices:
            target = choice.get("next") if isinstance(choice, dict) else None
            if not isinstance(target, str):
                continue
            graph[scene_id].append(target)
            if target not in scenes:
                missing_targets.append(f"Scene {scene_id} choice targets missing scene {target}")
    return graph, missing_targets


def traverse_from(start_scene: str, graph: dict) -> set:
    if start_scene not in graph:
        return set()
    visited = set()
    stack = [start_scene]
    while stack:
        current = stack.pop()
        if current in visited or current not in graph:
            continue
        visited.add(current)
        stack.extend(graph.get(current, []))
    return visited


def find_unreachable(world: dict) -> list[str]:
    graph, _ = build_graph(world)
    reached = traverse_from(world.get("start", DEFAULT_START_SCENE), graph)
    return sorted(set(graph) - reached)


def main() -> None:
    world_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_WORLD_PATH
    world = load_world(world_path)
    graph, missing_targets = build_graph(world)
    unreachable = find_unreachable(world)

    print(f"World file: {world_path}")
    print(f"Total scenes: {len(graph)}")
    print(f"Reachable scenes: {len(graph) - len(unreachable)}")
    for message in missing_targets:
        print(f"  ! {message}")
    if unreachable:
        print("Unreachable scenes:")
        for scene_id in unreachable:
            print(f"  - {scene_id}")
    else:
        print("All scenes reachable from the start scene.")


if __name__ == "__main__":
    main()
