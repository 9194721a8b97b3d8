#!/usr/bin/env python3
"""Run random playthroughs to sanity-check event odds and effect balance."""

from __future__ import annotations

import argparse
import random
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_WORLD = REPO_ROOT / "world" / "world.json"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from pepper.engine import SceneEngine
from pepper.world import World, load_world


@dataclass
class PlaythroughStats:
    runs: int = 0
    game_overs: int = 0
    days: List[int] = field(default_factory=list)
    final_money: List[int] = field(default_factory=list)
    visits: Counter = field(default_factory=Counter)
    events: Counter = field(default_factory=Counter)

    @property
    def game_over_rate(self) -> float:
        return self.game_overs / self.runs if self.runs else 0.0

    @property
    def average_days(self) -> float:
        return sum(self.days) / len(self.days) if self.days else 0.0


def simulate_playthrough(
    world: World, *, seed: int, max_steps: int, stats: PlaythroughStats
) -> None:
    rng = random.Random(seed)
    engine = SceneEngine.from_world(world, rng=rng, print_func=lambda _message: None)
    stats.runs += 1
    for _ in range(max_steps):
        stats.visits[engine.state.current_scene] += 1
        if engine.is_halted:
            break
        if engine.is_dead_end:
            engine.continue_from_dead_end()
            continue
        index = rng.randrange(len(engine.current_scene.choices))
        result = engine.choose(index)
        stats.events.update(result.messages)
        if result.game_over:
            stats.game_overs += 1
            break
    stats.days.append(engine.state.day)
    stats.final_money.append(engine.state.money)


def run_playtests(world: World, *, runs: int, max_steps: int, seed: int = 0) -> PlaythroughStats:
    stats = PlaythroughStats()
    for offset in range(runs):
        simulate_playthrough(world, seed=seed + offset, max_steps=max_steps, stats=stats)
    return stats


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate random Pepper Tale playthroughs.")
    parser.add_argument("world_path", nargs="?", default=str(DEFAULT_WORLD))
    parser.add_argument("--runs", type=int, default=200)
    parser.add_argument("--max-steps", type=int, default=100)
    parser.add_argument("--seed", type=int, default=0)
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    world = load_world(args.world_path)
    stats = run_playtests(world, runs=args.runs, max_steps=args.max_steps, seed=args.seed)

    print(f"World: {world.title}")
    print(f"Runs: {stats.runs} (max {args.max_steps} steps each)")
    print(f"Game overs: {stats.game_overs} ({stats.game_over_rate:.0%})")
    print(f"Average final day: {stats.average_days:.1f}")
    if stats.final_money:
        print(f"Final money range: {min(stats.final_money)}..{max(stats.final_money)}")
    print("Scene visits:")
    for scene_id, count in stats.visits.most_common():
        print(f"  {scene_id}: {count}")
    if stats.events:
        print("Random events fired:")
        for text, count in stats.events.most_common():
            print(f"  {count}x {text}")


if __name__ == "__main__":
    main(sys.argv)
