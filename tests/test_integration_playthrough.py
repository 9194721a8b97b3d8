import random

from pepper.engine import SceneEngine
from pepper.world import load_world
from tools.playtest import run_playtests


def simulate_random_playthrough(engine: SceneEngine, *, seed: int, max_steps: int = 500) -> int:
    """Play random choices, checking the state invariants after every step."""
    rng = random.Random(seed)
    resets = 0
    for _ in range(max_steps):
        if engine.is_dead_end:
            result = engine.continue_from_dead_end()
            assert result.scene is engine.scenes[engine.start]
            continue

        day_before = engine.state.day
        choices = engine.available_choices()
        assert choices, f"No available choices from scene '{engine.state.current_scene}'."
        result = engine.choose(rng.randrange(len(choices)))

        assert result.error is None
        assert engine.state.day == day_before + 1
        assert engine.state.health >= 0
        assert engine.state.current_scene in engine.scenes
        if result.game_over:
            assert engine.state.health == 0
            engine.reset_state()
            resets += 1
    return resets


def test_random_playthrough_keeps_invariants() -> None:
    world = load_world()
    for seed in range(5):
        engine = SceneEngine.from_world(world, rng=random.Random(seed))
        simulate_random_playthrough(engine, seed=seed)


def test_playtest_tool_summarizes_runs() -> None:
    stats = run_playtests(load_world(), runs=20, max_steps=50, seed=3)
    assert stats.runs == 20
    assert len(stats.days) == 20
    assert stats.visits["start"] >= 20
    assert 0.0 <= stats.game_over_rate <= 1.0
