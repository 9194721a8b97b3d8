"""Scene graph engine: applies choices, effects and random events to the player."""

from __future__ import annotations

import random
import sys
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .world import Choice, Effect, RandomEvent, Scene, World
from .world_schema import (
    DEAD_END_POLICIES,
    DEFAULT_CONTINUE_LABEL,
    DEFAULT_START_SCENE,
    is_int,
    is_non_empty_str,
)

DEFAULT_HEALTH = 100
DEFAULT_MONEY = 50
FIRST_DAY = 1


class EngineError(Exception):
    """Base class for engine failures; none of them are fatal."""


class UnknownSceneError(EngineError):
    """Raised when a scene ID is not in the scene table."""

    def __init__(self, scene_id: str) -> None:
        super().__init__(f"Unknown scene '{scene_id}'.")
        self.scene_id = scene_id


class ChoiceIndexError(EngineError):
    """Raised when a choice index is outside the active scene's choices."""


@dataclass
class PlayerState:
    health: int = DEFAULT_HEALTH
    money: int = DEFAULT_MONEY
    day: int = FIRST_DAY
    current_scene: str = DEFAULT_START_SCENE

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["currentScene"] = data.pop("current_scene")
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "PlayerState":
        """Strict inverse of :meth:`to_dict`; raises ``ValueError`` on bad shapes."""
        if not isinstance(data, dict):
            raise ValueError("state must be an object.")
        for key in ("health", "money", "day"):
            if not is_int(data.get(key)):
                raise ValueError(f"state.{key} must be an integer.")
        scene = data.get("currentScene")
        if not is_non_empty_str(scene):
            raise ValueError("state.currentScene must be a non-empty string.")
        return cls(
            health=data["health"],
            money=data["money"],
            day=data["day"],
            current_scene=scene,
        )


@dataclass
class TransitionResult:
    scene: Scene
    messages: List[str] = field(default_factory=list)
    game_over: bool = False
    error: Optional[str] = None


def _stderr(message: str) -> None:
    print(message, file=sys.stderr)


class SceneEngine:
    """Own the player state and move it through the authored scene graph."""

    def __init__(
        self,
        scenes: Mapping[str, Scene],
        random_events: Sequence[RandomEvent] = (),
        *,
        start: str = DEFAULT_START_SCENE,
        dead_end_policy: str = "restart",
        continue_label: str = DEFAULT_CONTINUE_LABEL,
        rng: Optional[random.Random] = None,
        print_func: Callable[[str], None] = _stderr,
    ) -> None:
        if dead_end_policy not in DEAD_END_POLICIES:
            raise ValueError(
                f"dead_end_policy must be one of {', '.join(DEAD_END_POLICIES)}."
            )
        self.scenes = scenes
        self.random_events = tuple(random_events)
        self.start = start
        self.dead_end_policy = dead_end_policy
        self.continue_label = continue_label
        self.rng = rng if rng is not None else random.Random()
        self.print = print_func
        if start not in scenes:
            raise UnknownSceneError(start)
        self.state = PlayerState(current_scene=start)

    @classmethod
    def from_world(cls, world: World, **kwargs: Any) -> "SceneEngine":
        kwargs.setdefault("start", world.start)
        kwargs.setdefault("dead_end_policy", world.dead_end_policy)
        kwargs.setdefault("continue_label", world.continue_label)
        return cls(world.scenes, world.random_events, **kwargs)

    # ---------- Queries ----------
    @property
    def current_scene(self) -> Scene:
        return self.scenes[self.state.current_scene]

    @property
    def is_game_over(self) -> bool:
        return self.state.health <= 0

    @property
    def is_dead_end(self) -> bool:
        return self.current_scene.is_dead_end

    @property
    def is_halted(self) -> bool:
        return self.is_dead_end and self.dead_end_policy == "halt"

    def available_choices(self) -> List[Choice]:
        """Choices to render; a dead end under ``restart`` gets one implicit continue."""
        scene = self.current_scene
        if scene.choices:
            return list(scene.choices)
        if self.dead_end_policy == "restart":
            return [Choice(self.continue_label, self.start)]
        return []

    # ---------- Transitions ----------
    def load_scene(self, scene_id: str) -> Scene:
        scene = self.scenes.get(scene_id)
        if scene is None:
            self.print(f"[!] Unknown scene '{scene_id}'.")
            raise UnknownSceneError(scene_id)
        self.state.current_scene = scene_id
        return scene

    def choose(self, choice_index: int) -> TransitionResult:
        choices = self.current_scene.choices
        if isinstance(choice_index, bool) or not isinstance(choice_index, int):
            raise ChoiceIndexError(f"Choice index must be an integer, got {choice_index!r}.")
        if not 0 <= choice_index < len(choices):
            raise ChoiceIndexError(
                f"Choice {choice_index} is out of range for scene "
                f"'{self.state.current_scene}' ({len(choices)} choices)."
            )

        choice = choices[choice_index]
        if choice.effect is not None:
            self.apply_effect(choice.effect)
        self.state.day += 1
        messages = self.roll_random_events()

        try:
            scene = self.load_scene(choice.next_scene)
        except UnknownSceneError as exc:
            return TransitionResult(
                scene=self.current_scene,
                messages=messages,
                game_over=self.is_game_over,
                error=str(exc),
            )
        return TransitionResult(scene=scene, messages=messages, game_over=self.is_game_over)

    def continue_from_dead_end(self) -> TransitionResult:
        """Follow the implicit continue choice; the day does not advance."""
        if not self.is_dead_end:
            raise ChoiceIndexError(
                f"Scene '{self.state.current_scene}' has authored choices; use choose()."
            )
        if self.dead_end_policy != "restart":
            raise ChoiceIndexError(f"Scene '{self.state.current_scene}' is an ending.")
        return TransitionResult(scene=self.load_scene(self.start), game_over=self.is_game_over)

    def apply_effect(self, effect: Effect) -> None:
        if effect.health:
            self.state.health = max(0, self.state.health + effect.health)
        if effect.money:
            self.state.money += effect.money

    def roll_random_events(self) -> List[str]:
        fired = []
        for event in self.random_events:
            if self.rng.random() < event.probability:
                self.apply_effect(event.effect)
                fired.append(event.text)
        return fired

    # ---------- State replacement ----------
    def reset_state(self) -> Scene:
        self.state = PlayerState(current_scene=self.start)
        return self.load_scene(self.start)

    def replace_state(self, state: PlayerState) -> Scene:
        """Adopt a loaded state, falling back to the start scene if it no longer exists."""
        if state.current_scene not in self.scenes:
            self.print(
                f"[!] Saved scene '{state.current_scene}' missing in current world. "
                f"Resetting to '{self.start}'."
            )
            state.current_scene = self.start
        self.state = state
        return self.current_scene
