"""Save management utilities for Pepper Tale."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .engine import PlayerState, SceneEngine


class SaveError(Exception):
    """Base class for save related failures."""


class DeserializationError(SaveError):
    """Raised when saved data cannot be parsed or does not describe a state."""


class SaveManager:
    """Persist the engine's player state under a single fixed key."""

    SAVE_KEY = "textGameSave"

    def __init__(
        self,
        engine: SceneEngine,
        storage,
        *,
        key: Optional[str] = None,
        print_func: Callable[[str], None] = print,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.engine = engine
        self.storage = storage
        self.key = key or self.SAVE_KEY
        self.print = print_func
        self.clock = clock

    # ---------- Public API ----------
    def save(self, *, quiet: bool = False, label: str = "Saved") -> Dict[str, Any]:
        payload = self._build_payload()
        # StorageError propagates so the caller can report it.
        self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False, indent=2))
        if not quiet:
            self.print(f"[{label}] Day {payload['state']['day']} stored under '{self.key}'.")
        return payload

    def autosave(self) -> Optional[Dict[str, Any]]:
        if self.engine.is_game_over:
            return None
        return self.save(quiet=True, label="Autosave")

    def has_save(self) -> bool:
        return self.storage.get_item(self.key) is not None

    def load(self) -> bool:
        """Replace the engine state with the stored one; ``False`` when nothing is saved."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            self.print("[!] No saved game found.")
            return False
        state = self._parse(raw)
        self.engine.replace_state(state)
        self.print(f"[Loaded] Day {state.day}, scene '{self.engine.state.current_scene}'.")
        return True

    def reset(self) -> None:
        self.storage.remove_item(self.key)
        self.engine.reset_state()
        self.print("[Reset] Progress cleared.")

    # ---------- Internal helpers ----------
    def _build_payload(self) -> Dict[str, Any]:
        return {
            "state": self.engine.state.to_dict(),
            "timestamp": self.clock().isoformat(),
        }

    def _parse(self, raw: str) -> PlayerState:
        try:
            payload = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            raise DeserializationError(f"Invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise DeserializationError("Payload was not an object.")
        if "state" not in payload:
            raise DeserializationError("State block missing.")
        timestamp = payload.get("timestamp")
        if timestamp is not None and not isinstance(timestamp, str):
            raise DeserializationError("Timestamp must be an ISO-8601 string.")
        try:
            return PlayerState.from_dict(payload["state"])
        except ValueError as exc:
            raise DeserializationError(str(exc)) from exc
