"""Settings persistence for Pepper Tale."""

from __future__ import annotations

import json
import os
import sys
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

_BASE_DIR = Path(__file__).resolve().parent.parent
SETTINGS_PATH = _BASE_DIR / "settings.json"

BASE_LINE_WIDTH = 60
MIN_LINE_WIDTH = 30
MAX_LINE_WIDTH = 120


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass
class Settings:
    """Runtime configuration toggles that persist between sessions."""

    autosave: bool = True
    prompt_load_on_start: bool = True
    confirm_reset: bool = True
    ui_scale: float = 1.0
    save_dir: str = "saves"

    def clamp(self) -> "Settings":
        self.autosave = bool(self.autosave)
        self.prompt_load_on_start = bool(self.prompt_load_on_start)
        self.confirm_reset = bool(self.confirm_reset)
        self.ui_scale = _clamp(float(self.ui_scale), 0.5, 2.0)
        save_dir = str(self.save_dir).strip()
        self.save_dir = save_dir or "saves"
        return self

    @property
    def line_width(self) -> int:
        width = int(round(BASE_LINE_WIDTH * self.ui_scale))
        return max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, width))

    def copy(self) -> "Settings":
        return Settings.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Settings":
        if not isinstance(data, dict):
            return cls()

        def _as_float(key: str, default: float) -> float:
            try:
                return float(data.get(key, default))
            except (TypeError, ValueError):
                return default

        def _as_bool(key: str, default: bool) -> bool:
            value = data.get(key, default)
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in {"true", "1", "yes", "on"}:
                    return True
                if lowered in {"false", "0", "no", "off"}:
                    return False
            return bool(value) if value is not None else default

        settings = cls(
            autosave=_as_bool("autosave", True),
            prompt_load_on_start=_as_bool("prompt_load_on_start", True),
            confirm_reset=_as_bool("confirm_reset", True),
            ui_scale=_as_float("ui_scale", 1.0),
            save_dir=str(data.get("save_dir", "saves")),
        )
        return settings.clamp()


def load_settings(path: Path | str = SETTINGS_PATH) -> Settings:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError, TypeError):
        return Settings()
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Path | str = SETTINGS_PATH) -> Settings:
    path = Path(path)
    sanitized = settings.copy().clamp()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, prefix=path.name, suffix=".tmp", encoding="utf-8"
        ) as tmp_file:
            json.dump(sanitized.to_dict(), tmp_file, indent=2)
            tmp_file.write("\n")
            tmp_path = Path(tmp_file.name)
        os.replace(str(tmp_path), str(path))
    except OSError as exc:
        print(f"[Settings] Failed to save settings: {exc}", file=sys.stderr)
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return sanitized
