"""Key-value storage backends used by the save manager."""

from __future__ import annotations

import os
import string
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

_VALID_KEY_CHARS = set(string.ascii_letters + string.digits + "-_.")

IS_WEB = sys.platform == "emscripten"


def _browser_local_storage() -> Optional[Any]:
    if not IS_WEB:
        return None
    try:
        from js import localStorage  # type: ignore
    except ImportError:
        return None
    return localStorage


class StorageError(Exception):
    """Raised when a storage backend cannot read, write or remove a key."""


class MemoryStorage:
    """In-process store; nothing survives the interpreter."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Store each key as ``<base_path>/<key>.json``."""

    SUFFIX = ".json"

    def __init__(self, base_path: Path | str = "saves") -> None:
        self.base_path = Path(base_path)

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, dir=path.parent, prefix=path.name, suffix=".tmp", encoding="utf-8"
            ) as tmp_file:
                tmp_file.write(value)
                tmp_path = Path(tmp_file.name)
            os.replace(str(tmp_path), str(path))
        except OSError as exc:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Could not remove {path}: {exc}") from exc

    def _path_for(self, key: str) -> Path:
        cleaned = "".join(ch for ch in (key or "").strip() if ch in _VALID_KEY_CHARS)
        if not cleaned or cleaned.strip(".") == "":
            raise StorageError(f"Invalid storage key {key!r}.")
        return self.base_path / f"{cleaned}{self.SUFFIX}"


class WebStorage:
    """Thin wrapper over the browser ``localStorage`` API."""

    def __init__(self, local_storage: Any, *, prefix: str = "pepper:") -> None:
        self._local_storage = local_storage
        self.prefix = prefix

    def get_item(self, key: str) -> Optional[str]:
        raw = self._call("read", self._local_storage.getItem, self.prefix + key)
        return None if raw is None else str(raw)

    def set_item(self, key: str, value: str) -> None:
        self._call("write", self._local_storage.setItem, self.prefix + key, value)

    def remove_item(self, key: str) -> None:
        self._call("remove", self._local_storage.removeItem, self.prefix + key)

    def _call(self, action: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        # Pyodide surfaces browser failures (quota, privacy mode) as JsException.
        except Exception as exc:
            raise StorageError(f"localStorage {action} failed: {exc}") from exc


def open_storage(
    base_path: Path | str = "saves",
    *,
    print_func: Callable[[str], None] = print,
):
    """Pick ``localStorage`` in browser builds and the filesystem elsewhere."""
    local_storage = _browser_local_storage()
    if local_storage is not None:
        return WebStorage(local_storage)
    if IS_WEB:
        print_func(
            "[Save] localStorage unavailable in web build; "
            "falling back to filesystem storage."
        )
    return FileStorage(base_path)
