"""
Persisted key-value store for simulado state.

Values are JSON documents kept in a single file (default
~/.simulado/state.json) so they survive between CLI invocations. Listeners
are notified on every effective change, and `refresh()` picks up keys that
another process wrote since we last looked, the way a browser tab receives
storage events from its siblings.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Callable

from loguru import logger

Listener = Callable[[str, Any], None]


def _normalize(value: Any) -> Any:
    """Round-trip through JSON so cached values match what is on disk."""
    return json.loads(json.dumps(value))


class PersistedStore:
    """
    JSON-file backed key-value store with change notification.

    Writes are last-write-wins per key: each write re-reads the file and
    replaces only its own key, so concurrent writers to different keys do
    not clobber each other.
    """

    DEFAULT_PATH = Path.home() / ".simulado" / "state.json"

    def __init__(self, path: Path | None = None):
        self.path = path or self.DEFAULT_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data: dict[str, Any] = self._read_file()
        self._listeners: dict[str | None, list[Listener]] = {}

    # =========================================================================
    # Disk I/O
    # =========================================================================

    def _read_file(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self.path}: top level is not an object")
            return {}
        return data

    def _write_key(self, key: str, value: Any) -> None:
        on_disk = self._read_file()
        if value is None:
            on_disk.pop(key, None)
        else:
            on_disk[key] = value

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(on_disk, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    # =========================================================================
    # Key-value API
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        """
        Store a value. Setting None removes the key.

        Writes that do not change the stored value are skipped and do not
        notify listeners.
        """
        normalized = None if value is None else _normalize(value)
        if normalized == self._data.get(key):
            return

        if normalized is None:
            self._data.pop(key, None)
        else:
            self._data[key] = normalized

        try:
            self._write_key(key, normalized)
        except OSError as e:
            # The in-memory value still applies for this process
            logger.warning(f"Error persisting key {key!r}: {e}")

        self._notify(key, copy.deepcopy(normalized))

    def delete(self, key: str) -> None:
        self.set(key, None)

    def clear(self, keys: list[str]) -> None:
        for key in keys:
            self.delete(key)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    # =========================================================================
    # Change notification
    # =========================================================================

    def subscribe(self, listener: Listener, key: str | None = None) -> Callable[[], None]:
        """
        Register a listener for one key (or every key when key is None).

        Returns:
            A callable that removes the listener.
        """
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners.get(key, [])) + list(self._listeners.get(None, [])):
            listener(key, value)

    def refresh(self) -> list[str]:
        """
        Reload the file and notify listeners for keys changed by other writers.

        Returns:
            The keys whose values changed.
        """
        on_disk = self._read_file()
        changed = [
            key
            for key in set(on_disk) | set(self._data)
            if on_disk.get(key) != self._data.get(key)
        ]
        self._data = on_disk
        for key in sorted(changed):
            self._notify(key, copy.deepcopy(on_disk.get(key)))
        if changed:
            logger.debug(f"Picked up external changes for {len(changed)} keys")
        return sorted(changed)
