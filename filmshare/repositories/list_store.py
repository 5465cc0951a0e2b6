# filmshare/repositories/list_store.py
# Per-profile film lists (watchlist, watched) persisted as JSON files

from __future__ import annotations

import json
import os
import threading
import weakref
from datetime import datetime, timezone
from typing import Any

from filmshare import config
from filmshare.constants import LIST_NAMES, PROFILE_PATTERN
from filmshare.utils.logger import log_exception


# entries live only as long as some ListStore holds the lock
_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _lock_for(path: str) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(path)
        if lock is None:
            lock = threading.Lock()
            _locks[path] = lock
        return lock


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ListStore:
    """One list for one profile.

    Items are ``{"filmKey", "title", "addedAt", "priority"}`` in insertion
    order. A missing or unreadable file reads as an empty list.
    """

    def __init__(self, profile: str, list_name: str, base_path: str | None = None):
        if not isinstance(profile, str) or not PROFILE_PATTERN.fullmatch(profile):
            raise ValueError(f"Invalid profile name: {profile!r}")
        if list_name not in LIST_NAMES:
            raise ValueError(f"Unknown list: {list_name!r}")
        self.profile = profile
        self.list_name = list_name
        self.path = os.path.join(base_path or config.LISTS_PATH, profile, f"{list_name}.json")
        self._lock = _lock_for(self.path)

    # --- persistence ---

    def _read(self) -> list[dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            log_exception(e, f"ListStore: reading {self.path}")
            return []
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict) and isinstance(item.get("filmKey"), str)]

    def _write(self, items: list[dict[str, Any]]) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    # --- reads ---

    def items(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read()

    def keys(self) -> list[str]:
        return [item["filmKey"] for item in self.items()]

    def priority_keys(self) -> set[str]:
        return {item["filmKey"] for item in self.items() if item.get("priority") is True}

    def contains(self, film_key: str) -> bool:
        return film_key in self.keys()

    # --- writes ---

    def add(self, film_key: str, title: str = "", priority: bool = False) -> bool:
        """Append ``film_key``; returns False if it was already present."""
        with self._lock:
            items = self._read()
            if any(item["filmKey"] == film_key for item in items):
                return False
            items.append({"filmKey": film_key, "title": title, "addedAt": _now_iso(), "priority": priority})
            self._write(items)
            return True

    def remove(self, film_key: str) -> bool:
        with self._lock:
            items = self._read()
            kept = [item for item in items if item["filmKey"] != film_key]
            if len(kept) == len(items):
                return False
            self._write(kept)
            return True

    def set_priority(self, film_key: str, priority: bool) -> bool:
        with self._lock:
            items = self._read()
            found = False
            for item in items:
                if item["filmKey"] == film_key:
                    item["priority"] = priority
                    found = True
            if found:
                self._write(items)
            return found

    def replace(self, items: list[dict[str, Any]]) -> None:
        with self._lock:
            self._write(items)

    def clear(self) -> None:
        with self._lock:
            if os.path.exists(self.path):
                os.remove(self.path)


def get_list_store(profile: str, list_name: str) -> ListStore:
    return ListStore(profile, list_name)
