# filmshare/services/lists_service.py
# Watchlist / watched bookkeeping on top of the per-profile list stores

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable

from filmshare.constants import FILM_KEY_PATTERN, WATCHED, WATCHLIST
from filmshare.repositories.list_store import ListStore, get_list_store

_REQUIRED_ITEM_KEYS = {"filmKey", "title", "addedAt"}
_ALLOWED_ITEM_KEYS = _REQUIRED_ITEM_KEYS | {"priority"}


def is_valid_list_item(item: Any) -> bool:
    """Strict shape check for items arriving through a JSON import."""
    if not isinstance(item, dict):
        return False
    keys = set(item)
    if not _REQUIRED_ITEM_KEYS <= keys or not keys <= _ALLOWED_ITEM_KEYS:
        return False
    film_key, title, added_at = item["filmKey"], item["title"], item["addedAt"]
    if not isinstance(film_key, str) or not FILM_KEY_PATTERN.fullmatch(film_key):
        return False
    if not isinstance(title, str) or not 0 < len(title) < 500:
        return False
    if not isinstance(added_at, str):
        return False
    try:
        datetime.fromisoformat(added_at.replace("Z", "+00:00"))
    except ValueError:
        return False
    return "priority" not in item or isinstance(item["priority"], bool)


class ListsService:

    def __init__(self, store_factory: Callable[[str, str], ListStore] = get_list_store):
        self.store_factory = store_factory

    def watchlist(self, profile: str) -> ListStore:
        return self.store_factory(profile, WATCHLIST)

    def watched(self, profile: str) -> ListStore:
        return self.store_factory(profile, WATCHED)

    def toggle_watchlist(self, profile: str, film_key: str, title: str = "") -> bool:
        """Returns True when the film is on the watchlist afterwards."""
        store = self.watchlist(profile)
        if store.contains(film_key):
            store.remove(film_key)
            return False
        store.add(film_key, title)
        return True

    def add_to_watched(self, profile: str, film_key: str, title: str = "") -> None:
        self.watched(profile).add(film_key, title)
        self.watchlist(profile).remove(film_key)

    def toggle_watched(self, profile: str, film_key: str, title: str = "") -> bool:
        """Un-watching puts the film back on the watchlist. Returns the new watched state."""
        watched = self.watched(profile)
        if watched.contains(film_key):
            watched.remove(film_key)
            self.watchlist(profile).add(film_key, title)
            return False
        self.add_to_watched(profile, film_key, title)
        return True

    def export_json(self, profile: str) -> str:
        return json.dumps(self.watchlist(profile).items(), indent=2, ensure_ascii=False)

    def import_json(self, profile: str, raw: str) -> int:
        """Replace the watchlist with a previously exported JSON document.

        The whole import is rejected if any item fails validation.
        """
        try:
            items = json.loads(raw)
        except ValueError as e:
            raise ValueError("Import is not valid JSON") from e
        if not isinstance(items, list):
            raise ValueError("Import must be a JSON array")
        if not all(is_valid_list_item(item) for item in items):
            raise ValueError("Import contains invalid items")

        unique: dict[str, dict[str, Any]] = {}
        for item in items:
            unique.setdefault(item["filmKey"], {"priority": False, **item})
        self.watchlist(profile).replace(list(unique.values()))
        return len(unique)
