# tests/unit/test_lists.py

import gc
import json

import pytest

from filmshare.repositories.list_store import ListStore
from filmshare.services.lists_service import ListsService, is_valid_list_item


@pytest.fixture
def lists(tmp_path):
    return ListsService(store_factory=lambda profile, name: ListStore(profile, name, base_path=str(tmp_path)))


def test_empty_store(tmp_path):
    store = ListStore("alice", "watchlist", base_path=str(tmp_path))
    assert store.items() == []
    assert store.keys() == []


def test_add_keeps_order_and_skips_duplicates(tmp_path):
    store = ListStore("alice", "watchlist", base_path=str(tmp_path))
    assert store.add("flow-2024", "Flow")
    assert store.add("anora-2024", "Anora", priority=True)
    assert not store.add("flow-2024", "Flow again")
    assert store.keys() == ["flow-2024", "anora-2024"]
    assert store.priority_keys() == {"anora-2024"}


def test_stores_are_shared_by_path(tmp_path):
    ListStore("alice", "watchlist", base_path=str(tmp_path)).add("flow-2024")
    assert ListStore("alice", "watchlist", base_path=str(tmp_path)).contains("flow-2024")
    assert not ListStore("bob", "watchlist", base_path=str(tmp_path)).contains("flow-2024")


def test_path_locks_are_released_with_their_stores(tmp_path):
    from filmshare.repositories import list_store

    first = ListStore("alice", "watchlist", base_path=str(tmp_path))
    second = ListStore("alice", "watchlist", base_path=str(tmp_path))
    assert first._lock is second._lock

    path = first.path
    del first, second
    gc.collect()
    assert path not in list_store._locks


def test_remove_priority_and_clear(tmp_path):
    store = ListStore("alice", "watchlist", base_path=str(tmp_path))
    store.add("flow-2024")
    assert store.set_priority("flow-2024", True)
    assert not store.set_priority("eden-2014", True)
    assert store.priority_keys() == {"flow-2024"}
    assert store.remove("flow-2024")
    assert not store.remove("flow-2024")
    store.add("eden-2014")
    store.clear()
    assert store.items() == []


def test_corrupt_file_reads_as_empty(tmp_path):
    store = ListStore("alice", "watchlist", base_path=str(tmp_path))
    store.add("flow-2024")
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("[{broken")
    assert store.items() == []


@pytest.mark.parametrize("profile", ["", "../etc", "a" * 65, "bad profile"])
def test_profile_names_are_checked(tmp_path, profile):
    with pytest.raises(ValueError):
        ListStore(profile, "watchlist", base_path=str(tmp_path))


def test_unknown_list_name(tmp_path):
    with pytest.raises(ValueError):
        ListStore("alice", "favorites", base_path=str(tmp_path))


def test_toggle_watchlist(lists):
    assert lists.toggle_watchlist("alice", "flow-2024", "Flow")
    assert lists.watchlist("alice").keys() == ["flow-2024"]
    assert not lists.toggle_watchlist("alice", "flow-2024", "Flow")
    assert lists.watchlist("alice").keys() == []


def test_watching_moves_film_off_watchlist(lists):
    lists.watchlist("alice").add("flow-2024", "Flow")
    assert lists.toggle_watched("alice", "flow-2024", "Flow")
    assert lists.watched("alice").keys() == ["flow-2024"]
    assert lists.watchlist("alice").keys() == []

    assert not lists.toggle_watched("alice", "flow-2024", "Flow")
    assert lists.watched("alice").keys() == []
    assert lists.watchlist("alice").keys() == ["flow-2024"]


def test_export_then_import(lists):
    lists.watchlist("alice").add("flow-2024", "Flow", priority=True)
    lists.watchlist("alice").add("eden-2014", "Eden")
    exported = lists.export_json("alice")

    assert lists.import_json("bob", exported) == 2
    bob = lists.watchlist("bob")
    assert bob.keys() == ["flow-2024", "eden-2014"]
    assert bob.priority_keys() == {"flow-2024"}


@pytest.mark.parametrize("raw", [
    "not json",
    json.dumps({"filmKey": "flow-2024"}),
    json.dumps([{"filmKey": "flow-2024", "title": "Flow", "addedAt": "yesterday"}]),
])
def test_import_rejects_bad_documents(lists, raw):
    lists.watchlist("alice").add("eden-2014", "Eden")
    with pytest.raises(ValueError):
        lists.import_json("alice", raw)
    assert lists.watchlist("alice").keys() == ["eden-2014"]


@pytest.mark.parametrize("item, valid", [
    ({"filmKey": "flow-2024", "title": "Flow", "addedAt": "2024-05-01T10:00:00Z"}, True),
    ({"filmKey": "flow-2024", "title": "Flow", "addedAt": "2024-05-01T10:00:00+00:00", "priority": True}, True),
    ({"filmKey": "flow-2024", "title": "", "addedAt": "2024-05-01T10:00:00Z"}, False),
    ({"filmKey": "flow 2024", "title": "Flow", "addedAt": "2024-05-01T10:00:00Z"}, False),
    ({"filmKey": "flow-2024", "title": "Flow", "addedAt": "2024-05-01T10:00:00Z", "extra": 1}, False),
    ({"filmKey": "flow-2024", "title": "Flow", "addedAt": "2024-05-01T10:00:00Z", "priority": "yes"}, False),
    ({"filmKey": "flow-2024", "title": "Flow"}, False),
    ("flow-2024", False),
])
def test_is_valid_list_item(item, valid):
    assert is_valid_list_item(item) is valid
