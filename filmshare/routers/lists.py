# filmshare/routers/lists.py
# FastAPI router for per-profile watchlist / watched lists

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from filmshare.middleware.error_handler import NotFoundError, ValidationError
from filmshare.repositories.list_store import ListStore
from filmshare.routers.favorites import (
    get_favorites_service,
    raise_for_failure,
    registry_unavailable,
    share_response,
)
from filmshare.schemas.common import StatusResponse
from filmshare.schemas.favorites import (
    ImportSharedRequest,
    ImportSharedResponse,
    ProfileShareRequest,
    ShareResponse,
)
from filmshare.schemas.lists import (
    AddItemRequest,
    JsonImportRequest,
    JsonImportResponse,
    ListItem,
    ListResponse,
    ToggleResponse,
)
from filmshare.services.errors import RegistryLoadError
from filmshare.services.favorites_service import FavoritesService
from filmshare.services.lists_service import ListsService

router = APIRouter(tags=["Lists"])

ListName = Literal["watchlist", "watched"]


@lru_cache
def get_lists_service() -> ListsService:
    return ListsService()


def _store(service: ListsService, profile: str, list_name: str) -> ListStore:
    try:
        return service.store_factory(profile, list_name)
    except ValueError as e:
        raise ValidationError(str(e))


# --- sharing (static paths first so they win over /{list_name}) ---

@router.post("/lists/{profile}/share", response_model=ShareResponse)
async def share_watchlist(
    profile: str,
    payload: ProfileShareRequest,
    lists: ListsService = Depends(get_lists_service),
    favorites: FavoritesService = Depends(get_favorites_service),
) -> ShareResponse:
    """Share the profile's watchlist, keeping its priority flags."""
    store = _store(lists, profile, "watchlist")
    try:
        link = await favorites.share_film_keys(store.keys(), store.priority_keys(), payload.list_name)
    except RegistryLoadError as e:
        raise registry_unavailable(e)
    return share_response(link)


@router.post("/lists/{profile}/import-shared", response_model=ImportSharedResponse)
async def import_shared(
    profile: str,
    payload: ImportSharedRequest,
    lists: ListsService = Depends(get_lists_service),
    favorites: FavoritesService = Depends(get_favorites_service),
) -> ImportSharedResponse:
    """Merge (or replace) the watchlist with the films of a shared link."""
    _store(lists, profile, "watchlist")
    try:
        outcome = await favorites.import_shared(profile, payload.favs, payload.mode)
    except RegistryLoadError as e:
        raise registry_unavailable(e)
    raise_for_failure(outcome.result)
    return ImportSharedResponse(
        imported=outcome.imported,
        skipped=outcome.skipped,
        film_keys=outcome.result.film_keys,
        priorities=outcome.result.priorities,
    )


@router.get("/lists/{profile}/watchlist/export")
async def export_watchlist(profile: str, lists: ListsService = Depends(get_lists_service)) -> Response:
    _store(lists, profile, "watchlist")
    return Response(content=lists.export_json(profile), media_type="application/json")


@router.post("/lists/{profile}/watchlist/import", response_model=JsonImportResponse)
async def import_watchlist(
    profile: str,
    payload: JsonImportRequest,
    lists: ListsService = Depends(get_lists_service),
) -> JsonImportResponse:
    _store(lists, profile, "watchlist")
    try:
        imported = lists.import_json(profile, payload.data)
    except ValueError as e:
        raise ValidationError(str(e))
    return JsonImportResponse(imported=imported)


# --- plain list operations ---

@router.get("/lists/{profile}/{list_name}", response_model=ListResponse)
async def get_list(profile: str, list_name: ListName, lists: ListsService = Depends(get_lists_service)) -> ListResponse:
    store = _store(lists, profile, list_name)
    return ListResponse(profile=profile, list_name=list_name, items=[ListItem(**item) for item in store.items()])


@router.post("/lists/{profile}/{list_name}", response_model=StatusResponse)
async def add_item(
    profile: str,
    list_name: ListName,
    payload: AddItemRequest,
    lists: ListsService = Depends(get_lists_service),
) -> StatusResponse:
    if list_name == "watched":
        _store(lists, profile, list_name)
        lists.add_to_watched(profile, payload.film_key, payload.title)
        return StatusResponse(success=True, message="added")
    added = _store(lists, profile, list_name).add(payload.film_key, payload.title, payload.priority)
    return StatusResponse(success=True, message="added" if added else "already present")


@router.post("/lists/{profile}/{list_name}/toggle", response_model=ToggleResponse)
async def toggle_item(
    profile: str,
    list_name: ListName,
    payload: AddItemRequest,
    lists: ListsService = Depends(get_lists_service),
) -> ToggleResponse:
    _store(lists, profile, list_name)
    if list_name == "watched":
        active = lists.toggle_watched(profile, payload.film_key, payload.title)
    else:
        active = lists.toggle_watchlist(profile, payload.film_key, payload.title)
    return ToggleResponse(film_key=payload.film_key, active=active)


@router.delete("/lists/{profile}/{list_name}/{film_key}", response_model=StatusResponse)
async def remove_item(
    profile: str,
    list_name: ListName,
    film_key: str,
    lists: ListsService = Depends(get_lists_service),
) -> StatusResponse:
    if not _store(lists, profile, list_name).remove(film_key):
        raise NotFoundError(f"{film_key} is not on the {list_name}")
    return StatusResponse(success=True, message="deleted")


@router.delete("/lists/{profile}/{list_name}", response_model=StatusResponse)
async def clear_list(profile: str, list_name: ListName, lists: ListsService = Depends(get_lists_service)) -> StatusResponse:
    _store(lists, profile, list_name).clear()
    return StatusResponse(success=True, message="cleared")
