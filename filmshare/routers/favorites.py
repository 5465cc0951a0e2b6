# filmshare/routers/favorites.py
# FastAPI router for shared favorites links

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Query

from filmshare.middleware.error_handler import RegistryUnavailableError, ShareDecodeError, ValidationError
from filmshare.schemas.favorites import ShareRequest, ShareResponse, SharedFavoritesResponse
from filmshare.services.errors import RegistryLoadError
from filmshare.services.favorites_decoder import DecodeResult
from filmshare.services.favorites_service import FavoritesService, ShareLink
from filmshare.services.registry_loader import get_registry_loader

router = APIRouter(tags=["Favorites"])


@lru_cache
def get_favorites_service() -> FavoritesService:
    """Provide service with DI so handlers stay thin."""
    return FavoritesService(loader=get_registry_loader())


def registry_unavailable(e: RegistryLoadError) -> RegistryUnavailableError:
    return RegistryUnavailableError(details={"reason": str(e)})


def raise_for_failure(result: DecodeResult) -> None:
    if not result.success:
        raise ShareDecodeError(result.error_kind, details=result.details or None)


def favs_from_query(value: str) -> str:
    """Undo form decoding: a raw '+' from the compressor arrives as ' '."""
    return value.replace(" ", "+")


def share_response(link: Optional[ShareLink]) -> ShareResponse:
    if link is None:
        raise ValidationError("None of the given films can be shared")
    return ShareResponse(url=link.url, favs=link.favs, count=link.count, priority_count=link.priority_count)


@router.post("/favorites/share", response_model=ShareResponse)
async def share_favorites(
    payload: ShareRequest,
    service: FavoritesService = Depends(get_favorites_service),
) -> ShareResponse:
    """Build a shared-favorites link for an explicit list of film keys."""
    try:
        link = await service.share_film_keys(payload.film_keys, payload.priority_film_keys, payload.list_name)
    except RegistryLoadError as e:
        raise registry_unavailable(e)
    return share_response(link)


@router.get("/favorites/shared", response_model=SharedFavoritesResponse)
async def shared_favorites(
    favs: str = Query(..., max_length=200_000),
    name: Optional[str] = Query(None, max_length=200),
    service: FavoritesService = Depends(get_favorites_service),
) -> SharedFavoritesResponse:
    """Decode the favs parameter of a /shared-favorites link without importing anything."""
    try:
        result = await service.preview_shared(favs_from_query(favs))
    except RegistryLoadError as e:
        raise registry_unavailable(e)
    raise_for_failure(result)
    return SharedFavoritesResponse(
        name=name.strip() if name and name.strip() else None,
        film_keys=result.film_keys,
        priorities=result.priorities,
        legacy_format=result.legacy_format,
        rejected=result.details.get("rejected", {}),
    )
