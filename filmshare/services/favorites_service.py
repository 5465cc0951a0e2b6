# filmshare/services/favorites_service.py
# Sharing and importing favorites: registry + codec + list stores

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from filmshare.constants import SHORT_CODE_LENGTH
from filmshare.services.favorites_decoder import DecodeResult, FavoritesDecoder
from filmshare.services.favorites_encoder import FavoritesEncoder, build_share_url
from filmshare.services.lists_service import ListsService
from filmshare.services.registry_loader import RegistryLoader
from filmshare.services.transport_codec import TransportCodec
from filmshare.utils.logger import log_info

IMPORT_MODES = ("merge", "replace")


@dataclass
class ShareLink:
    url: str
    favs: str
    count: int
    priority_count: int


@dataclass
class ImportOutcome:
    result: DecodeResult
    imported: int = 0
    skipped: int = 0


class FavoritesService:
    """Service layer; handlers stay thin."""

    def __init__(
        self,
        loader: RegistryLoader,
        lists: ListsService | None = None,
        codec: TransportCodec | None = None,
        origin: str | None = None,
        strict: bool | None = None,
    ):
        self.loader = loader
        self.lists = lists or ListsService()
        self.codec = codec
        self.origin = origin
        self.strict = strict

    async def _encoder(self) -> FavoritesEncoder:
        registry = await self.loader.load()
        return FavoritesEncoder(registry, codec=self.codec, origin=self.origin)

    async def _decoder(self) -> FavoritesDecoder:
        registry = await self.loader.load()
        return FavoritesDecoder(registry, codec=self.codec, strict=self.strict)

    async def share_film_keys(
        self,
        film_keys: Iterable[str],
        priority_film_keys: Iterable[str] = (),
        list_name: str | None = None,
    ) -> ShareLink | None:
        """None when no film in the list has a short code."""
        encoder = await self._encoder()
        payload = encoder.build_payload(film_keys, priority_film_keys)
        if not payload.codes:
            return None
        favs = encoder.encode_payload(payload)
        return ShareLink(
            url=build_share_url(encoder.origin, favs, list_name),
            favs=favs,
            count=len(payload.codes) // SHORT_CODE_LENGTH,
            priority_count=len(payload.priorities),
        )

    async def share_profile_watchlist(self, profile: str, list_name: str | None = None) -> ShareLink | None:
        store = self.lists.watchlist(profile)
        return await self.share_film_keys(store.keys(), store.priority_keys(), list_name)

    async def preview_shared(self, favs: str) -> DecodeResult:
        decoder = await self._decoder()
        return decoder.decode(favs)

    async def import_shared(self, profile: str, favs: str, mode: str = "merge") -> ImportOutcome:
        """Apply a decoded share to the profile's watchlist; a failed decode applies nothing."""
        if mode not in IMPORT_MODES:
            raise ValueError(f"Unknown import mode: {mode!r}")
        result = await self.preview_shared(favs)
        if not result.success:
            return ImportOutcome(result=result)

        store = self.lists.watchlist(profile)
        if mode == "replace":
            now = datetime.now(timezone.utc).isoformat()
            existing = {item["filmKey"]: item for item in store.items()}
            store.replace([
                {
                    "filmKey": film_key,
                    "title": existing.get(film_key, {}).get("title", ""),
                    "addedAt": existing.get(film_key, {}).get("addedAt", now),
                    "priority": result.priorities.get(film_key, False),
                }
                for film_key in result.film_keys
            ])
            outcome = ImportOutcome(result=result, imported=len(result.film_keys))
        else:
            imported = 0
            for film_key in result.film_keys:
                if store.add(film_key, priority=result.priorities.get(film_key, False)):
                    imported += 1
            outcome = ImportOutcome(result=result, imported=imported, skipped=len(result.film_keys) - imported)

        log_info(f"FavoritesService: imported {outcome.imported} shared films into {profile} ({mode})")
        return outcome
