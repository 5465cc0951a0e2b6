# filmshare/services/favorites_encoder.py
# Turns a list of film keys into a shared-favorites link

from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import quote

from filmshare import config
from filmshare.constants import FAVS_PARAM, NAME_PARAM, SHARE_PATH
from filmshare.services.short_code_registry import ShortCodeRegistry
from filmshare.services.transport_codec import TransportCodec, default_codec
from filmshare.services.wire_format import SharePayload, serialize_payload

logger = logging.getLogger(__name__)

# characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


class FavoritesEncoder:
    """Pure function of its inputs and the registry's current state."""

    def __init__(
        self,
        registry: ShortCodeRegistry,
        codec: TransportCodec | None = None,
        origin: str | None = None,
    ):
        self.registry = registry
        self.codec = codec or default_codec
        self.origin = (origin if origin is not None else config.SHARE_ORIGIN).rstrip("/")

    def build_payload(
        self,
        film_keys: Iterable[str],
        priority_film_keys: Iterable[str] = (),
    ) -> SharePayload:
        priority_set = set(priority_film_keys)
        codes: list[str] = []
        priorities: dict[str, bool] = {}
        seen: set[str] = set()
        dropped = 0

        for film_key in film_keys:
            code = self.registry.encode(film_key)
            if code is None:
                dropped += 1
                continue
            if code in seen:
                continue
            seen.add(code)
            codes.append(code)
            if film_key in priority_set:
                priorities[code] = True

        if dropped:
            logger.debug("film keys without short code left out of share", extra={"dropped": dropped})
        return SharePayload(codes="".join(codes), priorities=priorities)

    def encode_favs(
        self,
        film_keys: Iterable[str],
        priority_film_keys: Iterable[str] = (),
    ) -> str:
        """Compressed ``favs`` value, or "" when nothing could be represented."""
        return self.encode_payload(self.build_payload(film_keys, priority_film_keys))

    def encode_payload(self, payload: SharePayload) -> str:
        if not payload.codes:
            return ""
        return self.codec.compress(serialize_payload(payload))

    def encode(
        self,
        film_keys: Iterable[str],
        priority_film_keys: Iterable[str] = (),
        list_name: str | None = None,
    ) -> str:
        """Full ShareURL: ``<origin>/shared-favorites?[name=<name>&]favs=<payload>``."""
        favs = self.encode_favs(film_keys, priority_film_keys)
        if not favs:
            return ""
        return build_share_url(self.origin, favs, list_name)


def build_share_url(origin: str, favs: str, list_name: str | None = None) -> str:
    url = f"{origin}{SHARE_PATH}?"
    if list_name and list_name.strip():
        url += f"{NAME_PARAM}={encode_uri_component(list_name.strip())}&"
    return url + f"{FAVS_PARAM}={favs}"
