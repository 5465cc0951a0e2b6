# filmshare/services/favorites_decoder.py
"""
Decoder and validator for the ``favs`` parameter of shared-favorites links.

The parameter arrives from a URL anyone can hand-edit, so every stage treats
its input as hostile. Stages run in a fixed order and the first failure ends
the pipeline; a failed decode never carries film keys.

    presence/type -> trim -> charset -> size -> decompress -> size
    -> wire format -> codes to film keys -> count -> per-key checks
    -> non-empty -> priorities

Failures come back as DecodeResult(success=False, ...), never as exceptions.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from filmshare import config
from filmshare.constants import (
    FILM_KEY_MAX_LENGTH,
    FILM_KEY_MIN_LENGTH,
    FILM_KEY_PATTERN,
    INJECTION_BLOCKLIST,
    MAX_DECOMPRESSED_LENGTH,
    MAX_PAYLOAD_LENGTH,
    MAX_SHARED_ITEMS,
    PAYLOAD_CHARSET_PATTERN,
    SHORT_CODE_LENGTH,
    SUSPICIOUS_PAYLOAD_MARKERS,
)
from filmshare.services.errors import DecodeErrorKind
from filmshare.services.short_code_registry import ShortCodeRegistry
from filmshare.services.transport_codec import TransportCodec, default_codec
from filmshare.services.wire_format import CurrentWireBody, LegacyWireBody, WireBody, parse_wire_body
from filmshare.utils.logger import log_exception

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    success: bool
    film_keys: list[str] = field(default_factory=list)
    priorities: dict[str, bool] = field(default_factory=dict)
    error_kind: DecodeErrorKind | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    legacy_format: bool = False

    @classmethod
    def failure(cls, kind: DecodeErrorKind, details: dict[str, Any] | None = None) -> "DecodeResult":
        return cls(success=False, error_kind=kind, error=kind.message, details=details or {})


class _Reject(Exception):
    """Internal short-circuit for a failed stage."""

    def __init__(self, kind: DecodeErrorKind, details: dict[str, Any] | None = None):
        super().__init__(kind.value)
        self.kind = kind
        self.details = details or {}


def check_film_key(film_key: str) -> DecodeErrorKind | None:
    """Per-key rules: pattern, then length, then the injection blocklist."""
    if not FILM_KEY_PATTERN.fullmatch(film_key):
        return DecodeErrorKind.INVALID_FILM_ID
    if not FILM_KEY_MIN_LENGTH <= len(film_key) <= FILM_KEY_MAX_LENGTH:
        return DecodeErrorKind.INVALID_FILM_ID_LENGTH
    lowered = film_key.lower()
    if any(word in lowered for word in INJECTION_BLOCKLIST):
        return DecodeErrorKind.INVALID_FILM_ID_CONTENT
    return None


def split_codes(codes: str) -> list[str]:
    """Fixed-width chunks; a trailing partial chunk is kept and will not resolve."""
    return [codes[i:i + SHORT_CODE_LENGTH] for i in range(0, len(codes), SHORT_CODE_LENGTH)]


class FavoritesDecoder:

    def __init__(
        self,
        registry: ShortCodeRegistry,
        codec: TransportCodec | None = None,
        strict: bool | None = None,
    ):
        self.registry = registry
        self.codec = codec or default_codec
        self.strict = config.settings.STRICT_FILM_KEY_VALIDATION if strict is None else strict

    def decode(self, url_param: Any) -> DecodeResult:
        try:
            result = self._run(url_param)
        except _Reject as rejection:
            logger.info("shared favorites rejected", extra={"kind": rejection.kind.value})
            return DecodeResult.failure(rejection.kind, rejection.details)
        except Exception as e:
            log_exception(e, "FavoritesDecoder.decode")
            return DecodeResult.failure(DecodeErrorKind.UNEXPECTED)
        return result

    # --- pipeline ---

    def _run(self, url_param: Any) -> DecodeResult:
        payload = self._check_input(url_param)
        text = self._decompress(payload)
        body = parse_wire_body(text)
        candidates = self._resolve(body)

        if len(candidates) > MAX_SHARED_ITEMS:
            raise _Reject(DecodeErrorKind.TOO_MANY_ITEMS, {"count": len(candidates)})
        if not candidates:
            raise _Reject(DecodeErrorKind.NO_FAVORITES)

        film_keys, rejected = self._validate(candidates)
        if not film_keys:
            raise _Reject(DecodeErrorKind.NO_VALID_FAVORITES, {"rejected": dict(rejected)})

        priorities = self._priorities(body, set(film_keys))
        details: dict[str, Any] = {"rejected": dict(rejected)} if rejected else {}
        return DecodeResult(
            success=True,
            film_keys=film_keys,
            priorities=priorities,
            details=details,
            legacy_format=isinstance(body, LegacyWireBody),
        )

    def _check_input(self, url_param: Any) -> str:
        if not isinstance(url_param, str):
            raise _Reject(DecodeErrorKind.INVALID_INPUT_TYPE)
        payload = url_param.strip()
        if not payload:
            raise _Reject(DecodeErrorKind.EMPTY_PAYLOAD)
        if not PAYLOAD_CHARSET_PATTERN.fullmatch(payload):
            raise _Reject(DecodeErrorKind.INVALID_FORMAT)
        if len(payload) > MAX_PAYLOAD_LENGTH:
            raise _Reject(DecodeErrorKind.PAYLOAD_TOO_LARGE, {"length": len(payload)})
        lowered = payload.lower()
        if any(marker in lowered for marker in SUSPICIOUS_PAYLOAD_MARKERS):
            raise _Reject(DecodeErrorKind.INVALID_FORMAT)
        return payload

    def _decompress(self, payload: str) -> str:
        try:
            text = self.codec.decompress(payload)
        except Exception:
            raise _Reject(DecodeErrorKind.DECOMPRESSION_FAILED)
        if not isinstance(text, str) or not text:
            raise _Reject(DecodeErrorKind.DECOMPRESSION_FAILED)
        if len(text) > MAX_DECOMPRESSED_LENGTH:
            raise _Reject(DecodeErrorKind.DECOMPRESSED_TOO_LARGE, {"length": len(text)})
        return text

    def _resolve(self, body: WireBody) -> list[str]:
        if isinstance(body, LegacyWireBody) and body.comma_separated:
            return self._resolve_comma_separated(body.codes)
        candidates = []
        for chunk in split_codes(body.codes):
            film_key = self.registry.decode(chunk)
            if film_key is not None:
                candidates.append(film_key)
        return candidates

    def _resolve_comma_separated(self, codes: str) -> list[str]:
        # oldest links: "a4g,0zv", with raw film keys where no code existed yet
        candidates = []
        for token in codes.split(","):
            token = token.strip()
            if not token:
                continue
            film_key = self.registry.decode(token)
            if film_key is not None:
                candidates.append(film_key)
            elif len(token) != SHORT_CODE_LENGTH:
                candidates.append(token)
        return candidates

    def _validate(self, candidates: list[str]) -> tuple[list[str], Counter]:
        accepted: list[str] = []
        seen: set[str] = set()
        rejected: Counter = Counter()
        for film_key in candidates:
            problem = check_film_key(film_key)
            if problem is not None:
                if self.strict:
                    raise _Reject(problem)
                rejected[problem.value] += 1
                continue
            if film_key in seen:
                continue
            seen.add(film_key)
            accepted.append(film_key)
        return accepted, rejected

    def _priorities(self, body: WireBody, accepted: set[str]) -> dict[str, bool]:
        if not isinstance(body, CurrentWireBody):
            return {}
        priorities: dict[str, bool] = {}
        for code, flag in body.priorities.items():
            if flag is not True:
                continue
            film_key = self.registry.decode(code)
            if film_key is not None and film_key in accepted:
                priorities[film_key] = True
        return priorities
