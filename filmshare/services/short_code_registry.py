# filmshare/services/short_code_registry.py
"""
Bidirectional, append-only dictionary between film keys and 3-character short codes.

A film key such as ``no-other-land-2024`` is replaced by a code such as ``a4g``
inside shared favorites links. Codes come from a 62-symbol alphabet, so the
code space holds 62**3 = 238,328 films. Once assigned, a code is never
reassigned while its film key remains in the catalog.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from filmshare.constants import (
    SHORT_CODE_ALPHABET,
    SHORT_CODE_CAPACITY,
    SHORT_CODE_CHARSET_LABEL,
    SHORT_CODE_LENGTH,
)
from filmshare.services.errors import RegistryCapacityError, RegistryLoadError

logger = logging.getLogger(__name__)

_BASE = len(SHORT_CODE_ALPHABET)
_ALPHABET_INDEX = {ch: i for i, ch in enumerate(SHORT_CODE_ALPHABET)}


def code_for_index(index: int) -> str:
    """Render ``index`` as a fixed-width base-62 code, most significant digit first."""
    digit0 = index % _BASE
    digit1 = (index // _BASE) % _BASE
    digit2 = (index // (_BASE * _BASE)) % _BASE
    return SHORT_CODE_ALPHABET[digit2] + SHORT_CODE_ALPHABET[digit1] + SHORT_CODE_ALPHABET[digit0]


def index_for_code(code: str) -> int:
    """Inverse of code_for_index. Raises KeyError for characters outside the alphabet."""
    index = 0
    for ch in code:
        index = index * _BASE + _ALPHABET_INDEX[ch]
    return index


def is_short_code(value: Any) -> bool:
    return (
        isinstance(value, str)
        and len(value) == SHORT_CODE_LENGTH
        and all(ch in _ALPHABET_INDEX for ch in value)
    )


class ShortCodeRegistry:
    """The two reverse indices plus the allocation cursor.

    Lookups are pure. The only mutation is allocate(), used by the
    catalog-growth job, never by the sharing codec itself.
    """

    def __init__(
        self,
        film_key_to_code: Mapping[str, str] | None = None,
        generated: str | None = None,
    ):
        self._film_key_to_code: dict[str, str] = {}
        self._code_to_film_key: dict[str, str] = {}
        self.generated = generated
        for film_key, code in (film_key_to_code or {}).items():
            self._insert(film_key, code)

    def _insert(self, film_key: str, code: str) -> None:
        if not isinstance(film_key, str) or not film_key:
            raise RegistryLoadError(f"Invalid film key in registry: {film_key!r}")
        if not is_short_code(code):
            raise RegistryLoadError(f"Invalid short code {code!r} for film key {film_key!r}")
        if film_key in self._film_key_to_code:
            raise RegistryLoadError(f"Film key {film_key!r} mapped twice")
        if code in self._code_to_film_key:
            raise RegistryLoadError(
                f"Code {code!r} shared by {self._code_to_film_key[code]!r} and {film_key!r}"
            )
        self._film_key_to_code[film_key] = code
        self._code_to_film_key[code] = film_key

    # --- construction ---

    @classmethod
    def build(cls, film_keys: Iterable[str]) -> "ShortCodeRegistry":
        """Initial generation: sorted, de-duplicated film keys get sequential codes."""
        ordered = sorted(set(film_keys))
        if len(ordered) > SHORT_CODE_CAPACITY:
            raise RegistryCapacityError(
                f"{len(ordered)} films exceed the code space of {SHORT_CODE_CAPACITY}"
            )
        return cls({film_key: code_for_index(i) for i, film_key in enumerate(ordered)})

    @classmethod
    def from_document(cls, document: Any) -> "ShortCodeRegistry":
        """Build from the mapping document; both maps must be exact inverses."""
        if not isinstance(document, dict):
            raise RegistryLoadError("Mapping document must be a JSON object")
        forward = document.get("filmKeyToCode")
        reverse = document.get("codeToFilmKey")
        if not isinstance(forward, dict) or not isinstance(reverse, dict):
            raise RegistryLoadError("Mapping document needs filmKeyToCode and codeToFilmKey objects")

        registry = cls(forward, generated=(document.get("metadata") or {}).get("generated"))
        if len(reverse) != len(forward):
            raise RegistryLoadError(
                f"Reverse index size {len(reverse)} does not match forward index size {len(forward)}"
            )
        for code, film_key in reverse.items():
            if registry.decode(code) != film_key:
                raise RegistryLoadError(f"Reverse entry {code!r} -> {film_key!r} disagrees with forward index")
        return registry

    def to_document(self) -> dict[str, Any]:
        """Serialize to the mapping document layout, film keys sorted."""
        film_keys = sorted(self._film_key_to_code)
        return {
            "metadata": {
                "generated": datetime.now(timezone.utc).isoformat(),
                "totalFilms": len(film_keys),
                "codeLength": SHORT_CODE_LENGTH,
                "charset": SHORT_CODE_CHARSET_LABEL,
                "maxCapacity": SHORT_CODE_CAPACITY,
            },
            "filmKeyToCode": {k: self._film_key_to_code[k] for k in film_keys},
            "codeToFilmKey": {self._film_key_to_code[k]: k for k in film_keys},
        }

    # --- lookups ---

    def encode(self, film_key: str) -> str | None:
        """Short code for ``film_key``; None means the film cannot be shared yet."""
        return self._film_key_to_code.get(film_key)

    def decode(self, code: str) -> str | None:
        """Film key for ``code``; None for removed films and forged codes."""
        return self._code_to_film_key.get(code)

    def __len__(self) -> int:
        return len(self._film_key_to_code)

    def __contains__(self, film_key: object) -> bool:
        return film_key in self._film_key_to_code

    # --- catalog growth ---

    def allocate(self, film_key: str) -> str:
        """Assign the next free code to ``film_key`` and return it.

        Starts at index len(registry) and walks forward past codes that an
        earlier manual assignment already occupies.
        """
        existing = self.encode(film_key)
        if existing is not None:
            return existing
        if len(self._code_to_film_key) >= SHORT_CODE_CAPACITY:
            raise RegistryCapacityError(f"All {SHORT_CODE_CAPACITY} short codes are assigned")

        start = len(self)
        for attempt in range(SHORT_CODE_CAPACITY):
            code = code_for_index(start + attempt)
            if code not in self._code_to_film_key:
                self._insert(film_key, code)
                logger.info("allocated short code", extra={"film_key": film_key, "code": code})
                return code
        raise RegistryCapacityError(f"No free short code found for {film_key!r}")
