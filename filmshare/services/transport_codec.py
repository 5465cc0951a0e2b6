# filmshare/services/transport_codec.py
# URL-safe text compression used for the favs query parameter

from __future__ import annotations

from typing import Protocol

from lzstring import LZString


class TransportCodec(Protocol):
    def compress(self, text: str) -> str: ...

    def decompress(self, payload: str) -> str | None: ...


class LZStringCodec:
    """LZ-string with the URI-component alphabet.

    Output is byte-compatible with the JavaScript lz-string
    compressToEncodedURIComponent, so links produced in the browser decode here.
    decompress() returns None (or raises) on malformed input; callers treat
    both as failure.
    """

    def __init__(self):
        self._lz = LZString()

    def compress(self, text: str) -> str:
        return self._lz.compressToEncodedURIComponent(text)

    def decompress(self, payload: str) -> str | None:
        return self._lz.decompressFromEncodedURIComponent(payload)


default_codec = LZStringCodec()
