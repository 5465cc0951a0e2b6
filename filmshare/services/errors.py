# filmshare/services/errors.py
# Domain errors raised by the registry and the shared favorites codec

from enum import Enum


class RegistryLoadError(Exception):
    """Mapping document is missing, unreadable or inconsistent."""


class RegistryNotLoadedError(RuntimeError):
    """Registry was used synchronously before the first load finished."""


class RegistryCapacityError(Exception):
    """Every 3-character code is already assigned."""


class DecodeErrorKind(str, Enum):
    """Why a shared favorites payload was rejected, in pipeline order."""

    INVALID_INPUT_TYPE = "INVALID_INPUT_TYPE"
    EMPTY_PAYLOAD = "EMPTY_PAYLOAD"
    INVALID_FORMAT = "INVALID_FORMAT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    DECOMPRESSION_FAILED = "DECOMPRESSION_FAILED"
    DECOMPRESSED_TOO_LARGE = "DECOMPRESSED_TOO_LARGE"
    TOO_MANY_ITEMS = "TOO_MANY_ITEMS"
    NO_FAVORITES = "NO_FAVORITES"
    INVALID_FILM_ID = "INVALID_FILM_ID"
    INVALID_FILM_ID_LENGTH = "INVALID_FILM_ID_LENGTH"
    INVALID_FILM_ID_CONTENT = "INVALID_FILM_ID_CONTENT"
    NO_VALID_FAVORITES = "NO_VALID_FAVORITES"
    UNEXPECTED = "UNEXPECTED"

    @property
    def message(self) -> str:
        return DECODE_ERROR_MESSAGES[self]


DECODE_ERROR_MESSAGES: dict[DecodeErrorKind, str] = {
    DecodeErrorKind.INVALID_INPUT_TYPE: "Invalid input type",
    DecodeErrorKind.EMPTY_PAYLOAD: "Empty data",
    DecodeErrorKind.INVALID_FORMAT: "Invalid format",
    DecodeErrorKind.PAYLOAD_TOO_LARGE: "Data too large",
    DecodeErrorKind.DECOMPRESSION_FAILED: "Failed to decompress data",
    DecodeErrorKind.DECOMPRESSED_TOO_LARGE: "Decompressed data too large",
    DecodeErrorKind.TOO_MANY_ITEMS: "Too many items (max 10,000)",
    DecodeErrorKind.NO_FAVORITES: "No favorites found",
    DecodeErrorKind.INVALID_FILM_ID: "Invalid film ID detected",
    DecodeErrorKind.INVALID_FILM_ID_LENGTH: "Invalid film ID length",
    DecodeErrorKind.INVALID_FILM_ID_CONTENT: "Invalid film ID format",
    DecodeErrorKind.NO_VALID_FAVORITES: "No valid favorites found",
    DecodeErrorKind.UNEXPECTED: "Unexpected error during validation",
}
