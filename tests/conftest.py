# tests/conftest.py
# Shared fixtures: small registries and stub transport codecs

import json

import pytest

from filmshare.services.short_code_registry import ShortCodeRegistry
from filmshare.services.transport_codec import LZStringCodec


class StubCodec:
    """Transport codec double: decompress() returns a canned value and records its input."""

    def __init__(self, text=None, error: Exception = None):
        self.text = text
        self.error = error
        self.decompress_calls: list[str] = []

    def compress(self, text: str) -> str:
        return "stub"

    def decompress(self, payload: str):
        self.decompress_calls.append(payload)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def stub_codec():
    """Factory for StubCodec instances."""
    return StubCodec


@pytest.fixture
def codec():
    return LZStringCodec()


@pytest.fixture
def scenario_registry():
    """Two festival films with hand-assigned codes."""
    return ShortCodeRegistry({"no-other-land-2024": "a4g", "flow-2024": "b1z"})


@pytest.fixture
def catalog_keys():
    return [
        "all-we-imagine-as-light-2024",
        "anora-2024",
        "eden-2014",
        "flow-2024",
        "no-other-land-2024",
        "the-room-next-door-2024",
    ]


@pytest.fixture
def registry(catalog_keys):
    return ShortCodeRegistry.build(catalog_keys)


@pytest.fixture
def mappings_file(tmp_path, registry):
    path = tmp_path / "film-key-mappings.json"
    path.write_text(json.dumps(registry.to_document()), encoding="utf-8")
    return path
