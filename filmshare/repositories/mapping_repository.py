# filmshare/repositories/mapping_repository.py
# File-backed persistence for the film key <-> short code document and the film catalog

from __future__ import annotations

import json
import os
from typing import Any

from filmshare import config
from filmshare.services.errors import RegistryLoadError
from filmshare.services.short_code_registry import ShortCodeRegistry


class MappingRepository:
    """Reads and writes film-key-mappings.json."""

    def __init__(self, path: str | None = None):
        self.path = path or config.MAPPINGS_PATH

    def load(self) -> ShortCodeRegistry:
        """Read the mapping document. Raises RegistryLoadError if unreadable or corrupt."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RegistryLoadError(f"Cannot read mappings at {self.path}: {e}") from e
        return ShortCodeRegistry.from_document(document)

    def save(self, registry: ShortCodeRegistry) -> None:
        """Write the document atomically (temp file + rename)."""
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(registry.to_document(), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class CatalogRepository:
    """Read-only view of the film catalog produced by the scraping pipelines."""

    def __init__(self, path: str | None = None):
        self.path = path or config.CATALOG_PATH

    def film_keys(self) -> list[str]:
        """Film keys in catalog order.

        Accepts ``{"films": {<id>: {"filmKey": ...}}}``, ``{"films": [...]}``
        or a bare list of film objects.
        """
        with open(self.path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)

        films = data.get("films", data) if isinstance(data, dict) else data
        if isinstance(films, dict):
            films = list(films.values())
        if not isinstance(films, list):
            raise ValueError(f"Unrecognized catalog layout in {self.path}")

        keys: list[str] = []
        for film in films:
            if isinstance(film, dict) and isinstance(film.get("filmKey"), str) and film["filmKey"]:
                keys.append(film["filmKey"])
        return keys
