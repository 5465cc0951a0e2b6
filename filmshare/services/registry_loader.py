# filmshare/services/registry_loader.py
# Lazily loaded, process-wide handle on the short-code registry

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache

from filmshare.repositories.mapping_repository import MappingRepository
from filmshare.services.errors import RegistryNotLoadedError
from filmshare.services.short_code_registry import ShortCodeRegistry
from filmshare.utils.logger import log_info

logger = logging.getLogger(__name__)


class RegistryLoader:
    """Single-flight loader: concurrent first callers share one read of the document.

    After the first successful load every call returns the cached registry.
    A failed load is not cached, so the next call reads the file again.
    """

    def __init__(self, repository: MappingRepository | None = None):
        self.repository = repository or MappingRepository()
        self._registry: ShortCodeRegistry | None = None
        self._lock: asyncio.Lock | None = None
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._registry is not None

    async def load(self) -> ShortCodeRegistry:
        if self._registry is not None:
            return self._registry

        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            # another caller may have finished the load while we waited
            if self._registry is None:
                self.load_count += 1
                registry = await asyncio.to_thread(self.repository.load)
                self._registry = registry
                log_info(f"RegistryLoader: loaded {len(registry)} short codes from {self.repository.path}")
        return self._registry

    def get(self) -> ShortCodeRegistry:
        """Synchronous access once load() has completed."""
        if self._registry is None:
            raise RegistryNotLoadedError("Short-code registry has not been loaded")
        return self._registry

    def reset(self) -> None:
        self._registry = None
        self._lock = None


@lru_cache
def get_registry_loader() -> RegistryLoader:
    """Return the process-wide loader."""
    return RegistryLoader()
