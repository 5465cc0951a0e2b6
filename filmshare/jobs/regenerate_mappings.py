# filmshare/jobs/regenerate_mappings.py
# Catalog-growth job: give every new catalog film a short code, never touching existing ones
#
#   python -m filmshare.jobs.regenerate_mappings [--catalog films.json] [--mappings film-key-mappings.json]

from __future__ import annotations

import argparse
import logging
import os
import sys

from filmshare import config
from filmshare.observability.logger import configure_logging
from filmshare.repositories.mapping_repository import CatalogRepository, MappingRepository
from filmshare.services.errors import RegistryCapacityError, RegistryLoadError
from filmshare.services.short_code_registry import ShortCodeRegistry
from filmshare.utils.logger import log_exception, log_info

logger = logging.getLogger(__name__)


def regenerate(catalog: CatalogRepository, mappings: MappingRepository) -> tuple[ShortCodeRegistry, list[str]]:
    """Returns the updated registry and the film keys that got new codes."""
    if os.path.exists(mappings.path):
        registry = mappings.load()
    else:
        logger.info("no existing mappings, starting a new registry", extra={"path": mappings.path})
        registry = ShortCodeRegistry()

    new_keys = sorted({key for key in catalog.film_keys() if key not in registry})
    for film_key in new_keys:
        registry.allocate(film_key)

    mappings.save(registry)
    log_info(f"regenerate_mappings: {len(new_keys)} new codes, {len(registry)} films total")
    return registry, new_keys


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Assign short codes to new catalog films")
    parser.add_argument("--catalog", default=config.CATALOG_PATH, help="film catalog JSON")
    parser.add_argument("--mappings", default=config.MAPPINGS_PATH, help="mapping document to update")
    args = parser.parse_args(argv)

    configure_logging(config)
    try:
        registry, new_keys = regenerate(CatalogRepository(args.catalog), MappingRepository(args.mappings))
    except (OSError, ValueError, RegistryLoadError, RegistryCapacityError) as e:
        log_exception(e, "regenerate_mappings")
        logger.error(f"regenerate_mappings failed: {e}")
        return 1

    for film_key in new_keys[:10]:
        logger.info(f"{film_key:<40} -> {registry.encode(film_key)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
