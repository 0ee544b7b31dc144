"""
Catalog Service

Owns the process-wide catalog snapshot. A refresh fetches services, then the
schedule for exactly those services, builds the catalog and swaps the
snapshot reference in one step. Failed refreshes leave the previous snapshot
in place.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Protocol, Sequence

from yletv.services import catalog_builder_service
from yletv.services.catalog_types import BuildResult, CatalogSnapshot
from yletv.utils.logging_helpers import (
    log_build_summary,
    log_refresh_end,
    log_refresh_start,
)


logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Remote fetchers needed to build a catalog."""

    async def fetch_services(self, service_type: str = ...) -> list[dict]: ...

    async def fetch_schedule(self, service_ids: Sequence[str]) -> list[dict]: ...


class CatalogService:
    """
    Read/refresh interface around the immutable catalog snapshot.

    Refreshes are serialized with an asyncio.Lock so two refreshes never race
    on the swap. Readers always see a complete snapshot.
    """

    def __init__(
        self,
        source: CatalogSource,
        *,
        service_type: str = "TVChannel",
        primary_locale: str = catalog_builder_service.DEFAULT_PRIMARY_LOCALE,
        secondary_locale: str = catalog_builder_service.DEFAULT_SECONDARY_LOCALE
    ) -> None:
        self._source = source
        self._service_type = service_type
        self._primary_locale = primary_locale
        self._secondary_locale = secondary_locale
        self._snapshot = CatalogSnapshot.empty()
        self._refresh_lock = asyncio.Lock()

    def current(self) -> CatalogSnapshot:
        """Return the current snapshot (possibly empty)."""
        return self._snapshot

    @property
    def last_refreshed_at(self) -> datetime | None:
        return self._snapshot.built_at

    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh(self) -> BuildResult:
        """
        Fetch and rebuild the catalog, then replace the snapshot

        Returns:
            BuildResult of the published catalog

        Raises:
            TransportError: If either fetch fails; the previous snapshot is kept
        """
        async with self._refresh_lock:
            log_refresh_start(logger)

            services = await self._source.fetch_services(self._service_type)
            service_ids = [
                service["id"]
                for service in services
                if isinstance(service, dict) and isinstance(service.get("id"), str) and service["id"]
            ]
            logger.info("Fetched %s services", len(services))

            if service_ids:
                schedule = await self._source.fetch_schedule(service_ids)
            else:
                logger.warning("No service ids returned - skipping schedule fetch")
                schedule = []
            logger.info("Fetched %s current schedule entries", len(schedule))

            result = catalog_builder_service.build(
                services,
                schedule,
                primary_locale=self._primary_locale,
                secondary_locale=self._secondary_locale,
            )
            self._snapshot = CatalogSnapshot.from_build(result)

            log_build_summary(
                logger,
                len(result.channels),
                len(result.programs),
                result.dropped_channels,
                result.dropped_programs,
            )
            log_refresh_end(logger)
            return result
