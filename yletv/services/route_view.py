"""
In-memory view adapter

Records the last route result published by the route controller so the HTTP
layer can hand it out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from yletv.services.catalog_types import Program


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishedRoute:
    """One published route result: a program with optional stream, or an error."""
    published_at: datetime
    program: Program | None = None
    url: str | None = None
    fragment: str | None = None
    error: str | None = None


class LatestRouteView:
    """Keeps only the most recent publication."""

    def __init__(self) -> None:
        self.latest: PublishedRoute | None = None
        self.published_count = 0

    def show_program(self, program: Program, url: str | None) -> None:
        self.latest = PublishedRoute(
            published_at=datetime.now(timezone.utc),
            program=program,
            url=url,
        )
        self.published_count += 1
        logger.debug("Published program %s on %s", program.id, program.channel_id)

    def show_error(self, fragment: str, cause: Exception) -> None:
        self.latest = PublishedRoute(
            published_at=datetime.now(timezone.utc),
            fragment=fragment,
            error=f"{type(cause).__name__}: {cause}",
        )
        self.published_count += 1
        logger.debug("Published error for '%s'", fragment)
