"""
Shared dataclasses used across the catalog and route pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from yletv.exceptions import CatalogBuildError


@dataclass(frozen=True, slots=True)
class Channel:
    """A TV service with at least one currently airing program."""
    id: str
    title: str


@dataclass(frozen=True, slots=True)
class Program:
    """A currently airing schedule entry, denormalized for display."""
    id: str
    content_id: str
    channel_id: str
    title: str
    channel: str
    start_time: datetime
    end_time: datetime
    image_id: str = ""
    media_id: str | None = None
    description: str | None = None
    playback_url: str | None = None

    @property
    def playable(self) -> bool:
        return self.media_id is not None


@dataclass(frozen=True, slots=True)
class StreamDescriptor:
    """Playout metadata for one program; url is still encrypted."""
    url: str
    protocol: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Catalog builder output with a record of dropped entries."""
    channels: tuple[Channel, ...]
    programs: tuple[Program, ...]
    dropped_channels: int = 0
    dropped_programs: int = 0
    errors: tuple[CatalogBuildError, ...] = ()


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """Immutable catalog unit; replaced as a whole, never mutated."""
    channels: tuple[Channel, ...]
    programs: tuple[Program, ...]
    built_at: datetime | None = None

    @classmethod
    def empty(cls) -> CatalogSnapshot:
        return cls(channels=(), programs=())

    @classmethod
    def from_build(cls, result: BuildResult) -> CatalogSnapshot:
        return cls(
            channels=result.channels,
            programs=result.programs,
            built_at=datetime.now(timezone.utc),
        )

    @property
    def is_empty(self) -> bool:
        return not self.channels


__all__ = [
    "Channel",
    "Program",
    "StreamDescriptor",
    "BuildResult",
    "CatalogSnapshot",
]
