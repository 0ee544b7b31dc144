"""
Catalog Builder Service

Turns raw YLE service and schedule payloads into the ordered Channel and
Program lists of a catalog snapshot. Entries that cannot be built are dropped
and reported in the BuildResult instead of failing the whole build.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence
import logging

from yletv.exceptions import CatalogBuildError, ConsistencyError, DataShapeError
from yletv.services.catalog_types import BuildResult, Channel, Program
from yletv.utils.timezone import DateFormatError, parse_iso8601_to_utc

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_LOCALE = "fi"
DEFAULT_SECONDARY_LOCALE = "sv"

CURRENT_TEMPORAL_STATUS = "currently"
ON_DEMAND_PUBLICATION = "OnDemandPublication"


@dataclass(frozen=True, slots=True)
class _ProgramDraft:
    """Schedule entry with every field resolved except its channel link."""
    id: str
    content_id: str
    service_id: str
    title: str
    description: str | None
    image_id: str
    media_id: str | None
    start_time: datetime
    end_time: datetime


def _as_text(value: Any) -> str | None:
    """Non-empty string value, else None"""
    if isinstance(value, str) and value:
        return value
    return None


def resolve_locale(
    values: Mapping[str, Any] | None,
    primary: str = DEFAULT_PRIMARY_LOCALE,
    secondary: str = DEFAULT_SECONDARY_LOCALE
) -> str | None:
    """
    Pick the primary locale value, falling back to the secondary one

    Empty strings and non-string values count as missing.

    Args:
        values: Mapping of locale code to text, e.g. {"fi": "Uutiset", "sv": "Nyheter"}
        primary: Preferred locale code
        secondary: Fallback locale code

    Returns:
        Resolved text or None if neither locale is populated
    """
    if not isinstance(values, Mapping):
        return None
    return _as_text(values.get(primary)) or _as_text(values.get(secondary))


def resolve_image_id(content: Mapping[str, Any]) -> str:
    """Content's own image id, else its series cover image id, else ''"""
    image = content.get("image")
    if isinstance(image, Mapping) and _as_text(image.get("id")):
        return image["id"]

    series = content.get("partOfSeries")
    if isinstance(series, Mapping):
        cover = series.get("coverImage")
        if isinstance(cover, Mapping) and _as_text(cover.get("id")):
            return cover["id"]

    return ""


def select_media_id(publication_events: Iterable[Any] | None) -> str | None:
    """
    Select the on-demand media currently available for a content item

    The first event (in list order) that is currently airing, is an on-demand
    publication and has available media wins.

    Returns:
        Media id, or None when no event qualifies
    """
    for event in publication_events or ():
        if not isinstance(event, Mapping):
            continue
        if event.get("temporalStatus") != CURRENT_TEMPORAL_STATUS:
            continue
        if event.get("type") != ON_DEMAND_PUBLICATION:
            continue

        media = event.get("media")
        if not isinstance(media, Mapping) or not media.get("available"):
            continue

        media_id = _as_text(media.get("id"))
        if media_id:
            return media_id

    return None


def build_playback_url(content_id: str, media_id: str | None) -> str | None:
    """Navigation token for a playable program, None when not playable"""
    if media_id is None:
        return None
    return f"#play/{content_id}/{media_id}"


def build(
    raw_services: Sequence[Any],
    raw_schedule: Sequence[Any],
    *,
    primary_locale: str = DEFAULT_PRIMARY_LOCALE,
    secondary_locale: str = DEFAULT_SECONDARY_LOCALE
) -> BuildResult:
    """
    Build the catalog from raw service and schedule payloads

    Args:
        raw_services: Service entries as returned by the services endpoint
        raw_schedule: Schedule entries as returned by the current schedule endpoint

    Returns:
        BuildResult with channels and programs in fetch order, plus the
        number of dropped entries and the errors that caused the drops

    Keyword Args:
        primary_locale: Preferred locale for titles and descriptions
        secondary_locale: Fallback locale for titles and descriptions
    """
    errors: list[CatalogBuildError] = []

    logger.debug("  Mapping %s services to channel candidates...", len(raw_services))
    candidates = _parse_channels(raw_services, primary_locale, secondary_locale, errors)
    dropped_channels = len(raw_services) - len(candidates)

    logger.debug("  Parsing %s schedule entries...", len(raw_schedule))
    drafts = _parse_programs(raw_schedule, primary_locale, secondary_locale, errors)
    dropped_programs = len(raw_schedule) - len(drafts)

    # Only channels with a current program are published
    referenced = {draft.service_id for draft in drafts}
    channels = [channel for channel in candidates if channel.id in referenced]
    logger.debug(
        "    Retained %s of %s channels with a current program",
        len(channels),
        len(candidates),
    )

    channels_by_id = {channel.id: channel for channel in channels}
    programs: list[Program] = []
    for draft in drafts:
        try:
            programs.append(_link_program(draft, channels_by_id))
        except ConsistencyError as exc:
            logger.warning("Dropping schedule entry: %s", exc)
            errors.append(exc)
            dropped_programs += 1

    return BuildResult(
        channels=tuple(channels),
        programs=tuple(programs),
        dropped_channels=dropped_channels,
        dropped_programs=dropped_programs,
        errors=tuple(errors),
    )


def _parse_channels(
    raw_services: Sequence[Any],
    primary_locale: str,
    secondary_locale: str,
    errors: list[CatalogBuildError]
) -> list[Channel]:
    """Map services to channel candidates, first occurrence of an id wins"""
    channels: list[Channel] = []
    seen: set[str] = set()

    for index, service in enumerate(raw_services):
        try:
            channel = _parse_single_channel(service, primary_locale, secondary_locale)
        except DataShapeError as exc:
            logger.warning("Dropping service entry #%s: %s", index, exc)
            errors.append(exc)
            continue

        if channel.id in seen:
            logger.warning("Dropping duplicate service entry #%s: %s", index, channel.id)
            continue

        seen.add(channel.id)
        channels.append(channel)

    return channels


def _parse_single_channel(service: Any, primary_locale: str, secondary_locale: str) -> Channel:
    if not isinstance(service, Mapping):
        raise DataShapeError(f"Service entry is not an object: {type(service).__name__}")

    service_id = service.get("id")
    if not service_id or not isinstance(service_id, str):
        raise DataShapeError("Service entry has no id")

    title = resolve_locale(service.get("title"), primary_locale, secondary_locale)
    if title is None:
        raise DataShapeError(
            f"Service {service_id} has no '{primary_locale}' or '{secondary_locale}' title"
        )

    return Channel(id=service_id, title=title)


def _parse_programs(
    raw_schedule: Sequence[Any],
    primary_locale: str,
    secondary_locale: str,
    errors: list[CatalogBuildError]
) -> list[_ProgramDraft]:
    drafts = []

    for index, entry in enumerate(raw_schedule):
        try:
            drafts.append(_parse_single_program(entry, primary_locale, secondary_locale))
        except DataShapeError as exc:
            logger.warning("Dropping schedule entry #%s: %s", index, exc)
            errors.append(exc)

    return drafts


def _parse_single_program(entry: Any, primary_locale: str, secondary_locale: str) -> _ProgramDraft:
    """Parse single schedule entry"""
    if not isinstance(entry, Mapping):
        raise DataShapeError(f"Schedule entry is not an object: {type(entry).__name__}")

    program_id = _as_text(entry.get("id"))
    if program_id is None:
        raise DataShapeError("Schedule entry has no id")

    service = entry.get("service")
    service_id = _as_text(service.get("id")) if isinstance(service, Mapping) else None
    if service_id is None:
        raise DataShapeError(f"Schedule entry {program_id} has no service id")

    content = entry.get("content")
    if not isinstance(content, Mapping) or _as_text(content.get("id")) is None:
        raise DataShapeError(f"Schedule entry {program_id} has no content id")

    title = resolve_locale(content.get("title"), primary_locale, secondary_locale)
    if title is None:
        raise DataShapeError(
            f"Schedule entry {program_id} has no '{primary_locale}' or '{secondary_locale}' title"
        )

    try:
        start_time = parse_iso8601_to_utc(entry.get("startTime"))
        end_time = parse_iso8601_to_utc(entry.get("endTime"))
    except DateFormatError as exc:
        raise DataShapeError(f"Schedule entry {program_id} has invalid times: {exc}") from exc

    return _ProgramDraft(
        id=program_id,
        content_id=content["id"],
        service_id=service_id,
        title=title,
        description=resolve_locale(content.get("description"), primary_locale, secondary_locale),
        image_id=resolve_image_id(content),
        media_id=select_media_id(content.get("publicationEvent")),
        start_time=start_time,
        end_time=end_time,
    )


def _link_program(draft: _ProgramDraft, channels_by_id: Mapping[str, Channel]) -> Program:
    channel = channels_by_id.get(draft.service_id)
    if channel is None:
        raise ConsistencyError(
            f"Schedule entry {draft.id} references unknown channel {draft.service_id}"
        )

    return Program(
        id=draft.id,
        content_id=draft.content_id,
        channel_id=channel.id,
        title=draft.title,
        channel=channel.title,
        start_time=draft.start_time,
        end_time=draft.end_time,
        image_id=draft.image_id,
        media_id=draft.media_id,
        description=draft.description,
        playback_url=build_playback_url(draft.content_id, draft.media_id),
    )
