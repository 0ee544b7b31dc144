"""
Route Controller

Keeps the view in step with the navigation fragment. Every navigation event
starts a new resolution with a fresh generation token; when a resolution
finishes it only publishes if no newer navigation has started meanwhile.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from yletv.exceptions import (
    EmptyCatalogError,
    NoProgramForChannel,
    RouteResolutionError,
    TransportError,
    UnsupportedRouteError,
)
from yletv.services import crypto_service
from yletv.services.catalog_types import CatalogSnapshot, Program, StreamDescriptor


logger = logging.getLogger(__name__)

CHANNELS_SECTION = "channels"


@dataclass(frozen=True, slots=True)
class Uninitialized:
    generation: int = 0


@dataclass(frozen=True, slots=True)
class Resolving:
    fragment: str
    generation: int


@dataclass(frozen=True, slots=True)
class Ready:
    channel_id: str
    program: Program
    generation: int
    url: str | None = None


@dataclass(frozen=True, slots=True)
class Error:
    fragment: str
    cause: Exception
    generation: int


RouteState = Uninitialized | Resolving | Ready | Error


class CatalogReader(Protocol):
    def current(self) -> CatalogSnapshot: ...


class StreamSource(Protocol):
    async def fetch_stream_descriptor(self, content_id: str, media_id: str) -> StreamDescriptor: ...


class RouteView(Protocol):
    """View layer receiving route resolution results."""

    def show_program(self, program: Program, url: str | None) -> None: ...

    def show_error(self, fragment: str, cause: Exception) -> None: ...


def channel_fragment(channel_id: str) -> str:
    return f"{CHANNELS_SECTION}/{channel_id}"


def parse_fragment(fragment: str) -> str:
    """
    Extract the channel id from a 'channels/<channelId>' fragment

    A leading '#' is ignored. Extra trailing segments are ignored.

    Raises:
        UnsupportedRouteError: If the fragment is of any other form
    """
    segments = fragment.lstrip("#").split("/")
    if len(segments) < 2 or segments[0] != CHANNELS_SECTION or not segments[1]:
        raise UnsupportedRouteError(fragment)
    return segments[1]


def find_current_program(snapshot: CatalogSnapshot, channel_id: str) -> Program:
    """First program of the channel in catalog order"""
    for program in snapshot.programs:
        if program.channel_id == channel_id:
            return program
    raise NoProgramForChannel(channel_id)


class RouteController:
    """State machine driven by navigation fragments."""

    def __init__(
        self,
        catalog: CatalogReader,
        streams: StreamSource,
        view: RouteView,
        secret: str,
        *,
        decrypt: Callable[[str, str], str] = crypto_service.decrypt
    ) -> None:
        self._catalog = catalog
        self._streams = streams
        self._view = view
        self._secret = secret
        self._decrypt = decrypt
        self._generation = 0
        self._state: RouteState = Uninitialized()

    @property
    def state(self) -> RouteState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    async def start(self) -> RouteState | None:
        """
        Route to the first channel of the current catalog

        Raises:
            EmptyCatalogError: If the catalog has no channels
        """
        snapshot = self._catalog.current()
        if snapshot.is_empty:
            raise EmptyCatalogError("Catalog has no channels to route to")
        return await self.navigate(channel_fragment(snapshot.channels[0].id))

    async def navigate(self, fragment: str) -> RouteState | None:
        """
        Resolve a navigation fragment and publish the result to the view

        Always preempts any resolution still in flight.

        Returns:
            The Ready or Error state this resolution settled into, or None if
            a newer navigation superseded it before it finished
        """
        self._generation += 1
        generation = self._generation
        self._state = Resolving(fragment=fragment, generation=generation)
        logger.info("Handle route change '%s' (generation %s)", fragment, generation)

        try:
            program, url = await self._resolve(fragment)
        except (TransportError, RouteResolutionError) as exc:
            logger.warning("Route '%s' failed: %s", fragment, exc)
            return self._fail(fragment, exc, generation)
        except Exception as exc:
            logger.error("Unexpected error resolving route '%s': %s", fragment, exc, exc_info=True)
            return self._fail(fragment, exc, generation)

        if not self._is_latest(generation):
            logger.debug("Discarding stale result for '%s' (generation %s)", fragment, generation)
            return None

        state = Ready(channel_id=program.channel_id, program=program, generation=generation, url=url)
        self._state = state
        self._view.show_program(program, url)
        logger.info(
            "Route '%s' ready: %s (%s)",
            fragment,
            program.title,
            "stream" if url else "metadata only",
        )
        return state

    def _is_latest(self, generation: int) -> bool:
        return generation == self._generation

    def _fail(self, fragment: str, cause: Exception, generation: int) -> Error | None:
        if not self._is_latest(generation):
            logger.debug("Discarding stale failure for '%s' (generation %s)", fragment, generation)
            return None
        state = Error(fragment=fragment, cause=cause, generation=generation)
        self._state = state
        self._view.show_error(fragment, cause)
        return state

    async def _resolve(self, fragment: str) -> tuple[Program, str | None]:
        channel_id = parse_fragment(fragment)
        program = find_current_program(self._catalog.current(), channel_id)

        if program.media_id is None:
            return program, None

        descriptor = await self._streams.fetch_stream_descriptor(program.content_id, program.media_id)
        return program, self._decrypt(descriptor.url, self._secret)
