from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException
import logging

from yletv.dependencies import (
    get_catalog_scheduler,
    get_catalog_service,
    get_route_controller,
    get_route_view,
)
from yletv.exceptions import TransportError
from yletv.schemas import (
    ChannelResponse,
    ChannelsResponse,
    NavigateRequest,
    ProgramResponse,
    ProgramsResponse,
    PublishedRouteResponse,
    RouteResponse,
    RouteStateResponse,
)
from yletv.services.catalog_service import CatalogService
from yletv.services.route_controller import (
    Error,
    Ready,
    Resolving,
    RouteController,
    RouteState,
)
from yletv.services.route_view import LatestRouteView, PublishedRoute
from yletv.services.scheduler_service import CatalogScheduler


logger = logging.getLogger(__name__)

main_router = APIRouter()

CatalogDep = Annotated[CatalogService, Depends(get_catalog_service)]
ControllerDep = Annotated[RouteController, Depends(get_route_controller)]


@main_router.get("/")
async def root(scheduler: Annotated[CatalogScheduler, Depends(get_catalog_scheduler)]) -> dict:
    """Root endpoint with service information"""
    next_run = scheduler.get_next_run_time()

    return {
        "service": "YLE Live",
        "version": "0.1.0",
        "next_scheduled_refresh": next_run.isoformat() if next_run else None,
        "endpoints": {
            "channels": "/channels - Channels with a current program",
            "programs": "/programs - Currently airing programs",
            "refresh": "/refresh - Manually trigger catalog refresh (POST)",
            "navigate": "/navigate - Resolve a route fragment (POST)",
            "route": "/route - Current route state",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check(
    catalog: CatalogDep,
    scheduler: Annotated[CatalogScheduler, Depends(get_catalog_scheduler)]
) -> dict:
    """Health check endpoint"""
    next_run = scheduler.get_next_run_time()
    last_refresh = catalog.last_refreshed_at
    return {
        "status": "ok",
        "scheduler_running": scheduler.scheduler.running if scheduler.scheduler else False,
        "next_refresh": next_run.isoformat() if next_run else None,
        "last_refresh": last_refresh.isoformat() if last_refresh else None,
        "channels": len(catalog.current().channels),
    }


@main_router.get("/channels", response_model=ChannelsResponse)
async def list_channels(catalog: CatalogDep) -> ChannelsResponse:
    """Channels that have a currently airing program, in service order"""
    snapshot = catalog.current()
    return ChannelsResponse(
        built_at=snapshot.built_at,
        total_channels=len(snapshot.channels),
        channels=[ChannelResponse.model_validate(channel) for channel in snapshot.channels],
    )


@main_router.get("/programs", response_model=ProgramsResponse)
async def list_programs(catalog: CatalogDep, channel_id: str | None = None) -> ProgramsResponse:
    """Currently airing programs, optionally for a single channel"""
    snapshot = catalog.current()
    programs = [
        program for program in snapshot.programs
        if channel_id is None or program.channel_id == channel_id
    ]
    return ProgramsResponse(
        built_at=snapshot.built_at,
        total_programs=len(programs),
        programs=[ProgramResponse.model_validate(program) for program in programs],
    )


@main_router.post("/refresh")
async def trigger_refresh(catalog: CatalogDep) -> dict:
    """
    Manually trigger catalog refresh

    The previous catalog stays in place if the refresh fails
    """
    logger.info("Manual catalog refresh triggered via API")
    if catalog.is_refreshing():
        logger.warning("Catalog refresh already in progress, skipping this request")
        return {
            "status": "skipped",
            "message": "Catalog refresh already in progress"
        }

    try:
        result = await catalog.refresh()
    except TransportError as exc:
        logger.error(f"Manual refresh failed: {exc}")
        raise HTTPException(status_code=502, detail=str(exc))

    return {
        "status": "success",
        "channels": len(result.channels),
        "programs": len(result.programs),
        "dropped_channels": result.dropped_channels,
        "dropped_programs": result.dropped_programs,
        "built_at": catalog.last_refreshed_at.isoformat() if catalog.last_refreshed_at else None,
    }


@main_router.post("/navigate", response_model=RouteStateResponse)
async def navigate(request: NavigateRequest, controller: ControllerDep) -> RouteStateResponse:
    """
    Deliver a navigation event and wait for its resolution

    Returns state 'superseded' when a newer navigation finished first
    """
    state = await controller.navigate(request.fragment)
    if state is None:
        return RouteStateResponse(
            state="superseded",
            generation=controller.generation,
            fragment=request.fragment,
        )
    return _state_response(state)


@main_router.get("/route", response_model=RouteResponse)
async def current_route(
    controller: ControllerDep,
    view: Annotated[LatestRouteView, Depends(get_route_view)]
) -> RouteResponse:
    """Current route state and the last result published to the view"""
    published = view.latest
    return RouteResponse(
        current=_state_response(controller.state),
        published=_published_response(published) if published else None,
    )


def _state_response(state: RouteState) -> RouteStateResponse:
    if isinstance(state, Ready):
        return RouteStateResponse(
            state="ready",
            generation=state.generation,
            channel_id=state.channel_id,
            program=ProgramResponse.model_validate(state.program),
            url=state.url,
        )
    if isinstance(state, Error):
        return RouteStateResponse(
            state="error",
            generation=state.generation,
            fragment=state.fragment,
            error=f"{type(state.cause).__name__}: {state.cause}",
        )
    if isinstance(state, Resolving):
        return RouteStateResponse(
            state="resolving",
            generation=state.generation,
            fragment=state.fragment,
        )
    return RouteStateResponse(state="uninitialized", generation=state.generation)


def _published_response(published: PublishedRoute) -> PublishedRouteResponse:
    return PublishedRouteResponse(
        published_at=published.published_at,
        program=ProgramResponse.model_validate(published.program) if published.program else None,
        url=published.url,
        fragment=published.fragment,
        error=published.error,
    )
