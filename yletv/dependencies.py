"""
Dependency wiring

Lazily creates the process-wide API client, catalog service, route view,
route controller and scheduler from settings. FastAPI routes receive them via
Depends(); tests replace them with app.dependency_overrides or reset them.
"""
import logging

from yletv.config import settings
from yletv.services.catalog_service import CatalogService
from yletv.services.route_controller import RouteController
from yletv.services.route_view import LatestRouteView
from yletv.services.scheduler_service import CatalogScheduler
from yletv.services.yle_api_client import YleApiClient


logger = logging.getLogger(__name__)

_api_client: YleApiClient | None = None
_catalog_service: CatalogService | None = None
_route_view: LatestRouteView | None = None
_route_controller: RouteController | None = None
_catalog_scheduler: CatalogScheduler | None = None


def get_api_client() -> YleApiClient:
    """
    Get or create the global YLE API client.

    Returns:
        The global YleApiClient instance
    """
    global _api_client
    if _api_client is None:
        _api_client = YleApiClient(
            settings.yle_api_base_url,
            settings.yle_app_id,
            settings.yle_app_key,
            timeout=settings.fetch_timeout_sec,
            stream_protocol=settings.stream_protocol,
        )
        logger.debug("Created YLE API client for %s", settings.yle_api_base_url)
    return _api_client


def get_catalog_service() -> CatalogService:
    """
    Get or create the global catalog service.

    Returns:
        The global CatalogService instance
    """
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService(
            get_api_client(),
            service_type=settings.service_type,
            primary_locale=settings.primary_locale,
            secondary_locale=settings.secondary_locale,
        )
    return _catalog_service


def get_route_view() -> LatestRouteView:
    global _route_view
    if _route_view is None:
        _route_view = LatestRouteView()
    return _route_view


def get_route_controller() -> RouteController:
    """
    Get or create the global route controller.

    Returns:
        The global RouteController instance
    """
    global _route_controller
    if _route_controller is None:
        _route_controller = RouteController(
            get_catalog_service(),
            get_api_client(),
            get_route_view(),
            settings.yle_secret,
        )
    return _route_controller


def get_catalog_scheduler() -> CatalogScheduler:
    global _catalog_scheduler
    if _catalog_scheduler is None:
        _catalog_scheduler = CatalogScheduler(get_catalog_service().refresh)
    return _catalog_scheduler


def reset_dependencies() -> None:
    """
    Reset all global instances (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _api_client, _catalog_service, _route_view, _route_controller, _catalog_scheduler
    _api_client = None
    _catalog_service = None
    _route_view = None
    _route_controller = None
    _catalog_scheduler = None
