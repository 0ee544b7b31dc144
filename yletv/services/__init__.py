"""
Services package for YLE Live

This package contains the catalog, stream resolution and scheduling components.
"""
from yletv.services.catalog_builder_service import build
from yletv.services.catalog_service import CatalogService
from yletv.services.crypto_service import decrypt
from yletv.services.route_controller import RouteController
from yletv.services.yle_api_client import YleApiClient

__all__ = [
    'build',
    'CatalogService',
    'decrypt',
    'RouteController',
    'YleApiClient',
]
