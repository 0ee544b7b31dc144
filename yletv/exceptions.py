"""
Error taxonomy for the live catalog and stream resolution pipeline.

Catalog build errors are collected per entry and never escape the builder.
Route resolution errors end up in the route controller's Error state.
Transport errors during a catalog refresh propagate to the caller.
"""


class YleLiveError(Exception):
    """Base class for all service errors"""
    pass


class TransportError(YleLiveError):
    """Remote fetch failed or returned an unusable response"""
    pass


class FetchTimeoutError(TransportError):
    """Remote fetch did not complete within the configured timeout"""
    pass


class CatalogBuildError(YleLiveError):
    """A single raw entry could not be turned into a catalog record"""
    pass


class DataShapeError(CatalogBuildError):
    """Required field missing or malformed in a raw payload"""
    pass


class ConsistencyError(CatalogBuildError):
    """Schedule entry references a channel that is not in the catalog"""
    pass


class RouteResolutionError(YleLiveError):
    """Route could not be resolved into a program and stream"""
    pass


class DecryptionError(RouteResolutionError):
    """Encrypted stream locator could not be decrypted into a URL"""
    pass


class NoProgramForChannel(RouteResolutionError):
    """Route points at a channel with no current program"""

    def __init__(self, channel_id: str):
        super().__init__(f"No current program for channel '{channel_id}'")
        self.channel_id = channel_id


class UnsupportedRouteError(RouteResolutionError):
    """Fragment is not of the form channels/<channelId>"""

    def __init__(self, fragment: str):
        super().__init__(f"Unsupported route fragment: '{fragment}'")
        self.fragment = fragment


class StreamDescriptorError(RouteResolutionError):
    """Stream descriptor payload lacks the encrypted URL"""
    pass


class EmptyCatalogError(YleLiveError):
    """Catalog has no channels to route to"""
    pass
