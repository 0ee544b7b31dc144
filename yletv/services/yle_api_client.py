"""
YLE API client

Fetches services, the current schedule and stream playout descriptors. Each
request is bounded by a timeout and fails fast; there is no retry.
"""
import json
import logging
import re
from typing import Any, Sequence

import httpx

from yletv.exceptions import FetchTimeoutError, StreamDescriptorError, TransportError
from yletv.services.catalog_types import StreamDescriptor
from yletv.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)

# callback({...}); as produced by JSONP endpoints
_JSONP_PATTERN = re.compile(r"^\s*[\w$.]+\s*\((?P<body>.*)\)\s*;?\s*$", re.DOTALL)


def decode_payload(text: str) -> Any:
    """
    Decode a JSON or JSONP response body

    Raises:
        TransportError: If the body is not valid JSON after unwrapping
    """
    match = _JSONP_PATTERN.match(text)
    body = match.group("body") if match else text
    try:
        return json.loads(body)
    except ValueError as exc:
        raise TransportError(f"Response is not valid JSON: {exc}") from exc


class YleApiClient:
    """Asynchronous client for the YLE programs and media endpoints."""

    def __init__(
        self,
        base_url: str,
        app_id: str,
        app_key: str,
        *,
        timeout: float = 10.0,
        stream_protocol: str = "HLS",
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self.app_key = app_key
        self.timeout = timeout
        self.stream_protocol = stream_protocol
        self._transport = transport

    async def fetch_services(self, service_type: str = "TVChannel") -> list[dict]:
        """
        Fetch the YLE services of the given type

        Args:
            service_type: Service type filter, e.g. 'TVChannel'

        Returns:
            Raw service entries

        Raises:
            TransportError: If the request fails, times out or returns a malformed envelope
        """
        data = await self._get("/programs/services.json", {"type": service_type})
        return _expect_list(data, "services")

    async def fetch_schedule(self, service_ids: Sequence[str]) -> list[dict]:
        """
        Fetch the currently airing schedule entries for the given services

        Args:
            service_ids: Service ids used as filter

        Returns:
            Raw schedule entries
        """
        params = {
            "service": ",".join(service_ids),
            "start": "0",
            "end": "0",
        }
        data = await self._get("/programs/schedules/now.json", params)
        return _expect_list(data, "schedule")

    async def fetch_stream_descriptor(self, content_id: str, media_id: str) -> StreamDescriptor:
        """
        Fetch the playout descriptor for a program's on-demand media

        Returns:
            StreamDescriptor with the still encrypted URL

        Raises:
            TransportError: If the request fails or returns a malformed envelope
            StreamDescriptorError: If the playout carries no URL
        """
        params = {
            "program_id": content_id,
            "media_id": media_id,
            "protocol": self.stream_protocol,
        }
        data = await self._get("/media/playouts.json", params)
        playouts = _expect_list(data, "playouts")
        if not playouts or not isinstance(playouts[0], dict):
            raise StreamDescriptorError(f"No playout for content {content_id} media {media_id}")

        playout = playouts[0]
        url = playout.get("url")
        if not url or not isinstance(url, str):
            raise StreamDescriptorError(f"Playout for content {content_id} has no URL")

        return StreamDescriptor(url=url, protocol=playout.get("protocol"), raw=playout)

    async def _get(self, path: str, params: dict[str, str]) -> Any:
        """Perform a GET and return the 'data' member of the response envelope"""
        url = f"{self.base_url}{path}"
        query = {"app_id": self.app_id, "app_key": self.app_key, **params}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=query)
                logger.debug("GET %s -> %s", sanitize_url_for_logging(str(response.url)), response.status_code)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error(f"Request to {path} timed out after {self.timeout}s")
            raise FetchTimeoutError(f"Request to {path} timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(f"HTTP {exc.response.status_code} from {path}")
            raise TransportError(f"HTTP {exc.response.status_code} from {path}") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Request to {path} failed: {type(exc).__name__}: {exc}")
            raise TransportError(f"Request to {path} failed: {exc}") from exc

        payload = decode_payload(response.text)
        if not isinstance(payload, dict) or "data" not in payload:
            raise TransportError(f"Response from {path} has no 'data' member")
        return payload["data"]


def _expect_list(data: Any, what: str) -> list:
    if not isinstance(data, list):
        raise TransportError(f"Expected a list of {what}, got {type(data).__name__}")
    return data
