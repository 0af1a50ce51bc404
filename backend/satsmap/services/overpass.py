"""
Overpass API Client

Queries the Overpass interpreter for every node, way and relation tagged
payment:bitcoin=yes, optionally restricted to a bounding box.
"""
import logging
import httpx
from pydantic import BaseModel, ValidationError
from typing import Optional

from ..core.config import settings
from ..core.exceptions import UpstreamFetchError
from ..schemas.location import LocationSource
from ..schemas.osm import OverpassResponse

logger = logging.getLogger(__name__)

BITCOIN_FILTER = '["payment:bitcoin"="yes"]'
ELEMENT_TYPES = ("node", "way", "relation")


class BoundingBox(BaseModel):
    south: float
    west: float
    north: float
    east: float


class OverpassConfig(BaseModel):
    timeout: Optional[int] = None  # in seconds
    maxsize: Optional[int] = None  # in bytes
    bounding_box: Optional[BoundingBox] = None


class OverpassClient:
    DEFAULT_TIMEOUT = 180  # 3 minutes
    DEFAULT_MAXSIZE = 1073741824  # 1GB

    def __init__(
        self,
        api_url: str = settings.OVERPASS_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.transport = transport

    def build_query(self, config: Optional[OverpassConfig] = None) -> str:
        config = config or OverpassConfig()
        timeout = config.timeout or self.DEFAULT_TIMEOUT
        maxsize = config.maxsize or self.DEFAULT_MAXSIZE

        base_query = f"[out:json][timeout:{timeout}][maxsize:{maxsize}];"

        area = ""
        if config.bounding_box:
            box = config.bounding_box
            area = f"({box.south},{box.west},{box.north},{box.east})"

        filters = "".join(f"{element}{BITCOIN_FILTER}{area};" for element in ELEMENT_TYPES)
        return f"{base_query}({filters});out center;"

    async def fetch_bitcoin_locations(self, config: Optional[OverpassConfig] = None) -> OverpassResponse:
        """
        Run the bitcoin query against the interpreter.

        Every failure is raised as UpstreamFetchError carrying the HTTP status,
        response body and the query string so operators can replay it.
        """
        config = config or OverpassConfig()
        source = LocationSource.OVERPASS.value
        query = self.build_query(config)
        timeout = config.timeout or self.DEFAULT_TIMEOUT

        logger.info(f"Executing Overpass query: {query}")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.get(
                    self.api_url,
                    params={"data": query},
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Overpass API Error: status={e.response.status_code} "
                f"data={e.response.text[:500]!r} query={query!r}"
            )
            raise UpstreamFetchError(
                f"Failed to fetch bitcoin locations: {e}",
                source=source,
                status_code=e.response.status_code,
                body=e.response.text,
                query=query,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Overpass API Error: {e!r} query={query!r}")
            raise UpstreamFetchError(
                "Failed to fetch bitcoin locations",
                source=source,
                query=query,
            ) from e

        try:
            data = OverpassResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Overpass API returned an unexpected payload for query={query!r}")
            raise UpstreamFetchError(
                "Failed to fetch bitcoin locations: unexpected response format",
                source=source,
                status_code=response.status_code,
                body=response.text,
                query=query,
            ) from e

        logger.info(f"Received {len(data.elements)} elements from Overpass")
        return data
