"""
btcmap.org Feed Client

Fetches the full btcmap.org elements snapshot. All or nothing: any HTTP
error or schema violation raises UpstreamFetchError and no records are
returned.
"""
import logging
import httpx
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.exceptions import UpstreamFetchError
from ..schemas.location import LocationSource

logger = logging.getLogger(__name__)


class BtcmapClient:
    """Client for the static btcmap.org elements endpoint"""

    def __init__(
        self,
        api_url: str = settings.BTCMAP_API_URL,
        timeout: float = settings.BTCMAP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    async def fetch_locations(self) -> List[Dict[str, Any]]:
        """Fetch every element from btcmap.org as raw dicts"""
        source = LocationSource.BTCMAP.value
        logger.info("Fetching data from btcmap.org...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.api_url)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching from btcmap.org: {e!r}")
            raise UpstreamFetchError(f"Failed to fetch from btcmap.org: {e}", source=source) from e

        if not response.is_success:
            logger.error(f"btcmap.org returned {response.status_code}")
            raise UpstreamFetchError(
                f"Failed to fetch from btcmap.org: {response.status_code} {response.reason_phrase}",
                source=source,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFetchError(
                "Invalid data format from btcmap.org: response is not JSON",
                source=source,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, list):
            raise UpstreamFetchError(
                "Invalid data format from btcmap.org: expected an array",
                source=source,
                status_code=response.status_code,
            )

        logger.info(f"Successfully fetched {len(data)} locations from btcmap.org")
        return data
