"""
Error taxonomy for the location sync pipeline and the read API.

- UpstreamFetchError: a whole-source fetch failed. Aborts the sync pass.
- RecordWriteError: a single location failed to upsert. Skipped and counted.
- NotFoundError: a read-by-id found nothing. Answered with a 404.
"""
from typing import Optional


class SatsMapError(Exception):
    """Base class for all application errors"""


class UpstreamFetchError(SatsMapError):
    """An upstream source could not deliver its batch"""

    def __init__(
        self,
        message: str,
        source: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        query: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.body = body
        self.query = query

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status={self.status_code})"
        return self.message


# Name used by the source clients' contracts
UpstreamError = UpstreamFetchError


class RecordWriteError(SatsMapError):
    """A single location row could not be written"""

    def __init__(self, location_id, message: str):
        super().__init__(f"Failed to write location {location_id}: {message}")
        self.location_id = location_id


class NotFoundError(SatsMapError):
    """Requested location does not exist"""

    def __init__(self, message: str = "Location not found"):
        super().__init__(message)
        self.message = message
