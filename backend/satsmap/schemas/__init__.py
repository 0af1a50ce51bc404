from .location import (
    Location,
    LocationCoordinates,
    LocationRecord,
    LocationSource,
    LocationStats,
    PaymentStats,
)
from .osm import BtcmapRecord, OverpassResponse, RawRecord
from .sync import SyncRun

__all__ = [
    "Location",
    "LocationCoordinates",
    "LocationRecord",
    "LocationSource",
    "LocationStats",
    "PaymentStats",
    "BtcmapRecord",
    "OverpassResponse",
    "RawRecord",
    "SyncRun",
]
