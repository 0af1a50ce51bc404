from .location import Location
from .sync_run import SyncRun

__all__ = [
    "Location",
    "SyncRun",
]
