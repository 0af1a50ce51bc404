"""
Sync Run Schemas

Pydantic schemas for the sync status API response.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class SyncRun(BaseModel):
    """Schema for the latest sync pass"""
    id: int
    status: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    overpass_received: int = 0
    overpass_upserted: int = 0
    overpass_failed: int = 0
    btcmap_received: int = 0
    btcmap_upserted: int = 0
    btcmap_failed: int = 0
    last_error: Optional[str] = None
    retry_scheduled: bool = False

    # Computed properties
    elapsed_time_seconds: float

    model_config = ConfigDict(from_attributes=True)
