"""
Sync Run Model

One row per location sync pass, kept for operators to see when data was
last refreshed and how each upstream source behaved.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from datetime import datetime, timezone
from ..core.database import Base


class SyncRun(Base):
    """Model to track location sync passes"""
    __tablename__ = "sync_runs"

    id = Column(Integer, primary_key=True, index=True)

    status = Column(String(20), nullable=False)  # 'running', 'completed', 'failed'
    started_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    finished_at = Column(DateTime(timezone=True), nullable=True)

    # Per-source counters
    overpass_received = Column(Integer, default=0)
    overpass_upserted = Column(Integer, default=0)
    overpass_failed = Column(Integer, default=0)
    btcmap_received = Column(Integer, default=0)
    btcmap_upserted = Column(Integer, default=0)
    btcmap_failed = Column(Integer, default=0)

    # Error tracking
    last_error = Column(Text, nullable=True)
    retry_scheduled = Column(Boolean, default=False)

    @property
    def elapsed_time_seconds(self) -> float:
        """Calculate elapsed time in seconds"""
        if not self.started_at or not self.finished_at:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
