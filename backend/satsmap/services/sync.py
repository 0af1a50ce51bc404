"""
Location Sync

One pass pulls the Overpass bitcoin query, then the btcmap.org feed, and
upserts every record into the location store, one after another.

- A record that fails to parse or write is logged, counted and skipped.
- A source that fails to fetch aborts the pass; a full retry is queued after
  a fixed delay. Rows already stored are never removed.
- A pass started while another is in flight is skipped.
- Upsert batches run in a worker thread so the event loop keeps serving
  reads while a pass writes.

btcmap.org runs second, so when both sources describe the same id its row
is the one that survives the pass.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.config import settings
from ..core.exceptions import UpstreamFetchError
from ..models.sync_run import SyncRun as SyncRunModel
from ..schemas.location import LocationSource
from .btcmap import BtcmapClient
from .cache import ResponseCache
from .location_store import LocationStore, utcnow
from .normalizer import normalize, parse_record
from .overpass import OverpassClient, OverpassConfig
from .tasks import ScheduledTask, TaskScheduler

logger = logging.getLogger(__name__)

RETRY_TASK_NAME = "location_sync_retry"


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING_OVERPASS = "fetching_overpass"
    UPSERTING_OVERPASS = "upserting_overpass"
    FETCHING_BTCMAP = "fetching_btcmap"
    UPSERTING_BTCMAP = "upserting_btcmap"
    DONE = "done"
    FAILED = "failed"


class SourceSyncResult(BaseModel):
    source: LocationSource
    received: int = 0
    upserted: int = 0

    @property
    def failed(self) -> int:
        return self.received - self.upserted


class SyncResult(BaseModel):
    started_at: datetime
    finished_at: Optional[datetime] = None
    status: str = "running"  # 'running', 'completed', 'failed'
    overpass: SourceSyncResult = Field(
        default_factory=lambda: SourceSyncResult(source=LocationSource.OVERPASS)
    )
    btcmap: SourceSyncResult = Field(
        default_factory=lambda: SourceSyncResult(source=LocationSource.BTCMAP)
    )
    error: Optional[str] = None
    retry_scheduled: bool = False


def default_overpass_config() -> OverpassConfig:
    """Wider budget than the client defaults, sized for a full-planet query"""
    return OverpassConfig(
        timeout=settings.SYNC_OVERPASS_TIMEOUT,
        maxsize=settings.SYNC_OVERPASS_MAXSIZE,
    )


class LocationSync:
    def __init__(
        self,
        store: LocationStore,
        overpass_client: Optional[OverpassClient] = None,
        btcmap_client: Optional[BtcmapClient] = None,
        task_scheduler: Optional[TaskScheduler] = None,
        retry_delay_seconds: float = settings.SYNC_RETRY_DELAY_SECONDS,
        overpass_config: Optional[OverpassConfig] = None,
        response_cache: Optional[ResponseCache] = None,
        session_factory: Optional[sessionmaker] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.overpass_client = overpass_client or OverpassClient()
        self.btcmap_client = btcmap_client or BtcmapClient()
        self.task_scheduler = task_scheduler
        self.retry_delay_seconds = retry_delay_seconds
        self.overpass_config = overpass_config or default_overpass_config()
        self.response_cache = response_cache
        self.session_factory = session_factory or store.session_factory
        self.clock = clock

        self.state = SyncState.IDLE
        self.last_result: Optional[SyncResult] = None
        self._running = False
        self._retry_task: Optional[ScheduledTask] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_retry(self) -> Optional[ScheduledTask]:
        return self._retry_task

    async def run(self) -> Optional[SyncResult]:
        """Run one full pass. Returns None if a pass was already running."""
        if self._running:
            logger.warning("Location sync already in progress, skipping this run")
            return None

        self._running = True
        self._cancel_pending_retry()

        result = SyncResult(started_at=self.clock())
        run_id = self._record_start(result)

        try:
            logger.info("Starting location update from all sources...")
            await self._sync_overpass(result)
            await self._sync_btcmap(result)

            result.status = "completed"
            self.state = SyncState.DONE
            logger.info("Location update completed from all sources")
        except UpstreamFetchError as e:
            logger.error(
                f"Failed to update bitcoin locations: {e} "
                f"(source={e.source}, status={e.status_code}, query={e.query!r})"
            )
            self._fail(result, e)
        except Exception as e:
            logger.exception(f"Failed to update bitcoin locations: {e}")
            self._fail(result, e)
        finally:
            result.finished_at = self.clock()
            self.last_result = result
            self._record_finish(run_id, result)
            self._running = False

        return result

    async def _sync_overpass(self, result: SyncResult):
        self.state = SyncState.FETCHING_OVERPASS
        logger.info("Fetching from Overpass API...")
        response = await self.overpass_client.fetch_bitcoin_locations(self.overpass_config)

        self.state = SyncState.UPSERTING_OVERPASS
        await run_in_threadpool(self._upsert_batch, response.elements, result.overpass, "Overpass")

    async def _sync_btcmap(self, result: SyncResult):
        self.state = SyncState.FETCHING_BTCMAP
        logger.info("Fetching from BTCMap API...")
        locations = await self.btcmap_client.fetch_locations()

        self.state = SyncState.UPSERTING_BTCMAP
        await run_in_threadpool(self._upsert_batch, locations, result.btcmap, "BTCMap")

    def _upsert_batch(self, raw_records: Iterable[Any], counts: SourceSyncResult, label: str):
        raw_records = list(raw_records)
        counts.received = len(raw_records)
        logger.info(f"Received {counts.received} locations from {label}. Starting database update...")

        for raw in raw_records:
            try:
                record = normalize(parse_record(raw), counts.source)
                self.store.upsert(record)
                counts.upserted += 1
            except Exception as e:
                record_id = raw.get("id") if isinstance(raw, dict) else None
                logger.error(f"Failed to update {label} location {record_id}: {e}")
                continue

        logger.info(
            f"Successfully updated {counts.upserted} out of {counts.received} {label} locations"
        )

        if self.response_cache is not None:
            self.response_cache.clear()

    def _fail(self, result: SyncResult, error: Exception):
        self.state = SyncState.FAILED
        result.status = "failed"
        result.error = str(error)

        if self.task_scheduler is None:
            logger.warning("No task scheduler configured, not retrying location update")
            return

        # Wait before retrying the whole pass
        self._retry_task = self.task_scheduler.schedule(
            self.retry_delay_seconds, self.run, name=RETRY_TASK_NAME
        )
        result.retry_scheduled = True
        logger.info(f"Retrying location update in {self.retry_delay_seconds} seconds")

    def _cancel_pending_retry(self):
        if self._retry_task is not None:
            self._retry_task.cancel()
            self._retry_task = None

    def _record_start(self, result: SyncResult) -> Optional[int]:
        """Insert the sync_runs row. Diagnostics never block the pass."""
        try:
            with self.session_factory() as db:
                run = SyncRunModel(status=result.status, started_at=result.started_at)
                db.add(run)
                db.commit()
                return run.id
        except SQLAlchemyError as e:
            logger.error(f"Could not record sync run start: {e}")
            return None

    def _record_finish(self, run_id: Optional[int], result: SyncResult):
        if run_id is None:
            return
        try:
            with self.session_factory() as db:
                run = db.get(SyncRunModel, run_id)
                if run is None:
                    return
                run.status = result.status
                run.finished_at = result.finished_at
                run.overpass_received = result.overpass.received
                run.overpass_upserted = result.overpass.upserted
                run.overpass_failed = result.overpass.failed
                run.btcmap_received = result.btcmap.received
                run.btcmap_upserted = result.btcmap.upserted
                run.btcmap_failed = result.btcmap.failed
                run.last_error = result.error
                run.retry_scheduled = result.retry_scheduled
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Could not record sync run result: {e}")
