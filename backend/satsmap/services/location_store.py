"""
Location Store

The canonical table of bitcoin-accepting locations, one row per OSM entity.
Writes replace the whole row; reads only list rows with coordinates.
"""
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.database import SessionLocal, init_db
from ..core.exceptions import RecordWriteError
from ..models.location import Location as LocationModel
from ..schemas.location import LocationRecord, PaymentStats

logger = logging.getLogger(__name__)

COUNTRY_TAG = "addr:country"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationStore:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock

    def init(self):
        """Create the backing tables if missing"""
        with self.session_factory() as db:
            init_db(bind=db.get_bind())

    def upsert(self, record: LocationRecord) -> None:
        """
        Insert or fully replace the row for record.id and stamp last_updated.
        Either the whole row is committed or nothing is.
        """
        with self.session_factory() as db:
            try:
                db.merge(LocationModel(
                    id=record.id,
                    type=record.type,
                    lat=record.lat,
                    lon=record.lon,
                    tags=record.tags,
                    nodes=record.nodes,
                    source=record.source.value,
                    last_updated=self.clock(),
                ))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise RecordWriteError(record.id, str(e)) from e

    @staticmethod
    def _located(db: Session):
        return db.query(LocationModel).filter(
            LocationModel.lat.isnot(None),
            LocationModel.lon.isnot(None),
        )

    def all(self) -> List[dict]:
        with self.session_factory() as db:
            rows = self._located(db).order_by(LocationModel.id).all()
            return [row.to_dict() for row in rows]

    def coordinates_only(self) -> List[dict]:
        """Light projection for map markers"""
        with self.session_factory() as db:
            rows = db.query(
                LocationModel.id,
                LocationModel.type,
                LocationModel.lat,
                LocationModel.lon,
            ).filter(
                LocationModel.lat.isnot(None),
                LocationModel.lon.isnot(None),
            ).order_by(LocationModel.id).all()

            return [
                {"id": row.id, "type": row.type, "lat": row.lat, "lon": row.lon}
                for row in rows
            ]

    def by_id(self, location_id: int) -> Optional[dict]:
        """Return one row, or None when the id is unknown"""
        with self.session_factory() as db:
            row = db.get(LocationModel, location_id)
            return row.to_dict() if row else None

    def payment_stats(self) -> PaymentStats:
        with self.session_factory() as db:
            total = db.query(func.count(LocationModel.id)).scalar() or 0

            nodes = db.query(func.count(LocationModel.id)).filter(
                LocationModel.type == "node"
            ).scalar() or 0

            ways = db.query(func.count(LocationModel.id)).filter(
                LocationModel.type == "way"
            ).scalar() or 0

            # Country comes from the free-form tag map, grouped in Python
            countries = Counter()
            for (tags,) in db.query(LocationModel.tags).filter(LocationModel.tags.isnot(None)):
                country = tags.get(COUNTRY_TAG) if isinstance(tags, dict) else None
                if country is not None:
                    countries[str(country)] += 1

            distribution: Dict[str, int] = dict(countries.most_common())

        return PaymentStats(
            total_locations=total,
            nodes=nodes,
            ways=ways,
            countries=distribution,
        )

    def last_updated(self) -> Optional[datetime]:
        """Timestamp of the most recent successful write"""
        with self.session_factory() as db:
            return db.query(func.max(LocationModel.last_updated)).scalar()


def get_location_store() -> LocationStore:
    """Dependency for FastAPI to get the location store"""
    return LocationStore()
