from sqlalchemy import Column, Integer, String, Float, DateTime, JSON
from ..core.database import Base


class Location(Base):
    """Canonical row for one OSM entity, last write wins across both sources"""
    __tablename__ = "locations"

    # OSM entity id, shared by both upstream sources
    id = Column(Integer, primary_key=True, autoincrement=False)

    type = Column(String(20), nullable=False, index=True)  # node, way, relation

    # Null when the geometry could not be resolved
    lat = Column(Float)
    lon = Column(Float)

    tags = Column(JSON(none_as_null=True))  # {"name": "...", "payment:bitcoin": "yes", ...}
    nodes = Column(JSON(none_as_null=True))  # way member node ids

    source = Column(String(20), nullable=False)  # overpass, btcmap
    last_updated = Column(DateTime(timezone=True), nullable=False)

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "lat": self.lat,
            "lon": self.lon,
            "tags": self.tags or {},
            "nodes": self.nodes or [],
            "source": self.source,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }
