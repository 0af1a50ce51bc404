from enum import Enum
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class LocationSource(str, Enum):
    """Upstream feed that last wrote a row"""
    OVERPASS = "overpass"
    BTCMAP = "btcmap"


class LocationRecord(BaseModel):
    """Canonical row produced by the normalizer, before it is stamped and stored"""
    id: int
    type: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Optional[Dict[str, Any]] = None
    nodes: Optional[List[int]] = None
    source: LocationSource

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


class Location(BaseModel):
    id: int
    type: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Dict[str, Any] = Field(default_factory=dict)
    nodes: List[int] = Field(default_factory=list)
    source: str
    last_updated: Optional[str] = None


class LocationCoordinates(BaseModel):
    id: int
    type: str
    lat: float
    lon: float


class PaymentStats(BaseModel):
    """Aggregates computed by the location store"""
    total_locations: int
    nodes: int
    ways: int
    countries: Dict[str, int]


class LocationTypes(BaseModel):
    physical_locations: int
    areas_or_buildings: int


class CountryStats(BaseModel):
    total_countries: int
    distribution: Dict[str, int]


class LocationStats(BaseModel):
    """Shape served by /api/stats"""
    total_locations: int
    location_types: LocationTypes
    countries: CountryStats
    last_updated: Optional[str] = None
