"""
Raw upstream record schemas.

A raw record is one of two shapes:
- BtcmapRecord: the btcmap.org envelope, carrying a nested OSM object in
  ``osm_json`` plus an outer tag map.
- Overpass element: a plain node/way/relation from the Overpass interpreter.

Both nested unions are discriminated on ``type``.
"""
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union


class GeoPoint(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class Bounds(BaseModel):
    minlat: Optional[float] = None
    maxlat: Optional[float] = None
    minlon: Optional[float] = None
    maxlon: Optional[float] = None


# btcmap.org osm_json payloads
# Inner fields may come back null; the normalizer falls back instead of rejecting the record

class OSMNode(BaseModel):
    type: Literal["node"]
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Optional[Dict[str, Any]] = None


class OSMWay(BaseModel):
    type: Literal["way"]
    id: int
    nodes: Optional[List[int]] = None
    geometry: Optional[List[Optional[GeoPoint]]] = None
    bounds: Optional[Bounds] = None
    tags: Optional[Dict[str, Any]] = None


class OSMRelation(BaseModel):
    type: Literal["relation"]
    id: int
    bounds: Optional[Bounds] = None
    members: Optional[List[Dict[str, Any]]] = None
    tags: Optional[Dict[str, Any]] = None


OSMJson = Annotated[Union[OSMNode, OSMWay, OSMRelation], Field(discriminator="type")]


class BtcmapRecord(BaseModel):
    """One element of the btcmap.org elements feed"""
    id: Union[int, str]
    osm_json: OSMJson
    tags: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None


# Overpass interpreter elements

class OverpassNode(BaseModel):
    type: Literal["node"]
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    tags: Optional[Dict[str, Any]] = None


class OverpassWay(BaseModel):
    type: Literal["way"]
    id: int
    nodes: Optional[List[int]] = None
    center: Optional[GeoPoint] = None
    tags: Optional[Dict[str, Any]] = None


class OverpassRelation(BaseModel):
    type: Literal["relation"]
    id: int
    center: Optional[GeoPoint] = None
    tags: Optional[Dict[str, Any]] = None


OverpassElement = Annotated[
    Union[OverpassNode, OverpassWay, OverpassRelation], Field(discriminator="type")
]


class Osm3s(BaseModel):
    timestamp_osm_base: Optional[str] = None
    copyright: Optional[str] = None


class OverpassResponse(BaseModel):
    """
    Top-level Overpass response.

    Elements stay as plain dicts here so one malformed element only fails
    its own upsert, not the whole batch.
    """
    version: Optional[float] = None
    generator: Optional[str] = None
    osm3s: Optional[Osm3s] = None
    elements: List[Dict[str, Any]]


RawRecord = Union[BtcmapRecord, OverpassNode, OverpassWay, OverpassRelation]
