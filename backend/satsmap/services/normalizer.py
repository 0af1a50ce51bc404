"""
Location Normalizer

Turns a raw upstream record into the canonical location row. Pure, no I/O.

btcmap.org records get their inner and outer tags merged (outer wins) and the
two payment flags recomputed, because the feed spells bitcoin acceptance as
``payment:onchain`` or ``currency:XBT`` while OSM uses ``payment:bitcoin``.
Overpass elements keep their tags exactly as returned.
"""
from typing import Any, Dict, Optional, Tuple

from pydantic import TypeAdapter

from ..schemas.location import LocationRecord, LocationSource
from ..schemas.osm import (
    BtcmapRecord,
    GeoPoint,
    OSMNode,
    OSMRelation,
    OSMWay,
    OverpassElement,
    OverpassNode,
    OverpassRelation,
    OverpassWay,
    RawRecord,
)

_overpass_element_adapter = TypeAdapter(OverpassElement)

Coordinates = Tuple[Optional[float], Optional[float]]


def parse_record(raw: Dict[str, Any]) -> RawRecord:
    """
    Validate a raw upstream dict into its typed variant.
    The btcmap envelope is recognised by its nested ``osm_json`` object.
    Raises pydantic.ValidationError for records that cannot be identified.
    """
    if isinstance(raw, dict) and "osm_json" in raw:
        return BtcmapRecord.model_validate(raw)
    return _overpass_element_adapter.validate_python(raw)


def _is_yes(tags: Dict[str, Any], key: str) -> bool:
    return tags.get(key) == "yes"


def merge_btcmap_tags(osm_tags: Dict[str, Any], element_tags: Dict[str, Any]) -> Dict[str, Any]:
    """Merge inner and outer tags and recompute the payment flags"""
    merged = {**osm_tags, **element_tags}

    bitcoin = (
        _is_yes(osm_tags, "payment:bitcoin")
        or _is_yes(element_tags, "payment:onchain")
        or _is_yes(element_tags, "currency:XBT")
    )
    lightning = _is_yes(osm_tags, "payment:lightning") or _is_yes(element_tags, "payment:lightning")

    merged["payment:bitcoin"] = "yes" if bitcoin else "no"
    merged["payment:lightning"] = "yes" if lightning else "no"
    return merged


def _point_coordinates(point: Optional[GeoPoint]) -> Coordinates:
    if point is None or point.lat is None or point.lon is None:
        return None, None
    return point.lat, point.lon


def _way_coordinates(way: OSMWay) -> Coordinates:
    # First point of the way stands in for its position
    if way.geometry:
        return _point_coordinates(way.geometry[0])
    return None, None


def _relation_coordinates(relation: OSMRelation) -> Coordinates:
    bounds = relation.bounds
    if bounds is None or None in (bounds.minlat, bounds.maxlat, bounds.minlon, bounds.maxlon):
        return None, None
    return (bounds.minlat + bounds.maxlat) / 2, (bounds.minlon + bounds.maxlon) / 2


def _normalize_btcmap(record: BtcmapRecord, source: LocationSource) -> LocationRecord:
    osm = record.osm_json
    tags = merge_btcmap_tags(osm.tags or {}, record.tags or {})
    nodes = None

    if isinstance(osm, OSMNode):
        lat, lon = osm.lat, osm.lon
    elif isinstance(osm, OSMWay):
        lat, lon = _way_coordinates(osm)
        nodes = list(osm.nodes) if osm.nodes is not None else None
    elif isinstance(osm, OSMRelation):
        lat, lon = _relation_coordinates(osm)
    else:
        raise TypeError(f"Unhandled osm_json variant: {type(osm).__name__}")

    return LocationRecord(
        id=osm.id,
        type=osm.type,
        lat=lat,
        lon=lon,
        tags=tags,
        nodes=nodes,
        source=source,
    )


def _normalize_overpass(element, source: LocationSource) -> LocationRecord:
    nodes = None

    if isinstance(element, OverpassNode):
        lat, lon = element.lat, element.lon
    elif isinstance(element, (OverpassWay, OverpassRelation)):
        # "out center" reports a center point for ways and relations
        lat, lon = _point_coordinates(element.center)
        if isinstance(element, OverpassWay) and element.nodes is not None:
            nodes = list(element.nodes)
    else:
        raise TypeError(f"Unhandled Overpass element: {type(element).__name__}")

    return LocationRecord(
        id=element.id,
        type=element.type,
        lat=lat,
        lon=lon,
        tags=dict(element.tags) if element.tags is not None else None,
        nodes=nodes,
        source=source,
    )


def normalize(record: RawRecord, source: LocationSource) -> LocationRecord:
    """Produce the canonical row for a parsed upstream record"""
    if isinstance(record, BtcmapRecord):
        return _normalize_btcmap(record, source)
    return _normalize_overpass(record, source)
