"""
Location read API - thin handlers over the location store
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..core.exceptions import NotFoundError
from ..schemas.location import (
    CountryStats,
    Location,
    LocationCoordinates,
    LocationStats,
    LocationTypes,
)
from ..services.cache import ResponseCache, get_response_cache
from ..services.location_store import LocationStore, get_location_store

logger = logging.getLogger(__name__)

router = APIRouter()


def build_location_stats(store: LocationStore) -> LocationStats:
    """Reshape the store aggregates into the public stats payload"""
    stats = store.payment_stats()
    last_updated = store.last_updated()

    return LocationStats(
        total_locations=stats.total_locations,
        location_types=LocationTypes(
            physical_locations=stats.nodes,
            areas_or_buildings=stats.ways,
        ),
        countries=CountryStats(
            total_countries=len(stats.countries),
            distribution=stats.countries,
        ),
        last_updated=last_updated.isoformat() if last_updated else None,
    )


@router.get("/locations", response_model=List[Location])
def get_locations(
    store: LocationStore = Depends(get_location_store),
    cache: ResponseCache = Depends(get_response_cache),
):
    """Get all bitcoin locations that have coordinates"""
    try:
        return cache.get_or_set("locations", store.all)
    except Exception:
        logger.exception("Failed to fetch locations")
        raise HTTPException(status_code=500, detail="Failed to fetch locations")


@router.get("/coordinates", response_model=List[LocationCoordinates])
def get_coordinates(
    store: LocationStore = Depends(get_location_store),
    cache: ResponseCache = Depends(get_response_cache),
):
    """Get id/type/lat/lon only, for drawing many markers"""
    try:
        return cache.get_or_set("coordinates", store.coordinates_only)
    except Exception:
        logger.exception("Failed to fetch coordinates")
        raise HTTPException(status_code=500, detail="Failed to fetch coordinates")


@router.get("/locations/{location_id}", response_model=Location)
def get_location(
    location_id: int,
    store: LocationStore = Depends(get_location_store),
):
    try:
        location = store.by_id(location_id)
    except Exception:
        logger.exception(f"Failed to fetch location {location_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch location")

    if location is None:
        raise NotFoundError(f"Location {location_id} not found")
    return location


@router.get("/stats", response_model=LocationStats)
def get_stats(
    store: LocationStore = Depends(get_location_store),
    cache: ResponseCache = Depends(get_response_cache),
):
    """Get payment statistics"""
    try:
        return cache.get_or_set("stats", lambda: build_location_stats(store))
    except Exception:
        logger.exception("Failed to fetch statistics")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")
