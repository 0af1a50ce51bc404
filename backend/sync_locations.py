#!/usr/bin/env python3
"""
Manual Location Sync

Runs one full sync pass (Overpass, then btcmap.org) against the configured
database and prints a summary. No retry is scheduled when run this way;
a failed pass exits with status 1.

Usage:
    python sync_locations.py
    python sync_locations.py --bbox 40.7,-74.1,40.8,-74.0
"""
import argparse
import asyncio
import logging
import sys
import os

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))

# Add parent directory to path
sys.path.insert(0, BACKEND_DIR)

# Settings are read at import time, so the backend .env must be loaded first
# when this runs from another working directory
from dotenv import load_dotenv
load_dotenv(f'{BACKEND_DIR}/.env')

from satsmap.core.config import settings
from satsmap.services.location_store import LocationStore
from satsmap.services.overpass import BoundingBox
from satsmap.services.sync import LocationSync, default_overpass_config


def parse_bbox(value: str) -> BoundingBox:
    """Parse 'south,west,north,east'"""
    try:
        south, west, north, east = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError("bbox must be 'south,west,north,east'")
    return BoundingBox(south=south, west=west, north=north, east=east)


async def sync_once(bbox: BoundingBox = None) -> int:
    store = LocationStore()
    store.init()

    overpass_config = default_overpass_config()
    if bbox:
        overpass_config.bounding_box = bbox

    location_sync = LocationSync(store, overpass_config=overpass_config)
    result = await location_sync.run()

    print()
    print("=" * 70)
    print(f"Sync {result.status}")
    print("=" * 70)
    print(f"{'Source':<12} {'Received':<10} {'Upserted':<10} {'Failed':<8}")
    print("-" * 70)
    for counts in (result.overpass, result.btcmap):
        print(f"{counts.source.value:<12} {counts.received:<10,} {counts.upserted:<10,} {counts.failed:<8}")
    if result.error:
        print(f"\nError: {result.error}")

    return 0 if result.status == "completed" else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one bitcoin location sync pass")
    parser.add_argument("--bbox", type=parse_bbox, help="Restrict the Overpass query to south,west,north,east")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    sys.exit(asyncio.run(sync_once(args.bbox)))
