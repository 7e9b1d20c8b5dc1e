"""Geographic helpers: great-circle distance, location history cleanup and map tiles."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

EARTH_RADIUS_KM = 6371.0

# A gateway has to move further than this to count as a new location.
MOVE_THRESHOLD_KM = 0.1


@dataclass
class Location:
    """A position a gateway was installed at, from a given time onwards."""

    network_id: str
    gateway_id: str
    latitude: float
    longitude: float
    altitude: int = 0
    installed_at: datetime | None = None


class TileBounds(NamedTuple):
    """Edges of a map tile, in degrees."""

    north: float
    south: float
    west: float
    east: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in kilometres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return c * EARTH_RADIUS_KM


def _distance(a: Location, b: Location) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def filter_locations(locations: Sequence[Location]) -> list[Location]:
    """Drop location entries that are not real moves.

    An entry is kept when it lies more than 100 m from the last kept entry,
    unless it is exactly the entry before that (a gateway oscillating
    between two positions).
    """
    if not locations:
        raise ValueError("no locations to filter")

    kept = [locations[0]]
    for location in locations:
        moved = _distance(kept[-1], location) > MOVE_THRESHOLD_KM
        if len(kept) >= 2 and _distance(kept[-2], location) == 0:
            moved = False
        if moved:
            kept.append(location)
    return kept


def tile_corner(x: int, y: int, zoom: int) -> tuple[float, float]:
    """Return (latitude, longitude) of the north-west corner of a slippy-map tile."""
    n = 2.0**zoom
    longitude = x / n * 360.0 - 180.0
    latitude = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y / n))))
    return latitude, longitude


def tile_bounds(x: int, y: int, zoom: int) -> TileBounds:
    """Return the edges of a slippy-map tile."""
    north, west = tile_corner(x, y, zoom)
    south, east = tile_corner(x + 1, y + 1, zoom)
    return TileBounds(north=north, south=south, west=west, east=east)