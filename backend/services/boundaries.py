"""Boundary geometry over axis-aligned lat/lng boxes.

Corner fields may be plain numbers or zero-argument providers (live map
overlay objects expose ``lat()`` / ``lng()`` methods instead of values).
Every containment test re-reads them; nothing is cached, since the values
can change while the map moves.

Distances here are cheap degree-based estimates meant as relative signals,
not geodesic measurements.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from domain.models import BoundaryBox, LatLng, NumberSource
from services.places_types import PlaceRecord

logger = logging.getLogger(__name__)

METERS_PER_DEGREE = 111_000.0
FALLBACK_DELTA_DEG = 0.001  # ~110m


@dataclass(frozen=True)
class BoundaryMatch:
    place: PlaceRecord
    boundary: BoundaryBox
    distance: float  # degrees to the nearest edge, positive inside


def resolve_number(value: NumberSource) -> float:
    """Evaluate a numeric field that may be a literal or a deferred provider."""
    if callable(value):
        value = value()
    if value is None or isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def corner_value(corner: Any, axis: str) -> float:
    """Read `lat` or `lng` from a corner given as a mapping or an object."""
    if corner is None:
        raise ValueError("missing corner")
    if isinstance(corner, Mapping):
        value = corner[axis]
    else:
        value = getattr(corner, axis)
    return resolve_number(value)


def _box_corner(box: Any, name: str) -> Any:
    if isinstance(box, Mapping):
        return box.get(name)
    return getattr(box, name, None)


def _resolve_box(box: Any) -> Optional[Tuple[float, float, float, float]]:
    """
    Resolve a box into (south, north, west, east), normalizing swapped corners.

    Returns None for an empty or malformed box.
    """
    if box is None:
        return None
    try:
        northeast = _box_corner(box, "northeast")
        southwest = _box_corner(box, "southwest")
        ne_lat = corner_value(northeast, "lat")
        ne_lng = corner_value(northeast, "lng")
        sw_lat = corner_value(southwest, "lat")
        sw_lng = corner_value(southwest, "lng")
    except Exception as exc:
        logger.debug("Ignoring malformed boundary %r: %s", box, exc)
        return None
    values = (ne_lat, ne_lng, sw_lat, sw_lng)
    if any(math.isnan(v) for v in values):
        return None
    south, north = sorted((sw_lat, ne_lat))
    west, east = sorted((sw_lng, ne_lng))
    return south, north, west, east


def _resolve_point(point: Any) -> Tuple[float, float]:
    if isinstance(point, (tuple, list)):
        return float(point[0]), float(point[1])
    return corner_value(point, "lat"), corner_value(point, "lng")


def contains_point(box: Any, point: Any) -> bool:
    """True when the point lies inside the box, edges included."""
    edges = _resolve_box(box)
    if edges is None:
        return False
    lat, lng = _resolve_point(point)
    south, north, west, east = edges
    return south <= lat <= north and west <= lng <= east


def distance_to_edge(box: Any, point: Any) -> Optional[float]:
    """
    Smallest signed margin (degrees) between the point and the box edges.

    Positive inside, near zero at an edge, negative outside. None when the
    box is malformed.
    """
    edges = _resolve_box(box)
    if edges is None:
        return None
    lat, lng = _resolve_point(point)
    south, north, west, east = edges
    return min(north - lat, lat - south, east - lng, lng - west)


def degrees_to_meters(degrees: float) -> float:
    # Rough: one degree of latitude is about 111km.
    return abs(degrees) * METERS_PER_DEGREE


def fallback_boundary(lat: float, lng: float, delta: float = FALLBACK_DELTA_DEG) -> BoundaryBox:
    """Small box around a point location, for places that only report a location."""
    return BoundaryBox(
        northeast=LatLng(lat=lat + delta, lng=lng + delta),
        southwest=LatLng(lat=lat - delta, lng=lng - delta),
        is_fallback=True,
    )


def find_containing_boundaries(point: Any, places: Iterable[PlaceRecord]) -> List[BoundaryMatch]:
    """
    Places whose boundaries contain the point, deepest first.

    A place with several containing boundaries is reported once, with its
    deepest box.
    """
    matches: List[BoundaryMatch] = []
    for place in places:
        best: Optional[BoundaryMatch] = None
        for boundary in place.boundaries or []:
            if not contains_point(boundary, point):
                continue
            distance = distance_to_edge(boundary, point)
            if distance is None:
                continue
            if best is None or distance > best.distance:
                best = BoundaryMatch(place=place, boundary=boundary, distance=distance)
        if best is not None:
            matches.append(best)
    return sorted(matches, key=lambda m: m.distance, reverse=True)


def nearest_edge_distance(point: Any, places: Iterable[PlaceRecord]) -> Optional[float]:
    """Signed distance to the closest boundary edge across all places."""
    nearest: Optional[float] = None
    for place in places:
        for boundary in place.boundaries or []:
            distance = distance_to_edge(boundary, point)
            if distance is None:
                continue
            if nearest is None or distance > nearest:
                nearest = distance
    return nearest
