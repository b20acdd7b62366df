"""
Place lookup backed by Nominatim (OSM) reverse geocoding, plus helpers that
turn provider payloads into PlaceRecords with boundary boxes.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from domain.models import BoundaryBox, LatLng
from services.boundaries import corner_value, fallback_boundary
from services.errors import PlaceLookupError
from services.nominatim import NOMINATIM_BASE_URL, NOMINATIM_HEADERS, _throttled_get
from services.places_types import PlaceLookup, PlaceRecord
from settings import settings

# (OSM category, OSM type) -> vocabulary tag. A None type matches any type
# in that category.
OSM_TYPE_ALIASES: Dict[Tuple[str, Optional[str]], str] = {
    ("leisure", "park"): "park",
    ("leisure", "nature_reserve"): "nature_reserve",
    ("leisure", "garden"): "garden",
    ("leisure", "playground"): "playground",
    ("leisure", "golf_course"): "golf_course",
    ("leisure", "pitch"): "athletic_field",
    ("leisure", "dog_park"): "dog_park",
    ("leisure", "stadium"): "stadium",
    ("leisure", "sports_centre"): "sports_complex",
    ("leisure", "fitness_centre"): "fitness_center",
    ("leisure", "marina"): "marina",
    ("boundary", "national_park"): "national_park",
    ("boundary", "protected_area"): "nature_reserve",
    ("landuse", "forest"): "forest",
    ("landuse", "grass"): "grassland",
    ("landuse", "meadow"): "meadow",
    ("landuse", "cemetery"): "cemetery",
    ("tourism", "attraction"): "tourist_attraction",
    ("tourism", "viewpoint"): "viewpoint",
    ("tourism", "camp_site"): "campground",
    ("tourism", "caravan_site"): "rv_park",
    ("tourism", "theme_park"): "amusement_park",
    ("tourism", "hotel"): "lodging",
    ("place", "square"): "town_square",
    ("highway", "path"): "trail",
    ("highway", "footway"): "trail",
    ("highway", "pedestrian"): "plaza",
    ("amenity", "university"): "university",
    ("shop", "mall"): "shopping_mall",
    ("natural", None): "natural_feature",
    ("historic", None): "historical_landmark",
    ("shop", None): "store",
    ("building", None): "building",
}


def vocabulary_types(category: Optional[str], osm_type: Optional[str]) -> List[str]:
    """Vocabulary alias first, then the raw OSM type and category, deduplicated."""
    types: List[str] = []
    alias = None
    if category:
        alias = OSM_TYPE_ALIASES.get((category, osm_type)) or OSM_TYPE_ALIASES.get((category, None))
    for tag in (alias, osm_type, category):
        if tag and tag != "yes" and tag not in types:
            types.append(tag)
    return types


def place_record_from_nominatim(item: Mapping[str, Any], provider: str = "osm") -> PlaceRecord:
    """Build a PlaceRecord from one Nominatim jsonv2 result."""
    category = item.get("category") or item.get("class")
    lat = float(item["lat"]) if item.get("lat") is not None else None
    lng = float(item["lon"]) if item.get("lon") is not None else None

    boundaries: List[BoundaryBox] = []
    bbox = item.get("boundingbox")
    if bbox and len(bbox) == 4:
        # Nominatim order: [south, north, west, east]
        south, north, west, east = (float(v) for v in bbox)
        boundaries.append(
            BoundaryBox(northeast=LatLng(lat=north, lng=east), southwest=LatLng(lat=south, lng=west))
        )
    elif lat is not None and lng is not None:
        boundaries.append(fallback_boundary(lat, lng))

    return PlaceRecord(
        provider=provider,
        place_id=str(item.get("place_id", "")),
        name=item.get("name") or item.get("display_name") or "",
        types=vocabulary_types(category, item.get("type")),
        boundaries=boundaries,
        lat=lat,
        lng=lng,
        raw=dict(item),
    )


def place_record_from_dict(data: Mapping[str, Any], provider: str = "google") -> PlaceRecord:
    """
    Build a PlaceRecord from a Google-Places-shaped mapping.

    Viewport corners are kept as given (their lat/lng may be callables) and
    resolved at containment time. A place with a location but no viewport
    gets a small fallback box around the location.
    """
    geometry = data.get("geometry") or {}
    location = geometry.get("location")
    viewport = geometry.get("viewport") or {}

    lat = lng = None
    if location is not None:
        lat = corner_value(location, "lat")
        lng = corner_value(location, "lng")

    boundaries: List[BoundaryBox] = []
    if viewport.get("northeast") is not None and viewport.get("southwest") is not None:
        boundaries.append(BoundaryBox(northeast=viewport["northeast"], southwest=viewport["southwest"]))
    elif lat is not None and lng is not None:
        boundaries.append(fallback_boundary(lat, lng))

    return PlaceRecord(
        provider=provider,
        place_id=str(data.get("place_id", "")),
        name=data.get("name") or "",
        types=list(data.get("types") or []),
        boundaries=boundaries,
        lat=lat,
        lng=lng,
        is_manual_override=bool(data.get("manual_override", False)),
        raw=dict(data),
    )


def payload_place_lookup(payloads: Sequence[Mapping[str, Any]], provider: str = "google") -> PlaceLookup:
    """
    A lookup over raw client-supplied place dicts.

    Records are built when the lookup is awaited, so a malformed payload
    fails inside the analysis like any other lookup error.
    """
    snapshot = list(payloads)

    async def lookup(lat: float, lng: float, map_handle: Any = None) -> List[PlaceRecord]:
        try:
            return [place_record_from_dict(p, provider=provider) for p in snapshot]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PlaceLookupError(f"Malformed place data: {exc!r}") from exc

    return lookup


class NominatimPlaceLookup:
    def __init__(
        self,
        provider: str = "osm",
        base_url: Optional[str] = None,
        zooms: Optional[Sequence[int]] = None,
        timeout: float = 5.0,
    ):
        self.provider = provider
        base = (base_url or NOMINATIM_BASE_URL).rstrip("/")
        if base.endswith("/reverse"):
            base = base[: -len("/reverse")]
        self.base_url = base
        self.zooms = list(zooms or settings.NOMINATIM_REVERSE_ZOOMS)
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def _reverse_lookup(self, lat: float, lng: float, zoom: int) -> Any:
        params = {
            "format": "jsonv2",
            "lat": str(lat),
            "lon": str(lng),
            "zoom": str(zoom),
            "namedetails": "1",
        }
        try:
            resp = _throttled_get(
                f"{self.base_url}/reverse",
                params=params,
                headers=NOMINATIM_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise PlaceLookupError(f"Nominatim request failed: {exc}") from exc
        if not resp.ok:
            raise PlaceLookupError(f"Nominatim reverse lookup failed: HTTP {resp.status_code} {resp.reason}")
        try:
            return resp.json()
        except ValueError as exc:
            raise PlaceLookupError("Nominatim returned a non-JSON response") from exc

    def search_nearby(self, lat: float, lng: float) -> List[PlaceRecord]:
        """Blocking lookup: one reverse query per configured zoom, deduplicated by place id."""
        records: List[PlaceRecord] = []
        seen_ids: set[str] = set()
        for zoom in self.zooms:
            data = self._reverse_lookup(lat, lng, zoom)
            candidates = data if isinstance(data, list) else [data]
            for item in candidates:
                # {"error": "Unable to geocode"} means nothing here, not a failure.
                if not isinstance(item, Mapping) or "error" in item:
                    continue
                try:
                    record = place_record_from_nominatim(item, provider=self.provider)
                except (TypeError, ValueError, KeyError) as exc:
                    raise PlaceLookupError(f"Malformed Nominatim result: {exc}") from exc
                if record.place_id and record.place_id in seen_ids:
                    continue
                seen_ids.add(record.place_id)
                records.append(record)

        self.logger.debug(
            "NominatimPlaceLookup.search_nearby: provider=%s lat=%.6f lng=%.6f zooms=%s got %d places",
            self.provider,
            lat,
            lng,
            self.zooms,
            len(records),
        )
        return records

    async def lookup(self, lat: float, lng: float, map_handle: Any = None) -> List[PlaceRecord]:
        # map_handle is only meaningful to in-browser lookups.
        if not settings.PLACES_LOOKUP_ENABLED:
            return []
        return await asyncio.to_thread(self.search_nearby, lat, lng)

    async def __call__(self, lat: float, lng: float, map_handle: Any = None) -> List[PlaceRecord]:
        return await self.lookup(lat, lng, map_handle)


_default_place_lookup: Optional[NominatimPlaceLookup] = None


def get_default_place_lookup() -> NominatimPlaceLookup:
    global _default_place_lookup
    if _default_place_lookup is None:
        _default_place_lookup = NominatimPlaceLookup()
    return _default_place_lookup
