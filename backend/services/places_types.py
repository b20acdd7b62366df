from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Any

from domain.models import BoundaryBox


@dataclass(frozen=True)
class PlaceRecord:
    provider: str  # e.g. "osm", "google"
    place_id: str  # provider-specific place id
    name: str
    types: List[str]  # controlled vocabulary tags, e.g. "park", "shopping_mall"
    boundaries: List[BoundaryBox] = field(default_factory=list)
    lat: Optional[float] = None
    lng: Optional[float] = None
    is_manual_override: bool = False
    raw: Optional[dict] = None


# lookup(lat, lng, map_handle) -> places near the coordinate.
# Must raise on transport or parsing errors rather than return a sentinel.
PlaceLookup = Callable[[float, float, Any], Awaitable[List[PlaceRecord]]]
