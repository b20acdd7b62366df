"""
Core domain models for outdoor space detection.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union


# A boundary corner field is either a literal number or a zero-argument
# provider (map SDK objects expose both forms).
NumberSource = Union[float, int, Callable[[], float]]


class OutdoorSpaceCategory(str, Enum):
    """Outdoor standing of a place, derived from its type tags."""
    PRIMARY = "primary"  # Parks, reserves, trails
    SECONDARY = "secondary"  # Plazas, tourist attractions
    EXCLUSION = "exclusion"  # Malls, buildings, indoor venues
    UNKNOWN = "unknown"


class LocationPreference(str, Enum):
    """How the user prefers their location to be acquired."""
    PRECISE = "precise"
    IP = "ip"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class LatLng:
    """A boundary corner. Fields may be literals or providers."""
    lat: NumberSource
    lng: NumberSource


@dataclass(frozen=True)
class BoundaryBox:
    """
    Axis-aligned rectangle approximating a place's extent.

    Corners are usually LatLng instances, but any mapping or object exposing
    `lat` / `lng` (as values or zero-argument callables) is accepted.
    A box missing either corner never contains anything.
    """
    northeast: Optional[Any] = None
    southwest: Optional[Any] = None
    is_fallback: bool = False  # synthesized around a point location


@dataclass
class Explanations:
    """User-facing sentences for and against the outdoor verdict."""
    positive: List[str] = field(default_factory=list)
    negative: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"positive": list(self.positive), "negative": list(self.negative)}


@dataclass
class ClassificationResult:
    """
    Detailed output of the places analysis.

    `confidence` is not clamped here; the orchestrator clamps it.
    `distance_to_edge` is in degrees, negative when outside every boundary.
    """
    is_outdoors: bool = False
    is_in_building: bool = False
    in_boundary: bool = False
    confidence: int = 0
    reasons: List[str] = field(default_factory=list)
    explanations: Explanations = field(default_factory=Explanations)
    place_types: List[str] = field(default_factory=list)
    space_category: OutdoorSpaceCategory = OutdoorSpaceCategory.UNKNOWN
    distance_to_edge: Optional[float] = None
    place_name: Optional[str] = None


@dataclass
class DebugInfo:
    in_boundary: bool
    is_in_building: bool
    place_types: Optional[List[str]] = None
    distance_to_edge: Optional[float] = None
    space_category: Optional[OutdoorSpaceCategory] = None
    place_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "in_boundary": self.in_boundary,
            "is_in_building": self.is_in_building,
        }
        if self.place_types is not None:
            data["place_types"] = list(self.place_types)
        if self.distance_to_edge is not None:
            data["distance_to_edge"] = self.distance_to_edge
        if self.space_category is not None:
            data["space_category"] = self.space_category.value
        if self.place_name is not None:
            data["place_name"] = self.place_name
        return data


@dataclass
class OutdoorDetectionResult:
    """Public result of outdoor detection. Confidence is always within 0-100."""
    is_outdoors: bool
    confidence: int
    reasons: List[str]
    explanations: Explanations
    debug_info: DebugInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_outdoors": self.is_outdoors,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "explanations": self.explanations.to_dict(),
            "debug_info": self.debug_info.to_dict(),
        }


@dataclass
class GrassDebugInfo:
    is_in_park: bool = False
    is_in_building: bool = False
    place_types: List[str] = field(default_factory=list)


@dataclass
class GrassDetectionResult:
    is_touching_grass: bool
    confidence: int
    reasons: List[str]
    explanations: Explanations
    debug_info: GrassDebugInfo = field(default_factory=GrassDebugInfo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_touching_grass": self.is_touching_grass,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
            "explanations": self.explanations.to_dict(),
            "debug_info": {
                "is_in_park": self.debug_info.is_in_park,
                "is_in_building": self.debug_info.is_in_building,
                "place_types": list(self.debug_info.place_types),
            },
        }


@dataclass(frozen=True)
class LocationResult:
    lat: float
    lng: float
    is_precise: bool


@dataclass(frozen=True)
class PositionOptions:
    """Options handed to a device geolocator for a single-shot request."""
    enable_high_accuracy: bool = True
    timeout_ms: int = 5000
    maximum_age_ms: int = 0  # never reuse a cached position
