"""
Places analysis: combine nearby place records, boundary geometry and the
outdoor space taxonomy into a ClassificationResult.

The only external call is the place lookup. Records are read, never mutated.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from domain.models import ClassificationResult, Coordinate, Explanations, OutdoorSpaceCategory
from services.boundaries import (
    BoundaryMatch,
    degrees_to_meters,
    find_containing_boundaries,
    nearest_edge_distance,
)
from services.places_client import get_default_place_lookup
from services.places_types import PlaceLookup, PlaceRecord
from services.space_classification import SpaceClassification, classify_outdoor_space, get_outdoor_space_weight

logger = logging.getLogger(__name__)

# Confidence bands per category for a point inside a boundary. Depth inside
# the boundary moves the score within its band, never across.
CONFIDENCE_BANDS = {
    OutdoorSpaceCategory.PRIMARY: (90, 98),
    OutdoorSpaceCategory.SECONDARY: (70, 85),
    OutdoorSpaceCategory.UNKNOWN: (40, 55),
    OutdoorSpaceCategory.EXCLUSION: (20, 35),
}
NOT_IN_BOUNDARY_CONFIDENCE = 20
FULL_DEPTH_METERS = 100.0


def banded_confidence(category: OutdoorSpaceCategory, distance: Optional[float]) -> int:
    """
    Confidence for a point inside a boundary of the given category.

    Deeper points are more certain: outdoor categories move up their band,
    exclusion moves down its band.
    """
    low, high = CONFIDENCE_BANDS[category]
    depth = 0.0
    if distance is not None and distance > 0:
        depth = min(1.0, degrees_to_meters(distance) / FULL_DEPTH_METERS)
    if category == OutdoorSpaceCategory.EXCLUSION:
        return int(round(high - (high - low) * depth))
    return int(round(low + (high - low) * depth))


def collect_place_types(places: Iterable[PlaceRecord]) -> List[str]:
    """Ordered union of every record's type tags."""
    types: List[str] = []
    for place in places:
        for place_type in place.types or []:
            if place_type not in types:
                types.append(place_type)
    return types


def _classify_match(match: BoundaryMatch) -> SpaceClassification:
    if match.place.is_manual_override:
        return SpaceClassification(
            category=OutdoorSpaceCategory.PRIMARY,
            reasons=["Outdoor space confirmed manually"],
        )
    return classify_outdoor_space(match.place.types)


def _overall_category(categories: Sequence[OutdoorSpaceCategory]) -> OutdoorSpaceCategory:
    """Any exclusion wins; otherwise the heaviest outdoor category."""
    if OutdoorSpaceCategory.EXCLUSION in categories:
        return OutdoorSpaceCategory.EXCLUSION
    return max(categories, key=get_outdoor_space_weight, default=OutdoorSpaceCategory.UNKNOWN)


def _display_name(place: PlaceRecord) -> str:
    return place.name or "this place"


def manual_override_result() -> ClassificationResult:
    return ClassificationResult(
        is_outdoors=True,
        is_in_building=False,
        in_boundary=True,
        confidence=100,
        reasons=[],
        explanations=Explanations(positive=["You've overridden outdoor detection."]),
    )


def _not_in_boundary_result(point: Coordinate, places: List[PlaceRecord], place_types: List[str]) -> ClassificationResult:
    return ClassificationResult(
        is_outdoors=False,
        is_in_building=False,
        in_boundary=False,
        confidence=NOT_IN_BOUNDARY_CONFIDENCE,
        reasons=["Not in any known outdoor space", "No recognized outdoor space types found"],
        explanations=Explanations(negative=["You're not in a recognized outdoor area."]),
        place_types=place_types,
        space_category=OutdoorSpaceCategory.UNKNOWN,
        distance_to_edge=nearest_edge_distance(point, places),
    )


def _explain(
    category: OutdoorSpaceCategory,
    winner: PlaceRecord,
    classified: List[Tuple[BoundaryMatch, SpaceClassification]],
) -> Explanations:
    name = _display_name(winner)
    if category == OutdoorSpaceCategory.PRIMARY:
        return Explanations(positive=[
            f"You're inside {name}.",
            "This is a primary outdoor space with high confidence.",
        ])
    if category == OutdoorSpaceCategory.SECONDARY:
        return Explanations(positive=[
            f"You're inside {name}.",
            "This appears to be a secondary outdoor space.",
        ])
    if category == OutdoorSpaceCategory.EXCLUSION:
        negative = ["You're inside or very close to a building.", f"{name} is likely an indoor area."]
        outdoor = next(
            (
                m.place
                for m, c in classified
                if c.category in (OutdoorSpaceCategory.PRIMARY, OutdoorSpaceCategory.SECONDARY)
            ),
            None,
        )
        if outdoor is not None:
            negative.append(f"However, you appear to be in an indoor area within {_display_name(outdoor)}.")
        return Explanations(negative=negative)
    return Explanations(negative=[f"You're inside {name}, but it isn't a recognized outdoor space."])


async def analyze_places_with_boundaries(
    lat: float,
    lng: float,
    map_handle: Any = None,
    is_manual_override: bool = False,
    lookup: Optional[PlaceLookup] = None,
) -> ClassificationResult:
    """
    Classify a coordinate against the places around it.

    `place_types` lists the tags of the containing places when the point is
    inside a boundary, and of every nearby place otherwise.
    Lookup errors propagate; the orchestrator decides what to do with them.
    """
    if is_manual_override:
        logger.info("Manual override for lat=%.6f lng=%.6f; skipping place lookup", lat, lng)
        return manual_override_result()

    if lookup is None:
        lookup = get_default_place_lookup()
    places = list(await lookup(lat, lng, map_handle) or [])
    logger.debug("Place lookup returned %d places for lat=%.6f lng=%.6f", len(places), lat, lng)

    point = Coordinate(lat=lat, lng=lng)
    matches = find_containing_boundaries(point, places)
    if not matches:
        return _not_in_boundary_result(point, places, collect_place_types(places))

    classified: List[Tuple[BoundaryMatch, SpaceClassification]] = []
    reasons: List[str] = []
    for match in matches:
        classification = _classify_match(match)
        logger.debug(
            "Containing place %r types=%s -> %s",
            match.place.name,
            match.place.types,
            classification.category.value,
        )
        classified.append((match, classification))
        reasons.append(f"Inside boundary of {_display_name(match.place)}")
        reasons.extend(classification.reasons)

    category = _overall_category([c.category for _, c in classified])
    # Deepest containing match of the winning category.
    winning_match = next(m for m, c in classified if c.category == category)

    return ClassificationResult(
        is_outdoors=category in (OutdoorSpaceCategory.PRIMARY, OutdoorSpaceCategory.SECONDARY),
        is_in_building=category == OutdoorSpaceCategory.EXCLUSION,
        in_boundary=True,
        confidence=banded_confidence(category, winning_match.distance),
        reasons=reasons,
        explanations=_explain(category, winning_match.place, classified),
        place_types=collect_place_types(m.place for m in matches),
        space_category=category,
        distance_to_edge=winning_match.distance,
        place_name=winning_match.place.name or None,
    )
