"""Touching-grass verdict derived from the outdoor detection result."""
from __future__ import annotations

import logging
from typing import Any, Optional

from domain.models import Explanations, GrassDebugInfo, GrassDetectionResult, OutdoorSpaceCategory
from services.outdoor_detection import analyze_outdoor_space
from services.places_types import PlaceLookup

logger = logging.getLogger(__name__)

GREEN_SPACE_TYPES = frozenset({"park", "playground", "campground", "natural_feature", "garden"})
GREEN_SPACE_CONFIDENCE = 95


def failed_grass_detection() -> GrassDetectionResult:
    return GrassDetectionResult(
        is_touching_grass=False,
        confidence=0,
        reasons=["Detection failed"],
        explanations=Explanations(negative=["We couldn't determine if you're touching grass."]),
    )


async def analyze_grass(
    lat: float,
    lng: float,
    map_handle: Any = None,
    is_manual_override: bool = False,
    lookup: Optional[PlaceLookup] = None,
) -> GrassDetectionResult:
    if is_manual_override:
        return GrassDetectionResult(
            is_touching_grass=True,
            confidence=100,
            reasons=["Manual override enabled"],
            explanations=Explanations(positive=["You've overridden grass detection."]),
            debug_info=GrassDebugInfo(is_in_park=True, is_in_building=False),
        )

    try:
        outdoor = await analyze_outdoor_space(lat, lng, map_handle, False, lookup=lookup)
        debug = outdoor.debug_info
        place_types = list(debug.place_types or [])

        named_playground = "playground" in (debug.place_name or "").lower()
        is_green = bool(GREEN_SPACE_TYPES.intersection(place_types)) or named_playground
        # place_types only name containing places once the point is in a boundary.
        if debug.in_boundary and not debug.is_in_building and is_green:
            logger.info("lat=%.6f lng=%.6f is in a park area; counting as touching grass", lat, lng)
            return GrassDetectionResult(
                is_touching_grass=True,
                confidence=GREEN_SPACE_CONFIDENCE,
                reasons=["Location is in a park or green space area"],
                explanations=Explanations(positive=["Parks and green spaces typically have grass areas"]),
                debug_info=GrassDebugInfo(is_in_park=True, is_in_building=False, place_types=place_types),
            )

        is_touching_grass = outdoor.is_outdoors and debug.space_category == OutdoorSpaceCategory.PRIMARY
        return GrassDetectionResult(
            is_touching_grass=is_touching_grass,
            confidence=outdoor.confidence,
            reasons=list(outdoor.reasons),
            explanations=outdoor.explanations,
            debug_info=GrassDebugInfo(
                is_in_park=is_touching_grass,
                is_in_building=debug.is_in_building,
                place_types=place_types,
            ),
        )
    except Exception as exc:
        logger.warning("Grass detection failed for lat=%.6f lng=%.6f: %s", lat, lng, exc)
        return failed_grass_detection()
