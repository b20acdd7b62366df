"""
Public entry point for outdoor detection.

Wraps the places analysis: manual override short-circuit, confidence
clamping, projection into debug info, and a safe fallback when anything
in the analysis fails.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from domain.models import DebugInfo, Explanations, OutdoorDetectionResult
from services.places_analysis import analyze_places_with_boundaries
from services.places_types import PlaceLookup

logger = logging.getLogger(__name__)


def clamp_confidence(value: float) -> int:
    return int(max(0, min(100, value)))


def manual_override_detection() -> OutdoorDetectionResult:
    return OutdoorDetectionResult(
        is_outdoors=True,
        confidence=100,
        reasons=["Manual override enabled"],
        explanations=Explanations(positive=["You've overridden outdoor detection."]),
        debug_info=DebugInfo(in_boundary=True, is_in_building=False),
    )


def failed_detection() -> OutdoorDetectionResult:
    return OutdoorDetectionResult(
        is_outdoors=False,
        confidence=0,
        reasons=["Detection failed"],
        explanations=Explanations(negative=["We couldn't analyze your location properly."]),
        debug_info=DebugInfo(in_boundary=False, is_in_building=False),
    )


async def analyze_outdoor_space(
    lat: float,
    lng: float,
    map_handle: Any = None,
    is_manual_override: bool = False,
    lookup: Optional[PlaceLookup] = None,
) -> OutdoorDetectionResult:
    """Decide whether (lat, lng) is outdoors. Never raises."""
    if is_manual_override:
        logger.info("Manual override enabled for lat=%.6f lng=%.6f", lat, lng)
        return manual_override_detection()

    try:
        result = await analyze_places_with_boundaries(lat, lng, map_handle, False, lookup=lookup)
    except Exception as exc:
        logger.warning("Outdoor detection failed for lat=%.6f lng=%.6f: %s", lat, lng, exc)
        return failed_detection()

    confidence = clamp_confidence(result.confidence)
    logger.info(
        "Outdoor detection lat=%.6f lng=%.6f: is_outdoors=%s confidence=%d category=%s",
        lat,
        lng,
        result.is_outdoors,
        confidence,
        result.space_category.value,
    )
    return OutdoorDetectionResult(
        is_outdoors=result.is_outdoors,
        confidence=confidence,
        reasons=list(result.reasons),
        explanations=Explanations(
            positive=list(result.explanations.positive),
            negative=list(result.explanations.negative),
        ),
        debug_info=DebugInfo(
            in_boundary=result.in_boundary,
            is_in_building=result.is_in_building,
            place_types=list(result.place_types),
            distance_to_edge=result.distance_to_edge,
            space_category=result.space_category,
            place_name=result.place_name,
        ),
    )
