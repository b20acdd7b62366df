"""
Outdoor detection API routes.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from services.grass_detection import analyze_grass
from services.outdoor_detection import analyze_outdoor_space
from services.places_client import payload_place_lookup
from services.places_types import PlaceLookup

router = APIRouter()


class AnalyzeRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    manual_override: bool = False
    # Places already fetched by the client (Google-Places-shaped dicts).
    # When omitted the server looks places up itself.
    places: Optional[List[Dict[str, Any]]] = None


def _lookup_for(request: AnalyzeRequest) -> Optional[PlaceLookup]:
    if request.places is None:
        return None
    return payload_place_lookup(request.places)


@router.post("/analyze")
async def analyze(request: AnalyzeRequest):
    """Decide whether the coordinate is outdoors."""
    result = await analyze_outdoor_space(
        request.lat,
        request.lng,
        None,
        request.manual_override,
        lookup=_lookup_for(request),
    )
    return result.to_dict()


@router.post("/grass")
async def grass(request: AnalyzeRequest):
    """Decide whether the coordinate is somewhere you can touch grass."""
    result = await analyze_grass(
        request.lat,
        request.lng,
        None,
        request.manual_override,
        lookup=_lookup_for(request),
    )
    return result.to_dict()
