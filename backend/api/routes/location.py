"""
Location preference and IP geolocation API routes.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.errors import GeolocationError
from services.location import (
    get_location_from_ip,
    get_location_preference,
    set_location_preference,
)

router = APIRouter()


class PreferenceBody(BaseModel):
    preference: Optional[str] = None  # "precise", "ip" or null to clear


class LocationResponse(BaseModel):
    lat: float
    lng: float
    is_precise: bool


@router.get("/preference", response_model=PreferenceBody)
async def read_preference():
    preference = get_location_preference()
    return PreferenceBody(preference=preference.value if preference else None)


@router.put("/preference", response_model=PreferenceBody)
async def update_preference(body: PreferenceBody):
    try:
        set_location_preference(body.preference)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown location preference: {body.preference}")
    preference = get_location_preference()
    return PreferenceBody(preference=preference.value if preference else None)


@router.delete("/preference", response_model=PreferenceBody)
async def clear_preference():
    set_location_preference(None)
    return PreferenceBody(preference=None)


@router.get("/ip", response_model=LocationResponse)
async def ip_location():
    """Approximate location of the server's public IP."""
    try:
        location = await get_location_from_ip()
    except GeolocationError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return LocationResponse(lat=location.lat, lng=location.lng, is_precise=location.is_precise)
