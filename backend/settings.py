import os
from pathlib import Path
from typing import List, Optional

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int_list(val: str | None, default: List[int]) -> List[int]:
    if not val:
        return list(default)
    return [int(part) for part in val.split(",") if part.strip()]


class Settings:
    def __init__(self) -> None:
        self.PLACES_LOOKUP_ENABLED: bool = _as_bool(os.getenv("PLACES_LOOKUP_ENABLED"), True)
        self.NOMINATIM_BASE_URL: str = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
        # Building-level first, then the enclosing area.
        self.NOMINATIM_REVERSE_ZOOMS: List[int] = _as_int_list(os.getenv("NOMINATIM_REVERSE_ZOOMS"), [18, 16])
        self.NOMINATIM_MIN_INTERVAL: float = float(os.getenv("NOMINATIM_MIN_INTERVAL", "1.1"))
        self.NOMINATIM_USER_AGENT: Optional[str] = os.getenv("NOMINATIM_USER_AGENT")
        self.NOMINATIM_REFERER: Optional[str] = os.getenv("NOMINATIM_REFERER")
        self.IP_GEOLOCATION_URL: str = os.getenv("IP_GEOLOCATION_URL", "https://ipapi.co/json/")
        self.IP_GEOLOCATION_TIMEOUT: float = float(os.getenv("IP_GEOLOCATION_TIMEOUT", "5.0"))
        self.PRECISE_LOCATION_TIMEOUT_MS: int = int(os.getenv("PRECISE_LOCATION_TIMEOUT_MS", "5000"))
        self.LOCATION_PREFERENCE_STORE_ENABLED: bool = _as_bool(
            os.getenv("LOCATION_PREFERENCE_STORE_ENABLED"), True
        )
        self.LOCATION_PREFERENCE_DB: str = os.getenv(
            "LOCATION_PREFERENCE_DB", str(BACKEND_ROOT / "data" / "preferences.sqlite")
        )


settings = Settings()
