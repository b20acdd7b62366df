"""
Location preference and acquisition helpers.

The preference ("precise" or "ip") lives in a small SQLite key-value store.
IP geolocation goes through a JSON endpoint; device geolocation goes through
whatever geolocator the host registers with `set_device_geolocator`.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import sqlite3
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

import requests

from domain.models import Coordinate, LocationPreference, LocationResult, PositionOptions
from services.errors import GeolocationError
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()

PREFERENCE_KEY = "location_preference_status"

# geolocator(options) -> Coordinate, sync or async. Raises PermissionError
# when the user denies access.
DeviceGeolocator = Callable[[PositionOptions], Union[Coordinate, Awaitable[Coordinate]]]
_device_geolocator: Optional[DeviceGeolocator] = None


class PreferenceStore:
    """SQLite key-value store for user preferences.

    Defaults to `LOCATION_PREFERENCE_DB`, which lives under the package-local
    `backend/data/` directory unless overridden.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = Path(db_path or settings.LOCATION_PREFERENCE_DB)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


_default_store: Optional[PreferenceStore] = None


def get_default_preference_store() -> Optional[PreferenceStore]:
    """Shared store, or None when preferences are disabled or the DB can't be opened."""
    global _default_store
    if not settings.LOCATION_PREFERENCE_STORE_ENABLED:
        return None
    if _default_store is None:
        try:
            _default_store = PreferenceStore()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Location preference store unavailable: %s", exc)
            return None
    return _default_store


def get_location_preference(store: Optional[PreferenceStore] = None) -> Optional[LocationPreference]:
    if store is None:
        store = get_default_preference_store()
    if store is None:
        return None
    try:
        raw = store.get(PREFERENCE_KEY)
    except sqlite3.Error as exc:
        logger.warning("Could not read location preference: %s", exc)
        return None
    if raw is None:
        return None
    try:
        return LocationPreference(raw)
    except ValueError:
        logger.warning("Ignoring unusable stored location preference %r", raw)
        return None


def set_location_preference(
    value: Union[LocationPreference, str, None],
    store: Optional[PreferenceStore] = None,
) -> None:
    """Persist the preference; None clears it. Raises ValueError for an unknown token."""
    preference = LocationPreference(value) if value is not None else None
    if store is None:
        store = get_default_preference_store()
    if store is None:
        logger.debug("No preference store; not saving location preference %r", value)
        return
    try:
        if preference is None:
            store.remove(PREFERENCE_KEY)
        else:
            store.set(PREFERENCE_KEY, preference.value)
    except sqlite3.Error as exc:
        logger.warning("Could not save location preference: %s", exc)


def _fetch_ip_location() -> LocationResult:
    try:
        resp = _session.get(settings.IP_GEOLOCATION_URL, timeout=settings.IP_GEOLOCATION_TIMEOUT)
    except requests.RequestException as exc:
        raise GeolocationError(f"IP Geolocation failed: {exc}") from exc
    if not resp.ok:
        raise GeolocationError(f"IP Geolocation failed: {resp.reason}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise GeolocationError("Invalid location data from IP geolocation") from exc
    if not isinstance(data, dict):
        raise GeolocationError("Invalid location data from IP geolocation")

    lat = data.get("latitude")
    lng = data.get("longitude")
    if lat is None or lng is None:
        raise GeolocationError("Invalid location data from IP geolocation")
    try:
        return LocationResult(lat=float(lat), lng=float(lng), is_precise=False)
    except (TypeError, ValueError) as exc:
        raise GeolocationError("Invalid location data from IP geolocation") from exc


async def get_location_from_ip() -> LocationResult:
    """Approximate location from the caller's public IP."""
    try:
        return await asyncio.to_thread(_fetch_ip_location)
    except GeolocationError as exc:
        logger.warning("%s", exc)
        raise


def set_device_geolocator(geolocator: Optional[DeviceGeolocator]) -> None:
    """Register the device geolocation capability; None removes it."""
    global _device_geolocator
    _device_geolocator = geolocator


def position_options() -> PositionOptions:
    return PositionOptions(
        enable_high_accuracy=True,
        timeout_ms=settings.PRECISE_LOCATION_TIMEOUT_MS,
        maximum_age_ms=0,
    )


async def _call_geolocator(geolocator: DeviceGeolocator, options: PositionOptions) -> Any:
    if inspect.iscoroutinefunction(geolocator):
        return await geolocator(options)
    result = await asyncio.to_thread(geolocator, options)
    if inspect.isawaitable(result):
        result = await result
    return result


async def try_precise_location(geolocator: Optional[DeviceGeolocator] = None) -> LocationResult:
    """Single-shot high-accuracy device location, bounded by the configured timeout."""
    geolocator = geolocator or _device_geolocator
    if geolocator is None:
        raise GeolocationError("Geolocation is not supported on this platform")

    options = position_options()
    try:
        coordinate = await asyncio.wait_for(
            _call_geolocator(geolocator, options),
            timeout=options.timeout_ms / 1000,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("Device geolocation timed out after %d ms", options.timeout_ms)
        raise GeolocationError("Timed out waiting for device location") from exc
    except PermissionError as exc:
        logger.warning("Device geolocation denied: %s", exc)
        raise GeolocationError("Location permission denied") from exc
    except GeolocationError:
        raise
    except Exception as exc:
        logger.warning("Device geolocation failed: %s", exc)
        raise GeolocationError(f"Device location unavailable: {exc}") from exc

    try:
        return LocationResult(lat=float(coordinate.lat), lng=float(coordinate.lng), is_precise=True)
    except (AttributeError, TypeError, ValueError) as exc:
        raise GeolocationError("Invalid location data from device geolocation") from exc


async def request_precise_location(geolocator: Optional[DeviceGeolocator] = None) -> LocationResult:
    """Ask the device for a precise fix. Does not touch the stored preference."""
    return await try_precise_location(geolocator)


async def get_ip_based_location() -> LocationResult:
    """Opt out of precise location and use the IP-based estimate."""
    set_location_preference(LocationPreference.IP)
    location = await get_location_from_ip()
    return LocationResult(lat=location.lat, lng=location.lng, is_precise=False)


async def get_user_location() -> LocationResult:
    try:
        return await get_location_from_ip()
    except GeolocationError as exc:
        raise GeolocationError("Could not determine location") from exc
