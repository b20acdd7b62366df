"""Shared HTTP plumbing for OpenStreetMap Nominatim.

One requests session, one global rate limit and one set of identifying
headers, as required by the Nominatim usage policy.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any

import requests

from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = settings.NOMINATIM_MIN_INTERVAL
NOMINATIM_BASE_URL = settings.NOMINATIM_BASE_URL.rstrip("/")
NOMINATIM_USER_AGENT = settings.NOMINATIM_USER_AGENT
NOMINATIM_REFERER = settings.NOMINATIM_REFERER

FALLBACK_UA = "outdoor-space-detector/0.1 (contact: example@example.com)"
if NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


_ua_value = NOMINATIM_USER_AGENT or FALLBACK_UA
logger.debug("Nominatim User-Agent: %s", _redact_email(_ua_value))
NOMINATIM_HEADERS = {
    "User-Agent": _ua_value,
}
if NOMINATIM_REFERER:
    NOMINATIM_HEADERS["Referer"] = NOMINATIM_REFERER


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)
