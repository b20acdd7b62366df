import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def isolated_singletons(tmp_path, monkeypatch):
    """Keep module-level stores and lookups from leaking between tests."""
    from services import location, places_client
    from settings import settings

    monkeypatch.setattr(settings, "LOCATION_PREFERENCE_DB", str(tmp_path / "preferences.sqlite"))
    monkeypatch.setattr(location, "_default_store", None)
    monkeypatch.setattr(places_client, "_default_place_lookup", None)
