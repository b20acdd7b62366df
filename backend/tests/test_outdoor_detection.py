import asyncio
from unittest.mock import AsyncMock, patch

from domain.models import BoundaryBox, ClassificationResult, Explanations, LatLng, OutdoorSpaceCategory
from services.errors import PlaceLookupError
from services.outdoor_detection import analyze_outdoor_space, clamp_confidence
from services.places_types import PlaceRecord


def _classification(confidence, **kwargs):
    defaults = dict(
        is_outdoors=True,
        is_in_building=False,
        in_boundary=True,
        confidence=confidence,
        reasons=["Inside boundary of Test Park", "Park is a primary outdoor space"],
        explanations=Explanations(positive=["You're inside Test Park."]),
        place_types=["park"],
        space_category=OutdoorSpaceCategory.PRIMARY,
        distance_to_edge=0.002,
    )
    defaults.update(kwargs)
    return ClassificationResult(**defaults)


def test_clamp_confidence():
    assert clamp_confidence(120) == 100
    assert clamp_confidence(-5) == 0
    assert clamp_confidence(55) == 55


@patch("services.outdoor_detection.analyze_places_with_boundaries", new_callable=AsyncMock)
def test_manual_override_never_delegates(mock_analyze):
    result = asyncio.run(analyze_outdoor_space(0.5, 0.5, None, True))

    mock_analyze.assert_not_called()
    assert result.is_outdoors is True
    assert result.confidence == 100
    assert result.reasons == ["Manual override enabled"]
    assert result.explanations.positive == ["You've overridden outdoor detection."]
    assert result.debug_info.to_dict() == {"in_boundary": True, "is_in_building": False}


@patch("services.outdoor_detection.analyze_places_with_boundaries", new_callable=AsyncMock)
def test_high_confidence_passes_through(mock_analyze):
    mock_analyze.return_value = _classification(95)

    result = asyncio.run(analyze_outdoor_space(0.5, 0.5, None, False))

    assert result.is_outdoors is True
    assert result.confidence == 95
    assert result.debug_info.to_dict() == {
        "in_boundary": True,
        "is_in_building": False,
        "place_types": ["park"],
        "distance_to_edge": 0.002,
        "space_category": "primary",
    }


@patch("services.outdoor_detection.analyze_places_with_boundaries", new_callable=AsyncMock)
def test_confidence_is_clamped(mock_analyze):
    mock_analyze.return_value = _classification(120)
    assert asyncio.run(analyze_outdoor_space(0.5, 0.5)).confidence == 100

    mock_analyze.return_value = _classification(-10, is_outdoors=False)
    assert asyncio.run(analyze_outdoor_space(0.5, 0.5)).confidence == 0


@patch("services.outdoor_detection.analyze_places_with_boundaries", new_callable=AsyncMock)
def test_failures_become_safe_fallback(mock_analyze):
    for error in (PlaceLookupError("quota exceeded"), RuntimeError("unexpected"), ValueError("bad")):
        mock_analyze.side_effect = error

        result = asyncio.run(analyze_outdoor_space(0.5, 0.5))

        assert result.is_outdoors is False
        assert result.confidence == 0
        assert result.reasons == ["Detection failed"]
        assert result.explanations.positive == []
        assert result.explanations.negative == ["We couldn't analyze your location properly."]
        assert result.debug_info.to_dict() == {"in_boundary": False, "is_in_building": False}


def test_lookup_failure_end_to_end():
    lookup = AsyncMock(side_effect=PlaceLookupError("timeout"))
    result = asyncio.run(analyze_outdoor_space(0.5, 0.5, None, False, lookup=lookup))
    assert result.reasons == ["Detection failed"]
    assert result.confidence == 0


def test_shopping_mall_end_to_end():
    mall = PlaceRecord(
        provider="test",
        place_id="mall",
        name="Mall",
        types=["shopping_mall"],
        boundaries=[BoundaryBox(northeast=LatLng(lat=1.0, lng=1.0), southwest=LatLng(lat=0.0, lng=0.0))],
    )
    lookup = AsyncMock(return_value=[mall])

    result = asyncio.run(analyze_outdoor_space(0.5, 0.5, None, False, lookup=lookup))

    assert result.is_outdoors is False
    assert result.debug_info.is_in_building is True
    assert result.debug_info.in_boundary is True
    assert "Mall is likely an indoor area." in result.explanations.negative
    assert 0 <= result.confidence <= 100


def test_result_serializes_to_snake_case_dict():
    lookup = AsyncMock(return_value=[])
    data = asyncio.run(analyze_outdoor_space(0.5, 0.5, None, False, lookup=lookup)).to_dict()

    assert set(data) == {"is_outdoors", "confidence", "reasons", "explanations", "debug_info"}
    assert data["explanations"]["negative"] == ["You're not in a recognized outdoor area."]
    assert data["debug_info"]["space_category"] == "unknown"
    assert "distance_to_edge" not in data["debug_info"]


@patch("services.outdoor_detection.analyze_places_with_boundaries", new_callable=AsyncMock)
def test_place_name_is_projected_into_debug_info(mock_analyze):
    mock_analyze.return_value = _classification(95, place_name="Test Park")

    data = asyncio.run(analyze_outdoor_space(0.5, 0.5)).to_dict()

    assert data["debug_info"]["place_name"] == "Test Park"
