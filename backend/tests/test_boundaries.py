import pytest

from domain.models import BoundaryBox, Coordinate, LatLng
from services.boundaries import (
    contains_point,
    degrees_to_meters,
    distance_to_edge,
    fallback_boundary,
    find_containing_boundaries,
    nearest_edge_distance,
    resolve_number,
)
from services.places_types import PlaceRecord


def _box(south, west, north, east):
    return BoundaryBox(northeast=LatLng(lat=north, lng=east), southwest=LatLng(lat=south, lng=west))


def _place(name, box):
    return PlaceRecord(provider="test", place_id=name, name=name, types=["park"], boundaries=[box])


def test_contains_point_inside_and_outside():
    box = _box(0.0, 0.0, 1.0, 1.0)
    assert contains_point(box, Coordinate(0.5, 0.5))
    assert not contains_point(box, Coordinate(1.5, 0.5))
    assert not contains_point(box, Coordinate(0.5, -0.01))


def test_contains_point_is_inclusive_on_edges():
    box = _box(0.0, 0.0, 1.0, 1.0)
    assert contains_point(box, Coordinate(1.0, 0.5))
    assert contains_point(box, Coordinate(0.0, 0.0))
    assert contains_point(box, Coordinate(0.5, 1.0))


def test_swapped_corners_are_normalized():
    box = BoundaryBox(northeast=LatLng(lat=0.0, lng=0.0), southwest=LatLng(lat=1.0, lng=1.0))
    assert contains_point(box, Coordinate(0.5, 0.5))


def test_providers_are_evaluated_on_every_call():
    state = {"north": 1.0}
    box = BoundaryBox(
        northeast=LatLng(lat=lambda: state["north"], lng=lambda: 1.0),
        southwest=LatLng(lat=0.0, lng=0.0),
    )
    point = Coordinate(0.9, 0.5)
    assert contains_point(box, point)

    state["north"] = 0.8
    assert not contains_point(box, point)


def test_mapping_corners_and_tuple_points():
    box = {"northeast": {"lat": 1, "lng": 1}, "southwest": {"lat": 0, "lng": 0}}
    assert contains_point(box, (0.5, 0.5))
    assert distance_to_edge(box, (0.5, 0.25)) == pytest.approx(0.25)


def test_malformed_boxes_never_contain_and_have_no_distance():
    def broken():
        raise RuntimeError("map not ready")

    malformed = [
        BoundaryBox(),
        BoundaryBox(northeast=LatLng(lat=1.0, lng=1.0)),
        BoundaryBox(northeast={"lat": "north", "lng": 1.0}, southwest={"lat": 0.0, "lng": 0.0}),
        BoundaryBox(northeast=LatLng(lat=broken, lng=1.0), southwest=LatLng(lat=0.0, lng=0.0)),
        BoundaryBox(northeast={"lng": 1.0}, southwest={"lat": 0.0, "lng": 0.0}),
        None,
    ]
    point = Coordinate(0.5, 0.5)
    for box in malformed:
        assert contains_point(box, point) is False
        assert distance_to_edge(box, point) is None


def test_distance_to_edge_is_signed():
    box = _box(0.0, 0.0, 1.0, 1.0)
    assert distance_to_edge(box, Coordinate(0.5, 0.25)) == pytest.approx(0.25)
    assert distance_to_edge(box, Coordinate(1.0, 0.5)) == pytest.approx(0.0)
    assert distance_to_edge(box, Coordinate(2.0, 0.5)) == pytest.approx(-1.0)


def test_resolve_number_rejects_non_numbers():
    assert resolve_number(3) == 3.0
    assert resolve_number(lambda: 2.5) == 2.5
    with pytest.raises(TypeError):
        resolve_number(None)
    with pytest.raises(TypeError):
        resolve_number(True)


def test_degrees_to_meters():
    assert degrees_to_meters(0.001) == pytest.approx(111.0)
    assert degrees_to_meters(-0.001) == pytest.approx(111.0)


def test_fallback_boundary_surrounds_the_point():
    box = fallback_boundary(10.0, 20.0)
    assert box.is_fallback is True
    assert contains_point(box, Coordinate(10.0005, 20.0005))
    assert not contains_point(box, Coordinate(10.002, 20.0))


def test_find_containing_boundaries_orders_deepest_first():
    outer = _place("Outer Park", _box(0.0, 0.0, 1.0, 1.0))
    inner = _place("Inner Garden", _box(0.4, 0.4, 0.6, 0.6))
    far = _place("Far Park", _box(5.0, 5.0, 6.0, 6.0))

    matches = find_containing_boundaries(Coordinate(0.5, 0.5), [inner, far, outer])

    assert [m.place.name for m in matches] == ["Outer Park", "Inner Garden"]
    assert matches[0].distance == pytest.approx(0.5)
    assert matches[1].distance == pytest.approx(0.1)


def test_find_containing_boundaries_reports_each_place_once():
    place = PlaceRecord(
        provider="test",
        place_id="multi",
        name="Multi",
        types=["park"],
        boundaries=[_box(0.0, 0.0, 1.0, 1.0), _box(0.45, 0.45, 0.55, 0.55)],
    )
    matches = find_containing_boundaries(Coordinate(0.5, 0.5), [place])
    assert len(matches) == 1
    assert matches[0].distance == pytest.approx(0.5)


def test_nearest_edge_distance_outside_everything():
    places = [_place("A", _box(0.0, 0.0, 1.0, 1.0)), _place("B", _box(0.0, 3.0, 1.0, 4.0))]
    assert nearest_edge_distance(Coordinate(0.5, 1.5), places) == pytest.approx(-0.5)
    assert nearest_edge_distance(Coordinate(0.5, 1.5), []) is None
