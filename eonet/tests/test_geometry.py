import pytest

from eonet.geometry import event_position, position_of, rings_of
from eonet.models import Event, OtherGeometry, geometry_adapter
from eonet_fakes import event_payload, point

SQUARE = [[-120.0, 38.0], [-118.0, 38.0], [-118.0, 40.0], [-120.0, 40.0]]


def _geom(payload: dict):
    return geometry_adapter.validate_python(payload)


def test_point_position_is_lat_lon():
    assert position_of(_geom(point("2024-08-01T00:00:00Z", -120.5, 38.25))) == (38.25, -120.5)


def test_polygon_position_is_vertex_average_of_outer_ring():
    geom = _geom({"date": "2024-08-01T00:00:00Z", "type": "Polygon", "coordinates": [SQUARE]})
    assert position_of(geom) == pytest.approx((39.0, -119.0))


def test_multipolygon_uses_first_polygon():
    other = [[10.0, 10.0], [11.0, 10.0], [11.0, 11.0]]
    geom = _geom({"date": "2024-08-01T00:00:00Z", "type": "MultiPolygon", "coordinates": [[SQUARE], [other]]})
    assert position_of(geom) == pytest.approx((39.0, -119.0))
    assert len(rings_of(geom)) == 1


def test_rings_are_converted_to_lat_lon():
    geom = _geom({"date": "2024-08-01T00:00:00Z", "type": "Polygon", "coordinates": [SQUARE]})
    assert rings_of(geom)[0][0] == (38.0, -120.0)


def test_rings_of_point_is_empty():
    assert rings_of(_geom(point("2024-08-01T00:00:00Z", 1.0, 2.0))) == []


def test_other_geometry_with_flat_coordinates_is_treated_as_point():
    geom = OtherGeometry(date="2024-08-01T00:00:00Z", type="Unknown", coordinates=[5.0, 6.0])
    assert position_of(geom) == (6.0, 5.0)


def test_other_geometry_with_nested_coordinates_has_no_position():
    geom = OtherGeometry(date="2024-08-01T00:00:00Z", type="LineString", coordinates=[[1, 2], [3, 4]])
    assert position_of(geom) is None


def test_empty_polygon_has_no_position():
    geom = _geom({"date": "2024-08-01T00:00:00Z", "type": "Polygon", "coordinates": []})
    assert position_of(geom) is None


def test_event_without_geometry_has_no_position():
    assert event_position(Event.model_validate(event_payload("EONET_9"))) is None
    assert position_of(None) is None
