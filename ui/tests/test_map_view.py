import folium

from eonet.models import Event, events_adapter
from ui.components.map_view import _popup_html, add_event_layers, create_base_map
from ui.config.constants import DEFAULT_MAP_CENTER, SELECTED_ZOOM_LEVEL

RING = [[-120.0, 38.0], [-119.0, 38.0], [-119.0, 39.0], [-120.0, 38.0]]


def _events():
    return events_adapter.validate_python(
        [
            {"id": "P", "title": "point", "geometry": [{"date": "2024-08-01T00:00:00Z", "type": "Point", "coordinates": [-120.5, 38.5]}]},
            {"id": "G", "title": "poly", "geometry": [{"date": "2024-08-01T00:00:00Z", "type": "Polygon", "coordinates": [RING]}]},
            {"id": "N", "title": "no geometry"},
        ]
    )


def _children_of(m: folium.Map, kind):
    return [child for child in m._children.values() if isinstance(child, kind)]


def test_events_without_position_are_not_drawn() -> None:
    m = folium.Map()

    drawn = add_event_layers(m, _events(), selected_id=None)

    assert drawn == 2
    assert len(_children_of(m, folium.CircleMarker)) == 2
    assert len(_children_of(m, folium.Polygon)) == 1


def test_base_map_centres_on_selected_event() -> None:
    point_event = _events()[0]

    selected = create_base_map(point_event)
    default = create_base_map(None)

    assert selected.location == [38.5, -120.5]
    assert selected.options["zoom"] == SELECTED_ZOOM_LEVEL
    assert default.location == DEFAULT_MAP_CENTER


def test_popup_escapes_remote_text() -> None:
    event = Event.model_validate(
        {
            "id": "X",
            "title": "<script>alert(1)</script>",
            "sources": [
                {"id": "a", "url": 'https://example.com/?q="><img src=x onerror=alert(1)>'},
                {"id": "b", "url": "javascript:alert(1)"},
            ],
            "geometry": [{"date": "<b>2024</b>", "type": "Point", "coordinates": [1, 2]}],
        }
    )

    popup = _popup_html(event)

    assert "<script>" not in popup
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in popup
    assert "<img" not in popup
    assert "&quot;&gt;&lt;img" in popup
    assert "<b>2024</b>" not in popup
    assert "javascript:" not in popup


def test_popup_tolerates_geometry_without_date() -> None:
    event = Event.model_validate(
        {"id": "Y", "title": "Fire", "geometry": [{"type": "Point", "coordinates": [1, 2]}]}
    )

    assert "Fire" in _popup_html(event)
