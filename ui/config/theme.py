"""Design tokens for the wildfire event map.

Colors are CSS hex strings as folium/Leaflet expect them.
"""


class EventColors:
    """Marker and overlay colors by event status.

    - Open events: red outline, orange fill
    - Closed events: gray, so they recede when ``status=all``
    - Selected event: highlighted with a thicker yellow ring
    """
    OPEN_STROKE = "#d00000"
    OPEN_FILL = "#ff8c00"
    CLOSED_STROKE = "#6b7280"
    CLOSED_FILL = "#9ca3af"
    SELECTED_STROKE = "#facc15"

    POLYGON_STROKE = "#ff4500"
    POLYGON_FILL_OPACITY = 0.1
    MARKER_FILL_OPACITY = 0.9


class MarkerSizing:
    RADIUS = 8
    SELECTED_RADIUS = 12
    POLYGON_WEIGHT = 1


class MapConfig:
    """Initial map view."""
    HEIGHT = 600                    # pixels
    DEFAULT_CENTER = [20.0, 0.0]    # [lat, lon], world view
    DEFAULT_ZOOM = 2
    SELECTED_ZOOM = 6               # zoom used when flying to a selected event
    TILES = "OpenStreetMap"
