"""Map view component: one marker per event, plus perimeter polygons."""

from __future__ import annotations

import html
from typing import List, Optional

import folium
import streamlit as st
from streamlit_folium import st_folium

from eonet.geometry import event_position, rings_of
from eonet.models import Event
from ui.config.constants import (
    DEFAULT_MAP_CENTER,
    DEFAULT_ZOOM_LEVEL,
    MAP_HEIGHT,
    SELECTED_ZOOM_LEVEL,
)
from ui.config.theme import EventColors, MapConfig, MarkerSizing


def _is_web_url(url: Optional[str]) -> bool:
    return bool(url) and url.lower().startswith(("http://", "https://"))


def _popup_html(event: Event) -> str:
    latest = event.latest_geometry
    when = latest.date if latest is not None and latest.date else ""
    kind = latest.type if latest is not None and latest.type else "-"
    links = "".join(
        f'<div><a href="{html.escape(s.url, quote=True)}" target="_blank" rel="noreferrer">'
        f"{html.escape(s.url)}</a></div>"
        for s in event.sources
        if _is_web_url(s.url)
    )
    return (
        f'<div style="max-width: 260px"><strong>{html.escape(event.title)}</strong>'
        f'<div style="font-size: 12px">{html.escape(when)}</div>'
        f'<div style="font-size: 11px">geom: {html.escape(kind)}</div>'
        f"{links}</div>"
    )


def add_event_layers(map_obj: folium.Map, events: List[Event], selected_id: Optional[str]) -> int:
    """Draw ``events`` on ``map_obj``; returns how many had a position."""
    drawn = 0
    for event in events:
        for ring in rings_of(event.latest_geometry):
            folium.Polygon(
                locations=ring,
                color=EventColors.POLYGON_STROKE,
                weight=MarkerSizing.POLYGON_WEIGHT,
                fill=True,
                fill_opacity=EventColors.POLYGON_FILL_OPACITY,
            ).add_to(map_obj)

        position = event_position(event)
        if position is None:
            continue
        selected = event.id == selected_id
        stroke = EventColors.OPEN_STROKE if event.is_open else EventColors.CLOSED_STROKE
        fill = EventColors.OPEN_FILL if event.is_open else EventColors.CLOSED_FILL
        folium.CircleMarker(
            location=position,
            radius=MarkerSizing.SELECTED_RADIUS if selected else MarkerSizing.RADIUS,
            color=EventColors.SELECTED_STROKE if selected else stroke,
            fill=True,
            fillColor=fill,
            fillOpacity=EventColors.MARKER_FILL_OPACITY,
            tooltip=html.escape(event.title),
            popup=folium.Popup(_popup_html(event), max_width=280),
        ).add_to(map_obj)
        drawn += 1
    return drawn


def create_base_map(selected: Optional[Event] = None) -> folium.Map:
    """Base map centred on the selected event if it has a position."""
    position = event_position(selected) if selected is not None else None
    if position is not None:
        return folium.Map(location=list(position), zoom_start=SELECTED_ZOOM_LEVEL, tiles=MapConfig.TILES)
    return folium.Map(location=DEFAULT_MAP_CENTER, zoom_start=DEFAULT_ZOOM_LEVEL, tiles=MapConfig.TILES)


def render_map_view(events: List[Event], selected: Optional[Event]) -> None:
    m = create_base_map(selected)
    add_event_layers(m, events, selected.id if selected else None)
    st_folium(m, width=None, height=MAP_HEIGHT, returned_objects=[])
