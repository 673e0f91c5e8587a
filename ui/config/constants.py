"""Application constants."""

from typing import List

from ui.config.theme import MapConfig

DEFAULT_MAP_CENTER = MapConfig.DEFAULT_CENTER
DEFAULT_ZOOM_LEVEL = MapConfig.DEFAULT_ZOOM
SELECTED_ZOOM_LEVEL = MapConfig.SELECTED_ZOOM
MAP_HEIGHT = MapConfig.HEIGHT

STATUS_OPTIONS: List[str] = ["open", "closed", "all"]
STATUS_LABELS = {"open": "Open", "closed": "Closed", "all": "All"}

PAGE_TITLE = "Wildfire Tracker"
PAGE_CAPTION = "Live wildfire events from NASA EONET"
