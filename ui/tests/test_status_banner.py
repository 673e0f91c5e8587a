"""Banner selection for the three loader outcomes the UI distinguishes."""

from eonet.errors import EonetError, EonetRateLimitError, RATE_LIMIT_MESSAGE
from eonet.loader import LoaderState
from eonet.models import events_adapter
from ui.components.status_banner import banner_for


def _events():
    return events_adapter.validate_python(
        [{"id": "E1", "title": "Fire", "geometry": [{"date": "2024-08-01T00:00:00Z", "type": "Point", "coordinates": [1, 2]}]}]
    )


def test_no_banner_without_error() -> None:
    assert banner_for(LoaderState(events=_events(), loading=False, error=None)) is None
    assert banner_for(LoaderState()) is None


def test_failed_refresh_over_cached_data_is_a_warning() -> None:
    state = LoaderState(events=_events(), loading=False, error=EonetError("boom", status_code=500))

    banner = banner_for(state)

    assert banner.level == "warning"
    assert "Showing cached data" in banner.title
    assert "boom" in banner.detail


def test_empty_list_counts_as_data() -> None:
    state = LoaderState(events=[], loading=False, error=EonetError("boom"))
    assert banner_for(state).level == "warning"


def test_failure_without_data_is_an_error() -> None:
    state = LoaderState(events=None, loading=False, error=EonetRateLimitError(RATE_LIMIT_MESSAGE, status_code=429))

    banner = banner_for(state)

    assert banner.level == "error"
    assert "No wildfire data available" in banner.title
    assert "throttling" in banner.detail
