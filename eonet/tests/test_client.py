import asyncio
import unittest

import httpx

from eonet.client import EonetClient, parse_detail_payload
from eonet.errors import (
    EonetError,
    EonetProtocolError,
    EonetRateLimitError,
    EonetUnavailableError,
)
from eonet.models import OtherGeometry, PointGeometry, PolygonGeometry
from eonet_fakes import (
    BASE_URL,
    LIST_PATH,
    Router,
    detail_feature_collection,
    detail_path,
    event_payload,
    point,
    polygon,
)

RING = [[-120.0, 38.0], [-119.0, 38.0], [-119.0, 39.0], [-120.0, 38.0]]


class TestListEvents(unittest.IsolatedAsyncioTestCase):
    async def test_sends_wildfire_query_and_parses_events(self):
        router = Router()
        router.json(LIST_PATH, {"events": [event_payload("EONET_1"), event_payload("EONET_2")]})

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            events = await client.list_events(status="all", limit=25)

        self.assertEqual([e.id for e in events], ["EONET_1", "EONET_2"])
        params = router.requests[0].url.params
        self.assertEqual(params["status"], "all")
        self.assertEqual(params["category"], "wildfires")
        self.assertEqual(params["limit"], "25")

    async def test_missing_events_field_is_protocol_error(self):
        router = Router()
        router.json(LIST_PATH, {"title": "EONET Events"})

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetProtocolError):
                await client.list_events()

    async def test_non_list_events_field_is_protocol_error(self):
        router = Router()
        router.json(LIST_PATH, {"events": {"id": "EONET_1"}})

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetProtocolError):
                await client.list_events()

    async def test_one_malformed_event_does_not_sink_the_list(self):
        bad_geometry = {"date": "2024-08-01T00:00:00Z", "type": "Point", "coordinates": "bad"}
        router = Router()
        router.json(
            LIST_PATH,
            {
                "events": [
                    event_payload("A", geometries=[point("2024-08-01T00:00:00Z", 1.0, 2.0)]),
                    event_payload("B", geometries=[bad_geometry, point("2024-08-02T00:00:00Z", 3.0, 4.0)]),
                    event_payload("C", geometries=[bad_geometry]),
                    {"id": "D"},
                    "not an event",
                ]
            },
        )

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            events = await client.list_events()

        self.assertEqual([e.id for e in events], ["A", "B", "C"])
        self.assertEqual(len(events[0].geometries), 1)
        self.assertEqual([g.coordinates for g in events[1].geometries], [(3.0, 4.0)])
        self.assertTrue(events[2].missing_geometry)

    async def test_non_json_body_is_protocol_error(self):
        router = Router()
        router.add(LIST_PATH, lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetProtocolError):
                await client.list_events()

    async def test_429_carries_retry_after(self):
        router = Router()
        router.json(LIST_PATH, {"error": "slow down"}, status_code=429, headers={"Retry-After": "12"})

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetRateLimitError) as ctx:
                await client.list_events()

        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.retry_after, "12")

    async def test_server_error_keeps_status_code(self):
        router = Router()
        router.json(LIST_PATH, {"error": "boom"}, status_code=503)

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetError) as ctx:
                await client.list_events()

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertNotIsInstance(ctx.exception, EonetRateLimitError)

    async def test_timeout_is_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        router = Router()
        router.add(LIST_PATH, handler)

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetUnavailableError):
                await client.list_events()

    async def test_invalid_status_rejected_before_request(self):
        router = Router()
        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(ValueError):
                await client.list_events(status="burning")
        self.assertEqual(router.requests, [])


class TestEventGeometries(unittest.IsolatedAsyncioTestCase):
    async def test_feature_collection_is_flattened(self):
        router = Router()
        router.json(
            detail_path("EONET_7"),
            detail_feature_collection(point("2024-08-01T00:00:00Z", 1.0, 2.0), polygon("2024-08-02T00:00:00Z", RING)),
        )

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            geometries = await client.event_geometries("EONET_7")

        self.assertIsInstance(geometries[0], PointGeometry)
        self.assertIsInstance(geometries[1], PolygonGeometry)
        self.assertEqual(geometries[1].date, "2024-08-02T00:00:00Z")

    async def test_detail_429_raises_rate_limit(self):
        router = Router()
        router.json(detail_path("EONET_7"), {}, status_code=429)

        async with EonetClient(BASE_URL, transport=router.transport()) as client:
            with self.assertRaises(EonetRateLimitError):
                await client.event_geometries("EONET_7")


def test_client_requires_context_manager():
    client = EonetClient(BASE_URL)
    try:
        asyncio.run(client.list_events())
    except RuntimeError as exc:
        assert "async context manager" in str(exc)
    else:
        raise AssertionError("expected RuntimeError")


def test_detail_payload_geometries_passthrough():
    payload = {"geometries": [point("2024-08-01T00:00:00Z", 1.0, 2.0)]}
    geometries = parse_detail_payload(payload)
    assert len(geometries) == 1
    assert geometries[0].coordinates == (1.0, 2.0)


def test_detail_payload_single_geometry_is_wrapped():
    geometries = parse_detail_payload({"geometry": polygon("2024-08-01T00:00:00Z", RING)})
    assert len(geometries) == 1
    assert isinstance(geometries[0], PolygonGeometry)


def test_detail_payload_skips_features_without_type_or_coordinates():
    payload = {
        "features": [
            {"properties": {"date": "2024-08-01T00:00:00Z"}, "geometry": {}},
            {"properties": {"date": "2024-08-01T00:00:00Z"}, "geometry": None},
            {"properties": {"date": "2024-08-02T00:00:00Z"}, "geometry": {"type": "Point", "coordinates": [3, 4]}},
        ]
    }
    geometries = parse_detail_payload(payload)
    assert [g.date for g in geometries] == ["2024-08-02T00:00:00Z"]


def test_detail_payload_keeps_feature_without_date():
    payload = {"features": [{"properties": {}, "geometry": {"type": "Point", "coordinates": [1, 2]}}]}

    geometries = parse_detail_payload(payload)

    assert len(geometries) == 1
    assert isinstance(geometries[0], PointGeometry)
    assert geometries[0].date is None
    assert geometries[0].observed_at is None


def test_detail_payload_keeps_features_with_only_type_or_only_coordinates():
    payload = {
        "features": [
            {"properties": {"date": "2024-08-01T00:00:00Z"}, "geometry": {"type": "Point"}},
            {"properties": {"date": "2024-08-02T00:00:00Z"}, "geometry": {"coordinates": [3, 4]}},
        ]
    }

    geometries = parse_detail_payload(payload)

    assert [type(g) for g in geometries] == [OtherGeometry, OtherGeometry]
    assert geometries[0].type == "Point"
    assert geometries[0].coordinates is None
    assert geometries[1].type is None
    assert geometries[1].coordinates == [3, 4]


def test_detail_payload_drops_invalid_geometry():
    payload = {"geometries": [{"date": "2024-08-01T00:00:00Z", "type": "Point", "coordinates": "bad"}]}
    assert parse_detail_payload(payload) == []


def test_unrecognised_detail_payload_is_empty():
    assert parse_detail_payload({"type": "Feature"}) == []
    assert parse_detail_payload([1, 2, 3]) == []
    assert parse_detail_payload(None) == []
