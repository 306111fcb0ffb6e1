import json

import httpx
import pytest
import respx
from httpx import Response

from ridesim.core.exceptions import ValidationError
from ridesim.geo.models import Coordinate, RouteInfo
from ridesim.geo.routing_client import (
    NoRouteFoundError,
    RouteResult,
    RoutingGateway,
    RoutingServiceError,
    RoutingTimeoutError,
    decode_polyline,
    straight_line,
)
from ridesim.settings import RoutingSettings

ORIGIN = Coordinate(lat=37.7749, lng=-122.4194)
DESTINATION = Coordinate(lat=37.8044, lng=-122.2712)


@pytest.mark.unit
class TestDecodePolyline:
    def test_reference_vector(self):
        coords = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")

        assert [c.as_tuple() for c in coords] == [
            pytest.approx((38.5, -120.2)),
            pytest.approx((40.7, -120.95)),
            pytest.approx((43.252, -126.453)),
        ]

    def test_preserves_travel_order(self):
        coords = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
        lats = [c.lat for c in coords]
        assert lats == sorted(lats)

    def test_empty_string_decodes_to_empty_route(self):
        assert decode_polyline("") == []

    def test_single_point(self):
        coords = decode_polyline("_p~iF~ps|U")
        assert len(coords) == 1
        assert coords[0].as_tuple() == pytest.approx((38.5, -120.2))


@pytest.mark.unit
def test_straight_line_fallback():
    result = straight_line(ORIGIN, DESTINATION)

    assert result.geometry == [ORIGIN, DESTINATION]
    assert result.info is None
    assert result.is_fallback


@pytest.mark.unit
def test_from_settings():
    settings = RoutingSettings(base_url="https://routing.example/route/", api_key="k", timeout=2.5)

    gateway = RoutingGateway.from_settings(settings)

    assert gateway.base_url == "https://routing.example/route"
    assert gateway.api_key == "k"
    assert gateway.timeout == 2.5


@pytest.mark.unit
class TestFetchRoute:
    async def test_valid_response(self, gateway: RoutingGateway, ors_response: dict):
        async with respx.mock:
            route = respx.post(gateway.base_url).mock(return_value=Response(200, json=ors_response))

            result = await gateway.fetch_route_details(ORIGIN, DESTINATION)

            assert route.called
            assert isinstance(result, RouteResult)
            assert not result.is_fallback
            assert result.info == RouteInfo(distance_meters=5000.0, duration_seconds=600.0)
            assert len(result.geometry) == 3
            assert result.geometry[0].as_tuple() == pytest.approx((38.5, -120.2))

    async def test_request_sends_lng_lat_waypoints_in_order(
        self, gateway: RoutingGateway, ors_response: dict
    ):
        async with respx.mock:
            route = respx.post(gateway.base_url).mock(return_value=Response(200, json=ors_response))

            await gateway.fetch_route(ORIGIN, DESTINATION)

            request = route.calls.last.request
            assert json.loads(request.content) == {
                "coordinates": [[-122.4194, 37.7749], [-122.2712, 37.8044]]
            }
            assert request.headers["Authorization"] == "test-key"

    async def test_no_authorization_header_without_key(self, ors_response: dict):
        gateway = RoutingGateway(base_url="https://routing.test/directions")
        async with respx.mock:
            route = respx.post(gateway.base_url).mock(return_value=Response(200, json=ors_response))

            await gateway.fetch_route(ORIGIN, DESTINATION)

            assert "Authorization" not in route.calls.last.request.headers

    async def test_fetch_route_returns_geometry(self, gateway: RoutingGateway, ors_response: dict):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, json=ors_response))

            route = await gateway.fetch_route(ORIGIN, DESTINATION)

            assert len(route) == 3
            assert all(isinstance(point, Coordinate) for point in route)

    async def test_missing_summary_keeps_geometry(self, gateway: RoutingGateway):
        payload = {"routes": [{"geometry": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"}]}
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, json=payload))

            result = await gateway.fetch_route_details(ORIGIN, DESTINATION)

            assert not result.is_fallback
            assert result.info is None
            assert len(result.geometry) == 3


@pytest.mark.unit
class TestFallback:
    @pytest.mark.parametrize("status", [400, 401, 404, 429, 500, 503])
    async def test_non_success_status(self, gateway: RoutingGateway, status: int):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(status, text="error"))

            result = await gateway.fetch_route_details(ORIGIN, DESTINATION)

            assert result.is_fallback
            assert result.geometry == [ORIGIN, DESTINATION]

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"routes": []},
            {"routes": [{}]},
            {"routes": [{"geometry": ""}]},
            {"routes": [{"geometry": 123}]},
            {"routes": "nope"},
            ["not", "a", "dict"],
        ],
    )
    async def test_missing_route_fields(self, gateway: RoutingGateway, payload):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, json=payload))

            route = await gateway.fetch_route(ORIGIN, DESTINATION)

            assert route == [ORIGIN, DESTINATION]

    async def test_malformed_json(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, text="<html>oops"))

            route = await gateway.fetch_route(ORIGIN, DESTINATION)

            assert route == [ORIGIN, DESTINATION]

    async def test_single_point_geometry(self, gateway: RoutingGateway):
        payload = {"routes": [{"geometry": "_p~iF~ps|U", "summary": {"distance": 1, "duration": 1}}]}
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, json=payload))

            result = await gateway.fetch_route_details(ORIGIN, DESTINATION)

            assert result.is_fallback
            assert result.info is None

    async def test_timeout(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(side_effect=httpx.ReadTimeout("Request timed out"))

            route = await gateway.fetch_route(ORIGIN, DESTINATION)

            assert route == [ORIGIN, DESTINATION]

    async def test_network_error(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(side_effect=httpx.ConnectError("Connection failed"))

            route = await gateway.fetch_route(ORIGIN, DESTINATION)

            assert route == [ORIGIN, DESTINATION]

    async def test_failure_is_logged(self, gateway: RoutingGateway, caplog):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(502))

            with caplog.at_level("WARNING", logger="ridesim.geo.routing_client"):
                await gateway.fetch_route(ORIGIN, DESTINATION)

        assert "using straight line" in caplog.text


@pytest.mark.unit
class TestErrorClassification:
    """The private request path raises typed errors that the gateway converts."""

    async def test_server_error(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(500))

            with pytest.raises(RoutingServiceError) as exc_info:
                await gateway._request_route(ORIGIN, DESTINATION)

            assert exc_info.value.details == {"status_code": 500}

    async def test_timeout(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(side_effect=httpx.TimeoutException("slow"))

            with pytest.raises(RoutingTimeoutError):
                await gateway._request_route(ORIGIN, DESTINATION)

    async def test_no_route(self, gateway: RoutingGateway):
        async with respx.mock:
            respx.post(gateway.base_url).mock(return_value=Response(200, json={"routes": []}))

            with pytest.raises(NoRouteFoundError):
                await gateway._request_route(ORIGIN, DESTINATION)

    async def test_no_route_is_a_validation_error(self):
        assert issubclass(NoRouteFoundError, ValidationError)
