import asyncio

import httpx
import pytest

from conftest import Recorder, osrm_payload
from livetrack.schemas.tracking import FeatureKind, RouteState
from livetrack.services.mapview import MapView
from livetrack.services.planner import RoutePlanner
from livetrack.services.waypoints import WaypointManager

BASE = "http://osrm.test"


def make(recorder):
    view = MapView()
    planner = RoutePlanner(view, BASE, transport=httpx.MockTransport(recorder))
    manager = WaypointManager(view)
    manager.subscribe(planner.on_waypoints_changed)
    return manager, planner


def test_route_totals_are_converted():
    recorder = Recorder()

    async def scenario():
        manager, planner = make(recorder)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        assert planner.state == RouteState.FETCHING
        await planner.join()
        return planner

    planner = asyncio.run(scenario())
    assert planner.state == RouteState.READY
    assert planner.route.total_distance_km == 5.0
    assert planner.route.total_duration_min == 10.0
    assert planner.route.segment_names == ["Azadi", "Azadi", "Enghelab"]
    assert len(planner.route.polyline) == len(planner.route.coordinates) == 3
    assert len(planner.view.overlay.of_kind(FeatureKind.ROUTE)) == 1


def test_request_url_uses_lon_lat_order():
    recorder = Recorder()

    async def scenario():
        manager, planner = make(recorder)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await planner.join()

    asyncio.run(scenario())
    (req,) = recorder.requests
    assert req.url.path == "/route/v1/driving/51.4,35.7;51.41,35.705"
    assert req.url.params["geometries"] == "geojson"
    assert req.url.params["overview"] == "full"


def test_exactly_one_request_per_pair():
    recorder = Recorder()

    async def scenario():
        manager, planner = make(recorder)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await planner.join()
        # later notifications with the pair still at two do nothing
        planner.on_waypoints_changed(manager.waypoints)
        planner.on_waypoints_changed(manager.waypoints)
        await planner.join()
        first = len(recorder.requests)

        manager.clear()
        assert planner.state == RouteState.IDLE
        assert planner.route is None
        manager.add_waypoint(35.80, 51.50)
        manager.add_waypoint(35.81, 51.52)
        await planner.join()
        return first, planner

    first, planner = asyncio.run(scenario())
    assert first == 1
    assert len(recorder.requests) == 2
    assert planner.requests_issued == 2
    assert recorder.requests[1].url.path == "/route/v1/driving/51.5,35.8;51.52,35.81"
    assert planner.state == RouteState.READY


@pytest.mark.parametrize("reply", [
    osrm_payload() | {"routes": []},
    {"code": "NoRoute", "message": "Impossible route between points", "routes": []},
    {"code": "Ok", "routes": [{"distance": 1.0}]},
    httpx.Response(500, text="upstream down"),
    httpx.Response(200, text="<html>not json</html>"),
    httpx.ConnectError("boom"),
    {"code": "Ok", "routes": {"x": 1}},
    {"code": "Ok", "routes": ["not-a-route"]},
    osrm_payload() | {"routes": [osrm_payload()["routes"][0] | {"legs": 5}]},
    osrm_payload() | {"routes": [osrm_payload()["routes"][0] | {"legs": [{"steps": 5}]}]},
])
def test_bad_responses_end_in_failed(reply):
    recorder = Recorder(route=reply)

    async def scenario():
        manager, planner = make(recorder)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await planner.join()
        return planner

    planner = asyncio.run(scenario())
    assert planner.state == RouteState.FAILED
    assert planner.route is None
    assert planner.error
    assert len(recorder.requests) == 1


def test_failed_stays_failed_until_pair_changes():
    recorder = Recorder(route={"code": "Ok", "routes": []})

    async def scenario():
        manager, planner = make(recorder)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await planner.join()
        planner.on_waypoints_changed(manager.waypoints)
        assert planner.state == RouteState.FAILED
        recorder.route = osrm_payload()
        manager.clear()
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await planner.join()
        return planner

    planner = asyncio.run(scenario())
    assert planner.state == RouteState.READY
    assert len(recorder.requests) == 2


def test_stale_response_is_discarded_after_clear():
    release = None

    async def slow_handler(request):
        await release.wait()
        return httpx.Response(200, json=osrm_payload())

    async def scenario():
        nonlocal release
        release = asyncio.Event()
        view = MapView()
        planner = RoutePlanner(view, BASE, transport=httpx.MockTransport(slow_handler))
        manager = WaypointManager(view)
        manager.subscribe(planner.on_waypoints_changed)
        manager.add_waypoint(35.70, 51.40)
        manager.add_waypoint(35.705, 51.41)
        await asyncio.sleep(0)
        manager.clear()
        release.set()
        await planner.join()
        return planner

    planner = asyncio.run(scenario())
    assert planner.state == RouteState.IDLE
    assert planner.route is None
    assert planner.view.overlay.of_kind(FeatureKind.ROUTE) == []


def test_pair_completed_outside_event_loop_leaves_planner_idle():
    recorder = Recorder()
    manager, planner = make(recorder)
    manager.add_waypoint(35.70, 51.40)
    with pytest.raises(RuntimeError):
        manager.add_waypoint(35.705, 51.41)
    assert planner.state == RouteState.IDLE
    assert planner.requests_issued == 0

    async def scenario():
        planner.on_waypoints_changed(manager.waypoints)
        await planner.join()

    asyncio.run(scenario())
    assert planner.state == RouteState.READY
    assert len(recorder.requests) == 1
