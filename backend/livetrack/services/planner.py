from __future__ import annotations
import asyncio
from typing import List, Optional, Tuple

import httpx

from livetrack.core.config import OSRM_BASE_URL
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Feature, FeatureKind, Route, RouteState, Waypoint
from livetrack.services.mapview import MapView
from livetrack.services.osrm import RouteError, fetch_osrm_route, parse_route
from livetrack.utils.geo import project_lonlat_series

log = get_logger(__name__)


class RoutePlanner:
    """Computes the driving route for the waypoint pair.

    Idle -> Fetching happens once per transition into exactly two waypoints;
    staying at two does not refetch. Fetching ends in Ready or Failed, and
    dropping below two waypoints clears the route and returns to Idle.

    Each fetch is tagged with a sequence number. A response whose number is
    no longer current (the pair changed meanwhile) is dropped.
    """

    def __init__(self, view: MapView, base_url: str = OSRM_BASE_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.view = view
        self.base_url = base_url
        self.transport = transport
        self.state = RouteState.IDLE
        self.route: Optional[Route] = None
        self.error: Optional[str] = None
        self.requests_issued = 0
        self._pair: Optional[Tuple[Waypoint, Waypoint]] = None
        self._seq = 0
        self._task: Optional[asyncio.Task] = None

    def on_waypoints_changed(self, waypoints: List[Waypoint]) -> None:
        if len(waypoints) != 2:
            if self._pair is not None or self.state != RouteState.IDLE:
                self._reset()
            return

        pair = (waypoints[0], waypoints[1])
        if self._pair is not None:
            # still the same two points: edge already handled
            return
        # raises before any state changes when no loop is running
        loop = asyncio.get_running_loop()
        self._pair = pair
        self._seq += 1
        self.state = RouteState.FETCHING
        self.route = None
        self.error = None
        self.requests_issued += 1
        self._task = loop.create_task(self._fetch(self._seq, pair))

    def _reset(self) -> None:
        self._pair = None
        self._seq += 1  # orphan any in-flight fetch
        self.state = RouteState.IDLE
        self.route = None
        self.error = None
        self.view.overlay.replace_kind(FeatureKind.ROUTE, None)

    async def join(self) -> None:
        """Wait for the in-flight fetch, if any."""
        if self._task is not None:
            await self._task

    async def _fetch(self, seq: int, pair: Tuple[Waypoint, Waypoint]) -> None:
        origin = (pair[0].latitude, pair[0].longitude)
        destination = (pair[1].latitude, pair[1].longitude)
        try:
            raw = await fetch_osrm_route(origin, destination, self.base_url, transport=self.transport)
            coords, distance_m, duration_s, names = parse_route(raw)
        except RouteError as e:
            if seq == self._seq:
                self.state = RouteState.FAILED
                self.error = str(e)
            log.error("Error fetching the route: %s", e)
            return

        if seq != self._seq:
            log.info("Discarding superseded route response #%d", seq)
            return

        route = Route(
            polyline=project_lonlat_series(coords),
            coordinates=coords,
            total_distance_km=distance_m / 1000.0,
            total_duration_min=duration_s / 60.0,
            segment_names=names,
        )
        self.route = route
        self.state = RouteState.READY
        self.view.overlay.add_feature(Feature(
            kind=FeatureKind.ROUTE,
            geometry_type="LineString",
            coordinates=route.polyline,
            style="stroke:blue:3",
        ))
        log.info("Route ready: %.2f km, %.1f min, %d points", route.total_distance_km,
                 route.total_duration_min, len(route.polyline))
        log.info("Streets passed through: %s", names)
