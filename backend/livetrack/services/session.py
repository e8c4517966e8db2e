from __future__ import annotations
from typing import Optional

import httpx

from livetrack.core.config import NOMINATIM_BASE_URL, OSRM_BASE_URL, SAMPLE_INTERVAL_S
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Feature, FeatureKind, PanelSnapshot, Position
from livetrack.services.location import DeviceFeedLocationSource, LocationSource
from livetrack.services.mapview import MapView
from livetrack.services.motion import MotionAggregator
from livetrack.services.planner import RoutePlanner
from livetrack.services.sampler import GeoSampler
from livetrack.services.snapper import RoadSnapper
from livetrack.services.waypoints import WaypointManager

log = get_logger(__name__)


class TrackingSession:
    """One live map session: wires sampler, motion, waypoints, planner and snapper."""

    def __init__(self, source: Optional[LocationSource] = None, view: Optional[MapView] = None,
                 osrm_url: str = OSRM_BASE_URL, nominatim_url: str = NOMINATIM_BASE_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 interval_s: float = SAMPLE_INTERVAL_S):
        self.view = view or MapView()
        self.source = source or DeviceFeedLocationSource()
        self.motion = MotionAggregator()
        self.waypoints = WaypointManager(self.view)
        self.planner = RoutePlanner(self.view, osrm_url, transport=transport)
        self.snapper = RoadSnapper(self.view, nominatim_url, transport=transport)
        self.sampler = GeoSampler(self.source, self.view, self._on_position, interval_s=interval_s)
        self.last_position: Optional[Position] = None

        self.waypoints.subscribe(self.planner.on_waypoints_changed)

    def _on_position(self, pos: Position) -> bool:
        if self.motion.update(pos) is None:
            return False
        self.last_position = pos
        self.view.overlay.replace_kind(FeatureKind.DEVICE, Feature(
            kind=FeatureKind.DEVICE,
            geometry_type="Point",
            coordinates=[self.view.from_lonlat(pos.longitude, pos.latitude)],
            style="icon:red-dot",
        ))
        return True

    def start(self) -> None:
        self.sampler.start()

    async def stop(self) -> None:
        await self.sampler.stop()

    def panel(self) -> PanelSnapshot:
        m = self.motion.state
        route = self.planner.route
        pos = self.last_position
        return PanelSnapshot(
            latitude=pos.latitude if pos else None,
            longitude=pos.longitude if pos else None,
            current_speed_mps=m.current_speed_mps,
            average_speed_mps=m.average_speed_mps,
            travelled_distance_m=m.total_distance_m,
            route_distance_km=route.total_distance_km if route else 0.0,
            route_duration_min=route.total_duration_min if route else 0.0,
            route_state=self.planner.state,
            waypoints=len(self.waypoints),
        )
