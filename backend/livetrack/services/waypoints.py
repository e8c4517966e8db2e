from __future__ import annotations
from typing import Callable, List

from livetrack.core.config import MAX_WAYPOINTS
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Feature, FeatureKind, Waypoint
from livetrack.services.mapview import MapView
from livetrack.utils.geo import is_valid_latlon

log = get_logger(__name__)

WaypointListener = Callable[[List[Waypoint]], None]


class TooManyWaypoints(Exception):
    """Raised when a waypoint is added while the sequence is full."""

    def __init__(self, limit: int = MAX_WAYPOINTS):
        super().__init__(f"Only {limit} positions can be recorded")
        self.limit = limit


class WaypointManager:
    """Owns the ordered origin/destination pair.

    Every successful change redraws the waypoint markers on the overlay and
    then notifies listeners synchronously with a copy of the sequence.
    """

    def __init__(self, view: MapView, limit: int = MAX_WAYPOINTS):
        self.view = view
        self.limit = limit
        self._points: List[Waypoint] = []
        self._listeners: List[WaypointListener] = []

    @property
    def waypoints(self) -> List[Waypoint]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def subscribe(self, listener: WaypointListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        snapshot = self.waypoints
        for listener in self._listeners:
            listener(snapshot)

    def add_waypoint(self, lat: float, lon: float) -> Waypoint:
        if len(self._points) >= self.limit:
            log.info("Waypoint rejected, already holding %d", len(self._points))
            raise TooManyWaypoints(self.limit)
        if not is_valid_latlon(lat, lon):
            raise ValueError(f"Invalid waypoint coordinates: {lat}, {lon}")

        wp = Waypoint(latitude=float(lat), longitude=float(lon))
        self._points.append(wp)
        self.view.overlay.add_feature(Feature(
            kind=FeatureKind.WAYPOINT,
            geometry_type="Point",
            coordinates=[self.view.from_lonlat(wp.longitude, wp.latitude)],
            style="circle:green",
        ))
        log.info("Waypoint %d recorded at %.6f, %.6f", len(self._points), wp.latitude, wp.longitude)
        self._notify()
        return wp

    def add_at_viewport_center(self) -> Waypoint:
        if len(self._points) >= self.limit:
            raise TooManyWaypoints(self.limit)
        lon, lat = self.view.center_lonlat()
        return self.add_waypoint(lat, lon)

    def clear(self) -> None:
        self._points.clear()
        self.view.overlay.clear()
        log.info("Waypoints cleared")
        self._notify()
