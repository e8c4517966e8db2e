from __future__ import annotations
from typing import Optional

import httpx

from livetrack.core.config import ANIMATION_MS, NOMINATIM_BASE_URL
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Feature, FeatureKind
from livetrack.services.mapview import MapView
from livetrack.services.nominatim import reverse_geocode

log = get_logger(__name__)


class RoadSnapper:
    """Snaps the viewport to the nearest road once a pan/zoom settles.

    Requests are never cancelled. Each one takes a sequence number and its
    result is applied only if no later request has completed already,
    whatever that later request returned.
    """

    def __init__(self, view: MapView, base_url: str = NOMINATIM_BASE_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.view = view
        self.base_url = base_url
        self.transport = transport
        self._issued = 0
        self._completed = 0

    async def on_viewport_settled(self) -> bool:
        lon, lat = self.view.center_lonlat()
        snapped = await self.snap_to_nearest_road(lat, lon)
        if not snapped:
            log.info("No road close enough to snap to.")
        return snapped

    async def snap_to_nearest_road(self, lat: float, lon: float) -> bool:
        self._issued += 1
        seq = self._issued
        try:
            hit = await reverse_geocode(lat, lon, self.base_url, transport=self.transport)
        except (httpx.HTTPError, ValueError) as e:
            log.error("Error snapping to nearest road: %s", e)
            hit = None

        superseded = seq < self._completed
        self._completed = max(self._completed, seq)
        if superseded:
            log.info("Discarding superseded snap #%d (completed #%d)", seq, self._completed)
            return False
        if hit is None:
            log.info("Not a valid road type, skipping snapping.")
            return False

        s_lat, s_lon = hit
        target = self.view.from_lonlat(s_lon, s_lat)
        self.view.animate(target, duration_ms=ANIMATION_MS)
        self.view.set_pointer(target)
        self.view.overlay.replace([Feature(
            kind=FeatureKind.SNAP,
            geometry_type="Point",
            coordinates=[target],
            style="icon:pointer",
        )])
        log.info("Snapped %.6f, %.6f -> %.6f, %.6f", lat, lon, s_lat, s_lon)
        return True
