from __future__ import annotations
import asyncio
from typing import Callable, Optional

from livetrack.core.config import SAMPLE_INTERVAL_S
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Position
from livetrack.services.location import GeoRequestOptions, GeolocationError, LocationSource
from livetrack.services.mapview import MapView
from livetrack.utils.geo import is_valid_latlon

log = get_logger(__name__)

# returning False marks the sample as rejected
PositionListener = Callable[[Position], Optional[bool]]


class GeoSampler:
    """Polls the location source on a fixed period and emits positions.

    Failed cycles are logged and skipped; the next tick tries again. The
    first successful sample re-centers the viewport on the device once.
    """

    def __init__(self, source: LocationSource, view: MapView, on_position: Optional[PositionListener] = None,
                 interval_s: float = SAMPLE_INTERVAL_S, options: Optional[GeoRequestOptions] = None):
        self.source = source
        self.view = view
        self.on_position = on_position
        self.interval_s = interval_s
        self.options = options or GeoRequestOptions()
        self.has_centered = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self.has_centered = False
        self._task = asyncio.create_task(self._run(), name="geo-sampler")
        log.info("Geo sampler started (every %.1fs)", self.interval_s)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            log.info("Geo sampler stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.sample_once()
            except Exception:
                log.exception("Geo sampling cycle failed")
            # keep the cadence; a slow request just shortens the wait
            await asyncio.sleep(max(0.0, self.interval_s - (loop.time() - started)))

    async def sample_once(self) -> Optional[Position]:
        try:
            pos = await self.source.current_position(self.options)
        except GeolocationError as e:
            log.warning("Error getting location: %s", e)
            return None

        accepted = is_valid_latlon(pos.latitude, pos.longitude)
        if accepted and self.on_position is not None:
            try:
                accepted = self.on_position(pos) is not False
            except Exception:
                log.exception("Error updating position")
        if not accepted:
            log.warning("Skipping unusable fix %s", pos)
            return None

        if not self.has_centered:
            self.view.set_center(self.view.from_lonlat(pos.longitude, pos.latitude))
            self.has_centered = True
            log.info("Centered on device at %.6f, %.6f", pos.latitude, pos.longitude)
        return pos
