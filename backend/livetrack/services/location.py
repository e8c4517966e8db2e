from __future__ import annotations
import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from livetrack.core.config import GEO_HIGH_ACCURACY, GEO_MAX_CACHED_AGE_MS, GEO_TIMEOUT_MS
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import Position

log = get_logger(__name__)


class GeoErrorCode(str, Enum):
    PERMISSION_DENIED = "permission-denied"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


class GeolocationError(Exception):
    def __init__(self, code: GeoErrorCode, message: str = ""):
        super().__init__(f"{code.value}: {message}" if message else code.value)
        self.code = code


@dataclass(frozen=True)
class GeoRequestOptions:
    high_accuracy: bool = GEO_HIGH_ACCURACY
    max_cached_age_ms: int = GEO_MAX_CACHED_AGE_MS
    timeout_ms: int = GEO_TIMEOUT_MS


class LocationSource(Protocol):
    async def current_position(self, options: GeoRequestOptions) -> Position:
        ...


class DeviceFeedLocationSource:
    """Location source fed by the device pushing fixes over HTTP.

    A request resolves with a fix no older than max_cached_age_ms; with the
    default of 0 it waits for a fix that has not been handed out yet.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._latest: Optional[Position] = None
        self._received_at: float = 0.0
        self._served: Optional[Position] = None
        self._error: Optional[GeolocationError] = None
        self._changed = asyncio.Event()

    def push_fix(self, lat: float, lon: float, timestamp: Optional[float] = None) -> Position:
        now = self._clock()
        pos = Position(latitude=lat, longitude=lon, timestamp=now if timestamp is None else timestamp)
        self._latest = pos
        self._received_at = now
        self._error = None
        self._changed.set()
        return pos

    def push_error(self, code: GeoErrorCode, message: str = "") -> None:
        self._error = GeolocationError(code, message)
        self._changed.set()

    def _usable(self, options: GeoRequestOptions) -> Optional[Position]:
        if self._latest is None:
            return None
        if options.max_cached_age_ms <= 0:
            return self._latest if self._latest is not self._served else None
        age_ms = (self._clock() - self._received_at) * 1000.0
        return self._latest if age_ms <= options.max_cached_age_ms else None

    async def current_position(self, options: GeoRequestOptions) -> Position:
        deadline = self._clock() + options.timeout_ms / 1000.0
        while True:
            if self._error is not None:
                err, self._error = self._error, None
                raise err
            pos = self._usable(options)
            if pos is not None:
                self._served = pos
                return pos
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise GeolocationError(GeoErrorCode.TIMEOUT, "no fix within %d ms" % options.timeout_ms)
            self._changed.clear()
            try:
                await asyncio.wait_for(self._changed.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                pass
