from __future__ import annotations
from typing import Optional

from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import MotionState, Position
from livetrack.utils.geo import haversine_m, is_valid_latlon

log = get_logger(__name__)


class MotionAggregator:
    """Derives instantaneous speed, average speed and travelled distance
    from consecutive position samples.

    Samples must arrive in order; a sample with bad coordinates or a
    timestamp earlier than the previous one is rejected and leaves the
    state untouched.
    """

    def __init__(self):
        self._state = MotionState()

    @property
    def state(self) -> MotionState:
        return self._state.model_copy()

    def reset(self) -> None:
        self._state = MotionState()

    def update(self, pos: Position) -> Optional[MotionState]:
        """Fold one sample into the running state.

        Returns the new state, or None if the sample was rejected.
        """
        if not is_valid_latlon(pos.latitude, pos.longitude):
            log.warning("Rejected position with invalid coordinates: %s", pos)
            return None

        s = self._state
        prev = s.previous_position
        if prev is None:
            self._state = MotionState(previous_position=pos, first_position=pos, samples=1)
            return self.state

        elapsed = pos.timestamp - prev.timestamp
        if elapsed < 0:
            log.warning("Rejected out-of-order position (dt=%.3fs)", elapsed)
            return None

        delta = haversine_m((prev.latitude, prev.longitude), (pos.latitude, pos.longitude))
        current = delta / elapsed if elapsed > 0 else 0.0
        total = s.total_distance_m + delta
        since_first = pos.timestamp - s.first_position.timestamp
        average = total / since_first if since_first > 0 else 0.0

        self._state = MotionState(
            previous_position=pos,
            first_position=s.first_position,
            total_distance_m=total,
            current_speed_mps=current,
            average_speed_mps=average,
            samples=s.samples + 1,
        )
        log.debug("motion: +%.2fm total=%.2fm v=%.2fm/s avg=%.2fm/s", delta, total, current, average)
        return self.state
