from __future__ import annotations
from typing import Any, Dict, List, Optional

from livetrack.core.config import ANIMATION_MS, INITIAL_CENTER_LAT, INITIAL_CENTER_LON, INITIAL_ZOOM
from livetrack.core.logger import get_logger
from livetrack.schemas.tracking import XY, Animation, Feature, FeatureKind, LonLat
from livetrack.utils.geo import from_lonlat, to_lonlat, unproject_series

log = get_logger(__name__)


class OverlayLayer:
    """Vector layer holding the markers and polylines drawn over the map.

    Several producers write here without coordination; the last write wins.
    """

    def __init__(self):
        self._features: List[Feature] = []

    @property
    def features(self) -> List[Feature]:
        return list(self._features)

    def add_feature(self, feature: Feature) -> None:
        self._features.append(feature)

    def clear(self) -> None:
        self._features.clear()

    def replace(self, features: List[Feature]) -> None:
        self._features = list(features)

    def replace_kind(self, kind: FeatureKind, feature: Optional[Feature]) -> None:
        self._features = [f for f in self._features if f.kind != kind]
        if feature is not None:
            self._features.append(feature)

    def of_kind(self, kind: FeatureKind) -> List[Feature]:
        return [f for f in self._features if f.kind == kind]

    def to_geojson(self) -> Dict[str, Any]:
        out = []
        for f in self._features:
            coords = unproject_series(f.coordinates)
            geometry = {
                "type": f.geometry_type,
                "coordinates": list(coords[0]) if f.geometry_type == "Point" else [list(c) for c in coords],
            }
            out.append({
                "type": "Feature",
                "geometry": geometry,
                "properties": {"kind": f.kind.value, "style": f.style},
            })
        return {"type": "FeatureCollection", "features": out}


class MapView:
    """Server-side model of the map widget: viewport, pointer marker and overlay."""

    def __init__(self, lat: float = INITIAL_CENTER_LAT, lon: float = INITIAL_CENTER_LON,
                 zoom: float = INITIAL_ZOOM):
        self.overlay = OverlayLayer()
        self.center: XY = from_lonlat(lon, lat)
        self.zoom = zoom
        self.pointer: Optional[XY] = None
        self.last_animation: Optional[Animation] = None
        self.animate(self.center, zoom=zoom, duration_ms=ANIMATION_MS)
        self.render_tick()

    # -- projection --
    @staticmethod
    def from_lonlat(lon: float, lat: float) -> XY:
        return from_lonlat(lon, lat)

    @staticmethod
    def to_lonlat(point: XY) -> LonLat:
        return to_lonlat(point[0], point[1])

    # -- viewport --
    def center_lonlat(self) -> LonLat:
        return self.to_lonlat(self.center)

    def set_center(self, center: XY) -> None:
        self.center = (float(center[0]), float(center[1]))

    def animate(self, center: XY, zoom: Optional[float] = None, duration_ms: int = ANIMATION_MS) -> None:
        # No frames are rendered here: record the transition and land on its target.
        self.last_animation = Animation(center=center, zoom=zoom, duration_ms=duration_ms)
        self.set_center(center)
        if zoom is not None:
            self.zoom = zoom
        log.debug("viewport animate -> %s zoom=%s (%d ms)", center, zoom, duration_ms)

    def render_tick(self) -> None:
        """Post-render hook: the pointer marker follows the viewport center."""
        self.pointer = self.center

    def set_pointer(self, point: XY) -> None:
        self.pointer = point
