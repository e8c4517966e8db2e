from __future__ import annotations
import math
from typing import List, Sequence, Tuple

import numpy as np
from pyproj import Transformer

EARTH_R = 6371000.0  # Earth radius in meters

LatLon = Tuple[float, float]
LonLat = Tuple[float, float]
XY = Tuple[float, float]

# Geographic (EPSG:4326) <-> display projection (Web Mercator, EPSG:3857).
# always_xy keeps (lon, lat) / (x, y) ordering on both sides.
_TO_DISPLAY = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
_TO_GEO = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


def haversine_m(p1: LatLon, p2: LatLon) -> float:
    """Great-circle distance (meters) between two (lat, lon) points."""
    lat1, lon1 = map(math.radians, p1)
    lat2, lon2 = map(math.radians, p2)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_R * c


def is_valid_latlon(lat, lon) -> bool:
    """True when both values are finite numbers inside WGS84 bounds."""
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return False
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def from_lonlat(lon: float, lat: float) -> XY:
    """Project a geographic coordinate for display."""
    x, y = _TO_DISPLAY.transform(lon, lat)
    return float(x), float(y)


def to_lonlat(x: float, y: float) -> LonLat:
    """Inverse of from_lonlat."""
    lon, lat = _TO_GEO.transform(x, y)
    return float(lon), float(lat)


def project_lonlat_series(coords: Sequence[Sequence[float]]) -> List[XY]:
    """Project a whole [(lon, lat), ...] series in one transform call."""
    if len(coords) == 0:
        return []
    arr = np.asarray(coords, dtype=float)[:, :2]
    xs, ys = _TO_DISPLAY.transform(arr[:, 0], arr[:, 1])
    return [(float(x), float(y)) for x, y in zip(np.atleast_1d(xs), np.atleast_1d(ys))]


def unproject_series(points: Sequence[Sequence[float]]) -> List[LonLat]:
    if len(points) == 0:
        return []
    arr = np.asarray(points, dtype=float)[:, :2]
    lons, lats = _TO_GEO.transform(arr[:, 0], arr[:, 1])
    return [(float(lo), float(la)) for lo, la in zip(np.atleast_1d(lons), np.atleast_1d(lats))]
