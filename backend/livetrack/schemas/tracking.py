from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

XY = Tuple[float, float]
LonLat = Tuple[float, float]


class Position(BaseModel):
    """One device location sample. timestamp is a monotonic instant in seconds."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    timestamp: float


class Waypoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class RouteState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    polyline: List[XY]          # projected for display
    coordinates: List[LonLat]   # as returned by the router
    total_distance_km: float
    total_duration_min: float
    segment_names: List[str] = Field(default_factory=list)


class MotionState(BaseModel):
    previous_position: Optional[Position] = None
    first_position: Optional[Position] = None
    total_distance_m: float = 0.0
    current_speed_mps: float = 0.0
    average_speed_mps: float = 0.0
    samples: int = 0


class FeatureKind(str, Enum):
    WAYPOINT = "waypoint"
    ROUTE = "route"
    DEVICE = "device"
    SNAP = "snap"


class Feature(BaseModel):
    """Overlay feature; coordinates are in display projection."""
    model_config = ConfigDict(frozen=True)

    kind: FeatureKind
    geometry_type: str  # "Point" | "LineString"
    coordinates: List[XY]
    style: str = ""


class Animation(BaseModel):
    center: XY
    zoom: Optional[float] = None
    duration_ms: int


class ViewportOut(BaseModel):
    lat: float
    lon: float
    zoom: float
    pointer: Optional[LonLat] = None


class PanelSnapshot(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    current_speed_mps: float = 0.0
    average_speed_mps: float = 0.0
    travelled_distance_m: float = 0.0
    route_distance_km: float = 0.0
    route_duration_min: float = 0.0
    route_state: RouteState = RouteState.IDLE
    waypoints: int = 0


# ---- request bodies ----

class WaypointIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class ViewportIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    zoom: Optional[float] = None


class DeviceFixIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    timestamp: Optional[float] = None  # seconds; server clock when absent


class DeviceErrorIn(BaseModel):
    code: str
    message: str = ""
