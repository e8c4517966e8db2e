from fastapi import APIRouter, Depends, HTTPException

from livetrack.api.deps import get_session
from livetrack.schemas.tracking import DeviceErrorIn, DeviceFixIn, PanelSnapshot
from livetrack.services.location import DeviceFeedLocationSource, GeoErrorCode
from livetrack.services.session import TrackingSession

router = APIRouter()


def _feed(session: TrackingSession) -> DeviceFeedLocationSource:
    if not isinstance(session.source, DeviceFeedLocationSource):
        raise HTTPException(409, "Location source does not accept pushed fixes")
    return session.source


@router.post("/api/device/fix")
async def push_fix(payload: DeviceFixIn, session: TrackingSession = Depends(get_session)):
    pos = _feed(session).push_fix(payload.lat, payload.lon, payload.timestamp)
    return {"accepted": True, "timestamp": pos.timestamp}


@router.post("/api/device/error")
async def push_error(payload: DeviceErrorIn, session: TrackingSession = Depends(get_session)):
    try:
        code = GeoErrorCode(payload.code)
    except ValueError:
        raise HTTPException(400, f"Unknown error code: {payload.code}")
    _feed(session).push_error(code, payload.message)
    return {"accepted": True}


@router.get("/api/panel", response_model=PanelSnapshot)
async def info_panel(session: TrackingSession = Depends(get_session)):
    return session.panel()
