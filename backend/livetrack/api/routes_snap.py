from fastapi import APIRouter, Depends

from livetrack.api.deps import get_session
from livetrack.schemas.tracking import ViewportIn, ViewportOut
from livetrack.services.session import TrackingSession

router = APIRouter(prefix="/api/viewport", tags=["viewport"])


def _viewport(session: TrackingSession) -> ViewportOut:
    view = session.view
    lon, lat = view.center_lonlat()
    pointer = view.to_lonlat(view.pointer) if view.pointer is not None else None
    return ViewportOut(lat=lat, lon=lon, zoom=view.zoom, pointer=pointer)


@router.get("", response_model=ViewportOut)
async def get_viewport(session: TrackingSession = Depends(get_session)):
    return _viewport(session)


@router.post("", response_model=ViewportOut)
async def move_viewport(payload: ViewportIn, session: TrackingSession = Depends(get_session)):
    """User pan/zoom: move the view without snapping."""
    view = session.view
    view.set_center(view.from_lonlat(payload.lon, payload.lat))
    if payload.zoom is not None:
        view.zoom = payload.zoom
    view.render_tick()
    return _viewport(session)


@router.post("/settled")
async def viewport_settled(session: TrackingSession = Depends(get_session)):
    snapped = await session.snapper.on_viewport_settled()
    return {"snapped": snapped, "viewport": _viewport(session)}


@router.get("/overlay")
async def get_overlay(session: TrackingSession = Depends(get_session)):
    return session.view.overlay.to_geojson()
