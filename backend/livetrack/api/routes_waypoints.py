from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from livetrack.api.deps import get_session
from livetrack.schemas.tracking import WaypointIn
from livetrack.services.session import TrackingSession
from livetrack.services.waypoints import TooManyWaypoints

router = APIRouter(prefix="/api/waypoints", tags=["waypoints"])


def _listing(session: TrackingSession):
    return {
        "waypoints": [{"lat": w.latitude, "lon": w.longitude} for w in session.waypoints.waypoints],
        "route_state": session.planner.state.value,
    }


@router.get("")
async def list_waypoints(session: TrackingSession = Depends(get_session)):
    return _listing(session)


@router.post("")
async def record_waypoint(payload: Optional[WaypointIn] = Body(None),
                          session: TrackingSession = Depends(get_session)):
    """Record a waypoint at the given point, or at the viewport center when no body is sent."""
    try:
        if payload is None:
            session.waypoints.add_at_viewport_center()
        else:
            session.waypoints.add_waypoint(payload.lat, payload.lon)
    except TooManyWaypoints as e:
        raise HTTPException(409, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _listing(session)


@router.delete("")
async def clear_waypoints(session: TrackingSession = Depends(get_session)):
    session.waypoints.clear()
    return _listing(session)
