from fastapi import APIRouter, Depends

from livetrack.api.deps import get_session
from livetrack.services.session import TrackingSession

router = APIRouter()


@router.get("/api/route")
async def get_route(session: TrackingSession = Depends(get_session)):
    planner = session.planner
    route = planner.route
    return {
        "state": planner.state.value,
        "error": planner.error,
        "route": None if route is None else {
            "coordinates": [list(c) for c in route.coordinates],
            "distance_km": route.total_distance_km,
            "duration_min": route.total_duration_min,
            "segment_names": route.segment_names,
        },
    }
