import httpx
from typing import Any, Dict, List, Optional, Tuple
from livetrack.core.config import HTTP_TIMEOUT_S, OSRM_BASE_URL, USER_AGENT
from livetrack.core.logger import get_logger

log = get_logger(__name__)

LatLon = Tuple[float, float]


class RouteError(Exception):
    """Routing request failed or returned nothing usable."""


def route_url(origin: LatLon, destination: LatLon, base_url: str = OSRM_BASE_URL, profile: str = "driving") -> str:
    """OSRM wants lon,lat pairs separated by ';'."""
    (o_lat, o_lon), (d_lat, d_lon) = origin, destination
    return f"{base_url}/route/v1/{profile}/{o_lon},{o_lat};{d_lon},{d_lat}"


async def fetch_osrm_route(origin: LatLon, destination: LatLon, base_url: str = OSRM_BASE_URL,
                           transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    """Fetch a driving route with full GeoJSON geometry and return the first route object."""
    url = route_url(origin, destination, base_url)
    params = {"geometries": "geojson", "overview": "full", "steps": "true"}
    try:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_S, transport=transport,
                                     headers={"User-Agent": USER_AGENT}) as client:
            r = await client.get(url, params=params)
    except httpx.HTTPError as e:
        raise RouteError(f"OSRM request failed: {e}") from e

    try:
        data = r.json()
    except ValueError as e:
        raise RouteError(f"OSRM returned non-JSON body ({r.status_code})") from e

    if r.status_code != 200 or not isinstance(data, dict):
        detail = data.get("message") if isinstance(data, dict) else None
        raise RouteError(f"OSRM routing failed: {r.status_code} {detail or ''}".strip())

    code = data.get("code", "Ok")
    if code != "Ok":
        raise RouteError(f"OSRM error: {code} {data.get('message', '')}".strip())

    routes = data.get("routes") or []
    if not isinstance(routes, list) or not routes:
        raise RouteError("No routes found")
    if not isinstance(routes[0], dict):
        raise RouteError(f"Malformed route entry: {type(routes[0]).__name__}")
    log.debug("OSRM returned %d route(s)", len(routes))
    return routes[0]


def parse_route(route: Dict[str, Any]) -> Tuple[List[Tuple[float, float]], float, float, List[str]]:
    """Split an OSRM route object into (lon/lat coordinates, distance m, duration s, step names)."""
    try:
        coords = [(float(p[0]), float(p[1])) for p in route["geometry"]["coordinates"]]
        distance_m = float(route["distance"])
        duration_s = float(route["duration"])
        names: List[str] = []
        for leg in route.get("legs") or []:
            if not isinstance(leg, dict):
                continue
            for step in leg.get("steps") or []:
                if isinstance(step, dict):
                    names.append(str(step.get("name") or ""))
    except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
        raise RouteError(f"Malformed route payload: {e!r}") from e
    if len(coords) < 2:
        raise RouteError("Route geometry has fewer than two points")
    return coords, distance_m, duration_s, names
