import math
import httpx
from typing import Optional, Tuple
from livetrack.core.config import HTTP_TIMEOUT_S, NOMINATIM_BASE_URL, USER_AGENT
from livetrack.core.logger import get_logger

log = get_logger(__name__)


async def reverse_geocode(lat: float, lon: float, base_url: str = NOMINATIM_BASE_URL,
                          transport: Optional[httpx.AsyncBaseTransport] = None) -> Optional[Tuple[float, float]]:
    """Nearest addressable point to (lat, lon) as (lat, lon), or None when there is no match.

    Transport and decoding errors propagate as httpx.HTTPError / ValueError.
    """
    url = f"{base_url}/reverse"
    params = {"format": "jsonv2", "lat": lat, "lon": lon}
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_S, transport=transport,
                                 headers={"User-Agent": USER_AGENT}) as client:
        r = await client.get(url, params=params)
    r.raise_for_status()
    if not r.content.strip():
        return None
    data = r.json()
    if not isinstance(data, dict) or not data or "error" in data:
        log.debug("Reverse geocode miss: %s", data)
        return None
    try:
        s_lat = float(data["lat"])
        s_lon = float(data["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (math.isfinite(s_lat) and math.isfinite(s_lon)):
        return None
    return s_lat, s_lon
