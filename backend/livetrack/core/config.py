import os

# Servis URL'leri
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org").rstrip("/")
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip("/")
HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "10"))
# Nominatim rejects requests without an identifying agent
USER_AGENT = os.getenv("USER_AGENT", "livetrack/1.0 (+https://github.com/livetrack)")

# Konum örnekleme
SAMPLE_INTERVAL_S = float(os.getenv("SAMPLE_INTERVAL_S", "1.0"))
GEO_TIMEOUT_MS = int(os.getenv("GEO_TIMEOUT_MS", "5000"))
GEO_MAX_CACHED_AGE_MS = int(os.getenv("GEO_MAX_CACHED_AGE_MS", "0"))
GEO_HIGH_ACCURACY = os.getenv("GEO_HIGH_ACCURACY", "1") not in ("0", "false", "False")
AUTOSTART_SAMPLER = os.getenv("AUTOSTART_SAMPLER", "1") not in ("0", "false", "False")

MAX_WAYPOINTS = 2

# Harita başlangıç görünümü
INITIAL_CENTER_LAT = float(os.getenv("INITIAL_CENTER_LAT", "35.69672648316882"))
INITIAL_CENTER_LON = float(os.getenv("INITIAL_CENTER_LON", "51.36281969540723"))
INITIAL_ZOOM = float(os.getenv("INITIAL_ZOOM", "12"))
ANIMATION_MS = int(os.getenv("ANIMATION_MS", "1000"))

CORS_ORIGINS = [o.strip() for o in os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,https://localhost:3000"
).split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
