from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from livetrack.api.routes_waypoints import router as waypoints_router
from livetrack.api.routes_route import router as route_router
from livetrack.api.routes_snap import router as viewport_router
from livetrack.api.routes_device import router as device_router
from livetrack.core.logger import get_logger
from livetrack.core.config import AUTOSTART_SAMPLER, CORS_ORIGINS, NOMINATIM_BASE_URL, OSRM_BASE_URL
from livetrack.services.session import TrackingSession

logger = get_logger(__name__)


def create_app(session_factory: Optional[Callable[[], TrackingSession]] = None,
               autostart: bool = AUTOSTART_SAMPLER) -> FastAPI:
    factory = session_factory or TrackingSession

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # session is built inside the running loop so its asyncio primitives bind to it
        session = factory()
        app.state.session = session
        logger.info("============================================")
        logger.info("LiveTrack API Starting")
        logger.info("OSRM:      %s", OSRM_BASE_URL)
        logger.info("Nominatim: %s", NOMINATIM_BASE_URL)
        logger.info("============================================")
        if autostart:
            session.start()
        try:
            yield
        finally:
            await session.stop()

    app = FastAPI(title="LiveTrack", version="1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(waypoints_router)
    app.include_router(route_router)
    app.include_router(viewport_router)
    app.include_router(device_router)

    @app.get("/")
    async def root():
        return {"message": "LiveTrack API running", "docs": "/docs"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "sampler": app.state.session.sampler.running}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
