from fastapi import Request

from livetrack.services.session import TrackingSession


def get_session(request: Request) -> TrackingSession:
    return request.app.state.session
