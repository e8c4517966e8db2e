import json

import httpx
import pytest


def osrm_payload(distance=5000.0, duration=600.0, names=("Azadi", "Azadi", "Enghelab")):
    return {
        "code": "Ok",
        "routes": [{
            "geometry": {"type": "LineString",
                         "coordinates": [[51.40, 35.70], [51.405, 35.702], [51.41, 35.705]]},
            "distance": distance,
            "duration": duration,
            "legs": [{"steps": [{"name": n, "distance": 10.0} for n in names]}],
        }],
    }


class Recorder:
    """httpx.MockTransport handler that records requests and answers by path."""

    def __init__(self, route=None, reverse=None):
        self.requests = []
        self.route = route if route is not None else osrm_payload()
        self.reverse = reverse if reverse is not None else {"lat": "35.7", "lon": "51.4"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.route if request.url.path.startswith("/route/") else self.reverse
        if isinstance(body, Exception):
            raise body
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, content=json.dumps(body).encode(),
                              headers={"Content-Type": "application/json"})

    def paths(self, prefix):
        return [r for r in self.requests if r.url.path.startswith(prefix)]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def transport(recorder):
    return httpx.MockTransport(recorder)
