import json
from urllib.parse import parse_qs

import httpx


class RecordingTransport(httpx.AsyncBaseTransport):
    """Route requests by path to canned responses and record every request."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def handle_async_request(self, request):  # type: ignore[override]
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"detail": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


def form_body(request: httpx.Request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def json_body(request: httpx.Request):
    return json.loads(request.content)
