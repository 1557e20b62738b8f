"""Shared HTTP helper for the loan-origination REST API.

Uses `httpx.AsyncClient` with:
* Base URL taken from the client's credential
* Status branching: 200 decodes into the expected model, anything else
  decodes as generic JSON and raises `RemoteError`
* Prometheus counters + histogram (labels: endpoint, method, status)

No retries and no token handling here; callers pass auth per request. Tests
swap the transport for `httpx.MockTransport`.
"""
from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, RemoteError, TransportError
from .metrics import http_errors_total, http_latency_seconds, http_requests_total

__all__ = ["LoanHTTP"]

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


class LoanHTTP:
    def __init__(
        self,
        *,
        base_url: str,
        client_name: str = "unknown",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client_name = client_name
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=10,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def _send(self, method: str, url: str, *, endpoint: str, **kwargs) -> httpx.Response:
        extra = {"client": self._client_name, "endpoint": endpoint, "method": method}
        start = time.perf_counter()
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            http_errors_total.labels(endpoint, "transport").inc()
            _LOG.warning("Request to %s failed: %s", endpoint, exc, extra=extra)
            raise TransportError(f"{method} {endpoint}: {exc}") from exc
        elapsed = time.perf_counter() - start
        http_latency_seconds.labels(endpoint).observe(elapsed)
        http_requests_total.labels(endpoint, method.lower(), resp.status_code).inc()
        _LOG.debug(
            "%s %s -> %s in %.3fs", method, endpoint, resp.status_code, elapsed,
            extra={**extra, "status": resp.status_code},
        )
        return resp

    async def request(
        self, method: str, url: str, expect: Type[T], *, endpoint: str, **kwargs
    ) -> T:
        """Send a request and decode a 200 body as *expect*.

        Raises `RemoteError` carrying the JSON body for any other status,
        `DecodeError` when a body is not JSON or not the expected shape.
        """
        resp = await self._send(method, url, endpoint=endpoint, **kwargs)
        if resp.status_code != httpx.codes.OK:
            body = self._json(resp, endpoint)
            http_errors_total.labels(endpoint, "remote").inc()
            _LOG.info(
                "%s returned %s", endpoint, resp.status_code,
                extra={"client": self._client_name, "endpoint": endpoint, "status": resp.status_code},
            )
            raise RemoteError(resp.status_code, body)
        try:
            return _adapter(expect).validate_json(resp.content)
        except PydanticValidationError as exc:
            http_errors_total.labels(endpoint, "decode").inc()
            raise DecodeError(
                f"{endpoint}: unexpected response body: {exc}",
                status_code=resp.status_code,
            ) from exc

    @staticmethod
    def _json(resp: httpx.Response, endpoint: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            http_errors_total.labels(endpoint, "decode").inc()
            raise DecodeError(
                f"{endpoint}: response body is not JSON (HTTP {resp.status_code})",
                status_code=resp.status_code,
            ) from exc

    async def get(self, url: str, expect: Type[T], *, endpoint: str, **kw) -> T:
        return await self.request("GET", url, expect, endpoint=endpoint, **kw)

    async def post(self, url: str, expect: Type[T], *, endpoint: str, **kw) -> T:
        return await self.request("POST", url, expect, endpoint=endpoint, **kw)

    async def aclose(self) -> None:
        await self._client.aclose()

    # context-manager sugar
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
