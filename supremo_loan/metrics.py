"""Prometheus collectors for the loan client.

:func:`get_metric` hands back the collector already created under a name, so
callers asking for the same metric twice share one collector. The cache lives
in this module; reloading it registers the collectors again.
"""
from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram

__all__ = [
    "get_metric",
    "http_requests_total",
    "http_latency_seconds",
    "http_errors_total",
    "oauth_tokens_issued_total",
]

_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


http_requests_total = get_metric(
    Counter, "supremo_http_requests_total",
    "HTTP requests to the loan service",
    ["endpoint", "method", "status"],
)

http_latency_seconds = get_metric(
    Histogram, "supremo_http_latency_seconds",
    "Latency for loan service HTTP requests",
    ["endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)

# kind: transport | decode | remote
http_errors_total = get_metric(
    Counter, "supremo_http_errors_total",
    "Failed loan service calls by error kind",
    ["endpoint", "kind"],
)

oauth_tokens_issued_total = get_metric(
    Counter, "supremo_oauth_tokens_issued_total",
    "OAuth tokens issued by the loan service",
    ["grant"],
)
