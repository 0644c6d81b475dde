"""Prometheus metrics.

Each application builds its own :class:`Metrics` with a private registry and
hands it to the services, so several apps (e.g. in tests) never share
counters.
"""

import time

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest


class Metrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry,
        )
        self.pvz_created_total = Counter(
            "pvz_created_total",
            "Total number of PVZ created",
            registry=self.registry,
        )
        self.reception_created_total = Counter(
            "reception_created_total",
            "Total number of order receptions created",
            registry=self.registry,
        )
        self.products_added_total = Counter(
            "products_added_total",
            "Total number of products added",
            registry=self.registry,
        )

    def observe_request(self, method: str, endpoint: str, status: int, elapsed: float) -> None:
        self.http_requests_total.labels(method, endpoint, str(status)).inc()
        self.http_request_duration.labels(method, endpoint).observe(elapsed)

    def render(self) -> Response:
        return Response(content=generate_latest(self.registry), media_type=CONTENT_TYPE_LATEST)


def route_template(request: Request) -> str:
    """Full path template of the matched route, e.g. ``/api/v1/pvz/{pvz_id}/...``.

    Depending on how routers are included, ``route.path`` may or may not carry
    the prefixes above it, so the missing leading segments are taken from the
    request path, which has the same number of segments.
    """
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template is None:
        return "unmatched"

    template_parts = [part for part in template.split("/") if part]
    path_parts = [part for part in request.scope["path"].split("/") if part]
    prefix = path_parts[: max(len(path_parts) - len(template_parts), 0)]
    return "/" + "/".join(prefix + template_parts)


async def metrics_middleware(request: Request, call_next):
    """Record count and latency per matched route template."""
    metrics: Metrics | None = getattr(request.app.state, "metrics", None)
    start = time.perf_counter()
    response = await call_next(request)
    if metrics is not None:
        metrics.observe_request(
            request.method, route_template(request), response.status_code, time.perf_counter() - start
        )
    return response
