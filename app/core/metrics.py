"""
Prometheus metrics for the SkillSync API.

PrometheusMiddleware records request counts and latency labelled by route
template. The domain counters below are incremented by the services that
perform the operation. Each worker exposes its own registry on /metrics.
"""

import logging
import re
import time
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

try:
    APP_VERSION = get_version("skillsync-api")
except PackageNotFoundError:
    APP_VERSION = "unknown"

app_info = Info("skillsync_app", "SkillSync build information")
app_info.info({"version": APP_VERSION})

# HTTP

http_requests_total = Counter(
    "skillsync_http_requests_total",
    "HTTP requests by method, route and status",
    ["method", "route", "status"],
)

http_request_duration_seconds = Histogram(
    "skillsync_http_request_duration_seconds",
    "HTTP request latency by method and route",
    ["method", "route"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Cache

cache_hits_total = Counter("skillsync_cache_hits_total", "Redis cache hits")
cache_misses_total = Counter("skillsync_cache_misses_total", "Redis cache misses")

# Teams

team_requests_total = Counter(
    "skillsync_team_requests_total",
    "Team join request submissions by outcome",
    ["outcome"],
)

team_request_decisions_total = Counter(
    "skillsync_team_request_decisions_total",
    "Accept/reject decisions by outcome",
    ["decision", "outcome"],
)

team_members_removed_total = Counter(
    "skillsync_team_members_removed_total",
    "Members removed from project teams",
)

# Team dashboard

tasks_created_total = Counter("skillsync_tasks_created_total", "Tasks created")

tasks_updated_total = Counter(
    "skillsync_tasks_updated_total",
    "Task updates by resulting status",
    ["status"],
)

discussions_created_total = Counter(
    "skillsync_discussions_created_total",
    "Discussions started by category",
    ["category"],
)

# Community

posts_created_total = Counter("skillsync_posts_created_total", "Community posts created")

# Users

match_suggestions_served_total = Counter(
    "skillsync_match_suggestions_served_total",
    "Match suggestion responses by source (cache or database)",
    ["source"],
)

auth_login_attempts_total = Counter(
    "skillsync_auth_login_attempts_total",
    "Login attempts by status",
    ["status"],
)

auth_signups_total = Counter(
    "skillsync_auth_signups_total",
    "Signups by status",
    ["status"],
)


async def metrics_endpoint(request: Request) -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


_UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I)
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_path(path: str) -> str:
    """Collapse id segments of an unmatched path, e.g. /projects/<uuid> -> /projects/{id}."""
    path = _UUID_SEGMENT.sub("/{id}", path)
    return _NUMERIC_SEGMENT.sub("/{id}", path)


def route_label(request: Request) -> str:
    """Route template for matched requests, the normalized path otherwise."""
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template or normalize_path(request.url.path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = route_label(request)
            http_request_duration_seconds.labels(request.method, route).observe(
                time.perf_counter() - start
            )
            http_requests_total.labels(request.method, route, status).inc()
