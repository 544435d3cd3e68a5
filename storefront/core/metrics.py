"""
Prometheus metrics.

HTTP metrics are collected by ``PrometheusMiddleware``; catalog writes and
tree builds are recorded from the service layer.
"""

import re
import time
from typing import Any, Callable, cast

from fastapi import FastAPI, Request, Response
from loguru import logger
from prometheus_client import REGISTRY, Counter, Gauge, Histogram
from prometheus_client.openmetrics.exposition import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

METRICS_PATH = "/metrics"

REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests count", ["method", "endpoint", "status_code"])

REQUEST_TIME = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

REQUEST_IN_PROGRESS = Gauge("http_requests_in_progress", "Number of HTTP requests in progress", ["method", "endpoint"])

EXCEPTION_COUNT = Counter(
    "http_exceptions_total", "Total HTTP exceptions count", ["method", "endpoint", "exception_type"]
)

CATALOG_EVENTS = Counter("catalog_events_total", "Catalog and product writes", ["event_type"])

CATEGORY_TREE_ROWS = Histogram(
    "catalog_tree_rows",
    "Joined rows folded into one category tree",
    buckets=(1, 10, 50, 100, 250, 500, 1000, 5000, float("inf")),
)

# Entity IDs are collapsed so one route maps to one label value
_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


def normalize_path(path: str) -> str:
    return _UUID_SEGMENT.sub("/{id}", path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        if request.url.path == METRICS_PATH:
            return cast(Response, await call_next(request))

        method, endpoint = request.method, normalize_path(request.url.path)
        in_progress = REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint)
        in_progress.inc()
        started = time.perf_counter()

        try:
            response = cast(Response, await call_next(request))
        except Exception as e:
            EXCEPTION_COUNT.labels(method=method, endpoint=endpoint, exception_type=type(e).__name__).inc()
            logger.exception(f"Request {method} {endpoint} failed: {e}")
            raise
        finally:
            in_progress.dec()

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=response.status_code).inc()
        REQUEST_TIME.labels(method=method, endpoint=endpoint).observe(time.perf_counter() - started)
        return response


async def metrics_endpoint(request: Request) -> Response:
    return Response(content=generate_latest(REGISTRY), headers={"Content-Type": CONTENT_TYPE_LATEST})


def setup_metrics(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)
    app.add_route(METRICS_PATH, metrics_endpoint, include_in_schema=False)
    logger.info(f"Prometheus metrics exposed at {METRICS_PATH}")


def record_business_event(event_type: str) -> None:
    """Count a catalog write, e.g. ``product_created``."""
    CATALOG_EVENTS.labels(event_type=event_type).inc()


def observe_tree_build(row_count: int) -> None:
    CATEGORY_TREE_ROWS.observe(row_count)
