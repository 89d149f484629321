"""
Prometheus Metrics
Request, ingestion and Q&A counters on a dedicated registry
"""

import time
from typing import Callable

from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import generate_latest
from starlette.requests import Request
from starlette.responses import Response

# Create a custom registry
metrics_registry = CollectorRegistry()

# Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=metrics_registry
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=(.005, .01, .025, .05, .075, .1, .25, .5, .75, 1.0, 2.5, 5.0, 7.5, 10.0),
    registry=metrics_registry
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
    registry=metrics_registry
)

# Document metrics
documents_uploaded_total = Counter(
    "documents_uploaded_total",
    "Total files stored (new documents and new versions)",
    ["kind"],
    registry=metrics_registry
)

# Ingestion metrics
ingestion_jobs_total = Counter(
    "ingestion_jobs_total",
    "Ingestion job status changes",
    ["status"],
    registry=metrics_registry
)

# Q&A metrics
qa_questions_total = Counter(
    "qa_questions_total",
    "Questions answered",
    ["confidence", "source"],
    registry=metrics_registry
)


def route_template(request: Request) -> str:
    """Matched route path, so ids do not explode label cardinality"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_middleware(request: Request, call_next: Callable) -> Response:
    """Record count and latency for every HTTP request"""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        errors_total.labels(
            error_type=type(e).__name__,
            endpoint=route_template(request),
        ).inc()
        raise

    endpoint = route_template(request)
    http_requests_total.labels(
        method=request.method,
        endpoint=endpoint,
        status=str(response.status_code),
    ).inc()
    http_request_duration_seconds.labels(
        method=request.method,
        endpoint=endpoint,
    ).observe(time.time() - start_time)
    return response


def get_metrics() -> bytes:
    """Generate Prometheus metrics exposition format"""
    return generate_latest(metrics_registry)
