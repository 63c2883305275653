"""Request observability: Prometheus metrics for HTTP traffic and outbound calls."""
from typing import Optional
import time

from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

request_counter = Counter(
    "sentiment_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status", "auth"],
)

request_latency = Histogram(
    "sentiment_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path", "auth"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

external_call_outcomes = Counter(
    "sentiment_external_call_outcomes_total",
    "External call outcomes",
    ["system", "result"],
)

analyses_total = Counter(
    "sentiment_analyses_total",
    "Completed analyses by backend and category",
    ["backend", "sentiment"],
)

metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def metrics_endpoint():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_request_metrics(request: Request, status_code: int, duration: float, authenticated: bool):
    path = request.url.path
    method = request.method
    auth_label = "user" if authenticated else "anonymous"
    request_counter.labels(method=method, path=path, status=str(status_code), auth=auth_label).inc()
    request_latency.labels(method=method, path=path, auth=auth_label).observe(duration)


def record_external_call(system: str, result: str):
    external_call_outcomes.labels(system=system, result=result).inc()


def record_analysis(backend: str, sentiment: str):
    analyses_total.labels(backend=backend, sentiment=sentiment).inc()


def request_timer() -> float:
    return time.perf_counter()


def elapsed(start_time: Optional[float]) -> float:
    if start_time is None:
        return 0.0
    return time.perf_counter() - start_time
