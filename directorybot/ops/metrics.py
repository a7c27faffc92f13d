import time
from contextlib import contextmanager

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


ANALYSES_TOTAL = Counter(
    "analyses_total",
    "Total number of site analyses",
    ["mode"],
)
ANSWERS_TOTAL = Counter(
    "answers_total",
    "Total number of answers produced",
    ["source"],
)
DEGRADED_BATCHES_TOTAL = Counter(
    "degraded_batches_total",
    "Total number of batches answered by fallback after a remote failure",
    ["reason"],
)
COMPLETION_RETRIES_TOTAL = Counter(
    "completion_retries_total",
    "Total number of completion retries",
)
RATE_LIMIT_REJECTIONS_TOTAL = Counter(
    "rate_limit_rejections_total",
    "Total number of attempts rejected by the local rate limiter",
)
REQUEST_ERRORS_TOTAL = Counter(
    "request_errors_total",
    "Total number of failed API requests",
    ["reason"],
)
CACHE_HITS_TOTAL = Counter("cache_hits_total", "Total number of cache hits")

ANALYSIS_LATENCY_SECONDS = Histogram(
    "analysis_seconds",
    "End-to-end site analysis latency in seconds",
)
COMPLETION_LATENCY_SECONDS = Histogram(
    "completion_seconds",
    "Completion call latency in seconds, retries included",
)

CATALOG_SITES = Gauge(
    "catalog_sites_total",
    "Number of sites in the loaded catalog",
)


@contextmanager
def timer():
    start = time.time()
    yield lambda: time.time() - start


def observe_analysis_latency(sec: float) -> None:
    ANALYSIS_LATENCY_SECONDS.observe(sec)


def observe_completion_latency(sec: float) -> None:
    COMPLETION_LATENCY_SECONDS.observe(sec)


def inc_analyses(mode: str) -> None:
    ANALYSES_TOTAL.labels(mode=mode).inc()


def inc_answers(source: str, count: int = 1) -> None:
    if count > 0:
        ANSWERS_TOTAL.labels(source=source).inc(count)


def inc_degraded_batch(reason: str) -> None:
    DEGRADED_BATCHES_TOTAL.labels(reason=reason).inc()


def inc_completion_retries() -> None:
    COMPLETION_RETRIES_TOTAL.inc()


def inc_rate_limit_rejections() -> None:
    RATE_LIMIT_REJECTIONS_TOTAL.inc()


def inc_request_error(reason: str) -> None:
    REQUEST_ERRORS_TOTAL.labels(reason=reason).inc()


def inc_cache_hits() -> None:
    CACHE_HITS_TOTAL.inc()


def set_catalog_sites(count: int) -> None:
    CATALOG_SITES.set(max(0, count))


def render_metrics() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
