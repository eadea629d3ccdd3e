"""
Defines Prometheus metrics for detection, analysis, caching and provider calls.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram
from prometheus_client import start_http_server

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads) must not register a collector twice.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "detections_total": Counter(
            "pagebrief_detections_total",
            "Main-content detections by winning strategy",
            ["strategy"],
        ),
        "analysis_total": Counter(
            "pagebrief_analysis_total",
            "Content analyses by outcome",
            ["outcome"],
        ),
        "cache_lookups_total": Counter(
            "pagebrief_cache_lookups_total",
            "Summary cache lookups by result",
            ["result"],
        ),
        "provider_requests_total": Counter(
            "pagebrief_provider_requests_total",
            "Provider requests by summary format and outcome",
            ["format", "outcome"],
        ),
        "provider_latency_seconds": Histogram(
            "pagebrief_provider_latency_seconds",
            "Latency of a single provider request",
            ["format"],
        ),
        "summaries_total": Counter(
            "pagebrief_summaries_total",
            "Summary generations by outcome",
            ["outcome"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()


def start_metrics_server(port: int) -> None:
    """Expose the default registry over HTTP."""
    start_http_server(port)
