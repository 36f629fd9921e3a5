"""Prometheus metrics instrumentation."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

REGISTRY = CollectorRegistry()

SERIALIZATIONS = Counter(
    "sitemap_serializations_total",
    "Sitemap document serializations",
    labelnames=("cache",),
    registry=REGISTRY,
)

SERIALIZE_DURATION = Histogram(
    "sitemap_serialize_seconds",
    "Time spent rendering a sitemap document",
    registry=REGISTRY,
)

VALIDATION_VIOLATIONS = Counter(
    "sitemap_validation_violations_total",
    "Protocol violations found while validating entries",
    labelnames=("kind", "level"),
    registry=REGISTRY,
)

STREAM_ENTRIES = Counter(
    "sitemap_stream_entries_total",
    "Entries emitted through the streaming transform",
    registry=REGISTRY,
)

FILES_WRITTEN = Counter(
    "sitemap_files_written_total",
    "Sitemap files persisted by the index writer",
    labelnames=("kind",),
    registry=REGISTRY,
)


def metrics_payload() -> bytes:
    """Return metrics in the Prometheus text exposition format."""
    return generate_latest(REGISTRY)


__all__ = [
    "REGISTRY",
    "SERIALIZATIONS",
    "SERIALIZE_DURATION",
    "VALIDATION_VIOLATIONS",
    "STREAM_ENTRIES",
    "FILES_WRITTEN",
    "metrics_payload",
]
