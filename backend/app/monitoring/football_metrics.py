"""
backend/app/monitoring/football_metrics.py

Purpose:
    Prometheus counters for the football-data layer: normalization fallback
    paths, response cache traffic and upstream failures.

Dependencies:
    - prometheus_client
"""

from __future__ import annotations

from prometheus_client import Counter

METRIC_STATUS_PASSTHROUGH = Counter(
    "football_status_passthrough_total",
    "Fixture status codes missing from the canonical status table.",
    ["code"],
)
METRIC_ROUND_DEFAULT = Counter(
    "football_round_default_total",
    "Round labels without a digit run, normalized to matchday 1.",
)
METRIC_CACHE_EVENTS = Counter(
    "football_cache_events_total",
    "Response cache lookups and writes.",
    ["cache", "outcome"],
)
METRIC_PROVIDER_FAILURES = Counter(
    "football_provider_failures_total",
    "Failed upstream provider calls.",
    ["provider", "endpoint", "reason"],
)
