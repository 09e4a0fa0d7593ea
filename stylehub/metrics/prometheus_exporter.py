"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter


suggestion_requests_total = Counter(
    "suggestion_requests_total",
    "Total number of garment suggestion requests.",
    ["kind"],
)

wear_events_total = Counter(
    "wear_events_total",
    "Total number of wear events written to the ledger.",
)

closet_health_evaluations_total = Counter(
    "closet_health_evaluations_total",
    "Total number of closet health evaluations.",
)
