"""Prometheus metrics definitions for Grocer."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "grocer_http_requests_total",
    "Total number of HTTP requests processed by the Grocer API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "grocer_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Grocer API",
    ["method", "path"],
)

RECONCILE_RUNS = Counter(
    "grocer_reconcile_runs_total",
    "Number of shopping list reconciliation passes by outcome",
    ["outcome"],
)

ITEMS_ADDED = Counter(
    "grocer_items_added_total",
    "Number of items added to the active shopping list by origin",
    ["origin"],
)

ITEM_MUTATIONS = Counter(
    "grocer_item_mutations_total",
    "Number of shopping list mutations applied by operation",
    ["operation"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "RECONCILE_RUNS",
    "ITEMS_ADDED",
    "ITEM_MUTATIONS",
]
