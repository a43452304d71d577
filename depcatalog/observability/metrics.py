"""Prometheus metrics for graph construction."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

graph_builds_total = Counter(
    "depcatalog_graph_builds_total",
    "Graph snapshots built, by retrieval mode",
    ["mode"],
)

graph_build_duration_seconds = Histogram(
    "depcatalog_graph_build_duration_seconds",
    "Wall time to fetch rows and build one graph snapshot",
    ["mode"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

graph_edges_dropped_total = Counter(
    "depcatalog_graph_edges_dropped_total",
    "Dependency edges skipped during construction, by reason",
    ["reason"],
)
