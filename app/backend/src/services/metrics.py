"""Prometheus metric definitions for the query assistant."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

assistant_queries_total = Counter(
    "assistant_queries_total",
    "Total assistant aggregations by intent and outcome.",
    labelnames=["intent", "outcome"],
)

assistant_query_seconds = Histogram(
    "assistant_query_seconds",
    "Time spent resolving a single assistant intent.",
    labelnames=["intent"],
)

assistant_answers_total = Counter(
    "assistant_answers_total",
    "Language-model answers by outcome.",
    labelnames=["outcome"],
)

__all__ = [
    "assistant_answers_total",
    "assistant_queries_total",
    "assistant_query_seconds",
]
