"""Heuristic query performance estimation and statement previews."""

from arch_preflight.query.estimator import (
    QueryPerformance,
    analyze_queries,
    analyze_query,
    estimate,
    indexed_fields,
)
from arch_preflight.query.preview import preview_statement

__all__ = [
    "QueryPerformance",
    "analyze_queries",
    "analyze_query",
    "estimate",
    "indexed_fields",
    "preview_statement",
]
