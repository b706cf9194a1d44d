"""Unified preflight: graph validation + query estimation in one pass."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arch_preflight.graph.loader import is_graph_collection, load_graph_collection
from arch_preflight.graph.models import DatabaseData, DatabaseQuery, GraphCollection
from arch_preflight.query.estimator import QueryPerformance, analyze_query, estimate
from arch_preflight.validator import validate
from arch_preflight.validator.models import ValidationResult

log = logging.getLogger(__name__)


@dataclass
class QueryReport:
    """One query on one database block, with its derived fields filled in."""
    node_id: str
    node_label: str
    tab: str
    db_type: str
    query: DatabaseQuery
    performance: QueryPerformance


@dataclass
class PreflightResult:
    """Combined result from validation and query estimation."""
    validation: ValidationResult
    queries: list[QueryReport] = field(default_factory=list)
    source: Path | None = None

    @property
    def unindexed_queries(self) -> list[QueryReport]:
        return [q for q in self.queries if q.performance.suggested_indexes]

    def passed(self, *, strict: bool = False) -> bool:
        """Whether generation may proceed. ``strict`` also fails on warnings."""
        if strict:
            return self.validation.valid and self.validation.warning_count == 0
        return self.validation.valid


def run_preflight(
    graphs: GraphCollection | Mapping[str, Any],
    *,
    source: Path | None = None,
) -> PreflightResult:
    """Validate every tab and estimate every query on every database block.

    Args:
        graphs: Tab name → Graph, or the editor's raw export.
        source: File the graph was read from, for reporting.

    Returns:
        PreflightResult. Query reports follow tab, node and query order.
    """
    if not is_graph_collection(graphs):
        graphs = load_graph_collection(graphs)

    validation = validate(graphs)
    log.info("Validation complete: %d errors, %d warnings",
             validation.error_count, validation.warning_count)

    reports: list[QueryReport] = []
    for graph in graphs.values():
        for node in graph.nodes:
            if not isinstance(node.data, DatabaseData):
                continue
            for query in node.data.queries:
                perf = estimate(node.data, query)
                reports.append(QueryReport(
                    node_id=node.id,
                    node_label=node.display_name,
                    tab=node.tab,
                    db_type=node.data.db_type,
                    query=analyze_query(node.data, query, perf),
                    performance=perf,
                ))
    log.info("Query estimation complete: %d queries, %d without index coverage",
             len(reports), sum(1 for r in reports if r.performance.suggested_indexes))

    return PreflightResult(validation=validation, queries=reports, source=source)
