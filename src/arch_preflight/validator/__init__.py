"""Pre-generation graph validation.

Usage:
    from arch_preflight.validator import validate

    result = validate(graphs)   # GraphCollection or the editor's raw dict
    if not result.valid:
        for issue in result.errors:
            print(issue.code, issue.message)

Errors block generation and deploy; warnings are informational.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from arch_preflight.graph.index import GraphIndex
from arch_preflight.graph.loader import is_graph_collection, load_graph_collection
from arch_preflight.graph.models import GraphCollection
from arch_preflight.validator.models import ValidationIssue, ValidationResult
from arch_preflight.validator.rules import (
    CROSS_TAB_RULES,
    EDGE_RULES,
    NODE_RULES,
    check_empty_canvas,
)

log = logging.getLogger(__name__)

__all__ = ["ValidationIssue", "ValidationResult", "validate"]


def validate(graphs: GraphCollection | Mapping[str, Any]) -> ValidationResult:
    """Validate a snapshot of every tab of the architecture graph.

    Args:
        graphs: Tab name → Graph, or the editor's raw ``{tab: {nodes, edges}}``
                mapping (normalized first; malformed parts never raise).

    Returns:
        A fresh ValidationResult. The input is never modified.
    """
    if not is_graph_collection(graphs):
        graphs = load_graph_collection(graphs)

    index = GraphIndex.build(graphs)
    issues: list[ValidationIssue] = []

    empty = check_empty_canvas(index)
    issues.extend(empty)
    for rule in EDGE_RULES:
        issues.extend(rule(index))
    # An empty canvas has nothing to check per node
    if not empty:
        for rule in NODE_RULES:
            issues.extend(rule(index))
    for rule in CROSS_TAB_RULES:
        issues.extend(rule(index))

    result = ValidationResult(
        errors=tuple(i for i in issues if i.severity == "error"),
        warnings=tuple(i for i in issues if i.severity == "warning"),
        node_count=len(index.meaningful),
        edge_count=len(index.edges),
    )
    log.debug(
        "Validated %d nodes, %d edges across %d tabs: %d errors, %d warnings",
        result.node_count, result.edge_count, len(graphs),
        result.error_count, result.warning_count,
    )
    return result
