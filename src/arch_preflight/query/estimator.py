"""Design-time query cost estimation.

A heuristic, not an optimizer: conditions are never parsed as SQL and the
table population is a fixed hypothetical figure.  The output is directional
feedback for the query editor ("this will scan most of the table"), never
an exact row count.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import ConfigDict, Field

from arch_preflight.graph.models import (
    Complexity,
    DatabaseData,
    DatabaseQuery,
    DatabaseTable,
    EditorModel,
    as_database,
    as_query,
)
from arch_preflight.query.preview import preview_statement
from arch_preflight.query.tokenize import count_words, match_fields

log = logging.getLogger(__name__)

# Hypothetical population of every table
BASE_ROWS = 10_000
# Fraction of BASE_ROWS one predicate is assumed to touch
INDEXED_SELECTIVITY = 0.12
SCAN_SELECTIVITY = 0.55

SIMPLE_MAX_SCORE = 2
MODERATE_MAX_SCORE = 4


class QueryPerformance(EditorModel):
    model_config = ConfigDict(frozen=True)

    complexity: Complexity
    uses_index: bool
    suggested_indexes: list[str] = Field(default_factory=list)  # "table.field"
    estimated_rows_scanned: int

    # Intermediate figures, exposed for badges and tests
    condition_fields: list[str] = Field(default_factory=list)
    indexed_fields: list[str] = Field(default_factory=list)
    join_count: int = 0
    predicate_count: int = 0
    score: int = 1


def indexed_fields(table: DatabaseTable | None) -> set[str]:
    """Lower-cased field names covered by an index definition or a primary key."""
    if table is None:
        return set()
    names = [f.name for f in table.fields]
    covered: set[str] = set()
    for definition in table.indexes:
        covered.update(match_fields(definition, names))
    covered.update(f.name.lower() for f in table.fields if f.is_pk and f.name)
    return covered


def estimate(
    database: DatabaseData | Mapping[str, Any],
    query: DatabaseQuery | Mapping[str, Any],
) -> QueryPerformance:
    """Estimate index usage, complexity and rows scanned for one query.

    An unknown target table is not an error: field-aware figures are simply
    empty, so the query reads as unindexed.
    """
    database = as_database(database)
    query = as_query(query)

    table = database.table(query.target)
    field_names = [f.name for f in table.fields] if table else []
    conditions = query.conditions

    condition_fields = match_fields(conditions, field_names) if conditions.strip() else []
    covered = indexed_fields(table)

    uses_index = any(f in covered for f in condition_fields)
    suggested: list[str] = []
    if condition_fields and not uses_index:
        suggested = [f"{query.target}.{f}" for f in condition_fields if f not in covered]

    join_count = count_words(conditions, ("join",))
    predicate_count = 1 + count_words(conditions, ("and", "or")) if conditions.strip() else 0

    score = 1 + 2 * join_count
    if predicate_count >= 3:
        score += 1
    if predicate_count >= 6:
        score += 1
    if predicate_count > 0 and not uses_index:
        score += 1
    if query.operation != "SELECT":
        score += 1

    if score <= SIMPLE_MAX_SCORE:
        complexity = "simple"
    elif score <= MODERATE_MAX_SCORE:
        complexity = "moderate"
    else:
        complexity = "complex"

    if query.operation == "INSERT":
        rows = 1
    elif predicate_count > 0:
        selectivity = INDEXED_SELECTIVITY if uses_index else SCAN_SELECTIVITY
        raw = BASE_ROWS * selectivity * max(1, join_count + 1) / max(1, predicate_count)
        rows = max(1, _round_half_up(raw))
    else:
        rows = BASE_ROWS  # full scan

    log.debug(
        "Query %r on %r: score=%d (%s), rows=%d, index=%s",
        query.name or query.id, query.target, score, complexity, rows, uses_index,
    )
    return QueryPerformance(
        complexity=complexity,
        uses_index=uses_index,
        suggested_indexes=suggested,
        estimated_rows_scanned=rows,
        condition_fields=condition_fields,
        indexed_fields=sorted(covered),
        join_count=join_count,
        predicate_count=predicate_count,
        score=score,
    )


def analyze_query(
    database: DatabaseData | Mapping[str, Any],
    query: DatabaseQuery | Mapping[str, Any],
    performance: QueryPerformance | None = None,
) -> DatabaseQuery:
    """Return a copy of ``query`` with every derived field recomputed.

    Pass ``performance`` when the estimate for this query is already at hand.
    """
    database = as_database(database)
    query = as_query(query)
    perf = performance if performance is not None else estimate(database, query)
    return query.model_copy(update={
        "generated_code": preview_statement(database.db_type, query),
        "complexity": perf.complexity,
        "uses_index": perf.uses_index,
        "suggested_indexes": list(perf.suggested_indexes),
        "estimated_rows_scanned": perf.estimated_rows_scanned,
    })


def analyze_queries(database: DatabaseData | Mapping[str, Any]) -> list[DatabaseQuery]:
    """Recompute derived fields for every query stored on a database block."""
    database = as_database(database)
    return [analyze_query(database, q) for q in database.queries]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)

