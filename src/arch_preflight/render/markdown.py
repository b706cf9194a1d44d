"""Render preflight results as a Markdown report."""

from __future__ import annotations

from arch_preflight.preflight import PreflightResult, QueryReport
from arch_preflight.validator.models import ValidationIssue

_COMPLEXITY_BADGE = {
    "simple": "🟢 simple",
    "moderate": "🟡 moderate",
    "complex": "🔴 complex",
}


def render_markdown(result: PreflightResult) -> str:
    """Produce a full Markdown report from a PreflightResult."""
    sections: list[str] = []
    v = result.validation
    name = result.source.name if result.source else "architecture"

    # ── Title ────────────────────────────────────────────────────────────
    sections.append(f"# Preflight Report: {name}\n")

    # ── Summary box ──────────────────────────────────────────────────────
    summary_lines = [
        f"- **Status**: {_status_line(result)}",
        f"- **Blocks**: {v.node_count}",
        f"- **Connections**: {v.edge_count}",
        f"- **Errors**: {v.error_count}",
        f"- **Warnings**: {v.warning_count}",
        f"- **Queries analyzed**: {len(result.queries)}",
    ]
    sections.append("\n".join(summary_lines) + "\n")

    # ── Issues ───────────────────────────────────────────────────────────
    if v.errors:
        sections.append("## Errors\n")
        sections.append(_issue_table(v.errors))
    if v.warnings:
        sections.append("## Warnings\n")
        sections.append(_issue_table(v.warnings))
    if not v.errors and not v.warnings:
        sections.append("No issues found.\n")

    # ── Queries ──────────────────────────────────────────────────────────
    if result.queries:
        sections.append("## Query Performance\n")
        sections.append("_Estimates assume 10,000 rows per table; they are directional only._\n")
        sections.append("| Database | Query | Statement | Complexity | Index | Est. rows |")
        sections.append("|---|---|---|---|---|---|")
        for r in result.queries:
            sections.append(_query_row(r))
        sections.append("")

        unindexed = result.unindexed_queries
        if unindexed:
            sections.append("### Suggested Indexes\n")
            for r in unindexed:
                idx = ", ".join(f"`{s}`" for s in r.performance.suggested_indexes)
                sections.append(f"- **{_cell(r.query.name or r.query.id)}**: {idx}")
            sections.append("")

    return "\n".join(sections)


def _status_line(result: PreflightResult) -> str:
    v = result.validation
    if not v.valid:
        return "BLOCKED -- errors must be resolved before generating."
    if v.warnings:
        return "PASS WITH WARNINGS -- review warnings before generating."
    return "PASS -- ready to generate."


def _issue_table(issues: tuple[ValidationIssue, ...]) -> str:
    rows = ["| Code | Message | Block | Suggestion |", "|---|---|---|---|"]
    for i in issues:
        if i.node_id:
            block = f"`{i.node_id}`"
        elif i.node_ids:
            block = ", ".join(f"`{n}`" for n in i.node_ids)
        elif i.edge_id:
            block = f"edge `{i.edge_id}`"
        else:
            block = ""
        rows.append(f"| `{i.code}` | {_cell(i.message)} | {block} | {_cell(i.suggestion)} |")
    return "\n".join(rows) + "\n"


def _query_row(r: QueryReport) -> str:
    perf = r.performance
    index = "yes" if perf.uses_index else "no"
    return (
        f"| {_cell(r.node_label)} | {_cell(r.query.name or r.query.id)} "
        f"| `{_cell(r.query.generated_code)}` | {_COMPLEXITY_BADGE[perf.complexity]} "
        f"| {index} | {perf.estimated_rows_scanned:,} |"
    )


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")
