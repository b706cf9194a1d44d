"""Graph validation rules.

Each rule is a linear scan over a GraphIndex and returns its own list of
ValidationIssue objects; the orchestrator unions them.  service_boundary
nodes are cosmetic groupings and never the subject of an issue.
"""

from __future__ import annotations

import re

from arch_preflight.graph.index import GraphIndex
from arch_preflight.graph.models import (
    ApiBindingData,
    ApiEndpointData,
    DatabaseData,
    GraphNode,
    ProcessData,
    QueueData,
)
from arch_preflight.validator.models import Severity, ValidationIssue

VALID_DELIVERIES = ("at_least_once", "at_most_once", "exactly_once")

_WHITESPACE = re.compile(r"\s")


def _issue(
    severity: Severity,
    code: str,
    message: str,
    suggestion: str = "",
    node: GraphNode | None = None,
    **extra,
) -> ValidationIssue:
    if node is not None:
        extra.setdefault("node_id", node.id)
        extra.setdefault("node_label", node.display_name)
        extra.setdefault("tab", node.tab or None)
    return ValidationIssue(
        severity=severity, code=code, message=message, suggestion=suggestion, **extra,
    )


def _rest_binding(node: GraphNode) -> ApiBindingData | None:
    data = node.data
    if isinstance(data, ApiBindingData) and data.protocol == "rest":
        return data
    return None


# ── Canvas-level ────────────────────────────────────────────────────────────

def check_empty_canvas(index: GraphIndex) -> list[ValidationIssue]:
    if index.meaningful:
        return []
    return [_issue(
        "error", "EMPTY_CANVAS",
        "Canvas has no components. Add API, Function, Database or Queue nodes first.",
        "Drag nodes from the left sidebar onto the canvas.",
    )]


# ── Edges ───────────────────────────────────────────────────────────────────

def check_dangling_edges(index: GraphIndex) -> list[ValidationIssue]:
    """One error per edge endpoint that names a node that does not exist."""
    issues: list[ValidationIssue] = []
    for edge in index.edges:
        for end, node_id in (("source", edge.source), ("target", edge.target)):
            if node_id in index.by_id:
                continue
            issues.append(_issue(
                "error", "DANGLING_EDGE",
                f'Edge "{edge.id}" references a {end} node that no longer exists (id: {node_id}).',
                "Delete this edge and reconnect.",
                edge_id=edge.id, tab=edge.tab or None,
            ))
    return issues


def check_self_loops(index: GraphIndex) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for edge in index.edges:
        if edge.source != edge.target:
            continue
        node = index.by_id.get(edge.source)
        # Loops on missing nodes are reported as dangling edges
        if node is None or node.is_boundary:
            continue
        issues.append(_issue(
            "warning", "SELF_LOOP",
            f'Node "{node.display_name}" is connected to itself.',
            "Self-loops have no meaning in a backend architecture. Remove this edge.",
            node=node, edge_id=edge.id,
        ))
    return issues


# ── Per-node ────────────────────────────────────────────────────────────────

def check_missing_labels(index: GraphIndex) -> list[ValidationIssue]:
    return [
        _issue(
            "error", "MISSING_LABEL",
            f'Block "{n.id}" has no label.',
            "Every block needs a descriptive label so meaningful code can be generated.",
            node=n,
        )
        for n in index.meaningful
        if not n.label.strip()
    ]


def check_api_routes(index: GraphIndex) -> list[ValidationIssue]:
    """Shape checks for REST bindings: method set, route set, leading /, no spaces.

    Other protocols (ws, grpc, graphql, sse, webhook, socket.io) have no
    method/route and are exempt.
    """
    issues: list[ValidationIssue] = []
    for n in index.of_kind("api_binding"):
        data = _rest_binding(n)
        if data is None:
            continue
        lbl = n.display_name
        method = data.method.strip()
        route = data.route.strip()

        if not method:
            issues.append(_issue(
                "error", "API_NO_METHOD",
                f'API "{lbl}" has no HTTP method set.',
                "Set a method (GET, POST, PUT, PATCH, DELETE) in the node's Properties panel.",
                node=n,
            ))

        if not route:
            issues.append(_issue(
                "error", "API_NO_ROUTE",
                f'API "{lbl}" has no route defined.',
                "Set a route like /api/users or /api/users/:id.",
                node=n,
            ))
            continue
        if not route.startswith("/"):
            issues.append(_issue(
                "error", "API_ROUTE_SLASH",
                f'API "{lbl}" route "{route}" must start with /.',
                f'Change the route to "/{route}".',
                node=n,
            ))
        if _WHITESPACE.search(route):
            issues.append(_issue(
                "error", "API_ROUTE_SPACES",
                f'API "{lbl}" route "{route}" contains spaces.',
                "Routes cannot have spaces. Use hyphens or %20 for URL encoding.",
                node=n,
            ))
    return issues


def check_duplicate_routes(index: GraphIndex) -> list[ValidationIssue]:
    """First binding with a given ``METHOD route`` wins; each later one is flagged."""
    issues: list[ValidationIssue] = []
    seen: dict[str, GraphNode] = {}
    for n in index.of_kind("api_binding"):
        data = _rest_binding(n)
        if data is None:
            continue
        method = data.method.strip().upper()
        route = data.route.strip()
        if not method or not route:
            continue
        key = f"{method} {route}"
        first = seen.get(key)
        if first is None:
            seen[key] = n
            continue
        issues.append(_issue(
            "error", "DUPLICATE_ROUTE",
            f"Duplicate route: {key} is defined on multiple API nodes.",
            f'"{n.display_name}" and "{first.display_name}" share the same route.',
            node=n,
        ))
    return issues


def check_isolated_apis(index: GraphIndex) -> list[ValidationIssue]:
    """API bindings with no edge in either direction."""
    return [
        _issue(
            "warning", "ISOLATED_API",
            f'API "{n.display_name}" is not connected to any Function.',
            "Connect this API node to a Function block to define its handler logic.",
            node=n,
        )
        for n in index.of_kind("api_binding")
        if not index.is_connected(n.id)
    ]


def check_process_steps(index: GraphIndex) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for n in index.of_kind("process"):
        if isinstance(n.data, ProcessData) and n.data.steps:
            continue
        issues.append(_issue(
            "warning", "PROC_NO_STEPS",
            f'Function "{n.display_name}" has no steps defined.',
            "Add steps in the Properties panel; behavior is otherwise inferred from the label.",
            node=n,
        ))
    return issues


def check_database_tables(index: GraphIndex) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for n in index.of_kind("database"):
        if not isinstance(n.data, DatabaseData):
            continue
        lbl = n.display_name
        if not n.data.tables:
            issues.append(_issue(
                "warning", "DB_NO_TABLES",
                f'Database "{lbl}" has no tables defined.',
                "Add at least one table in the Database designer so schema code can be generated.",
                node=n,
            ))
            continue
        for table in n.data.tables:
            if table.fields:
                continue
            name = table.name or "unnamed"
            issues.append(_issue(
                "warning", "TABLE_NO_FIELDS",
                f'Table "{name}" in "{lbl}" has no columns defined.',
                f'Add at least one column to the "{name}" table.',
                node=n,
            ))
    return issues


def check_queue_delivery(index: GraphIndex) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for n in index.of_kind("queue"):
        delivery = n.data.delivery if isinstance(n.data, QueueData) else ""
        if delivery in VALID_DELIVERIES:
            continue
        issues.append(_issue(
            "error", "QUEUE_BAD_DELIVERY",
            f'Queue "{n.display_name}" has an invalid delivery guarantee: "{delivery}".',
            "Set delivery to at_least_once, at_most_once, or exactly_once.",
            node=n,
        ))
    return issues


def check_duplicate_labels(index: GraphIndex) -> list[ValidationIssue]:
    """One warning per label (trimmed, case-insensitive) used by 2+ nodes."""
    groups: dict[str, list[GraphNode]] = {}
    for n in index.meaningful:
        key = n.label.strip().lower()
        if key:
            groups.setdefault(key, []).append(n)

    issues: list[ValidationIssue] = []
    for members in groups.values():
        if len(members) < 2:
            continue
        ids = tuple(m.id for m in members)
        issues.append(_issue(
            "warning", "DUPLICATE_LABEL",
            f'Duplicate label "{members[0].label.strip()}" on {len(members)} blocks.',
            f"Node IDs: {', '.join(ids)}. Rename them so their responsibilities stay distinct.",
            node_ids=ids,
        ))
    return issues


def check_orphan_nodes(index: GraphIndex) -> list[ValidationIssue]:
    # A lone node is a valid (if small) architecture
    if len(index.meaningful) < 2:
        return []
    return [
        _issue(
            "warning", "ORPHAN_NODE",
            f'"{n.display_name}" is not connected to anything.',
            "This block has no edges. It will still be included but may be isolated in the generated project.",
            node=n,
        )
        for n in index.meaningful
        if not index.is_connected(n.id)
    ]


# ── Cross-tab ───────────────────────────────────────────────────────────────

def check_api_endpoint_links(index: GraphIndex) -> list[ValidationIssue]:
    """api_endpoint nodes must point at an api_binding on any tab."""
    issues: list[ValidationIssue] = []
    for n in index.of_kind("api_endpoint"):
        target = n.data.target_api_id if isinstance(n.data, ApiEndpointData) else ""
        if not target.strip():
            issues.append(_issue(
                "warning", "API_ENDPOINT_UNLINKED",
                f'API Endpoint "{n.display_name}" is not linked to any API interface.',
                "Link it to an API interface from the API tab for cross-tab integration.",
                node=n,
            ))
        elif target not in index.api_binding_ids:
            issues.append(_issue(
                "error", "API_ENDPOINT_DANGLING_REF",
                f'API Endpoint "{n.display_name}" references a deleted API interface.',
                f'Target "{target}" no longer exists. Update or remove the link.',
                node=n,
            ))
    return issues


# ── Graph-level ─────────────────────────────────────────────────────────────

def check_missing_functions(index: GraphIndex) -> list[ValidationIssue]:
    if index.of_kind("process"):
        return []
    issues: list[ValidationIssue] = []
    apis = index.of_kind("api_binding")
    if apis:
        issues.append(_issue(
            "warning", "NO_FUNCTIONS",
            f"You have {len(apis)} API endpoint(s) but no Function blocks.",
            "Add a Function block and connect it to your APIs to define the business logic.",
        ))
    databases = index.of_kind("database")
    if databases:
        issues.append(_issue(
            "warning", "DB_NO_FUNCTIONS",
            f"You have {len(databases)} Database(s) but no Function blocks to access them.",
            "Add a Function block and connect it to your Databases.",
        ))
    return issues


def check_all_isolated(index: GraphIndex) -> list[ValidationIssue]:
    if len(index.meaningful) < 2:
        return []
    if any(index.is_connected(n.id) for n in index.meaningful):
        return []
    return [_issue(
        "warning", "ALL_ISOLATED",
        "No nodes are connected. Components will be generated independently with no wiring.",
        "Draw edges between nodes to express dependencies and API-to-function relationships.",
    )]


EDGE_RULES = (
    check_dangling_edges,
    check_self_loops,
)

NODE_RULES = (
    check_missing_labels,
    check_api_routes,
    check_duplicate_routes,
    check_isolated_apis,
    check_process_steps,
    check_database_tables,
    check_queue_delivery,
    check_duplicate_labels,
    check_orphan_nodes,
)

CROSS_TAB_RULES = (
    check_api_endpoint_links,
    check_missing_functions,
    check_all_isolated,
)
