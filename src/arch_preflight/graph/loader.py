"""Normalize raw editor exports into a GraphCollection.

The editor hands over whatever it has in memory: half-filled payloads,
``null`` arrays, nodes missing their kind.  Nothing here raises for that;
unusable pieces are logged and dropped, everything else defaults to empty.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from arch_preflight.graph.models import (
    Graph,
    GraphCollection,
    GraphEdge,
    GraphNode,
    as_list,
)

log = logging.getLogger(__name__)

DEFAULT_TAB = "main"


class GraphFileError(Exception):
    """A graph file could not be read or does not hold a graph mapping."""


def load_graph_collection(raw: Any) -> GraphCollection:
    """Build a GraphCollection from a tab mapping or a single flat graph.

    Accepts ``{tab: {"nodes": [...], "edges": [...]}}`` or ``{"nodes": [...],
    "edges": [...]}`` (loaded under the ``main`` tab).  Already-built ``Graph``
    values are re-stamped with their tab name.
    """
    if not isinstance(raw, Mapping):
        log.warning("Graph input is %s, not a mapping; treating as empty", type(raw).__name__)
        return {}

    if _is_flat_graph(raw):
        return {DEFAULT_TAB: load_graph(raw, tab=DEFAULT_TAB)}

    graphs: GraphCollection = {}
    for tab, value in raw.items():
        tab = str(tab)
        if isinstance(value, (Mapping, Graph)):
            graphs[tab] = load_graph(value, tab=tab)
        else:
            log.warning("Tab %r holds %s, not a graph; skipped", tab, type(value).__name__)
    return graphs


def load_graph(raw: Mapping | Graph, *, tab: str = DEFAULT_TAB) -> Graph:
    """Load one tab's nodes and edges, stamping each with the tab name."""
    if isinstance(raw, Graph):
        return Graph(
            nodes=[n.model_copy(update={"tab": tab}) for n in raw.nodes],
            edges=[e.model_copy(update={"tab": tab}) for e in raw.edges],
        )

    nodes: list[GraphNode] = []
    for item in as_list(raw.get("nodes")):
        node = _load_node(item, tab)
        if node is not None:
            nodes.append(node)

    edges: list[GraphEdge] = []
    for item in as_list(raw.get("edges")):
        edge = _load_edge(item, tab)
        if edge is not None:
            edges.append(edge)

    return Graph(nodes=nodes, edges=edges)


def _load_node(item: Any, tab: str) -> GraphNode | None:
    if isinstance(item, GraphNode):
        return item.model_copy(update={"tab": tab})
    if not isinstance(item, Mapping):
        log.warning("Skipping non-object node in tab %r", tab)
        return None
    try:
        node = GraphNode.model_validate({**item, "tab": tab})
    except ValidationError as exc:
        log.warning("Skipping malformed node %r in tab %r: %s", item.get("id"), tab, exc)
        return None
    if not node.id:
        log.warning("Skipping node without id in tab %r", tab)
        return None
    return node


def _load_edge(item: Any, tab: str) -> GraphEdge | None:
    if isinstance(item, GraphEdge):
        return item.model_copy(update={"tab": tab})
    if not isinstance(item, Mapping):
        log.warning("Skipping non-object edge in tab %r", tab)
        return None
    try:
        return GraphEdge.model_validate({**item, "tab": tab})
    except ValidationError as exc:
        log.warning("Skipping malformed edge %r in tab %r: %s", item.get("id"), tab, exc)
        return None


def is_graph_collection(value: Any) -> bool:
    """True when ``value`` is already a normalized tab -> Graph mapping."""
    return isinstance(value, Mapping) and all(isinstance(g, Graph) for g in value.values())


def _is_flat_graph(raw: Mapping) -> bool:
    return "nodes" in raw or "edges" in raw


def read_graph_file(path: Path) -> GraphCollection:
    """Read a JSON or YAML graph export from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise GraphFileError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(text)
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise GraphFileError(f"Cannot parse {path}: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise GraphFileError(f"{path} does not contain a graph mapping")

    graphs = load_graph_collection(raw)
    log.info(
        "Loaded %s: %d tabs, %d nodes, %d edges",
        path.name, len(graphs),
        sum(len(g.nodes) for g in graphs.values()),
        sum(len(g.edges) for g in graphs.values()),
    )
    return graphs
