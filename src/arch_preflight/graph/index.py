"""GraphIndex: one flattened, cross-tab view of a GraphCollection."""

from __future__ import annotations

from dataclasses import dataclass

from arch_preflight.graph.models import GraphCollection, GraphEdge, GraphNode


@dataclass(frozen=True)
class GraphIndex:
    """All tabs merged into a single logical graph.

    Built once per validation call so that every rule is a linear scan over
    shared lookups instead of re-walking the tabs.
    """

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    # Every node except service_boundary groupings
    meaningful: tuple[GraphNode, ...]
    by_id: dict[str, GraphNode]
    # Any endpoint of any edge, whether or not that node exists
    connected_ids: frozenset[str]
    api_binding_ids: frozenset[str]

    @classmethod
    def build(cls, graphs: GraphCollection) -> GraphIndex:
        nodes: list[GraphNode] = []
        edges: list[GraphEdge] = []
        for graph in graphs.values():
            nodes.extend(graph.nodes)
            edges.extend(graph.edges)

        connected: set[str] = set()
        for e in edges:
            connected.add(e.source)
            connected.add(e.target)

        return cls(
            nodes=tuple(nodes),
            edges=tuple(edges),
            meaningful=tuple(n for n in nodes if not n.is_boundary),
            # Later tabs win on duplicate ids
            by_id={n.id: n for n in nodes},
            connected_ids=frozenset(connected),
            api_binding_ids=frozenset(n.id for n in nodes if n.kind == "api_binding"),
        )

    def of_kind(self, kind: str) -> list[GraphNode]:
        """Meaningful nodes of one kind, in tab then node order."""
        return [n for n in self.meaningful if n.kind == kind]

    def is_connected(self, node_id: str) -> bool:
        return node_id in self.connected_ids
