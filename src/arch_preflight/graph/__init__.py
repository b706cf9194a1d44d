"""Architecture graph data model, loader and cross-tab index."""

from arch_preflight.graph.index import GraphIndex
from arch_preflight.graph.loader import (
    GraphFileError,
    is_graph_collection,
    load_graph,
    load_graph_collection,
    read_graph_file,
)
from arch_preflight.graph.models import (
    ApiBindingData,
    ApiEndpointData,
    DatabaseData,
    DatabaseField,
    DatabaseQuery,
    DatabaseTable,
    Graph,
    GraphCollection,
    GraphEdge,
    GraphNode,
    InfraData,
    ProcessData,
    QueueData,
    ServiceBoundaryData,
    UnknownNodeData,
)

__all__ = [
    "ApiBindingData",
    "ApiEndpointData",
    "DatabaseData",
    "DatabaseField",
    "DatabaseQuery",
    "DatabaseTable",
    "Graph",
    "GraphCollection",
    "GraphEdge",
    "GraphFileError",
    "GraphIndex",
    "GraphNode",
    "InfraData",
    "ProcessData",
    "QueueData",
    "ServiceBoundaryData",
    "UnknownNodeData",
    "is_graph_collection",
    "load_graph",
    "load_graph_collection",
    "read_graph_file",
]
