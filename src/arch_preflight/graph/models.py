"""Pydantic models for the architecture graph as the visual editor exports it.

The editor speaks camelCase JSON (``dbType``, ``targetApiId``, ``isPrimaryKey``).
Every model accepts either the camelCase alias or the snake_case field name,
and every field is lenient: absent or wrongly-typed values collapse to empty
defaults instead of failing validation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

NodeKind = Literal[
    "api_binding",
    "process",
    "database",
    "queue",
    "infra",
    "service_boundary",
    "api_endpoint",
]
NODE_KINDS: frozenset[str] = frozenset(NodeKind.__args__)

QueryOperation = Literal["SELECT", "INSERT", "UPDATE", "DELETE"]
QUERY_OPERATIONS: frozenset[str] = frozenset(QueryOperation.__args__)

Complexity = Literal["simple", "moderate", "complex"]


# ── Coercion helpers ────────────────────────────────────────────────────────

def as_str(value: Any) -> str:
    """Coerce a loosely-typed editor value to a string ("" when unusable)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_records(value: Any) -> list:
    # Keep dicts and already-built models; drop scalars and nulls.
    return [v for v in as_list(value) if isinstance(v, (dict, BaseModel))]


class EditorModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ── Database schema ─────────────────────────────────────────────────────────

class DatabaseField(EditorModel):
    name: str = ""
    type: str = "string"
    nullable: bool = True
    is_primary_key: bool = False
    is_foreign_key: bool = False
    primary_key: bool = False  # legacy spelling of is_primary_key

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v: Any) -> str:
        return as_str(v) or "string"

    @field_validator("nullable", mode="before")
    @classmethod
    def _nullable(cls, v: Any) -> bool:
        return True if v is None else bool(v)

    @field_validator("is_primary_key", "is_foreign_key", "primary_key", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return bool(v)

    @property
    def is_pk(self) -> bool:
        return self.is_primary_key or self.primary_key


class DatabaseTable(EditorModel):
    name: str = ""
    fields: list[DatabaseField] = Field(default_factory=list)
    indexes: list[str] = Field(default_factory=list)  # free text, e.g. "idx_status (status)"

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("fields", mode="before")
    @classmethod
    def _fields(cls, v: Any) -> list:
        return _as_records(v)

    @field_validator("indexes", mode="before")
    @classmethod
    def _indexes(cls, v: Any) -> list[str]:
        return [s for s in as_list(v) if isinstance(s, str)]


class DatabaseQuery(EditorModel):
    """A user-authored query on a database block.

    Only ``operation``, ``target`` and ``conditions`` are authoritative; the
    remaining fields are derived by the estimator and always recomputable.
    """

    id: str = ""
    name: str = ""
    operation: QueryOperation = "SELECT"
    target: str = ""
    conditions: str = ""

    # Derived
    generated_code: str = ""
    complexity: Complexity | None = None
    uses_index: bool | None = None
    suggested_indexes: list[str] | None = None
    estimated_rows_scanned: int | None = None

    @field_validator("id", "name", "target", "conditions", "generated_code", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("operation", mode="before")
    @classmethod
    def _operation(cls, v: Any) -> str:
        op = as_str(v).strip().upper()
        return op if op in QUERY_OPERATIONS else "SELECT"

    @field_validator("complexity", mode="before")
    @classmethod
    def _complexity(cls, v: Any) -> str | None:
        return v if v in ("simple", "moderate", "complex") else None

    @field_validator("uses_index", mode="before")
    @classmethod
    def _uses_index(cls, v: Any) -> bool | None:
        return None if v is None else bool(v)

    @field_validator("suggested_indexes", mode="before")
    @classmethod
    def _suggested(cls, v: Any) -> list[str] | None:
        if v is None:
            return None
        return [s for s in as_list(v) if isinstance(s, str)]

    @field_validator("estimated_rows_scanned", mode="before")
    @classmethod
    def _rows(cls, v: Any) -> int | None:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return int(v)


# ── Node payloads (one variant per kind) ────────────────────────────────────

class NodeData(EditorModel):
    label: str = ""
    description: str = ""

    @field_validator("label", "description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_str(v)


class ApiBindingData(NodeData):
    kind: Literal["api_binding"] = "api_binding"
    protocol: str = "rest"  # rest | ws | socket.io | webrtc | graphql | grpc | sse | webhook
    method: str = ""
    route: str = ""

    @field_validator("protocol", mode="before")
    @classmethod
    def _protocol(cls, v: Any) -> str:
        return "rest" if v is None else as_str(v)

    @field_validator("method", "route", mode="before")
    @classmethod
    def _route_text(cls, v: Any) -> str:
        return as_str(v)


class ProcessData(NodeData):
    kind: Literal["process"] = "process"
    steps: list[Any] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _steps(cls, v: Any) -> list:
        return as_list(v)


class DatabaseData(NodeData):
    kind: Literal["database"] = "database"
    db_type: str = "sql"  # sql | nosql | kv | graph
    engine: str = ""
    tables: list[DatabaseTable] = Field(default_factory=list)
    queries: list[DatabaseQuery] = Field(default_factory=list)

    @field_validator("db_type", mode="before")
    @classmethod
    def _db_type(cls, v: Any) -> str:
        return as_str(v) or "sql"

    @field_validator("engine", mode="before")
    @classmethod
    def _engine(cls, v: Any) -> str:
        return as_str(v)

    @field_validator("tables", "queries", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list:
        return _as_records(v)

    def table(self, name: str) -> DatabaseTable | None:
        """Return the table with exactly this name, if any."""
        for t in self.tables:
            if t.name == name:
                return t
        return None


def as_database(value: Any) -> DatabaseData:
    """Accept a DatabaseData or the editor's raw database payload."""
    if isinstance(value, DatabaseData):
        return value
    data = dict(value) if isinstance(value, Mapping) else {}
    data["kind"] = "database"
    return DatabaseData.model_validate(data)


def as_query(value: Any) -> DatabaseQuery:
    """Accept a DatabaseQuery or the editor's raw query dict."""
    if isinstance(value, DatabaseQuery):
        return value
    return DatabaseQuery.model_validate(dict(value) if isinstance(value, Mapping) else {})


class QueueData(NodeData):
    kind: Literal["queue"] = "queue"
    delivery: str = ""  # at_least_once | at_most_once | exactly_once

    @field_validator("delivery", mode="before")
    @classmethod
    def _delivery(cls, v: Any) -> str:
        return as_str(v)


class InfraData(NodeData):
    kind: Literal["infra"] = "infra"
    provider: str = ""
    resource_type: str = ""

    @field_validator("provider", "resource_type", mode="before")
    @classmethod
    def _infra_text(cls, v: Any) -> str:
        return as_str(v)


class ServiceBoundaryData(NodeData):
    kind: Literal["service_boundary"] = "service_boundary"


class ApiEndpointData(NodeData):
    kind: Literal["api_endpoint"] = "api_endpoint"
    target_api_id: str = ""

    @field_validator("target_api_id", mode="before")
    @classmethod
    def _target(cls, v: Any) -> str:
        return as_str(v)


class UnknownNodeData(NodeData):
    """Payload of a node whose kind the analysis layer does not know."""

    kind: str = ""

    @field_validator("kind", mode="before")
    @classmethod
    def _kind(cls, v: Any) -> str:
        return as_str(v)


def _payload_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("kind")
    else:
        kind = getattr(value, "kind", None)
    # kind can be any JSON value, including unhashable lists and dicts
    return kind if isinstance(kind, str) and kind in NODE_KINDS else "unknown"


NodePayload = Annotated[
    Union[
        Annotated[ApiBindingData, Tag("api_binding")],
        Annotated[ProcessData, Tag("process")],
        Annotated[DatabaseData, Tag("database")],
        Annotated[QueueData, Tag("queue")],
        Annotated[InfraData, Tag("infra")],
        Annotated[ServiceBoundaryData, Tag("service_boundary")],
        Annotated[ApiEndpointData, Tag("api_endpoint")],
        Annotated[UnknownNodeData, Tag("unknown")],
    ],
    Discriminator(_payload_tag),
]


# ── Graph ───────────────────────────────────────────────────────────────────

class GraphNode(EditorModel):
    id: str
    tab: str = ""
    data: NodePayload = Field(default_factory=UnknownNodeData)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return raw
        raw = dict(raw)
        raw["id"] = as_str(raw.get("id"))
        data = raw.get("data")
        if isinstance(data, dict):
            data = dict(data)
            # React Flow nodes carry the kind twice; data.kind wins.
            kind = data.get("kind")
            if not (isinstance(kind, str) and kind) and isinstance(raw.get("type"), str):
                data["kind"] = raw["type"]
            raw["data"] = data
        elif not isinstance(data, BaseModel):
            kind = raw.get("type") if isinstance(raw.get("type"), str) else ""
            raw["data"] = {"kind": kind}
        return raw

    @property
    def kind(self) -> str:
        return self.data.kind

    @property
    def label(self) -> str:
        return self.data.label

    @property
    def display_name(self) -> str:
        """Label for messages: the node's label, or its id when unlabeled."""
        return self.data.label.strip() or self.id

    @property
    def is_boundary(self) -> bool:
        return self.data.kind == "service_boundary"


class GraphEdge(EditorModel):
    id: str
    source: str = ""
    target: str = ""
    tab: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return raw
        raw = dict(raw)
        raw["source"] = as_str(raw.get("source"))
        raw["target"] = as_str(raw.get("target"))
        raw["id"] = as_str(raw.get("id")) or f"{raw['source']}->{raw['target']}"
        return raw


class Graph(EditorModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


# Tab name ("api", "functions", "data", "infra", ...) → graph on that tab.
GraphCollection = dict[str, Graph]
