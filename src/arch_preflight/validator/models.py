"""Pydantic models for validation findings."""

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, computed_field

from arch_preflight.graph.models import EditorModel

Severity = Literal["error", "warning"]


class ValidationIssue(EditorModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: str               # "EMPTY_CANVAS", "DUPLICATE_ROUTE", ...
    message: str
    suggestion: str = ""
    node_id: str | None = None      # for highlighting on the canvas
    node_label: str | None = None
    node_ids: tuple[str, ...] = ()  # rules that implicate several nodes
    edge_id: str | None = None
    tab: str | None = None


class ValidationResult(EditorModel):
    model_config = ConfigDict(frozen=True)

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    node_count: int = 0     # excludes service_boundary nodes
    edge_count: int = 0

    # ── Derived, serialized: the UI gates Generate/Deploy on ``valid`` ──

    @computed_field
    @property
    def valid(self) -> bool:
        """True when there are no errors. Warnings never block."""
        return len(self.errors) == 0

    @computed_field
    @property
    def error_count(self) -> int:
        return len(self.errors)

    @computed_field
    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    # ── Convenience accessors (not serialized) ──

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.errors, *self.warnings]

    def codes(self, severity: Severity | None = None) -> list[str]:
        """Issue codes in report order, optionally for one severity."""
        return [i.code for i in self.issues if severity is None or i.severity == severity]

    def for_node(self, node_id: str) -> list[ValidationIssue]:
        return [i for i in self.issues if i.node_id == node_id or node_id in i.node_ids]
