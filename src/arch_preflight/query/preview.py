"""Dialect-appropriate preview statements for the query editor.

Presentation only: nothing else in the package reads these strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from arch_preflight.graph.models import DatabaseQuery, as_query

DOCUMENT_DB_TYPES = {"nosql"}
PLACEHOLDER_TARGET = "table_name"


def preview_statement(db_type: str, query: DatabaseQuery | Mapping[str, Any]) -> str:
    """Render a stub statement for ``query`` in the style of ``db_type``.

    ``nosql`` gets a document-store call (``db.users.find({ active: true })``);
    every other type gets relational SQL.
    """
    query = as_query(query)
    target = query.target or PLACEHOLDER_TARGET
    condition = query.conditions.strip()

    if db_type in DOCUMENT_DB_TYPES:
        filter_doc = condition or "{}"
        if query.operation == "SELECT":
            return f"db.{target}.find({filter_doc})"
        if query.operation == "INSERT":
            return f"db.{target}.insertOne({{ ...document }})"
        if query.operation == "UPDATE":
            return f"db.{target}.updateMany({filter_doc}, {{ $set: {{ ...updates }} }})"
        return f"db.{target}.deleteMany({filter_doc})"

    where = f" WHERE {condition}" if condition else ""
    if query.operation == "SELECT":
        return f"SELECT * FROM {target}{where};"
    if query.operation == "INSERT":
        return f"INSERT INTO {target} (...) VALUES (...);"
    if query.operation == "UPDATE":
        return f"UPDATE {target} SET ...{where};"
    return f"DELETE FROM {target}{where};"
