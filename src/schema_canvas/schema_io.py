from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .types import Column, DatabaseSchema, Note, Table
from .relationships import with_derived_relationships

# ============================================================================
# Plain-data conversion
#
# Turns already-parsed, JSON-shaped mappings (camelCase keys, as produced by
# the import collaborators) into schema values. File reading and SQL parsing
# happen upstream; this is only the value boundary.
#
# Any "relationships" entry in the input is ignored -- relationships are
# always re-derived from the column annotations.
# ============================================================================


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return str(value)


def column_from_mapping(data: Mapping[str, Any]) -> Column:
    return Column(
        name=str(data.get("name", "")),
        type=str(data.get("type", "")),
        is_primary_key=bool(data.get("isPrimaryKey", False)),
        is_foreign_key=bool(data.get("isForeignKey", False)),
        is_unique=bool(data.get("isUnique", False)),
        nullable=bool(data.get("nullable", True)),
        references=_opt_str(data, "references"),
        relation_type=_opt_str(data, "relationType") or None,
        relation_label=_opt_str(data, "relationLabel"),
        check_constraint=_opt_str(data, "checkConstraint"),
        comment=_opt_str(data, "comment"),
        on_delete=_opt_str(data, "onDelete"),
        on_update=_opt_str(data, "onUpdate"),
    )


def table_from_mapping(data: Mapping[str, Any]) -> Table:
    columns = data.get("columns") or []
    return Table(
        name=str(data.get("name", "")),
        columns=tuple(column_from_mapping(c) for c in columns),
        description=_opt_str(data, "description"),
    )


def note_from_mapping(data: Mapping[str, Any]) -> Note:
    return Note(
        id=str(data["id"]),
        content=str(data.get("content", "")),
        x=float(data.get("x", 0.0)),
        y=float(data.get("y", 0.0)),
        color=_opt_str(data, "color"),
    )


def schema_from_mapping(data: Mapping[str, Any]) -> DatabaseSchema:
    """Build a DatabaseSchema with relationships derived from its tables."""
    tables = data.get("tables", [])
    if not isinstance(tables, list):
        raise ValueError(f"'tables' must be a list, got {type(tables).__name__}")
    notes = data.get("notes") or []
    schema = DatabaseSchema(
        tables=tuple(table_from_mapping(t) for t in tables),
        notes=tuple(note_from_mapping(n) for n in notes),
    )
    return with_derived_relationships(schema)
