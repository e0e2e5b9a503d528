from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .types import Column, DatabaseSchema, DEFAULT_RELATION_TYPE, Relationship, Table

logger = logging.getLogger(__name__)

# ============================================================================
# Relationship extraction
#
# Relationships are never authored directly: they are re-derived from the
# foreign-key annotations on columns every time a table changes.
#
# A column yields a relationship when:
#   is_foreign_key is set
#   references is "Table.Column" -- exactly one dot, both parts non-empty
#     after trimming
#
# Anything else is dropped silently (logged at DEBUG). The target table and
# column are not checked; dangling references pass through and are handled
# by the edge router.
# ============================================================================


def _split_reference(references: str) -> tuple[str, str] | None:
    parts = references.split(".")
    if len(parts) != 2:
        return None
    target_table = parts[0].strip()
    target_column = parts[1].strip()
    if not target_table or not target_column:
        return None
    return target_table, target_column


def _relationship_for(table: Table, col: Column) -> Relationship | None:
    if not col.is_foreign_key or not col.references:
        return None
    target = _split_reference(col.references)
    if target is None:
        logger.debug(
            "Dropping malformed reference %r on %s.%s", col.references, table.name, col.name
        )
        return None
    return Relationship(
        from_table=table.name,
        from_column=col.name,
        to_table=target[0],
        to_column=target[1],
        type=col.relation_type or DEFAULT_RELATION_TYPE,
        label=col.relation_label,
    )


def extract_relationships(tables: Iterable[Table]) -> tuple[Relationship, ...]:
    """Derive relationships in discovery order (tables, then columns)."""
    relationships: list[Relationship] = []
    for table in tables:
        for col in table.columns:
            rel = _relationship_for(table, col)
            if rel is not None:
                relationships.append(rel)
    return tuple(relationships)


def with_derived_relationships(schema: DatabaseSchema) -> DatabaseSchema:
    """Return ``schema`` with its relationships recomputed from its tables."""
    relationships = extract_relationships(schema.tables)
    if relationships == schema.relationships:
        return schema
    return dataclasses.replace(schema, relationships=relationships)


# ============================================================================
# Diagnostics
# ============================================================================


@dataclass(frozen=True, slots=True)
class MalformedReference:
    table: str
    column: str
    # None when the column is flagged as FK but has no reference at all
    references: str | None


def find_malformed_references(tables: Sequence[Table]) -> list[MalformedReference]:
    """List foreign-key columns that extraction would skip.

    Lets the editor surface a warning for columns that silently produce
    no connector.
    """
    issues: list[MalformedReference] = []
    for table in tables:
        for col in table.columns:
            if not col.is_foreign_key:
                continue
            if not col.references or _split_reference(col.references) is None:
                issues.append(
                    MalformedReference(table=table.name, column=col.name, references=col.references)
                )
    return issues
