"""Tests for the layered layout engine.

Covers: level assignment (chains, diamonds, self-references, dangling
references, cycles), row packing and centering, row heights, determinism,
note nodes, and position/width overlays.
"""
from __future__ import annotations

import pytest

from schema_canvas.types import (
    Column,
    DatabaseSchema,
    LayoutNode,
    LayoutOptions,
    Note,
    Point,
    Table,
)
from schema_canvas.relationships import with_derived_relationships
from schema_canvas.layout import (
    apply_node_positions,
    build_nodes,
    compute_levels,
    estimate_height,
    layout_notes,
    layout_tables,
)


def table(name: str, *refs: str, extra_columns: int = 0) -> Table:
    """A table with an id column, one FK column per ref, and filler columns."""
    columns = [Column(name="id", type="INT", is_primary_key=True)]
    for i, ref in enumerate(refs):
        columns.append(Column(name=f"fk{i}", type="INT", is_foreign_key=True, references=f"{ref}.id"))
    for i in range(extra_columns):
        columns.append(Column(name=f"c{i}", type="TEXT"))
    return Table(name=name, columns=tuple(columns))


def schema(*tables: Table, notes: tuple[Note, ...] = ()) -> DatabaseSchema:
    return with_derived_relationships(DatabaseSchema(tables=tuple(tables), notes=notes))


def levels_of(s: DatabaseSchema) -> dict[str, int]:
    return compute_levels(s.tables, s.relationships)


# ============================================================================
# Level assignment
# ============================================================================


class TestComputeLevels:
    def test_tables_without_dependencies_are_level_zero(self):
        assert levels_of(schema(table("A"), table("B"))) == {"A": 0, "B": 0}

    def test_chain(self):
        s = schema(table("A"), table("B", "A"), table("C", "B"))
        assert levels_of(s) == {"A": 0, "B": 1, "C": 2}

    def test_chain_listed_child_first(self):
        s = schema(table("C", "B"), table("B", "A"), table("A"))
        assert levels_of(s) == {"A": 0, "B": 1, "C": 2}

    def test_diamond_takes_deepest_parent(self):
        s = schema(
            table("A"),
            table("B", "A"),
            table("C", "B"),
            table("D", "A", "C"),
        )
        assert levels_of(s)["D"] == 3

    def test_level_is_one_more_than_max_parent(self):
        s = schema(
            table("Users"),
            table("Tags"),
            table("Posts", "Users"),
            table("PostTags", "Posts", "Tags"),
            table("Comments", "Posts", "Users"),
        )
        levels = levels_of(s)
        parents = {
            "Posts": ["Users"],
            "PostTags": ["Posts", "Tags"],
            "Comments": ["Posts", "Users"],
        }
        for name, deps in parents.items():
            assert levels[name] == 1 + max(levels[p] for p in deps)
        assert levels["Users"] == levels["Tags"] == 0

    def test_self_reference_adds_no_dependency(self):
        assert levels_of(schema(table("Node", "Node"))) == {"Node": 0}

    def test_dangling_reference_adds_no_dependency(self):
        assert levels_of(schema(table("Posts", "Ghosts"))) == {"Posts": 0}

    def test_repeated_references_count_once(self):
        s = schema(table("A"), table("B", "A", "A"))
        assert levels_of(s) == {"A": 0, "B": 1}

    def test_cycle_terminates_with_bounded_levels(self):
        s = schema(table("A", "B"), table("B", "A"))
        levels = levels_of(s)
        assert set(levels) == {"A", "B"}
        # len(tables) + 1 passes, each raising a member by at most 2
        assert all(0 <= lvl <= 2 * (len(s.tables) + 1) for lvl in levels.values())

    def test_cycle_does_not_disturb_unrelated_tables(self):
        s = schema(table("A", "B"), table("B", "A"), table("Lone"), table("Child", "Lone"))
        levels = levels_of(s)
        assert levels["Lone"] == 0
        assert levels["Child"] == 1


# ============================================================================
# Coordinates
# ============================================================================


class TestLayoutTables:
    def test_empty_schema_yields_no_nodes(self):
        assert layout_tables(DatabaseSchema()) == []

    def test_single_table_is_centered_on_x_zero(self):
        (node,) = layout_tables(schema(table("A")))
        assert node.id == "A"
        assert node.type == "table"
        assert node.position == Point(x=-160, y=50)

    def test_row_is_centered_and_spaced(self):
        nodes = layout_tables(schema(table("A"), table("B"), table("C")))
        # 3 * 320 + 2 * 250 = 1460 wide -> starts at -730, step 570
        assert [n.position.x for n in nodes] == [-730, -160, 410]
        assert {n.position.y for n in nodes} == {50}

    def test_rows_keep_schema_order(self):
        nodes = layout_tables(schema(table("Z"), table("Y"), table("X")))
        assert [n.id for n in nodes] == ["Z", "Y", "X"]

    def test_next_row_starts_below_tallest_table(self):
        s = schema(
            table("A"),                       # 1 column  -> 50 + 40 + 20 = 110
            table("B", extra_columns=2),      # 3 columns -> 50 + 120 + 20 = 190
            table("C", "A"),
        )
        nodes = {n.id: n for n in layout_tables(s)}
        assert nodes["A"].position.y == 50
        assert nodes["C"].position.y == 50 + 190 + 150

    def test_node_height_is_the_estimate(self):
        t = table("A", extra_columns=4)
        (node,) = layout_tables(schema(t))
        assert node.height == estimate_height(t) == 50 + 5 * 40 + 20

    def test_nodes_carry_their_table(self):
        t = table("A")
        (node,) = layout_tables(schema(t))
        assert node.data is t
        assert node.width is None

    def test_node_ids_are_sanitized(self):
        (node,) = layout_tables(schema(Table(name="order items")))
        assert node.id == "order_items"

    def test_custom_options(self):
        opts = LayoutOptions(node_width=100, horizontal_spacing=20, origin_y=0)
        nodes = layout_tables(schema(table("A"), table("B")), opts)
        assert [n.position for n in nodes] == [Point(x=-110, y=0), Point(x=10, y=0)]

    def test_layout_is_deterministic(self):
        s = schema(
            table("Users"),
            table("Posts", "Users"),
            table("Comments", "Posts", "Users"),
            table("Tags"),
        )
        assert layout_tables(s) == layout_tables(s)

    def test_cyclic_schema_still_lays_out_every_table(self):
        s = schema(table("A", "B"), table("B", "A"), table("C"))
        nodes = layout_tables(s)
        assert sorted(n.id for n in nodes) == ["A", "B", "C"]

    def test_warns_on_id_collision(self, caplog):
        s = schema(Table(name="order items"), Table(name="order.items"))
        with caplog.at_level("WARNING", logger="schema_canvas.layout"):
            layout_tables(s)
        assert "order_items" in caplog.text


# ============================================================================
# Notes and overlays
# ============================================================================


class TestNotesAndOverlays:
    def test_notes_keep_their_stored_position(self):
        note = Note(id="note-1", content="hi", x=12.5, y=-40)
        (node,) = layout_notes([note])
        assert node.type == "note"
        assert node.id == "note-1"
        assert node.position == Point(x=12.5, y=-40)
        assert node.data is note

    def test_build_nodes_puts_tables_before_notes(self):
        s = schema(table("A"), notes=(Note(id="n1"), Note(id="n2")))
        assert [n.id for n in build_nodes(s)] == ["A", "n1", "n2"]

    def test_apply_positions_and_widths(self):
        nodes = build_nodes(schema(table("A"), table("B")))
        moved = apply_node_positions(nodes, positions={"A": (5, 6)}, widths={"B": 280})
        assert moved[0].position == Point(x=5, y=6)
        assert moved[1].position == nodes[1].position
        assert moved[1].width == 280
        # Inputs are untouched
        assert nodes[0].position == Point(x=-445, y=50)

    def test_apply_nothing_returns_equal_nodes(self):
        nodes = build_nodes(schema(table("A")))
        assert apply_node_positions(nodes) == nodes
