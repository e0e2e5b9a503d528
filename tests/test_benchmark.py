"""Smoke tests for the layout benchmark helpers."""
from __future__ import annotations

import logging

from schema_canvas.benchmark import generate_schema, main, run_benchmark


class TestGenerateSchema:
    def test_table_and_column_counts(self):
        s = generate_schema(20, cols_per_table=3)
        assert len(s.tables) == 20
        assert all(len(t.columns) in (3, 4) for t in s.tables)

    def test_relationships_follow_fk_columns(self):
        s = generate_schema(50)
        fk_tables = [t.name for t in s.tables if any(c.is_foreign_key for c in t.columns)]
        assert [r.from_table for r in s.relationships] == fk_tables
        assert 0 < len(s.relationships) <= 30
        assert all(r.from_table != r.to_table for r in s.relationships)

    def test_same_seed_same_schema(self):
        assert generate_schema(30, seed=7) == generate_schema(30, seed=7)

    def test_empty(self):
        assert generate_schema(0).tables == ()


class TestRunBenchmark:
    def test_reports_each_size(self):
        results = run_benchmark(sizes=(5, 25), cols_per_table=2)
        assert [r.table_count for r in results] == [5, 25]
        assert [r.node_count for r in results] == [5, 25]
        assert all(r.elapsed_ms >= 0 for r in results)
        assert all(r.edge_count <= r.table_count for r in results)

    def test_main_logs_one_line_per_size(self, caplog):
        caplog.set_level(logging.INFO, logger="schema_canvas.benchmark")
        main(sizes=(3, 6))
        lines = [r.getMessage() for r in caplog.records if r.name == "schema_canvas.benchmark"]
        assert lines[0].startswith("Layout benchmark")
        assert lines[1].startswith("Tables: 3, Nodes: 3,")
        assert lines[2].startswith("Tables: 6, Nodes: 6,")
        assert len(lines) == 3
