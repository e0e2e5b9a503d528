from __future__ import annotations

import logging
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass

from .types import Column, DatabaseSchema, LayoutOptions, Table
from .theme import DEFAULT_VISUAL_CONFIG
from .relationships import with_derived_relationships
from .layout import build_nodes
from .edge_router import route_edges

logger = logging.getLogger(__name__)

DEFAULT_SIZES = (10, 50, 100, 200, 400)


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    table_count: int
    node_count: int
    edge_count: int
    elapsed_ms: float


def generate_schema(table_count: int, cols_per_table: int = 5, seed: int = 0) -> DatabaseSchema:
    """Synthetic schema T_0..T_n with about 0.6 * n foreign keys on column c0."""
    rng = random.Random(seed)
    fk_targets: dict[int, int] = {}
    for _ in range(int(table_count * 0.6)):
        src = rng.randrange(table_count)
        dst = rng.randrange(table_count)
        if dst == src:
            dst = (dst + 1) % table_count
        fk_targets.setdefault(src, dst)

    tables: list[Table] = []
    for i in range(table_count):
        columns = [Column(name=f"c{c}", type="INT") for c in range(cols_per_table)]
        if i in fk_targets:
            columns.append(
                Column(
                    name="fk",
                    type="INT",
                    is_foreign_key=True,
                    references=f"T_{fk_targets[i]}.c0",
                )
            )
        tables.append(Table(name=f"T_{i}", columns=tuple(columns)))

    return with_derived_relationships(DatabaseSchema(tables=tuple(tables)))


def run_benchmark(
    sizes: Sequence[int] = DEFAULT_SIZES,
    cols_per_table: int = 8,
    options: LayoutOptions | None = None,
) -> list[BenchmarkResult]:
    """Time layout + routing for synthetic schemas of each size."""
    results: list[BenchmarkResult] = []
    for n in sizes:
        schema = generate_schema(n, cols_per_table)
        t0 = time.perf_counter()
        nodes = build_nodes(schema, options)
        edges = route_edges(schema.relationships, DEFAULT_VISUAL_CONFIG, nodes, options)
        t1 = time.perf_counter()
        results.append(
            BenchmarkResult(
                table_count=n,
                node_count=len(nodes),
                edge_count=len(edges),
                elapsed_ms=(t1 - t0) * 1000,
            )
        )
    return results


def main(sizes: Sequence[int] = DEFAULT_SIZES) -> None:
    """Entry point of the schema-canvas-benchmark console script."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Layout benchmark -- build_nodes + route_edges")
    for r in run_benchmark(sizes):
        logger.info(
            "Tables: %d, Nodes: %d, Edges: %d, Time: %.2f ms",
            r.table_count, r.node_count, r.edge_count, r.elapsed_ms,
        )


if __name__ == "__main__":
    main()
