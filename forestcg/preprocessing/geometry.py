"""
Geometric instance preparation on a GraphBuilder.

- geometry_based_cut: sparsify a complete Euclidean graph
- assign_depots: turn the vertices closest to a grid of centers into depots
"""

import math
from typing import List, Optional, Tuple

from forestcg.config import config
from forestcg.core.builder import BuilderEdge, GraphBuilder
from forestcg.heuristics.mst import prim_dijkstra_mst

# Normalized depot centers in the unit bounding box, per depot count
DEPOT_CENTERS = {
    1: [(0.5, 0.5)],
    2: [(0.25, 0.5), (0.75, 0.5)],
    4: [(0.25, 0.25), (0.25, 0.75), (0.75, 0.25), (0.75, 0.75)],
    8: [
        (0.125, 0.25), (0.125, 0.75), (0.375, 0.25), (0.375, 0.75),
        (0.625, 0.25), (0.625, 0.75), (0.875, 0.25), (0.875, 0.75),
    ],
}


def geometry_based_cut(
    builder: GraphBuilder,
    scale: Optional[float] = None,
    degree: Optional[int] = None,
) -> None:
    """
    Keep, for each vertex, ``degree`` incident edges that are short and
    point in different directions; remove every edge no vertex kept.

    An edge's score is ``scale * weight / max_weight`` plus the sum of
    cos(angle difference) to the edges already kept for the vertex; the
    lowest score is kept next.

    Args:
        builder: Graph to cut in place
        scale: Weight of the relative edge length (default: config)
        degree: Number of edges kept per vertex (default: config)
    """
    if scale is None:
        scale = config.geometry_cut_scale
    if degree is None:
        degree = config.geometry_cut_degree

    chosen = set()
    for vertex in builder.vertices:
        if not vertex.adj:
            continue
        max_weight = float(max(edge.weight for edge, _ in vertex.adj))
        angles: List[float] = []
        kept: List[BuilderEdge] = []
        for _ in range(degree):
            best: Optional[Tuple[float, BuilderEdge, float]] = None
            for edge, other in vertex.adj:
                if edge in kept:
                    continue
                angle = math.atan2(other.y - vertex.y, other.x - vertex.x)
                relative = edge.weight / max_weight if max_weight > 0 else 0.0
                score = scale * relative + sum(math.cos(a - angle) for a in angles)
                if best is None or score < best[0]:
                    best = (score, edge, angle)
            if best is None:
                break
            chosen.add(best[1])
            kept.append(best[1])
            angles.append(best[2])

    for edge in [e for e in builder.edges if e not in chosen]:
        edge.remove()


def assign_depots(builder: GraphBuilder, depot_count: int) -> None:
    """
    Place ``depot_count`` depots on a grid over the bounding box.

    The vertex closest to each grid center becomes a depot with capacity
    MST weight / (5 * depot_count). The builder's name gets the suffix
    ``_<depot_count>``.

    Raises:
        ValueError: If depot_count is not 1, 2, 4 or 8
        RuntimeError: If one vertex is closest to two centers
    """
    if depot_count not in DEPOT_CENTERS:
        raise ValueError(f"unsupported depot count {depot_count}")

    xs = [v.x for v in builder.vertices]
    ys = [v.y for v in builder.vertices]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    centers = [
        ((x_max - x_min) * cx + x_min, (y_max - y_min) * cy + y_min)
        for cx, cy in DEPOT_CENTERS[depot_count]
    ]

    capacity = prim_dijkstra_mst(builder.finalize()) / (5 * depot_count)

    for cx, cy in centers:
        vertex = min(builder.vertices, key=lambda v: (cx - v.x) ** 2 + (cy - v.y) ** 2)
        if vertex.is_depot:
            raise RuntimeError("unknown depot assigning scenario")
        vertex.capacity = capacity

    builder.name += f"_{depot_count}"
