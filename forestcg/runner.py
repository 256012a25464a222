"""
Batch experiment driver.

For every instance file and depot count: read the instance, assign
depots, optionally apply the geometry based cut, finalize, run the
exclusion rules (Dijkstra, then triangle) and solve the relaxation built
by ``relaxation_factory``.

Example:
    >>> from forestcg import HMRelaxation
    >>> from forestcg.runner import solve_all
    >>> results = solve_all(sorted(get_data_path().glob("*.tsp")), HMRelaxation, geometry_cut=True)
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from forestcg.config import config, get_data_path
from forestcg.core.graph import Graph
from forestcg.parsers import parse
from forestcg.preprocessing import assign_depots, exclude_dijkstra, exclude_triangle, geometry_based_cut
from forestcg.solver import CGResult, ColumnGeneration

logger = logging.getLogger(__name__)

RelaxationFactory = Callable[[Graph], ColumnGeneration]


def prepare_graph(
    path: Union[str, Path],
    depot_count: int,
    geometry_cut: bool = False,
) -> Graph:
    """
    Read, assign depots, cut and preprocess one instance.

    Returns:
        The finalized graph with its exclusion index filled in
    """
    builder = parse(path)
    assign_depots(builder, depot_count)
    if geometry_cut:
        geometry_based_cut(builder, config.geometry_cut_scale, config.geometry_cut_degree)
    graph = builder.finalize()

    exclude_dijkstra(graph)
    exclude_triangle(graph)
    return graph


def solve_all(
    paths: Optional[Iterable[Union[str, Path]]],
    relaxation_factory: RelaxationFactory,
    geometry_cut: bool,
    depot_counts: Sequence[int] = (1, 2, 4, 8),
) -> List[Tuple[str, CGResult]]:
    """
    Solve a relaxation on every (instance, depot count) combination.

    Args:
        paths: Instance files (None = every file in config.data_path)
        relaxation_factory: Builds the relaxation for a prepared graph
        geometry_cut: Whether to apply geometry_based_cut before finalizing
        depot_counts: Depot counts to assign to each instance

    Returns:
        List of (graph name, result) in solve order
    """
    if paths is None:
        paths = sorted(p for p in get_data_path().iterdir() if p.is_file())

    results = []
    for path in paths:
        for depot_count in depot_counts:
            graph = prepare_graph(path, depot_count, geometry_cut)
            result = relaxation_factory(graph).solve()
            logger.info("%s: %s", graph.name, result)
            results.append((graph.name, result))
    return results
