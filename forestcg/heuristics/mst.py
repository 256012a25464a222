"""Prim-Dijkstra minimum spanning forest."""

import heapq
import itertools

from forestcg.core.graph import Graph


def prim_dijkstra_mst(graph: Graph) -> float:
    """
    Minimum spanning forest of ``graph``.

    Every vertex enters the queue at infinite weight, so each connected
    component gets its own tree. Selected edges are flagged with
    ``edge.in_mst``.

    Args:
        graph: The graph; ``visited`` and ``in_mst`` are overwritten

    Returns:
        Total weight of the forest
    """
    for edge in graph.edges:
        edge.in_mst = False
    for vertex in graph.vertices:
        vertex.visited = False

    counter = itertools.count()
    queue = [(float('inf'), next(counter), vertex, None) for vertex in graph.vertices]
    heapq.heapify(queue)

    total = 0.0
    while queue:
        _, _, vertex, edge = heapq.heappop(queue)
        if vertex.visited:
            continue
        vertex.visited = True
        if edge is not None:
            edge.in_mst = True
            total += edge.weight
        for arc in vertex.adj_out:
            if arc.target.visited:
                continue
            heapq.heappush(queue, (arc.edge.weight, next(counter), arc.target, arc.edge))
    return total
