"""
Exclusion rules.

Both rules only clear entries of the graph's exclusion index; they never
change the topology. Run them after GraphBuilder.finalize() and before a
relaxation is constructed.
"""

import heapq
import itertools
import logging
import math
from typing import Optional

from forestcg.config import config
from forestcg.core.graph import Graph, VertexKind

logger = logging.getLogger(__name__)


def exclude_triangle(graph: Graph) -> None:
    """
    Triangle rule.

    For a depot d and a vertex j adjacent to d, an arc (i, j) heavier than
    the edge {d, j} can be replaced by {d, j} in any tree of d, so it is
    excluded for d.
    """
    before = graph.included_arc_count()
    for depot in graph.depots:
        for dj in depot.adj_out:
            for ij in dj.target.adj_in:
                if ij.edge.weight > dj.edge.weight:
                    graph.exclude_arc(ij, depot)
    logger.debug("triangle rule on %s: %d -> %d included arcs",
                 graph.name, before, graph.included_arc_count())


def exclude_dijkstra(graph: Graph, epsilon: Optional[float] = None) -> None:
    """
    Capacity-bounded reachability rule.

    For each depot a Dijkstra search, not passing through other depots and
    cut off at the depot capacity, computes the distance to every vertex.
    Arcs whose source distance plus weight exceeds the capacity are
    excluded for the depot, then customers without an included entering
    arc are excluded too.

    Args:
        graph: The graph whose exclusion index is updated
        epsilon: Weight tolerance (default: config.epsilon_weights)
    """
    if epsilon is None:
        epsilon = config.epsilon_weights
    before = graph.included_arc_count()

    for depot in graph.depots:
        limit = depot.capacity + epsilon
        dist = [math.inf] * graph.num_vertices
        dist[depot.vertex_id] = 0

        counter = itertools.count()
        queue = [(0, next(counter), depot)]
        while queue:
            d, _, vertex = heapq.heappop(queue)
            if dist[vertex.vertex_id] < d:
                continue
            for arc in vertex.adj_out:
                head = arc.target
                new_dist = d + arc.edge.weight
                if head.kind is VertexKind.DEPOT:
                    continue
                if new_dist < dist[head.vertex_id] and new_dist <= limit:
                    dist[head.vertex_id] = new_dist
                    heapq.heappush(queue, (new_dist, next(counter), head))

        for arc in graph.arcs:
            if arc.edge.weight + dist[arc.source.vertex_id] > limit:
                graph.exclude_arc(arc, depot)

        for customer in graph.customers:
            if not any(graph.includes_arc(arc, depot) for arc in customer.adj_in):
                graph.exclude_customer(customer, depot)

    logger.debug("dijkstra rule on %s: %d -> %d included arcs",
                 graph.name, before, graph.included_arc_count())
