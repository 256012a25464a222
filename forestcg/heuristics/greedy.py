"""
Greedy capacitated forest construction.

A multi-source Prim-Dijkstra growth: every depot starts a tree, the
lightest frontier arc is taken next, and its target joins the tree of the
arc's source if that tree still has capacity for the arc's weight.
Otherwise the arc is dropped and the target may be reached later through
another arc.

The result is written to the graph's scratch fields
(``associated_depot_index`` of vertices and edges) and returned as a
GreedyForest. The HM relaxation uses it as its initial column; the two-step
heuristic uses it as its first step.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from forestcg.core.graph import Edge, Graph, VertexKind

logger = logging.getLogger(__name__)


@dataclass
class GreedyForest:
    """
    Outcome of greedy_capacitated_forest().

    Attributes:
        customer_depot: Depot id per customer id (-1 = unassigned)
        edge_depot: Depot id per edge id (-1 = not in the forest)
        remaining_capacity: Unused capacity per depot id
    """
    customer_depot: np.ndarray
    edge_depot: np.ndarray
    remaining_capacity: np.ndarray

    @property
    def num_assigned_customers(self) -> int:
        return int((self.customer_depot >= 0).sum())

    @property
    def num_assigned_edges(self) -> int:
        return int((self.edge_depot >= 0).sum())

    def edges_of(self, graph: Graph, depot_id: int) -> List[Edge]:
        """Edges of the tree grown from depot ``depot_id``."""
        return [graph.edges[e] for e in np.flatnonzero(self.edge_depot == depot_id)]

    def used_capacity(self, graph: Graph, depot_id: int) -> float:
        return float(sum(edge.weight for edge in self.edges_of(graph, depot_id)))


def greedy_capacitated_forest(graph: Graph) -> GreedyForest:
    """
    Grow one capacitated tree per depot.

    Arcs excluded for the growing tree's depot and customers excluded for
    it are never admitted. Ties in arc weight are resolved in push order,
    so the result is deterministic.

    Args:
        graph: The graph; its scratch fields are overwritten

    Returns:
        The assignment of customers and edges to depots
    """
    graph.reset_scratch()
    remaining = np.array([depot.capacity for depot in graph.depots], dtype=np.float64)

    counter = itertools.count()
    # (weight, push order, arc or None, target)
    queue = []
    for depot in graph.depots:
        depot.associated_depot_index = depot.depot_id
        queue.append((float('-inf'), next(counter), None, depot))
    heapq.heapify(queue)

    while queue:
        _, _, arc, target = heapq.heappop(queue)
        if target.kind is VertexKind.CUSTOMER and target.associated_depot_index >= 0:
            continue
        if arc is not None:
            depot_id = arc.source.associated_depot_index
            if remaining[depot_id] < arc.edge.weight:
                continue
            remaining[depot_id] -= arc.edge.weight
            target.associated_depot_index = depot_id
            arc.edge.associated_depot_index = depot_id

        depot = graph.depots[target.associated_depot_index]
        for out in target.adj_out:
            head = out.target
            if head.associated_depot_index >= 0:
                continue
            if not graph.includes_arc(out, depot):
                continue
            if head.kind is VertexKind.CUSTOMER and not graph.includes_customer(head, depot):
                continue
            heapq.heappush(queue, (out.edge.weight, next(counter), out, head))

    forest = GreedyForest(
        customer_depot=np.array([c.associated_depot_index for c in graph.customers], dtype=np.int64),
        edge_depot=np.array([e.associated_depot_index for e in graph.edges], dtype=np.int64),
        remaining_capacity=remaining,
    )
    logger.debug(
        "greedy forest on %s: %d/%d customers assigned, %d edges",
        graph.name, forest.num_assigned_customers, graph.num_customers, forest.num_assigned_edges,
    )
    return forest


def two_step_heuristic(graph: Graph) -> int:
    """
    First step of the two-step heuristic (greedy construction).

    Returns:
        Number of edges in the constructed forest
    """
    return greedy_capacitated_forest(graph).num_assigned_edges
