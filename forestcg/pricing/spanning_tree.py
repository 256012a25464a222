"""
Spanning tree pricing (TM relaxation).

Operates on the augmented graph of the TM relaxation. Every depot,
including the super-root, is admitted up front at weight -inf, then a
Prim-Dijkstra search grows the tree along the lightest frontier edge.

Dual families (NaN where the constraint does not exist):

    alpha[e, k, d]    vertex-edge-label-1 of endpoint k of edge e at depot d
    beta[e, k, d]     vertex-edge-label-2 of endpoint k of edge e at depot d
    gamma[e]          edge-label-upper-bound of edge e
    zeta              lambda-sum
"""

import heapq
from dataclasses import dataclass

import numpy as np

from forestcg.core.graph import Graph, VertexKind
from forestcg.pricing.base import PricingProblem, PricingSolution


@dataclass
class TMDuals:
    """Dual values of the TM master; see the module docstring for shapes."""
    alpha: np.ndarray
    beta: np.ndarray
    gamma: np.ndarray
    zeta: float

    @classmethod
    def zeros(cls, graph: Graph) -> 'TMDuals':
        """Zero duals on every constraint the TM master creates for ``graph``."""
        E, D = graph.num_edges, graph.num_depots
        alpha = np.full((E, 2, D), np.nan)
        beta = np.full((E, 2, D), np.nan)
        for edge in graph.edges:
            for depot in graph.depots:
                d = depot.depot_id
                for k, vertex in enumerate(edge.endpoints):
                    if vertex.kind is not VertexKind.CUSTOMER or graph.includes_customer(vertex, depot):
                        alpha[edge.edge_id, k, d] = 0.0
                    if graph.includes_edge(edge, depot):
                        beta[edge.edge_id, k, d] = 0.0
        return cls(alpha=alpha, beta=beta, gamma=np.zeros(E), zeta=0.0)


class SpanningTreePricing(PricingProblem):
    """
    Pricing solver of the TM relaxation.

    Example:
        >>> pricing = SpanningTreePricing(augmented_graph)
        >>> pricing.solve(TMDuals.zeros(augmented_graph)).has_column
        False
    """

    def edge_weights(self, duals: TMDuals) -> np.ndarray:
        """weight(e) = sum over (k, d) of (alpha + beta) - gamma[e]; NaN counts as 0."""
        alpha = np.nan_to_num(duals.alpha, nan=0.0)
        beta = np.nan_to_num(duals.beta, nan=0.0)
        return (alpha + beta).sum(axis=(1, 2)) - duals.gamma

    def _solve_impl(self, duals: TMDuals) -> PricingSolution:
        graph = self._graph
        weights = self.edge_weights(duals)
        solution = PricingSolution(dual_bound=float(duals.zeta))

        for vertex in graph.vertices:
            vertex.visited = False

        # (weight, edge id, vertex id, vertex, edge)
        queue = [(float('-inf'), -1, depot.vertex_id, depot, None) for depot in graph.depots]
        heapq.heapify(queue)

        total = 0.0
        while queue:
            weight, _, _, vertex, edge = heapq.heappop(queue)
            if vertex.visited:
                continue
            vertex.visited = True
            if edge is not None:
                solution.edges.append((edge.edge_id, -1))
                total += weight
            for arc in vertex.adj_out:
                if arc.target.visited:
                    continue
                e = arc.edge.edge_id
                heapq.heappush(queue, (float(weights[e]), e, arc.target.vertex_id, arc.target, arc.edge))

        solution.total_score = float(total)
        return solution
