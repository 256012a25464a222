"""
Subforest pricing (HM relaxation).

Given the duals of the HM master, each customer is assigned to the depot
with the most negative score (if any), then for every depot a minimum
weight forest over the negative-weight edges of its subgraph is found with
Kruskal's algorithm.

Dual families (NaN where the constraint does not exist):

    alpha[i, d]       vertex-inclusion-1 of customer i at depot d
    beta[e, k, d]     vertex-inclusion-2 of endpoint k of edge e at depot d
    gamma[d]          weight (capacity) of depot d
    delta             edge-vertex-count
    epsilon           lambda-sum
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from forestcg.core.graph import Edge, Graph, Vertex, VertexKind
from forestcg.core.union_find import UnionFind
from forestcg.pricing.base import PricingProblem, PricingSolution


@dataclass
class HMDuals:
    """Dual values of the HM master; see the module docstring for shapes."""
    alpha: np.ndarray
    beta: np.ndarray
    gamma: np.ndarray
    delta: float
    epsilon: float

    @classmethod
    def zeros(cls, graph: Graph) -> 'HMDuals':
        """Zero duals on every constraint the HM master creates for ``graph``."""
        C, D, E = graph.num_customers, graph.num_depots, graph.num_edges
        alpha = np.full((C, D), np.nan)
        beta = np.full((E, 2, D), np.nan)
        for depot in graph.depots:
            d = depot.depot_id
            for customer in graph.customers:
                if graph.includes_customer(customer, depot):
                    alpha[customer.customer_id, d] = 0.0
            for edge in graph.edges:
                if not graph.includes_edge(edge, depot):
                    continue
                for k, vertex in enumerate(edge.endpoints):
                    if vertex.kind is VertexKind.CUSTOMER:
                        beta[edge.edge_id, k, d] = 0.0
        return cls(alpha=alpha, beta=beta, gamma=np.zeros(D), delta=0.0, epsilon=0.0)


def _local_id(vertex: Vertex) -> int:
    # all depots share the synthetic root 0
    if vertex.kind is VertexKind.CUSTOMER:
        return vertex.customer_id + 1
    return 0


class SubforestPricing(PricingProblem):
    """
    Pricing solver of the HM relaxation.

    Example:
        >>> pricing = SubforestPricing(graph)
        >>> solution = pricing.solve(HMDuals.zeros(graph))
        >>> solution.has_column
        True
    """

    def customer_scores(self, duals: HMDuals) -> np.ndarray:
        """
        Score of assigning each customer to each depot.

        score[i, d] = alpha[i, d] + delta - sum of beta[e, k, d] over the
        edges incident to i (missing beta entries count as 0). Entries of
        excluded (customer, depot) pairs are +inf.
        """
        graph = self._graph
        beta = np.nan_to_num(duals.beta, nan=0.0)
        scores = np.full((graph.num_customers, graph.num_depots), np.inf)
        for customer in graph.customers:
            i = customer.customer_id
            incident = np.zeros(graph.num_depots)
            for edge in customer.adj:
                incident += beta[edge.edge_id, edge.endpoint_index(customer)]
            for depot in graph.depots:
                d = depot.depot_id
                if graph.includes_customer(customer, depot):
                    scores[i, d] = duals.alpha[i, d] + duals.delta - incident[d]
        return scores

    def in_depot_subgraph(self, edge: Edge, depot_id: int) -> bool:
        """
        Whether ``edge`` belongs to the subgraph G_d of depot ``depot_id``.

        The edge must be included for the depot, each depot endpoint must be
        the depot itself and each customer endpoint must be included for it.
        """
        graph = self._graph
        depot = graph.depots[depot_id]
        if not graph.includes_edge(edge, depot):
            return False
        for vertex in edge.endpoints:
            if vertex.kind is VertexKind.DEPOT:
                if vertex.depot_id != depot_id:
                    return False
            elif not graph.includes_customer(vertex, depot):
                return False
        return True

    def edge_weights(self, duals: HMDuals, depot_id: int) -> np.ndarray:
        """
        Kruskal weights of the edges of G_d; +inf outside G_d.

        weight(e) = sum over customer endpoints k of (-alpha + beta[e, k])
                    + edge.weight * gamma[d] - delta - 1
        """
        graph = self._graph
        d = depot_id
        weights = np.full(graph.num_edges, np.inf)
        for edge in graph.edges:
            if not self.in_depot_subgraph(edge, d):
                continue
            weight = 0.0
            for k, vertex in enumerate(edge.endpoints):
                if vertex.kind is VertexKind.CUSTOMER:
                    weight += -duals.alpha[vertex.customer_id, d] + duals.beta[edge.edge_id, k, d]
            weights[edge.edge_id] = weight + edge.weight * duals.gamma[d] - duals.delta - 1.0
        return weights

    def minimum_forest(self, weights: np.ndarray) -> List[Tuple[Edge, float]]:
        """
        Kruskal over the negative entries of ``weights``.

        Edges are processed by ascending weight, ties by edge id.

        Returns:
            Admitted (edge, weight) pairs in admission order
        """
        graph = self._graph
        candidates = sorted(
            (weights[e], e) for e in np.flatnonzero(weights < 0)
        )
        union_find = UnionFind(graph.num_customers + 1)
        forest = []
        for weight, e in candidates:
            edge = graph.edges[e]
            a, b = (_local_id(v) for v in edge.endpoints)
            if union_find.find(a) != union_find.find(b):
                union_find.union(a, b)
                forest.append((edge, float(weight)))
        return forest

    def _solve_impl(self, duals: HMDuals) -> PricingSolution:
        graph = self._graph
        solution = PricingSolution(dual_bound=float(duals.epsilon))
        total = 0.0

        # customer to depot assignment
        scores = self.customer_scores(duals)
        for customer in graph.customers:
            i = customer.customer_id
            best_depot = -1
            best_score = 0.0
            for d in range(graph.num_depots):
                if scores[i, d] < best_score:
                    best_score = scores[i, d]
                    best_depot = d
            if best_depot >= 0:
                solution.customers.append((i, best_depot))
            total += best_score

        # minimum weight forest in each G_d
        for d in range(graph.num_depots):
            for edge, weight in self.minimum_forest(self.edge_weights(duals, d)):
                solution.edges.append((edge.edge_id, d))
                total += weight

        solution.total_score = float(total)
        return solution
