"""
Tests for the pricing module.

This module tests:
- PricingSolution properties
- SubforestPricing (customer scores, G_d membership, Kruskal forest)
- SpanningTreePricing on the augmented graph
- Termination test against the lambda-sum dual
"""

import networkx as nx
import numpy as np
import pytest

from forestcg.formulations import augment_with_super_root
from forestcg.pricing import (
    HMDuals,
    PricingConfig,
    PricingSolution,
    PricingStatus,
    SpanningTreePricing,
    SubforestPricing,
    TMDuals,
)


# =============================================================================
# Test PricingSolution
# =============================================================================

class TestPricingSolution:

    def test_defaults(self):
        solution = PricingSolution()
        assert solution.status is PricingStatus.NOT_SOLVED
        assert not solution.has_column
        assert solution.customers == []
        assert solution.edges == []

    def test_gap(self):
        solution = PricingSolution(total_score=-3.0, dual_bound=1.0)
        assert solution.gap == pytest.approx(2.0)
        assert solution.reduced_cost == pytest.approx(2.0)
        assert solution.summary().startswith("PricingSolution")


# =============================================================================
# Test Subforest Pricing
# =============================================================================

class TestSubforestPricing:
    """Tests for the HM pricing problem."""

    def test_zero_duals(self, path_graph):
        """No customer is worth assigning; every edge has weight -1."""
        pricing = SubforestPricing(path_graph)
        solution = pricing.solve(HMDuals.zeros(path_graph))

        assert solution.status is PricingStatus.COLUMN_FOUND
        assert solution.has_column
        assert solution.total_score == pytest.approx(-3.0)
        assert solution.customers == []
        assert sorted(solution.edges) == [(0, 0), (1, 0), (2, 0)]
        assert solution.gap == pytest.approx(3.0)

    def test_lambda_dual_blocks_column(self, path_graph):
        duals = HMDuals.zeros(path_graph)
        duals.epsilon = 5.0
        solution = SubforestPricing(path_graph).solve(duals)

        assert solution.status is PricingStatus.NO_COLUMN
        assert not solution.has_column

    def test_tolerance(self, path_graph):
        duals = HMDuals.zeros(path_graph)
        duals.epsilon = 3.0 - 1e-3
        pricing = SubforestPricing(path_graph, PricingConfig(tolerance=1e-2))
        assert not pricing.solve(duals).has_column

    def test_customer_scores(self, path_graph):
        duals = HMDuals.zeros(path_graph)
        duals.alpha[1, 0] = -2.0
        duals.beta[1, 1, 0] = 0.5   # c2 as endpoint 1 of edge 1
        duals.delta = 0.25
        path_graph.exclude_customer(path_graph.customers[2], path_graph.depots[0])

        scores = SubforestPricing(path_graph).customer_scores(duals)
        assert scores[0, 0] == pytest.approx(0.25)
        assert scores[1, 0] == pytest.approx(-2.0 + 0.25 - 0.5)
        assert scores[2, 0] == np.inf

    def test_negative_score_assigns_customer(self, path_graph):
        duals = HMDuals.zeros(path_graph)
        duals.alpha[0, 0] = -4.0
        solution = SubforestPricing(path_graph).solve(duals)

        assert solution.customers == [(0, 0)]
        # edges touching c1 get +4
        weights = SubforestPricing(path_graph).edge_weights(duals, 0)
        assert list(weights) == pytest.approx([3.0, 3.0, -1.0])
        assert solution.edges == [(2, 0)]
        assert solution.total_score == pytest.approx(-5.0)

    def test_depot_subgraph(self, triangle_graph):
        """Edges between depots or to another depot are outside G_d."""
        pricing = SubforestPricing(triangle_graph)
        d0 = triangle_graph.depots[0]
        for edge in triangle_graph.edges:
            a, b = edge.endpoints
            expected = all(v.is_customer or v is d0 for v in (a, b))
            assert pricing.in_depot_subgraph(edge, 0) == expected

    def test_excluded_edge_outside_subgraph(self, path_graph):
        edge = path_graph.edges[2]
        depot = path_graph.depots[0]
        for arc in edge.arcs:
            path_graph.exclude_arc(arc, depot)

        pricing = SubforestPricing(path_graph)
        assert not pricing.in_depot_subgraph(edge, 0)
        assert pricing.edge_weights(HMDuals.zeros(path_graph), 0)[2] == np.inf

    def test_minimum_forest_is_forest(self, triangle_graph):
        pricing = SubforestPricing(triangle_graph)
        duals = HMDuals.zeros(triangle_graph)
        for d in range(triangle_graph.num_depots):
            forest = pricing.minimum_forest(pricing.edge_weights(duals, d))

            g = nx.Graph()
            for edge, weight in forest:
                a, b = edge.endpoints
                g.add_edge(a.vertex_id, b.vertex_id)
                assert weight < 0
            assert nx.is_forest(g)
            # depot plus both customers
            assert len(forest) == 2

    def test_kruskal_order(self, path_graph):
        pricing = SubforestPricing(path_graph)
        weights = np.array([-1.0, -3.0, -2.0])
        forest = pricing.minimum_forest(weights)
        assert [edge.edge_id for edge, _ in forest] == [1, 2, 0]


# =============================================================================
# Test Spanning Tree Pricing
# =============================================================================

class TestSpanningTreePricing:
    """Tests for the TM pricing problem."""

    def test_zero_duals(self, triangle_graph):
        tgraph = augment_with_super_root(triangle_graph)
        solution = SpanningTreePricing(tgraph).solve(TMDuals.zeros(tgraph))

        assert solution.total_score == pytest.approx(0.0)
        assert not solution.has_column
        assert len(solution.edges) == tgraph.num_customers

    def test_gamma_makes_column(self, triangle_graph):
        tgraph = augment_with_super_root(triangle_graph)
        duals = TMDuals.zeros(tgraph)
        duals.gamma[:] = 1.0
        solution = SpanningTreePricing(tgraph).solve(duals)

        assert solution.has_column
        assert solution.total_score == pytest.approx(-2.0)
        assert len(solution.edges) == 2
        assert all(d == -1 for _, d in solution.edges)

    def test_tree_spans_customers(self, triangle_graph):
        """Every customer is reached exactly once from the pre-admitted depots."""
        tgraph = augment_with_super_root(triangle_graph)
        duals = TMDuals.zeros(tgraph)
        duals.gamma[:] = np.arange(tgraph.num_edges, dtype=float)
        solution = SpanningTreePricing(tgraph).solve(duals)

        reached = []
        for e, _ in solution.edges:
            a, b = tgraph.edges[e].endpoints
            reached.extend(v.customer_id for v in (a, b) if v.is_customer)
        assert sorted(set(reached)) == [0, 1]
        # the heaviest gamma edges are the super-root edges
        root = tgraph.depots[-1]
        assert all(root in tgraph.edges[e].endpoints for e, _ in solution.edges)

    def test_edge_weights_ignore_missing_rows(self, triangle_graph):
        tgraph = augment_with_super_root(triangle_graph)
        duals = TMDuals.zeros(tgraph)
        duals.alpha[0, 0, 0] = 2.0
        duals.beta[0, 1, 0] = 1.5
        duals.gamma[0] = 0.5
        weights = SpanningTreePricing(tgraph).edge_weights(duals)
        assert weights[0] == pytest.approx(3.0)
        assert np.all(weights[1:] == 0.0)
