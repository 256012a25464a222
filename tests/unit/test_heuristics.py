"""
Tests for the heuristics module.

This module tests:
- greedy_capacitated_forest (capacity, exclusions, scratch fields)
- two_step_heuristic
- prim_dijkstra_mst against networkx
"""

import networkx as nx

from forestcg.core import GraphBuilder
from forestcg.heuristics import greedy_capacitated_forest, prim_dijkstra_mst, two_step_heuristic
from forestcg.parsers import TSPLIBParser


# =============================================================================
# Test Greedy Forest
# =============================================================================

class TestGreedyForest:
    """Tests for greedy_capacitated_forest."""

    def test_path_respects_capacity(self, path_graph):
        """Edges of weight 3 and 4 fit into capacity 10, the edge of weight 5 does not."""
        forest = greedy_capacitated_forest(path_graph)

        assert list(forest.edge_depot) == [0, 0, -1]
        assert list(forest.customer_depot) == [0, 0, -1]
        assert forest.num_assigned_customers == 2
        assert forest.num_assigned_edges == 2
        assert forest.remaining_capacity[0] == 3.0
        assert forest.used_capacity(path_graph, 0) == 7.0

    def test_scratch_fields(self, path_graph):
        greedy_capacitated_forest(path_graph)
        assert path_graph.customers[0].associated_depot_index == 0
        assert path_graph.customers[2].associated_depot_index == -1
        assert path_graph.edges[1].associated_depot_index == 0

    def test_respects_exclusions(self, path_graph):
        depot = path_graph.depots[0]
        path_graph.exclude_customer(path_graph.customers[1], depot)

        forest = greedy_capacitated_forest(path_graph)
        assert list(forest.edge_depot) == [0, -1, -1]
        assert forest.num_assigned_customers == 1

    def test_excluded_arc(self, path_graph):
        depot = path_graph.depots[0]
        path_graph.exclude_arc(path_graph.edges[0].arcs[0], depot)

        forest = greedy_capacitated_forest(path_graph)
        assert forest.num_assigned_edges == 0

    def test_multiple_depots(self, triangle_graph):
        """Every customer joins exactly one tree and each tree is within capacity."""
        forest = greedy_capacitated_forest(triangle_graph)

        assert forest.num_assigned_customers == 2
        assert forest.num_assigned_edges == 2
        for depot in triangle_graph.depots:
            d = depot.depot_id
            assert forest.used_capacity(triangle_graph, d) <= depot.capacity
            assert forest.edges_of(triangle_graph, d) == [
                e for e in triangle_graph.edges if forest.edge_depot[e.edge_id] == d
            ]

    def test_tight_capacity(self):
        builder = GraphBuilder("tight")
        d = builder.add_vertex(capacity=2.0)
        c = builder.add_vertex()
        builder.add_edge(d, c, 3)
        forest = greedy_capacitated_forest(builder.finalize())
        assert forest.num_assigned_edges == 0
        assert forest.remaining_capacity[0] == 2.0

    def test_two_step_heuristic(self, path_graph):
        assert two_step_heuristic(path_graph) == 2


# =============================================================================
# Test Minimum Spanning Tree
# =============================================================================

class TestPrimDijkstraMST:

    def test_matches_networkx(self, tsp_file):
        graph = TSPLIBParser().parse(tsp_file).finalize()
        expected = nx.minimum_spanning_tree(graph.to_networkx()).size(weight="weight")

        assert prim_dijkstra_mst(graph) == expected
        assert sum(1 for e in graph.edges if e.in_mst) == graph.num_vertices - 1

    def test_path(self, path_graph):
        assert prim_dijkstra_mst(path_graph) == 12
        assert all(e.in_mst for e in path_graph.edges)

    def test_disconnected_graph(self):
        """Each component gets its own tree."""
        builder = GraphBuilder("two-components")
        a, b, c, d = (builder.add_vertex() for _ in range(4))
        builder.add_edge(a, b, 2)
        builder.add_edge(c, d, 5)
        graph = builder.finalize()

        assert prim_dijkstra_mst(graph) == 7
        assert all(e.in_mst for e in graph.edges)
