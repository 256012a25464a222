"""
Tests for the graph module.

This module tests:
- GraphBuilder (vertices, edges, removal, clone, finalize)
- Graph structure (ids, arcs, adjacency)
- Exclusion index
- networkx export
"""

import math

import networkx as nx
import pytest

from forestcg.core import Customer, Depot, GraphBuilder, VertexKind


# =============================================================================
# Test GraphBuilder
# =============================================================================

class TestGraphBuilder:
    """Tests for GraphBuilder."""

    def test_add_vertex(self):
        """A capacity makes a depot, no capacity a customer."""
        builder = GraphBuilder()
        depot = builder.add_vertex(1.0, 2.0, capacity=5.0)
        customer = builder.add_vertex(3.0, 4.0)

        assert depot.is_depot
        assert depot.capacity == 5.0
        assert not customer.is_depot
        assert math.isnan(customer.capacity)

    def test_self_loop_rejected(self):
        builder = GraphBuilder()
        v = builder.add_vertex()
        with pytest.raises(ValueError, match="self loops"):
            builder.add_edge(v, v, 1)

    def test_negative_weight_rejected(self):
        builder = GraphBuilder()
        a, b = builder.add_vertex(), builder.add_vertex()
        with pytest.raises(ValueError):
            builder.add_edge(a, b, -1)

    def test_remove_edge(self, path_builder):
        """Removing an edge updates both endpoints."""
        edge = path_builder.edges[1]
        a, b = edge.a, edge.b
        path_builder.remove_edge(edge)

        assert len(path_builder.edges) == 2
        assert all(e is not edge for e, _ in a.adj)
        assert all(e is not edge for e, _ in b.adj)

    def test_remove_vertex(self, path_builder):
        """Removing a vertex removes its incident edges."""
        c1 = path_builder.vertices[1]
        path_builder.remove_vertex(c1)

        assert len(path_builder.vertices) == 3
        assert len(path_builder.edges) == 1
        assert path_builder.edges[0].weight == 5

    def test_clone_is_independent(self, path_builder):
        clone = path_builder.clone()
        clone.edges[0].remove()

        assert len(clone.edges) == 2
        assert len(path_builder.edges) == 3
        assert clone.vertices[0].capacity == 10.0


# =============================================================================
# Test Graph
# =============================================================================

class TestGraph:
    """Tests for the finalized Graph."""

    def test_ids_follow_insertion_order(self, path_graph):
        assert path_graph.num_vertices == 4
        assert path_graph.num_depots == 1
        assert path_graph.num_customers == 3
        assert path_graph.num_edges == 3

        assert isinstance(path_graph.vertices[0], Depot)
        assert [c.customer_id for c in path_graph.customers] == [0, 1, 2]
        assert [c.vertex_id for c in path_graph.customers] == [1, 2, 3]
        assert all(isinstance(c, Customer) for c in path_graph.customers)
        assert path_graph.depots[0].capacity == 10.0

    def test_arcs(self, path_graph):
        """Each edge has two opposite arcs with ids 2e and 2e + 1."""
        assert len(path_graph.arcs) == 6
        for edge in path_graph.edges:
            forward, backward = edge.arcs
            assert forward.arc_id == 2 * edge.edge_id
            assert backward.arc_id == 2 * edge.edge_id + 1
            assert forward.opposite is backward
            assert tuple(forward) == edge.endpoints
            assert tuple(backward) == edge.endpoints[::-1]
            assert path_graph.arcs[forward.arc_id] is forward

    def test_adjacency(self, path_graph):
        c1 = path_graph.customers[0]
        assert [e.edge_id for e in c1.adj] == [0, 1]
        assert len(c1.adj_in) == 2
        assert len(c1.adj_out) == 2
        assert all(arc.target is c1 for arc in c1.adj_in)

    def test_edge_helpers(self, path_graph):
        edge = path_graph.edges[1]
        c1, c2 = path_graph.customers[0], path_graph.customers[1]
        assert edge.endpoint_index(c1) == 0
        assert edge.endpoint_index(c2) == 1
        assert edge.other(c1) is c2

    def test_vertex_kind(self, path_graph):
        assert path_graph.depots[0].kind is VertexKind.DEPOT
        assert path_graph.customers[0].kind is VertexKind.CUSTOMER

    def test_to_builder_round_trip(self, path_graph):
        graph = path_graph.to_builder().finalize()
        assert graph.num_depots == 1
        assert [e.weight for e in graph.edges] == [3, 4, 5]


# =============================================================================
# Test Exclusion Index
# =============================================================================

class TestExclusion:
    """Tests for the per-depot exclusion index."""

    def test_everything_included_initially(self, path_graph):
        depot = path_graph.depots[0]
        assert all(path_graph.includes_arc(a, depot) for a in path_graph.arcs)
        assert all(path_graph.includes_customer(c, depot) for c in path_graph.customers)
        assert path_graph.included_arc_count() == 6

    def test_exclude_arc(self, path_graph):
        depot = path_graph.depots[0]
        edge = path_graph.edges[2]
        path_graph.exclude_arc(edge.arcs[0], depot)

        assert not path_graph.includes_arc(edge.arcs[0], depot)
        # one arc is still included
        assert path_graph.includes_edge(edge, depot)

        path_graph.exclude_arc(edge.arcs[1], depot)
        assert not path_graph.includes_edge(edge, depot)
        assert path_graph.included_arc_count() == 4

    def test_exclude_customer(self, path_graph):
        depot = path_graph.depots[0]
        path_graph.exclude_customer(path_graph.customers[2], depot)
        assert not path_graph.includes_customer(path_graph.customers[2], depot)
        assert path_graph.includes_customer(path_graph.customers[1], depot)

    def test_reset_scratch(self, path_graph):
        path_graph.vertices[1].visited = True
        path_graph.edges[0].associated_depot_index = 0
        path_graph.reset_scratch()
        assert not path_graph.vertices[1].visited
        assert path_graph.edges[0].associated_depot_index == -1


# =============================================================================
# Test networkx export
# =============================================================================

class TestNetworkx:

    def test_to_networkx(self, triangle_graph):
        g = triangle_graph.to_networkx()

        assert isinstance(g, nx.MultiGraph)
        assert g.number_of_nodes() == 5
        assert g.number_of_edges() == 10
        assert g.nodes[0]["kind"] == "depot"
        assert g.nodes[0]["capacity"] == 10.0
        assert g.nodes[4]["kind"] == "customer"
        assert g.size(weight="weight") == 10
