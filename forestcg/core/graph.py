"""
Graph module - immutable topology for capacitated multi-depot forest problems.

A problem instance is an undirected weighted graph whose vertices are either
depots (with a capacity) or customers. Every undirected edge owns two arcs,
one per direction. Arcs are the unit of directed traversal, edges are the
unit of weight and of constraint bookkeeping.

This module provides:
- VertexKind: Tag distinguishing depots from customers
- Vertex, Depot, Customer: The vertex variants
- Edge, Arc: Undirected edges and their two directed arcs
- Graph: The finalized graph together with its exclusion index

Design Notes:
------------
- The structure (vertices, edges, arcs, adjacency) never changes after
  GraphBuilder.finalize() creates the Graph
- Vertices and edges carry scratch fields (visited, associated_depot_index,
  in_mst) that algorithms reset before use via Graph.reset_scratch()
- The exclusion index holds one boolean per (arc, depot) and per
  (customer, depot); entries start as included and are only ever cleared
"""

from enum import Enum, auto
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

import networkx as nx
import numpy as np

if TYPE_CHECKING:
    from forestcg.core.builder import GraphBuilder


class VertexKind(Enum):
    """Kind of a vertex. Algorithms switch on this tag."""
    DEPOT = auto()
    CUSTOMER = auto()


class Vertex:
    """
    Vertex of a Graph, either a Depot or a Customer.

    Attributes:
        vertex_id: Position of the vertex in Graph.vertices
        x, y: Coordinates (only used by external reporting)
        adj: Edges incident to this vertex
        adj_in: Arcs entering this vertex
        adj_out: Arcs leaving this vertex
        visited: Scratch flag used by graph searches
        associated_depot_index: Scratch depot assignment (-1 = unassigned)
    """

    kind: VertexKind

    def __init__(self, vertex_id: int, x: float, y: float):
        self.vertex_id = vertex_id
        self.x = x
        self.y = y
        self.adj: List['Edge'] = []
        self.adj_in: List['Arc'] = []
        self.adj_out: List['Arc'] = []

        # fields used by algorithms on the graph
        self.visited = False
        self.associated_depot_index = -1

    @property
    def is_depot(self) -> bool:
        return self.kind is VertexKind.DEPOT

    @property
    def is_customer(self) -> bool:
        return self.kind is VertexKind.CUSTOMER

    def __hash__(self) -> int:
        return hash(self.vertex_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vertex):
            return NotImplemented
        return self.vertex_id == other.vertex_id

    def __lt__(self, other: 'Vertex') -> bool:
        return self.vertex_id < other.vertex_id


class Depot(Vertex):
    """A depot vertex with a capacity bounding the weight of its tree."""

    kind = VertexKind.DEPOT

    def __init__(self, depot_id: int, capacity: float, vertex_id: int, x: float = 0.0, y: float = 0.0):
        super().__init__(vertex_id, x, y)
        self.depot_id = depot_id
        self.capacity = capacity

    def __repr__(self) -> str:
        return f"Depot(d{self.depot_id}|{self.vertex_id}, capacity={self.capacity})"


class Customer(Vertex):
    """A customer vertex."""

    kind = VertexKind.CUSTOMER

    def __init__(self, customer_id: int, vertex_id: int, x: float = 0.0, y: float = 0.0):
        super().__init__(vertex_id, x, y)
        self.customer_id = customer_id

    def __repr__(self) -> str:
        return f"Customer(c{self.customer_id}|{self.vertex_id})"


class Arc:
    """
    Directed arc (source, target) belonging to an Edge.

    Arc ids are 2 * edge_id for (a, b) and 2 * edge_id + 1 for (b, a).
    """

    def __init__(self, arc_id: int, edge: 'Edge', source: Vertex, target: Vertex):
        self.arc_id = arc_id
        self.edge = edge
        self.source = source
        self.target = target
        self.opposite: Optional['Arc'] = None

    def __iter__(self) -> Iterator[Vertex]:
        yield self.source
        yield self.target

    def __repr__(self) -> str:
        return f"Arc({self.source.vertex_id}, {self.target.vertex_id})"


class Edge:
    """
    Undirected edge {a, b} with a non-negative integer weight.

    Attributes:
        edge_id: Position of the edge in Graph.edges
        endpoints: The two endpoints (a, b)
        weight: Edge weight
        arcs: The arcs (a, b) and (b, a)
        in_mst: Scratch flag set by prim_dijkstra_mst
        associated_depot_index: Scratch depot assignment (-1 = unassigned)
    """

    def __init__(self, edge_id: int, a: Vertex, b: Vertex, weight: int):
        self.edge_id = edge_id
        self.endpoints: Tuple[Vertex, Vertex] = (a, b)
        self.weight = weight

        forward = Arc(2 * edge_id, self, a, b)
        backward = Arc(2 * edge_id + 1, self, b, a)
        forward.opposite = backward
        backward.opposite = forward
        self.arcs: Tuple[Arc, Arc] = (forward, backward)

        # fields used by algorithms on the graph
        self.in_mst = False
        self.associated_depot_index = -1

    def endpoint_index(self, vertex: Vertex) -> int:
        """Position (0 or 1) of ``vertex`` among the endpoints."""
        return 0 if self.endpoints[0] is vertex else 1

    def other(self, vertex: Vertex) -> Vertex:
        """The endpoint that is not ``vertex``."""
        return self.endpoints[1] if self.endpoints[0] is vertex else self.endpoints[0]

    def __repr__(self) -> str:
        a, b = self.endpoints
        return f"Edge({self.edge_id}: {a.vertex_id}-{b.vertex_id}, w={self.weight})"


class Graph:
    """
    Graph with immutable structure and a per-depot exclusion index.

    Example:
        >>> builder = GraphBuilder("tiny")
        >>> d = builder.add_vertex(capacity=10.0)
        >>> c = builder.add_vertex()
        >>> builder.add_edge(d, c, 3)
        >>> graph = builder.finalize()
        >>> graph.includes_customer(graph.customers[0], graph.depots[0])
        True
    """

    def __init__(
        self,
        name: str,
        vertices: List[Vertex],
        depots: List[Depot],
        customers: List[Customer],
        edges: List[Edge],
        arcs: List[Arc],
    ):
        self.name = name
        self.vertices = vertices
        self.depots = depots
        self.customers = customers
        self.edges = edges
        self.arcs = arcs

        # exclusion index, everything included by default
        self._arc_included = np.ones((len(arcs), len(depots)), dtype=bool)
        self._customer_included = np.ones((len(customers), len(depots)), dtype=bool)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_depots(self) -> int:
        return len(self.depots)

    @property
    def num_customers(self) -> int:
        return len(self.customers)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    # =========================================================================
    # Exclusion index
    # =========================================================================

    def exclude_arc(self, arc: Arc, depot: Depot) -> None:
        """Mark ``arc`` as excluded from the tree of ``depot``."""
        self._arc_included[arc.arc_id, depot.depot_id] = False

    def exclude_customer(self, customer: Customer, depot: Depot) -> None:
        """Mark ``customer`` as excluded from the tree of ``depot``."""
        self._customer_included[customer.customer_id, depot.depot_id] = False

    def includes_arc(self, arc: Arc, depot: Depot) -> bool:
        return bool(self._arc_included[arc.arc_id, depot.depot_id])

    def includes_customer(self, customer: Customer, depot: Depot) -> bool:
        return bool(self._customer_included[customer.customer_id, depot.depot_id])

    def includes_edge(self, edge: Edge, depot: Depot) -> bool:
        """An edge is included for a depot iff either of its arcs is."""
        return any(self.includes_arc(arc, depot) for arc in edge.arcs)

    def included_arc_count(self) -> int:
        """Number of (arc, depot) pairs that are still included."""
        return int(self._arc_included.sum())

    # =========================================================================
    # Utilities
    # =========================================================================

    def reset_scratch(self) -> None:
        """Reset the algorithm fields of all vertices and edges."""
        for vertex in self.vertices:
            vertex.visited = False
            vertex.associated_depot_index = -1
        for edge in self.edges:
            edge.in_mst = False
            edge.associated_depot_index = -1

    def to_builder(self) -> 'GraphBuilder':
        """Create a mutable copy with the same structure and depots."""
        from forestcg.core.builder import GraphBuilder

        return GraphBuilder.from_graph(self)

    def to_networkx(self) -> nx.MultiGraph:
        """
        Export the topology to networkx.

        Nodes are vertex ids with a ``kind`` attribute (and ``capacity`` for
        depots); edges are keyed by edge id and carry ``weight``.
        """
        g = nx.MultiGraph(name=self.name)
        for vertex in self.vertices:
            if vertex.is_depot:
                g.add_node(vertex.vertex_id, kind="depot", capacity=vertex.capacity)
            else:
                g.add_node(vertex.vertex_id, kind="customer")
        for edge in self.edges:
            a, b = edge.endpoints
            g.add_edge(a.vertex_id, b.vertex_id, key=edge.edge_id, weight=edge.weight)
        return g

    def __repr__(self) -> str:
        return (
            f"Graph({self.name!r}, depots={self.num_depots}, "
            f"customers={self.num_customers}, edges={self.num_edges})"
        )
