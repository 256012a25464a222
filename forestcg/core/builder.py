"""
Builder module - mutable graph used to assemble instances.

Instances are read, trimmed (geometry cut) and given depots on a
GraphBuilder; GraphBuilder.finalize() then produces the immutable Graph
the algorithms operate on.

A builder vertex becomes a Depot when its capacity is set and a Customer
otherwise.
"""

import math
from typing import Dict, List, Optional, Tuple

from forestcg.core.graph import Customer, Depot, Edge, Graph, Vertex


class BuilderVertex:
    """Vertex of a GraphBuilder. Setting ``capacity`` marks it as a depot."""

    def __init__(self, builder: 'GraphBuilder', x: float = 0.0, y: float = 0.0):
        self._builder = builder
        self.x = x
        self.y = y
        self.capacity = math.nan
        # (edge, other endpoint) pairs
        self.adj: List[Tuple['BuilderEdge', 'BuilderVertex']] = []

    @property
    def is_depot(self) -> bool:
        return not math.isnan(self.capacity)

    def remove(self) -> None:
        """Remove this vertex and all incident edges from the builder."""
        for edge, _ in list(self.adj):
            edge.remove()
        self._builder.vertices.remove(self)

    def __repr__(self) -> str:
        kind = f"capacity={self.capacity}" if self.is_depot else "customer"
        return f"BuilderVertex(({self.x}, {self.y}), {kind})"


class BuilderEdge:
    """Edge of a GraphBuilder."""

    def __init__(self, builder: 'GraphBuilder', a: BuilderVertex, b: BuilderVertex, weight: int):
        self._builder = builder
        self.a = a
        self.b = b
        self.weight = weight

    def remove(self) -> None:
        """Remove this edge from the builder."""
        self.a.adj = [(e, v) for e, v in self.a.adj if e is not self]
        self.b.adj = [(e, v) for e, v in self.b.adj if e is not self]
        self._builder.edges.remove(self)

    def __repr__(self) -> str:
        return f"BuilderEdge(w={self.weight})"


class GraphBuilder:
    """
    Graph whose structure can still be modified.

    Example:
        >>> builder = GraphBuilder("path")
        >>> depot = builder.add_vertex(capacity=10.0)
        >>> c1 = builder.add_vertex()
        >>> builder.add_edge(depot, c1, 3)
        >>> graph = builder.finalize()
        >>> len(graph.arcs)
        2
    """

    def __init__(self, name: str = "graph"):
        self.name = name
        self.vertices: List[BuilderVertex] = []
        self.edges: List[BuilderEdge] = []

    def add_vertex(self, x: float = 0.0, y: float = 0.0, capacity: Optional[float] = None) -> BuilderVertex:
        """
        Add a vertex.

        Args:
            x, y: Coordinates
            capacity: Depot capacity; None adds a customer

        Returns:
            The new vertex
        """
        vertex = BuilderVertex(self, x, y)
        if capacity is not None:
            vertex.capacity = float(capacity)
        self.vertices.append(vertex)
        return vertex

    def add_edge(self, a: BuilderVertex, b: BuilderVertex, weight: int) -> BuilderEdge:
        """
        Add an undirected edge between ``a`` and ``b``.

        Raises:
            ValueError: If ``a`` and ``b`` are the same vertex or the weight is negative
        """
        if a is b:
            raise ValueError("self loops are not allowed")
        if weight < 0:
            raise ValueError(f"edge weight must be non-negative, got {weight}")
        edge = BuilderEdge(self, a, b, int(weight))
        a.adj.append((edge, b))
        b.adj.append((edge, a))
        self.edges.append(edge)
        return edge

    def remove_vertex(self, vertex: BuilderVertex) -> None:
        vertex.remove()

    def remove_edge(self, edge: BuilderEdge) -> None:
        edge.remove()

    def clone(self) -> 'GraphBuilder':
        """Copy this builder with the same vertices, capacities and edges."""
        clone = GraphBuilder(self.name)
        vertex_map: Dict[int, BuilderVertex] = {}
        for vertex in self.vertices:
            copy = clone.add_vertex(vertex.x, vertex.y)
            copy.capacity = vertex.capacity
            vertex_map[id(vertex)] = copy
        for edge in self.edges:
            clone.add_edge(vertex_map[id(edge.a)], vertex_map[id(edge.b)], edge.weight)
        return clone

    @classmethod
    def from_graph(cls, graph: Graph) -> 'GraphBuilder':
        """Create a builder with the structure and depots of ``graph``."""
        builder = cls(graph.name)
        vertex_map: Dict[int, BuilderVertex] = {}
        for vertex in graph.vertices:
            capacity = vertex.capacity if vertex.is_depot else None
            vertex_map[vertex.vertex_id] = builder.add_vertex(vertex.x, vertex.y, capacity)
        for edge in graph.edges:
            a, b = edge.endpoints
            builder.add_edge(vertex_map[a.vertex_id], vertex_map[b.vertex_id], edge.weight)
        return builder

    def finalize(self) -> Graph:
        """
        Build the immutable Graph.

        Vertex, depot, customer and edge ids follow insertion order.
        """
        vertices: List[Vertex] = []
        depots: List[Depot] = []
        customers: List[Customer] = []
        edges: List[Edge] = []
        arcs = []
        vertex_map: Dict[int, Vertex] = {}

        for source in self.vertices:
            if source.is_depot:
                vertex = Depot(len(depots), source.capacity, len(vertices), source.x, source.y)
                depots.append(vertex)
            else:
                vertex = Customer(len(customers), len(vertices), source.x, source.y)
                customers.append(vertex)
            vertices.append(vertex)
            vertex_map[id(source)] = vertex

        for source in self.edges:
            edge = Edge(len(edges), vertex_map[id(source.a)], vertex_map[id(source.b)], source.weight)
            edges.append(edge)
            arcs.extend(edge.arcs)
            for arc in edge.arcs:
                arc.source.adj_out.append(arc)
                arc.target.adj_in.append(arc)
                arc.source.adj.append(edge)

        return Graph(self.name, vertices, depots, customers, edges, arcs)

    def __repr__(self) -> str:
        return f"GraphBuilder({self.name!r}, vertices={len(self.vertices)}, edges={len(self.edges)})"
