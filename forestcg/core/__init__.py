"""
Core module - graph model and data structures shared by all algorithms.

Components:
----------
- Vertex, Depot, Customer: Vertex variants tagged with VertexKind
- Edge, Arc: Undirected weighted edges and their two directed arcs
- Graph: Finalized topology with the per-depot exclusion index
- GraphBuilder: Mutable graph producing a Graph
- UnionFind: Disjoint-set union
- Column, MembershipMask: Columns of the restricted master
"""

from forestcg.core.graph import Arc, Customer, Depot, Edge, Graph, Vertex, VertexKind
from forestcg.core.builder import BuilderEdge, BuilderVertex, GraphBuilder
from forestcg.core.union_find import UnionFind
from forestcg.core.column import Column, MembershipMask

__all__ = [
    # Graph model
    "VertexKind",
    "Vertex",
    "Depot",
    "Customer",
    "Edge",
    "Arc",
    "Graph",
    # Building
    "GraphBuilder",
    "BuilderVertex",
    "BuilderEdge",
    # Algorithms support
    "UnionFind",
    # Columns
    "Column",
    "MembershipMask",
]
