"""
Plain text instance format.

Layout (whitespace separated, vertex ids 1-based):

    <vertex count> <depot count> <edge count>
    <depot vertex ids ...>
    <depot capacities ...>
    <x> <y>                     (one line per vertex)
    <a> <b> <weight>            (one line per edge)

On reading, the stored capacities are ignored and every depot gets
MST weight / (5 * depot count). Self loops are skipped.
"""

from pathlib import Path
from typing import Union

from forestcg.core.builder import GraphBuilder
from forestcg.core.graph import Graph
from forestcg.heuristics.mst import prim_dijkstra_mst
from forestcg.parsers.base import Parser


class TxtGraphParser(Parser):
    """Parser for the plain text depot format."""

    suffix = ".txt"

    def parse(self, path: Union[str, Path]) -> GraphBuilder:
        path = Path(path)
        tokens = iter(self._read_tokens(path))

        def next_token() -> str:
            try:
                return next(tokens)
            except StopIteration:
                raise ValueError(f"{path}: unexpected end of file") from None

        vertex_count = int(next_token())
        depot_count = int(next_token())
        edge_count = int(next_token())

        builder = GraphBuilder(f"{path.name.split('.')[0]}_{depot_count}")
        depot_ids = [int(next_token()) - 1 for _ in range(depot_count)]
        for _ in range(depot_count):
            next_token()

        for _ in range(vertex_count):
            builder.add_vertex(float(next_token()), float(next_token()))

        for _ in range(edge_count):
            a = builder.vertices[int(next_token()) - 1]
            b = builder.vertices[int(next_token()) - 1]
            weight = int(next_token())
            if a is not b:
                builder.add_edge(a, b, weight)

        if depot_count:
            capacity = prim_dijkstra_mst(builder.finalize()) / (5 * depot_count)
            for vertex_id in depot_ids:
                builder.vertices[vertex_id].capacity = capacity

        self._log(f"{builder.name}: {vertex_count} vertices, {depot_count} depots")
        return builder


def write_txt_file(graph: Graph, path: Union[str, Path]) -> None:
    """
    Write ``graph`` in the plain text format.

    Vertices are renumbered so that depots come first.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    order = list(graph.depots) + list(graph.customers)
    position = {vertex.vertex_id: index + 1 for index, vertex in enumerate(order)}

    with open(path, 'w', encoding='utf-8') as out:
        out.write(f"{graph.num_vertices} {graph.num_depots} {graph.num_edges}\n")
        out.write(" ".join(str(position[d.vertex_id]) for d in graph.depots) + "\n")
        out.write(" ".join(str(d.capacity) for d in graph.depots) + "\n")
        for vertex in order:
            out.write(f"{vertex.x} {vertex.y}\n")
        for edge in graph.edges:
            a, b = edge.endpoints
            out.write(f"{position[a.vertex_id]} {position[b.vertex_id]} {edge.weight}\n")
