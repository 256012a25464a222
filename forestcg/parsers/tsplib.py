"""
TSPLIB parser.

Reads the NODE_COORD_SECTION of a .tsp file and builds the complete graph
on its points. Edge weights are Euclidean distances rounded to the nearest
integer. No depots are assigned; see forestcg.preprocessing.assign_depots.
"""

import math
from pathlib import Path
from typing import Union

from forestcg.core.builder import GraphBuilder
from forestcg.parsers.base import Parser


def euclidean_weight(ax: float, ay: float, bx: float, by: float) -> int:
    return int(math.sqrt((ax - bx) ** 2 + (ay - by) ** 2) + 0.5)


class TSPLIBParser(Parser):
    """
    Parser for TSPLIB EUC_2D instances.

    Example:
        >>> builder = TSPLIBParser().parse("data/berlin52.tsp")
        >>> len(builder.vertices), len(builder.edges)
        (52, 1326)
    """

    suffix = ".tsp"

    def parse(self, path: Union[str, Path]) -> GraphBuilder:
        path = Path(path)
        builder = GraphBuilder(path.stem)

        reading = False
        for number, line in enumerate(self._read_lines(path), start=1):
            if line == "NODE_COORD_SECTION":
                reading = True
            elif line == "EOF":
                break
            elif reading and line:
                fields = line.split()
                if len(fields) < 3:
                    raise ValueError(f"{path}:{number}: expected '<id> <x> <y>', got {line!r}")
                builder.add_vertex(float(fields[1]), float(fields[2]))

        if not reading:
            raise ValueError(f"{path}: missing NODE_COORD_SECTION")

        vertices = builder.vertices
        for i, a in enumerate(vertices):
            for b in vertices[i + 1:]:
                builder.add_edge(a, b, euclidean_weight(a.x, a.y, b.x, b.y))

        self._log(f"{builder.name}: {len(vertices)} vertices, {len(builder.edges)} edges")
        return builder
