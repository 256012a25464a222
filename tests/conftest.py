"""
Shared pytest fixtures for forestcg tests.
"""

import pytest

from forestcg.core import GraphBuilder


def pytest_configure(config):
    """Add custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture
def path_builder():
    """One depot (capacity 10) and a path d - c1 - c2 - c3 with weights 3, 4, 5."""
    builder = GraphBuilder("path")
    depot = builder.add_vertex(0.0, 0.0, capacity=10.0)
    c1 = builder.add_vertex(1.0, 0.0)
    c2 = builder.add_vertex(2.0, 0.0)
    c3 = builder.add_vertex(3.0, 0.0)
    builder.add_edge(depot, c1, 3)
    builder.add_edge(c1, c2, 4)
    builder.add_edge(c2, c3, 5)
    return builder


@pytest.fixture
def path_graph(path_builder):
    return path_builder.finalize()


@pytest.fixture
def triangle_graph():
    """Three depots (capacity 10) and two customers, complete graph with unit weights."""
    builder = GraphBuilder("complete")
    vertices = [builder.add_vertex(float(i), 0.0, capacity=10.0) for i in range(3)]
    vertices += [builder.add_vertex(float(i), 1.0) for i in range(2)]
    for i, a in enumerate(vertices):
        for b in vertices[i + 1:]:
            builder.add_edge(a, b, 1)
    return builder.finalize()


@pytest.fixture
def tsp_file(tmp_path):
    """A small TSPLIB instance with five points."""
    path = tmp_path / "tiny5.tsp"
    path.write_text(
        "NAME : tiny5\n"
        "TYPE : TSP\n"
        "DIMENSION : 5\n"
        "EDGE_WEIGHT_TYPE : EUC_2D\n"
        "NODE_COORD_SECTION\n"
        "1 0 0\n"
        "2 10 0\n"
        "3 0 10\n"
        "4 10 10\n"
        "5 5 5\n"
        "EOF\n"
    )
    return path
