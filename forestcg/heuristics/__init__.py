"""
Heuristics module - combinatorial constructions on the graph.

This module provides:
- greedy_capacitated_forest: Capacity-respecting multi-depot tree growth
- two_step_heuristic: Greedy first step of the two-step heuristic
- prim_dijkstra_mst: Minimum spanning forest weight
"""

from forestcg.heuristics.greedy import GreedyForest, greedy_capacitated_forest, two_step_heuristic
from forestcg.heuristics.mst import prim_dijkstra_mst

__all__ = [
    'GreedyForest',
    'greedy_capacitated_forest',
    'two_step_heuristic',
    'prim_dijkstra_mst',
]
