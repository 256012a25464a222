"""
Preprocessing module - instance preparation and exclusion rules.

This module provides:
- exclude_dijkstra, exclude_triangle: Clear (arc, depot) and
  (customer, depot) pairs that cannot appear in a feasible tree
- geometry_based_cut, assign_depots: Builder-level instance preparation
"""

from forestcg.preprocessing.exclusion import exclude_dijkstra, exclude_triangle
from forestcg.preprocessing.geometry import DEPOT_CENTERS, assign_depots, geometry_based_cut

__all__ = [
    'exclude_dijkstra',
    'exclude_triangle',
    'geometry_based_cut',
    'assign_depots',
    'DEPOT_CENTERS',
]
