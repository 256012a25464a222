"""
Formulations module - the two column generation relaxations.

This module provides:
- HMRelaxation: Subforests with customer-depot assignment
- TMRelaxation: Spanning trees of the graph augmented with a super-root
- augment_with_super_root: The TM graph augmentation
"""

from forestcg.formulations.hm import HMRelaxation
from forestcg.formulations.tm import TMRelaxation, augment_with_super_root

__all__ = [
    'HMRelaxation',
    'TMRelaxation',
    'augment_with_super_root',
]
