"""
Pricing module - pricing subproblem solvers.

This module provides:
- PricingProblem: Abstract base class for pricing solvers
- PricingSolution, PricingStatus, PricingConfig: Results and configuration
- SubforestPricing, HMDuals: Customer assignment + per-depot Kruskal
- SpanningTreePricing, TMDuals: Prim-Dijkstra on the augmented graph
"""

from forestcg.pricing.base import PricingConfig, PricingProblem, PricingSolution, PricingStatus
from forestcg.pricing.subforest import HMDuals, SubforestPricing
from forestcg.pricing.spanning_tree import SpanningTreePricing, TMDuals

__all__ = [
    # Base
    'PricingProblem',
    'PricingSolution',
    'PricingStatus',
    'PricingConfig',

    # HM
    'SubforestPricing',
    'HMDuals',

    # TM
    'SpanningTreePricing',
    'TMDuals',
]
