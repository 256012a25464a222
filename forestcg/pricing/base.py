"""
Pricing problem abstract base class.

A pricing solver receives the dual values of the restricted master and
searches for a column with positive reduced cost (the master maximizes).
Both solvers in this package accumulate a total score whose negation,
minus the lambda-sum dual, is the reduced cost of the best column:

    reduced_cost = -total_score - lambda_sum_dual

so a column is worth adding iff ``total_score < -lambda_sum_dual``. A
tolerance absorbs floating point noise near optimality.

Customization Guide:
-------------------
To create a custom pricing solver:

1. Subclass PricingProblem
2. Implement _solve_impl(duals) returning a PricingSolution with
   total_score, dual_bound and the selection filled in
3. The base class decides the status and logs the pricing gap
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, List, Optional, Tuple

from forestcg.config import config as global_config
from forestcg.core.graph import Graph

logger = logging.getLogger(__name__)


class PricingStatus(Enum):
    """
    Status of the pricing problem solution.
    """
    NOT_SOLVED = auto()     # solve() not called yet
    COLUMN_FOUND = auto()   # Found a column with positive reduced cost
    NO_COLUMN = auto()      # Optimality certificate: no improving column


@dataclass
class PricingSolution:
    """
    Result of solving the pricing problem.

    Attributes:
        status: Solution status
        total_score: Accumulated score of the selection
        dual_bound: Dual value of the lambda-sum constraint
        customers: Selected (customer_id, depot_id) pairs
        edges: Selected (edge_id, depot_id) pairs; depot_id is -1 for
            spanning trees
        solve_time: Time spent solving in seconds
    """
    status: PricingStatus = PricingStatus.NOT_SOLVED
    total_score: float = 0.0
    dual_bound: float = 0.0
    customers: List[Tuple[int, int]] = field(default_factory=list)
    edges: List[Tuple[int, int]] = field(default_factory=list)
    solve_time: float = 0.0

    @property
    def has_column(self) -> bool:
        return self.status is PricingStatus.COLUMN_FOUND

    @property
    def gap(self) -> float:
        """-dual_bound - total_score; positive iff the column improves."""
        return -self.dual_bound - self.total_score

    @property
    def reduced_cost(self) -> float:
        return -self.total_score - self.dual_bound

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            "PricingSolution:",
            f"  Status: {self.status.name}",
            f"  Total score: {self.total_score:.6f}",
            f"  Lambda-sum dual: {self.dual_bound:.6f}",
            f"  Gap: {self.gap:.6f}",
            f"  Customers selected: {len(self.customers)}",
            f"  Edges selected: {len(self.edges)}",
            f"  Solve time: {self.solve_time:.3f}s",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PricingSolution({self.status.name}, score={self.total_score:.4f}, "
            f"edges={len(self.edges)})"
        )


@dataclass
class PricingConfig:
    """
    Configuration for pricing problem solving.

    Attributes:
        tolerance: Pricing termination tolerance (None = config.epsilon_pricing)
    """
    tolerance: Optional[float] = None

    def resolved_tolerance(self) -> float:
        if self.tolerance is None:
            return global_config.epsilon_pricing
        return self.tolerance


class PricingProblem(ABC):
    """
    Abstract base class for pricing problem solvers.

    Lifecycle:
    ---------
    1. Create: pricing = SubforestPricing(graph)
    2. Solve: solution = pricing.solve(duals)
    3. If solution.has_column, turn the selection into a Column

    Attributes:
        graph: The graph the pricing problem is defined on
        config: Pricing configuration
    """

    def __init__(self, graph: Graph, config: Optional[PricingConfig] = None):
        self._graph = graph
        self._config = config or PricingConfig()

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def config(self) -> PricingConfig:
        return self._config

    def solve(self, duals: Any) -> PricingSolution:
        """
        Solve the pricing problem for the given duals.

        Duals are read only; the graph's scratch fields may be overwritten.

        Returns:
            PricingSolution; has_column is False when no improving column exists
        """
        start_time = time.time()
        solution = self._solve_impl(duals)
        solution.solve_time = time.time() - start_time

        logger.debug(
            "pricing problem: %s >= -%s? gap: %s",
            solution.total_score, solution.dual_bound, solution.gap,
        )
        threshold = -solution.dual_bound - self._config.resolved_tolerance()
        if solution.total_score >= threshold:
            solution.status = PricingStatus.NO_COLUMN
        else:
            solution.status = PricingStatus.COLUMN_FOUND
        return solution

    @abstractmethod
    def _solve_impl(self, duals: Any) -> PricingSolution:
        """
        Compute the best selection.

        Must set total_score, dual_bound and the selection; the status is
        set by solve().
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(graph={self._graph.name!r})"
