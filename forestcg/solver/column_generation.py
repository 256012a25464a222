"""
Column Generation engine.

This module implements the state machine that coordinates the restricted
master (a LinearRelaxationSolver) and a formulation-specific pricing
problem.

Algorithm Overview:
------------------
1. INITIALIZING: create all master constraints and the initial column(s)
2. OPTIMIZING: solve the restricted master
3. PRICING: read duals and search for an improving column
4. TERMINATING if pricing found nothing or the termination predicate holds
5. ADDING: attach the new columns, apply the removal hook, go to 2

Constraint handles are created once in step 1; later iterations only add
or remove column variables. "No improving column" is the normal end of a
run; a SolverError raised by the master ends the run and propagates.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np

from forestcg.config import config as global_config
from forestcg.core.column import Column
from forestcg.core.graph import Graph
from forestcg.master import (
    HIGHS_AVAILABLE,
    HiGHSSolver,
    LinearRelaxationSolver,
    LinExpr,
    ObjectiveSense,
)
from forestcg.pricing import PricingConfig, PricingSolution
from forestcg.solver.solution import CGIteration, CGResult, CGStatus, PhaseTimer

logger = logging.getLogger(__name__)

# Type alias for termination predicates over the master objective
TerminationCriterion = Callable[[float], bool]


def never_terminate(objective: float) -> bool:
    return False


class CGState(Enum):
    """State of the column generation engine."""
    INITIALIZING = auto()
    OPTIMIZING = auto()
    PRICING = auto()
    ADDING = auto()
    TERMINATING = auto()


@dataclass
class CGConfig:
    """
    Configuration for the column generation engine.

    Attributes:
        max_iterations: Maximum number of master optimizations (0 = unlimited)
        pricing_config: Configuration for the pricing subproblem
        verbosity: Output level passed to the default HiGHS solver
    """
    max_iterations: int = 0
    pricing_config: Optional[PricingConfig] = None
    verbosity: int = 0


class ColumnGeneration(ABC):
    """
    Column generation engine, one instance per graph and formulation.

    Subclasses define the master problem:

    - generate_rows_and_initial_columns(): create constraints (and static
      variables) and return the initial columns
    - solve_pricing_problem(): read duals and return new columns, empty
      when no improving column exists
    - remove_columns(): columns to drop after adding (default: none)

    Example:
        >>> relaxation = HMRelaxation(graph)
        >>> result = relaxation.solve()
        >>> print(result)
        obj 2 init 0.0 optimize 0.0 pricing 0.0
    """

    def __init__(
        self,
        graph: Graph,
        sense: ObjectiveSense,
        termination: Optional[TerminationCriterion] = None,
        solver: Optional[LinearRelaxationSolver] = None,
        config: Optional[CGConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            graph: The problem instance
            sense: Objective sense of the master
            termination: Predicate over the objective that stops the run early
            solver: LP engine for the restricted master (default: HiGHSSolver)
            config: Engine configuration (uses defaults if not provided)
        """
        self._graph = graph
        self._sense = sense
        self._termination = termination or never_terminate
        self._config = config or CGConfig()

        if solver is None:
            if not HIGHS_AVAILABLE:
                raise RuntimeError(
                    "HiGHS is not available. Install it with: pip install highspy\n"
                    "Or provide a custom LinearRelaxationSolver implementation."
                )
            solver = HiGHSSolver(verbosity=self._config.verbosity)
        self._solver = solver

        self._state = CGState.INITIALIZING
        self._columns: Dict[int, Column] = {}
        self._column_counter = 0
        self._timer = PhaseTimer()
        self._history: List[CGIteration] = []
        self._last_pricing: Optional[PricingSolution] = None
        self._result: Optional[CGResult] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def solver(self) -> LinearRelaxationSolver:
        """The LP engine holding the restricted master."""
        return self._solver

    @property
    def config(self) -> CGConfig:
        return self._config

    @property
    def state(self) -> CGState:
        return self._state

    @property
    def columns(self) -> Dict[int, Column]:
        """Active columns by id."""
        return self._columns

    @property
    def result(self) -> Optional[CGResult]:
        """The result (None if not yet solved)."""
        return self._result

    # =========================================================================
    # Formulation hooks
    # =========================================================================

    @abstractmethod
    def generate_rows_and_initial_columns(self) -> Iterable[Column]:
        """Create every master constraint and return the initial columns."""

    @abstractmethod
    def solve_pricing_problem(self) -> Iterable[Column]:
        """Return improving columns; empty when none exists."""

    def remove_columns(self) -> Iterable[Column]:
        """Columns to remove after new ones were added."""
        return ()

    # =========================================================================
    # Main Algorithm
    # =========================================================================

    def solve(self) -> CGResult:
        """
        Run column generation until pricing finds no improving column, the
        termination predicate holds or the iteration limit is reached.

        Returns:
            CGResult with the objective value and per-phase timings

        Raises:
            SolverError: If the restricted master cannot be solved
            RuntimeError: If solve() was already called
        """
        if self._result is not None or self._state is not CGState.INITIALIZING:
            raise RuntimeError(f"{self!r} has already been solved")

        self._timer.profile("init")
        self._solver.set_objective(LinExpr(), self._sense)
        for column in self.generate_rows_and_initial_columns():
            self._add_column(column)

        iteration = 0
        status = CGStatus.NOT_SOLVED
        while True:
            self._state = CGState.OPTIMIZING
            self._timer.profile("optimize")
            self._solver.optimize()
            objective = self._solver.objective_value()
            iteration += 1

            self._state = CGState.PRICING
            self._timer.profile("pricing")
            self._last_pricing = None
            new_columns = list(self.solve_pricing_problem())

            record = CGIteration(
                iteration=iteration,
                num_columns=len(self._columns),
                objective=objective,
                pricing_gap=self._last_pricing.gap if self._last_pricing is not None else None,
            )
            self._history.append(record)
            logger.debug("iteration %d: obj %s, %d columns", iteration, objective, len(self._columns))

            if not new_columns:
                status = CGStatus.OPTIMAL
                break
            if self._termination(objective):
                status = CGStatus.TERMINATED
                break
            if self._config.max_iterations and iteration >= self._config.max_iterations:
                status = CGStatus.ITERATION_LIMIT
                break

            self._state = CGState.ADDING
            for column in new_columns:
                self._add_column(column)
            record.columns_added = len(new_columns)
            for column in list(self.remove_columns()):
                self._remove_column(column)

        self._state = CGState.TERMINATING
        self._timer.profile(None)
        self._result = CGResult(
            objective_value=objective,
            phase_times=dict(self._timer.times),
            status=status,
            iterations=iteration,
            num_columns=len(self._columns),
            history=self._history,
        )
        logger.info("%s: %s (%s)", self._graph.name, self._result, status.name)
        return self._result

    # =========================================================================
    # Columns
    # =========================================================================

    def new_column(self, objective: float = 0.0, **kwargs) -> Column:
        """Create a column with the next sequential id."""
        column = Column(self._column_counter, objective, **kwargs)
        self._column_counter += 1
        return column

    def _add_column(self, column: Column) -> None:
        column.attach(self._solver)
        self._columns[column.column_id] = column

    def _remove_column(self, column: Column) -> None:
        column.detach(self._solver)
        del self._columns[column.column_id]

    def _record_pricing(self, solution: PricingSolution) -> None:
        self._last_pricing = solution

    # =========================================================================
    # Solution read-back
    # =========================================================================

    def dual_array(self, handles: np.ndarray) -> np.ndarray:
        """Dual values of an array of constraint handles; NaN where None."""
        return self._read_array(handles, self._solver.dual_values)

    def primal_array(self, handles: np.ndarray) -> np.ndarray:
        """Primal values of an array of variable handles; NaN where None."""
        return self._read_array(handles, self._solver.primal_values)

    @staticmethod
    def _read_array(handles: np.ndarray, read) -> np.ndarray:
        values = np.full(handles.shape, np.nan)
        present = np.array([h is not None for h in handles.flat], dtype=bool).reshape(handles.shape)
        values[present] = read(handles[present])
        return values

    def column_values(self) -> Dict[int, float]:
        """
        Primal value of every active column.

        Returns:
            Dict mapping column_id to value
        """
        ids = list(self._columns)
        values = self._solver.primal_values(self._columns[i].variable for i in ids)
        return dict(zip(ids, values.tolist()))

    def get_iteration_history(self) -> List[CGIteration]:
        return list(self._history)

    def summary(self) -> str:
        lines = [
            f"{self.__class__.__name__}: {self._graph.name}",
            f"  State: {self._state.name}",
            f"  Max iterations: {self._config.max_iterations}",
        ]
        if self._result is not None:
            lines.extend(["", self._result.summary()])
        else:
            lines.append("\n  Status: Not yet solved")
        return "\n".join(lines)

    def __repr__(self) -> str:
        status = "solved" if self._result is not None else "not solved"
        return f"{self.__class__.__name__}(graph={self._graph.name!r}, {status})"


def make_handle_array(shape) -> np.ndarray:
    """Object array of the given shape filled with None."""
    handles = np.empty(shape, dtype=object)
    handles.fill(None)
    return handles


def snap_fractions(values: np.ndarray, epsilon: Optional[float] = None) -> np.ndarray:
    """
    Round utilisation values within ``epsilon`` of 0 or 1 to exactly 0 or 1.

    Args:
        values: Fractional utilisation values
        epsilon: Tolerance (default: config.epsilon_color_interpolate)
    """
    if epsilon is None:
        epsilon = global_config.epsilon_color_interpolate
    snapped = np.array(values, dtype=np.float64)
    snapped[np.abs(snapped) < epsilon] = 0.0
    snapped[np.abs(snapped - 1.0) < epsilon] = 1.0
    return snapped
