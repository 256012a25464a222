"""
HiGHS implementation of the linear relaxation solver.

HiGHS is the default LP engine of forestcg: rows and columns are added
incrementally, columns can be deleted between solves, and the simplex
warm starts from the previous basis.

Usage:
    >>> from forestcg.master import HiGHSSolver
    >>> solver = HiGHSSolver()
    >>> relaxation = HMRelaxation(graph, solver)
"""

from typing import List, Optional, Tuple

import numpy as np

try:
    import highspy
    HIGHS_AVAILABLE = True
except ImportError:
    HIGHS_AVAILABLE = False

from forestcg.master.base import LinearRelaxationSolver, ObjectiveSense
from forestcg.master.solution import SolutionStatus


# HiGHS status mapping
def _map_highs_status(status) -> SolutionStatus:
    """Map HiGHS model status to our SolutionStatus."""
    if not HIGHS_AVAILABLE:
        return SolutionStatus.ERROR

    status_map = {
        highspy.HighsModelStatus.kNotset: SolutionStatus.NOT_SOLVED,
        highspy.HighsModelStatus.kLoadError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPresolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kSolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPostsolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelEmpty: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kOptimal: SolutionStatus.OPTIMAL,
        highspy.HighsModelStatus.kInfeasible: SolutionStatus.INFEASIBLE,
        highspy.HighsModelStatus.kUnbounded: SolutionStatus.UNBOUNDED,
        highspy.HighsModelStatus.kUnboundedOrInfeasible: SolutionStatus.INF_OR_UNBOUNDED,
        highspy.HighsModelStatus.kTimeLimit: SolutionStatus.TIME_LIMIT,
        highspy.HighsModelStatus.kIterationLimit: SolutionStatus.ITERATION_LIMIT,
    }

    return status_map.get(status, SolutionStatus.ERROR)


def _to_highs_bound(value: float) -> float:
    if value == float('inf'):
        return highspy.kHighsInf
    if value == float('-inf'):
        return -highspy.kHighsInf
    return value


def _split(entries: List[Tuple[int, float]]):
    indices = np.array([index for index, _ in entries], dtype=np.int32)
    values = np.array([value for _, value in entries], dtype=np.float64)
    return indices, values


class HiGHSSolver(LinearRelaxationSolver):
    """
    Linear relaxation solver using HiGHS.

    The restricted master is solved with the primal simplex, which keeps
    the previous basis primal feasible after columns are added.

    Attributes:
        time_limit: Maximum solve time in seconds (None = no limit)
        verbosity: HiGHS output level (0 = silent, 1 = normal)
    """

    def __init__(self, time_limit: Optional[float] = None, verbosity: int = 0):
        """
        Initialize an empty HiGHS model.

        Args:
            time_limit: Maximum solve time in seconds (None = no limit)
            verbosity: HiGHS output level (0 = silent)

        Raises:
            ImportError: If highspy is not installed
        """
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )
        super().__init__()

        self.time_limit = time_limit
        self.verbosity = verbosity

        self._highs = highspy.Highs()
        self._highs.setOptionValue('output_flag', verbosity > 0)
        self._highs.setOptionValue('log_to_console', verbosity > 0)
        self._highs.setOptionValue('solver', 'simplex')
        # 4 = primal simplex
        self._highs.setOptionValue('simplex_strategy', 4)
        if time_limit is not None:
            self._highs.setOptionValue('time_limit', time_limit)

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _add_variable_impl(self, lower, upper, objective, column):
        indices, values = _split(column)
        # addCol(cost, lower, upper, num_nz, indices, values)
        self._highs.addCol(
            objective,
            _to_highs_bound(lower),
            _to_highs_bound(upper),
            len(indices),
            indices,
            values,
        )

    def _add_constraint_impl(self, lower, upper, row):
        indices, values = _split(row)
        self._highs.addRow(
            _to_highs_bound(lower),
            _to_highs_bound(upper),
            len(indices),
            indices,
            values,
        )

    def _remove_variable_impl(self, index):
        self._highs.deleteCols(1, np.array([index], dtype=np.int32))

    def _remove_constraint_impl(self, index):
        self._highs.deleteRows(1, np.array([index], dtype=np.int32))

    def _set_objective_impl(self, costs, offset, sense):
        for index, cost in enumerate(costs):
            self._highs.changeColCost(index, cost)
        self._highs.changeObjectiveOffset(offset)
        if sense is ObjectiveSense.MAXIMIZE:
            self._highs.changeObjectiveSense(highspy.ObjSense.kMaximize)
        else:
            self._highs.changeObjectiveSense(highspy.ObjSense.kMinimize)

    def _optimize_impl(self) -> SolutionStatus:
        self._highs.run()
        return _map_highs_status(self._highs.getModelStatus())

    def _primal_value_impl(self, index):
        return float(self._highs.getSolution().col_value[index])

    def _dual_value_impl(self, index):
        return float(self._highs.getSolution().row_dual[index])

    def _objective_value_impl(self):
        return float(self._highs.getInfo().objective_function_value)

    def _primal_values_impl(self, indices):
        col_value = np.asarray(self._highs.getSolution().col_value, dtype=np.float64)
        return col_value[np.asarray(indices, dtype=np.intp)]

    def _dual_values_impl(self, indices):
        row_dual = np.asarray(self._highs.getSolution().row_dual, dtype=np.float64)
        return row_dual[np.asarray(indices, dtype=np.intp)]
