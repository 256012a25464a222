"""
Master module - the linear relaxation solver behind the restricted master.

This module provides:
- LinearRelaxationSolver: Abstract base class for LP engines
- HiGHSSolver: Default implementation using HiGHS
- VariableHandle, ConstraintHandle: Opaque model references
- LinExpr, Relation, ObjectiveSense: Model building helpers
- SolutionStatus, SolverError: Solve outcome

Usage:
------
    >>> from forestcg.master import HiGHSSolver, LinExpr, Relation, ObjectiveSense
    >>> solver = HiGHSSolver()
    >>> x = solver.add_variable(0.0, 10.0, 1.0)
    >>> solver.set_objective(LinExpr({x: 1.0}), ObjectiveSense.MAXIMIZE)
    >>> solver.optimize()
    >>> solver.primal_value(x)
    10.0

Creating a custom solver:

    >>> class MyGurobiSolver(LinearRelaxationSolver):
    ...     def _add_variable_impl(self, lower, upper, objective, column):
    ...         ...
    ...     def _optimize_impl(self):
    ...         ...
"""

from forestcg.master.solution import SolutionStatus, SolverError
from forestcg.master.base import (
    ConstraintHandle,
    LinearRelaxationSolver,
    LinExpr,
    ObjectiveSense,
    Relation,
    VariableHandle,
    term_sum,
)
from forestcg.master.highs import HIGHS_AVAILABLE, HiGHSSolver


__all__ = [
    # Status
    'SolutionStatus',
    'SolverError',

    # Base class and model building
    'LinearRelaxationSolver',
    'VariableHandle',
    'ConstraintHandle',
    'LinExpr',
    'Relation',
    'ObjectiveSense',
    'term_sum',

    # HiGHS implementation
    'HiGHSSolver',
    'HIGHS_AVAILABLE',
]
