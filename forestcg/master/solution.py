"""
Solver status module.

This module defines the status reported by a LinearRelaxationSolver after
optimize() and the error raised when the restricted master cannot be
solved to optimality.
"""

from enum import Enum, auto
from typing import Optional


class SolutionStatus(Enum):
    """
    Status of the last optimize() call.
    """
    OPTIMAL = auto()           # Optimal solution found
    INFEASIBLE = auto()        # Problem is infeasible
    UNBOUNDED = auto()         # Problem is unbounded
    INF_OR_UNBOUNDED = auto()  # Infeasible or unbounded (solver couldn't determine)
    TIME_LIMIT = auto()        # Time limit reached
    ITERATION_LIMIT = auto()   # Iteration limit reached
    NOT_SOLVED = auto()        # Solve not called yet
    ERROR = auto()             # Solver error occurred


class SolverError(RuntimeError):
    """
    Raised when the linear relaxation could not be solved to optimality.

    Attributes:
        status: The status reported by the solver
    """

    def __init__(self, status: SolutionStatus, message: Optional[str] = None):
        self.status = status
        super().__init__(message or f"linear relaxation not solved to optimality: {status.name}")
