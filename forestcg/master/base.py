"""
Linear relaxation solver abstract base class.

The column generation engine never talks to an LP library directly. It
builds and modifies the restricted master through this interface:

    add_variable(lower, upper, objective, coefficients) -> VariableHandle
    add_constraint(expression, relation, rhs)           -> ConstraintHandle
    remove_variable(handle), remove_constraint(handle)
    set_objective(expression, sense)
    optimize()                     (raises SolverError unless OPTIMAL)
    primal_value(handle), dual_value(handle), objective_value()
    primal_values(handles), dual_values(handles)   (one read per call)

Dual values follow the Lagrangian convention reduced_cost = c - A^T y for
both objective senses.

Customization Guide:
-------------------
To back the engine with another LP library:

1. Subclass LinearRelaxationSolver
2. Implement the _*_impl methods
3. Keep handle.index equal to the position of the variable/constraint in
   the underlying model (the base class shifts indices after removals)

Example:
    >>> solver = HiGHSSolver()
    >>> x = solver.add_variable(0.0, math.inf, 1.0)
    >>> row = solver.add_constraint(LinExpr({x: 1.0}), Relation.LESS_EQUAL, 4.0)
    >>> solver.set_objective(LinExpr({x: 1.0}), ObjectiveSense.MAXIMIZE)
    >>> solver.optimize()
    >>> solver.objective_value()
    4.0
"""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from forestcg.master.solution import SolutionStatus, SolverError


class Relation(Enum):
    """Relation of a linear constraint."""
    LESS_EQUAL = '<='
    EQUAL = '='
    GREATER_EQUAL = '>='


class ObjectiveSense(Enum):
    """Direction of optimization."""
    MINIMIZE = 'min'
    MAXIMIZE = 'max'


class _Handle:
    """Opaque reference to a model entity; hashed by identity."""

    __slots__ = ('name', 'index', 'removed')

    def __init__(self, name: str, index: int):
        self.name = name
        self.index = index
        self.removed = False

    def __repr__(self) -> str:
        state = ", removed" if self.removed else ""
        return f"{self.__class__.__name__}({self.name!r}{state})"


class VariableHandle(_Handle):
    """Handle of a variable of the restricted master."""
    __slots__ = ()


class ConstraintHandle(_Handle):
    """Handle of a constraint of the restricted master."""
    __slots__ = ()


class LinExpr:
    """
    Linear expression sum(coef * var) + constant.

    Repeated terms for the same variable are accumulated.

    Example:
        >>> expr = LinExpr()
        >>> expr.add_term(1.0, x).add_term(2.0, x)
        >>> expr.coefficient(x)
        3.0
    """

    def __init__(self, terms: Optional[Mapping[VariableHandle, float]] = None, constant: float = 0.0):
        self._terms: Dict[VariableHandle, float] = {}
        self.constant = constant
        if terms:
            for var, coef in terms.items():
                self.add_term(coef, var)

    def add_term(self, coefficient: float, variable: Optional[VariableHandle]) -> 'LinExpr':
        """Add ``coefficient * variable``; a None variable is treated as fixed to zero."""
        if variable is not None:
            self._terms[variable] = self._terms.get(variable, 0.0) + coefficient
        return self

    def coefficient(self, variable: VariableHandle) -> float:
        return self._terms.get(variable, 0.0)

    def items(self) -> Iterator[Tuple[VariableHandle, float]]:
        return iter(self._terms.items())

    def __len__(self) -> int:
        return len(self._terms)

    def __add__(self, other: Union['LinExpr', float]) -> 'LinExpr':
        result = LinExpr(self._terms, self.constant)
        if isinstance(other, LinExpr):
            for var, coef in other.items():
                result.add_term(coef, var)
            result.constant += other.constant
        else:
            result.constant += float(other)
        return result

    def __iadd__(self, other: Union['LinExpr', float]) -> 'LinExpr':
        if isinstance(other, LinExpr):
            for var, coef in other.items():
                self.add_term(coef, var)
            self.constant += other.constant
        else:
            self.constant += float(other)
        return self

    def __repr__(self) -> str:
        terms = " + ".join(f"{c}*{v.name}" for v, c in self._terms.items())
        return f"LinExpr({terms or '0'}, constant={self.constant})"


def term_sum(terms) -> LinExpr:
    """Sum an iterable of LinExpr into a new expression."""
    result = LinExpr()
    for term in terms:
        result += term
    return result


class LinearRelaxationSolver(ABC):
    """
    Abstract base class for the LP engine behind the restricted master.

    Lifecycle:
    ---------
    1. set_objective(LinExpr(), sense) and add constraints/static variables
    2. add column variables with their constraint coefficients
    3. optimize(), then read primal/dual/objective values
    4. add or remove variables and repeat 3
    """

    def __init__(self):
        self._variables: List[VariableHandle] = []
        self._constraints: List[ConstraintHandle] = []
        self._status = SolutionStatus.NOT_SOLVED

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_variables(self) -> int:
        return len(self._variables)

    @property
    def num_constraints(self) -> int:
        return len(self._constraints)

    @property
    def status(self) -> SolutionStatus:
        """Status of the last optimize() call."""
        return self._status

    # =========================================================================
    # Public API - model building
    # =========================================================================

    def add_variable(
        self,
        lower: float = 0.0,
        upper: float = math.inf,
        objective: float = 0.0,
        coefficients: Optional[Mapping[ConstraintHandle, float]] = None,
        name: str = "",
    ) -> VariableHandle:
        """
        Add a variable, optionally with its column of constraint coefficients.

        Args:
            lower: Lower bound
            upper: Upper bound
            objective: Objective coefficient
            coefficients: Mapping constraint handle -> coefficient
            name: Variable name (for diagnostics)

        Returns:
            Handle of the new variable
        """
        column = []
        for constraint, coefficient in (coefficients or {}).items():
            self._check_alive(constraint)
            if coefficient != 0.0:
                column.append((constraint.index, coefficient))

        handle = VariableHandle(name or f"x{len(self._variables)}", len(self._variables))
        self._add_variable_impl(lower, upper, objective, column)
        self._variables.append(handle)
        return handle

    def add_constraint(
        self,
        expression: Union[LinExpr, Mapping[VariableHandle, float]],
        relation: Relation,
        rhs: float,
        name: str = "",
    ) -> ConstraintHandle:
        """
        Add the constraint ``expression relation rhs``.

        The constant of ``expression`` is moved to the right hand side.
        """
        if not isinstance(expression, LinExpr):
            expression = LinExpr(expression)

        row = []
        for variable, coefficient in expression.items():
            self._check_alive(variable)
            if coefficient != 0.0:
                row.append((variable.index, coefficient))

        bound = rhs - expression.constant
        if relation is Relation.LESS_EQUAL:
            lower, upper = -math.inf, bound
        elif relation is Relation.GREATER_EQUAL:
            lower, upper = bound, math.inf
        else:
            lower, upper = bound, bound

        handle = ConstraintHandle(name or f"r{len(self._constraints)}", len(self._constraints))
        self._add_constraint_impl(lower, upper, row)
        self._constraints.append(handle)
        return handle

    def remove_variable(self, handle: VariableHandle) -> None:
        """Remove a variable from the model."""
        self._check_alive(handle)
        self._remove_variable_impl(handle.index)
        self._detach(handle, self._variables)

    def remove_constraint(self, handle: ConstraintHandle) -> None:
        """Remove a constraint from the model."""
        self._check_alive(handle)
        self._remove_constraint_impl(handle.index)
        self._detach(handle, self._constraints)

    def set_objective(
        self,
        expression: Union[LinExpr, Mapping[VariableHandle, float]],
        sense: ObjectiveSense,
    ) -> None:
        """Replace the objective; variables absent from ``expression`` get cost 0."""
        if not isinstance(expression, LinExpr):
            expression = LinExpr(expression)
        costs = [0.0] * len(self._variables)
        for variable, coefficient in expression.items():
            self._check_alive(variable)
            costs[variable.index] += coefficient
        self._set_objective_impl(costs, expression.constant, sense)

    # =========================================================================
    # Public API - solving
    # =========================================================================

    def optimize(self) -> None:
        """
        Solve the current model.

        Raises:
            SolverError: If the model is not solved to optimality
        """
        self._status = self._optimize_impl()
        if self._status is not SolutionStatus.OPTIMAL:
            raise SolverError(self._status)

    def primal_value(self, handle: VariableHandle) -> float:
        self._check_solved()
        self._check_alive(handle)
        return self._primal_value_impl(handle.index)

    def dual_value(self, handle: ConstraintHandle) -> float:
        self._check_solved()
        self._check_alive(handle)
        return self._dual_value_impl(handle.index)

    def primal_values(self, handles: Iterable[VariableHandle]) -> np.ndarray:
        """Primal values of several variables, in the order given."""
        return self._bulk_read(handles, self._primal_values_impl)

    def dual_values(self, handles: Iterable[ConstraintHandle]) -> np.ndarray:
        """Dual values of several constraints, in the order given."""
        return self._bulk_read(handles, self._dual_values_impl)

    def objective_value(self) -> float:
        self._check_solved()
        return self._objective_value_impl()

    # =========================================================================
    # Abstract Methods (MUST be implemented by subclasses)
    # =========================================================================

    @abstractmethod
    def _add_variable_impl(self, lower: float, upper: float, objective: float,
                           column: List[Tuple[int, float]]) -> None:
        """Append a variable with (row index, coefficient) entries."""

    @abstractmethod
    def _add_constraint_impl(self, lower: float, upper: float,
                             row: List[Tuple[int, float]]) -> None:
        """Append a row lower <= sum(coef * var) <= upper."""

    @abstractmethod
    def _remove_variable_impl(self, index: int) -> None:
        """Delete the variable at ``index``; later variables shift down."""

    @abstractmethod
    def _remove_constraint_impl(self, index: int) -> None:
        """Delete the row at ``index``; later rows shift down."""

    @abstractmethod
    def _set_objective_impl(self, costs: List[float], offset: float, sense: ObjectiveSense) -> None:
        """Set every variable cost, the objective offset and the sense."""

    @abstractmethod
    def _optimize_impl(self) -> SolutionStatus:
        """Run the solver and return its status."""

    @abstractmethod
    def _primal_value_impl(self, index: int) -> float:
        pass

    @abstractmethod
    def _dual_value_impl(self, index: int) -> float:
        pass

    @abstractmethod
    def _objective_value_impl(self) -> float:
        pass

    def _primal_values_impl(self, indices: List[int]) -> np.ndarray:
        return np.array([self._primal_value_impl(i) for i in indices], dtype=np.float64)

    def _dual_values_impl(self, indices: List[int]) -> np.ndarray:
        return np.array([self._dual_value_impl(i) for i in indices], dtype=np.float64)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_alive(self, handle: _Handle) -> None:
        if handle.removed:
            raise ValueError(f"{handle!r} has been removed from the model")

    def _check_solved(self) -> None:
        if self._status is not SolutionStatus.OPTIMAL:
            raise SolverError(self._status, "no optimal solution available")

    def _bulk_read(self, handles, read) -> np.ndarray:
        self._check_solved()
        handles = list(handles)
        for handle in handles:
            self._check_alive(handle)
        return read([handle.index for handle in handles])

    @staticmethod
    def _detach(handle: _Handle, handles: list) -> None:
        position = handle.index
        del handles[position]
        for later in handles[position:]:
            later.index -= 1
        handle.removed = True

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(variables={self.num_variables}, "
            f"constraints={self.num_constraints}, status={self._status.name})"
        )
