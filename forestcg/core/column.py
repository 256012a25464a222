"""
Column module - one variable of the restricted master problem.

In the HM relaxation a column is a capacitated subforest (a selection of
(customer, depot) and (edge, depot) pairs); in the TM relaxation it is a
spanning tree of the augmented graph (a selection of edges).

This module provides:
- MembershipMask: Fixed-size boolean bit vector with set/test/iterate
- Column: Objective coefficient, constraint coefficients and membership

Column Lifecycle:
----------------
1. Created by a relaxation with the next sequential id
2. Coefficients accumulated with add_term() while the selection is replayed
3. attach() adds the variable to the LP; the coefficient map is then frozen
4. Primal values are read back through the variable handle
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Tuple

import numpy as np

from forestcg.master.base import ConstraintHandle, VariableHandle

if TYPE_CHECKING:
    from forestcg.master.base import LinearRelaxationSolver


class MembershipMask:
    """
    Boolean bit vector of fixed shape.

    HM columns use shape (num_depots, num_customers) for customers and
    (num_depots, num_edges) for edges; TM columns use (num_edges,).

    Example:
        >>> mask = MembershipMask((2, 3))
        >>> mask.set(1, 2)
        >>> mask.test(1, 2), mask.test(0, 2)
        (True, False)
        >>> list(mask)
        [(1, 2)]
    """

    def __init__(self, shape: Tuple[int, ...]):
        self._bits = np.zeros(shape, dtype=bool)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._bits.shape

    def set(self, *index: int) -> None:
        self._bits[index] = True

    def test(self, *index: int) -> bool:
        return bool(self._bits[index])

    def count(self) -> int:
        return int(self._bits.sum())

    def __iter__(self) -> Iterator[Tuple[int, ...]]:
        for index in np.argwhere(self._bits):
            yield tuple(int(i) for i in index)

    def __len__(self) -> int:
        return self.count()

    def to_array(self) -> np.ndarray:
        """A copy of the bits."""
        return self._bits.copy()

    def __repr__(self) -> str:
        return f"MembershipMask(shape={self.shape}, set={self.count()})"


@dataclass(eq=False)
class Column:
    """
    A column of the restricted master problem.

    Attributes:
        column_id: Sequential identifier assigned by the engine
        objective: Objective coefficient
        customers: (depot, customer) membership bits, HM only
        edges: (depot, edge) bits for HM, edge bits for TM
        lower: Lower bound of the variable
        upper: Upper bound of the variable
        coefficients: Constraint handle -> accumulated coefficient
        variable: Handle of the LP variable once attached
    """
    column_id: int
    objective: float = 0.0
    customers: Optional[MembershipMask] = None
    edges: Optional[MembershipMask] = None
    lower: float = 0.0
    upper: float = math.inf
    coefficients: Dict[ConstraintHandle, float] = field(default_factory=dict)
    variable: Optional[VariableHandle] = None

    def add_term(self, coefficient: float, constraint: Optional[ConstraintHandle]) -> None:
        """
        Add ``coefficient`` to the entry of ``constraint``.

        A column may reach the same constraint through several edges, so
        entries are summed. None stands for a constraint that does not exist
        and is ignored.

        Raises:
            RuntimeError: If the column is already attached to a solver
        """
        if self.variable is not None:
            raise RuntimeError(f"column {self.column_id} is already attached")
        if constraint is None:
            return
        self.coefficients[constraint] = self.coefficients.get(constraint, 0.0) + coefficient

    def coefficient(self, constraint: ConstraintHandle) -> float:
        return self.coefficients.get(constraint, 0.0)

    @property
    def is_attached(self) -> bool:
        return self.variable is not None

    def attach(self, solver: 'LinearRelaxationSolver') -> VariableHandle:
        """Add this column as a variable of ``solver``."""
        if self.variable is not None:
            raise RuntimeError(f"column {self.column_id} is already attached")
        self.variable = solver.add_variable(
            self.lower, self.upper, self.objective, self.coefficients, name=f"lambda{self.column_id}"
        )
        return self.variable

    def detach(self, solver: 'LinearRelaxationSolver') -> None:
        """Remove the variable of this column from ``solver``."""
        if self.variable is not None:
            solver.remove_variable(self.variable)
            self.variable = None

    def __repr__(self) -> str:
        return (
            f"Column(id={self.column_id}, obj={self.objective}, "
            f"nnz={len(self.coefficients)}, attached={self.is_attached})"
        )
