"""
Tests for the master module.

This module tests:
- LinExpr and term_sum
- LinearRelaxationSolver bookkeeping (via HiGHSSolver)
- HiGHSSolver solves, duals and column removal
- SolverError on non-optimal models
"""

import math

import pytest

from forestcg.master import (
    HIGHS_AVAILABLE,
    HiGHSSolver,
    LinExpr,
    ObjectiveSense,
    Relation,
    SolutionStatus,
    SolverError,
    term_sum,
)
from forestcg.master.base import VariableHandle


# =============================================================================
# Test Fixtures
# =============================================================================

def create_two_row_lp(sense: ObjectiveSense):
    """
    x + y subject to x + 2y <op> 4 and 3x + y <op> 6, x, y >= 0.

    Both senses have the vertex (1.6, 1.2) with objective 2.8 as optimum.
    """
    relation = Relation.LESS_EQUAL if sense is ObjectiveSense.MAXIMIZE else Relation.GREATER_EQUAL
    solver = HiGHSSolver()
    x = solver.add_variable(0.0, math.inf, name="x")
    y = solver.add_variable(0.0, math.inf, name="y")
    r1 = solver.add_constraint(LinExpr({x: 1.0, y: 2.0}), relation, 4.0, "r1")
    r2 = solver.add_constraint(LinExpr({x: 3.0, y: 1.0}), relation, 6.0, "r2")
    solver.set_objective(LinExpr({x: 1.0, y: 1.0}), sense)
    return solver, (x, y), (r1, r2)


class SolutionCounter:
    """Forwards to a highspy.Highs and counts getSolution() calls."""

    def __init__(self, highs):
        self._highs = highs
        self.calls = 0

    def getSolution(self):
        self.calls += 1
        return self._highs.getSolution()

    def __getattr__(self, name):
        return getattr(self._highs, name)


# =============================================================================
# Test LinExpr
# =============================================================================

class TestLinExpr:

    def test_terms_accumulate(self):
        x = VariableHandle("x", 0)
        expr = LinExpr().add_term(1.0, x).add_term(2.0, x)
        assert expr.coefficient(x) == 3.0
        assert len(expr) == 1

    def test_missing_variable_ignored(self):
        expr = LinExpr().add_term(1.0, None)
        assert len(expr) == 0

    def test_addition(self):
        x, y = VariableHandle("x", 0), VariableHandle("y", 1)
        expr = LinExpr({x: 1.0}, constant=2.0) + LinExpr({x: 1.0, y: -1.0})
        assert expr.coefficient(x) == 2.0
        assert expr.coefficient(y) == -1.0
        assert expr.constant == 2.0

        expr += 1.5
        assert expr.constant == 3.5

    def test_term_sum(self):
        x, y = VariableHandle("x", 0), VariableHandle("y", 1)
        expr = term_sum(LinExpr().add_term(1.0, v) for v in (x, y, None))
        assert dict(expr.items()) == {x: 1.0, y: 1.0}


# =============================================================================
# Test HiGHSSolver
# =============================================================================

@pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
class TestHiGHSSolver:
    """Tests for HiGHSSolver."""

    def test_creation(self):
        solver = HiGHSSolver(time_limit=10.0)
        assert solver.num_variables == 0
        assert solver.num_constraints == 0
        assert solver.status is SolutionStatus.NOT_SOLVED
        assert solver.time_limit == 10.0

    def test_maximize(self):
        solver, (x, y), _ = create_two_row_lp(ObjectiveSense.MAXIMIZE)
        solver.optimize()

        assert solver.status is SolutionStatus.OPTIMAL
        assert solver.objective_value() == pytest.approx(2.8)
        assert solver.primal_value(x) == pytest.approx(1.6)
        assert solver.primal_value(y) == pytest.approx(1.2)

    def test_minimize_duals(self):
        """Duals satisfy reduced_cost = c - A^T y."""
        solver, _, (r1, r2) = create_two_row_lp(ObjectiveSense.MINIMIZE)
        solver.optimize()

        assert solver.objective_value() == pytest.approx(2.8)
        assert solver.dual_value(r1) == pytest.approx(0.4)
        assert solver.dual_value(r2) == pytest.approx(0.2)
        assert list(solver.dual_values([r2, r1])) == pytest.approx([0.2, 0.4])

    def test_add_variable_with_column(self):
        """A column added after the rows enters with its coefficients."""
        solver, _, (r1, r2) = create_two_row_lp(ObjectiveSense.MAXIMIZE)
        z = solver.add_variable(0.0, 1.0, 5.0, {r1: 1.0, r2: 1.0}, name="z")
        solver.optimize()

        assert solver.primal_value(z) == pytest.approx(1.0)
        assert solver.objective_value() > 2.8

    def test_constraint_constant_moves_to_rhs(self):
        solver = HiGHSSolver()
        x = solver.add_variable(0.0, math.inf, name="x")
        solver.add_constraint(LinExpr({x: 1.0}, constant=1.0), Relation.LESS_EQUAL, 4.0)
        solver.set_objective(LinExpr({x: 1.0}), ObjectiveSense.MAXIMIZE)
        solver.optimize()
        assert solver.objective_value() == pytest.approx(3.0)

    def test_remove_variable_shifts_indices(self):
        solver = HiGHSSolver()
        x = solver.add_variable(0.0, 1.0, name="x")
        y = solver.add_variable(0.0, 1.0, name="y")
        z = solver.add_variable(0.0, 1.0, name="z")
        solver.add_constraint(LinExpr({x: 1.0, y: 1.0, z: 1.0}), Relation.LESS_EQUAL, 2.0)
        solver.set_objective(LinExpr({x: 1.0, y: 3.0, z: 2.0}), ObjectiveSense.MAXIMIZE)

        solver.remove_variable(y)
        assert solver.num_variables == 2
        assert z.index == 1
        assert y.removed

        solver.optimize()
        assert solver.objective_value() == pytest.approx(3.0)
        assert solver.primal_value(z) == pytest.approx(1.0)

        with pytest.raises(ValueError, match="removed"):
            solver.remove_variable(y)

    def test_remove_constraint(self):
        solver, (x, y), (r1, r2) = create_two_row_lp(ObjectiveSense.MAXIMIZE)
        solver.add_constraint(LinExpr({x: 1.0, y: 1.0}), Relation.LESS_EQUAL, 1.0, "r3")
        solver.remove_constraint(r1)
        assert solver.num_constraints == 2
        assert r2.index == 0

        solver.optimize()
        assert solver.objective_value() == pytest.approx(1.0)

    def test_values_before_solve(self):
        solver = HiGHSSolver()
        with pytest.raises(SolverError):
            solver.objective_value()

    def test_infeasible(self):
        solver = HiGHSSolver()
        x = solver.add_variable(0.0, math.inf, name="x")
        solver.add_constraint(LinExpr({x: 1.0}), Relation.LESS_EQUAL, -1.0)
        solver.set_objective(LinExpr({x: 1.0}), ObjectiveSense.MAXIMIZE)

        with pytest.raises(SolverError) as info:
            solver.optimize()
        assert info.value.status in (SolutionStatus.INFEASIBLE, SolutionStatus.INF_OR_UNBOUNDED)
        with pytest.raises(SolverError):
            solver.primal_value(x)

    def test_repr(self):
        solver = HiGHSSolver()
        solver.add_variable()
        assert "variables=1" in repr(solver)

    def test_bulk_reads_copy_solution_once(self):
        solver, (x, y), (r1, r2) = create_two_row_lp(ObjectiveSense.MINIMIZE)
        solver.optimize()
        counter = SolutionCounter(solver._highs)
        solver._highs = counter

        assert list(solver.primal_values([y, x])) == pytest.approx([1.2, 1.6])
        assert list(solver.dual_values([r1, r2, r1])) == pytest.approx([0.4, 0.2, 0.4])
        assert counter.calls == 2
        assert solver.dual_values([]).shape == (0,)

    def test_bulk_read_rejects_removed_handle(self):
        solver, (x, y), (r1, r2) = create_two_row_lp(ObjectiveSense.MAXIMIZE)
        solver.add_constraint(LinExpr({x: 1.0, y: 1.0}), Relation.LESS_EQUAL, 1.0, "r3")
        solver.remove_constraint(r1)
        solver.optimize()

        with pytest.raises(ValueError, match="removed"):
            solver.dual_values([r2, r1])

    def test_bulk_read_before_solve(self):
        solver, (x, y), _ = create_two_row_lp(ObjectiveSense.MAXIMIZE)
        with pytest.raises(SolverError):
            solver.primal_values([x, y])

