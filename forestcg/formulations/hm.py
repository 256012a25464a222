"""
HM relaxation: column generation over capacitated subforests.

A column is a selection of (customer, depot) pairs and (edge, depot)
pairs. The master maximizes the number of selected edges subject to:

    vertex-inclusion-1[i, d]     <= 0   (i included for d)
    vertex-inclusion-2[e, k, d]  <= 0   (endpoint k of e a customer, e included for d)
    weight[d]                    <= capacity of d
    edge-vertex-count             = 0
    lambda-sum                   <= 1

The initial column is the greedy capacitated forest.
"""

import logging
from typing import List, Optional

import numpy as np

from forestcg.core.column import Column, MembershipMask
from forestcg.core.graph import Edge, Graph, VertexKind
from forestcg.heuristics.greedy import greedy_capacitated_forest
from forestcg.master import LinearRelaxationSolver, LinExpr, ObjectiveSense, Relation
from forestcg.pricing import HMDuals, PricingSolution, SubforestPricing
from forestcg.solver import (
    CGConfig,
    ColumnGeneration,
    TerminationCriterion,
    make_handle_array,
    snap_fractions,
)

logger = logging.getLogger(__name__)


class HMRelaxation(ColumnGeneration):
    """
    Subforest and customer-depot assignment relaxation.

    Example:
        >>> relaxation = HMRelaxation(graph)
        >>> result = relaxation.solve()
        >>> utilization = relaxation.customer_utilization()
    """

    def __init__(
        self,
        graph: Graph,
        termination: Optional[TerminationCriterion] = None,
        solver: Optional[LinearRelaxationSolver] = None,
        config: Optional[CGConfig] = None,
    ):
        super().__init__(graph, ObjectiveSense.MAXIMIZE, termination, solver, config)
        self._pricing = SubforestPricing(graph, self._config.pricing_config)

        C, D, E = graph.num_customers, graph.num_depots, graph.num_edges
        self.v_incl1 = make_handle_array((C, D))
        self.v_incl2 = make_handle_array((E, 2, D))
        self.weight = make_handle_array((D,))
        self.ev_count = None
        self.lambda_sum = None

    @property
    def pricing(self) -> SubforestPricing:
        return self._pricing

    # =========================================================================
    # Master problem
    # =========================================================================

    def generate_rows_and_initial_columns(self) -> List[Column]:
        graph = self._graph
        solver = self._solver

        for customer in graph.customers:
            for depot in graph.depots:
                if graph.includes_customer(customer, depot):
                    i, d = customer.customer_id, depot.depot_id
                    self.v_incl1[i, d] = solver.add_constraint(
                        LinExpr(), Relation.LESS_EQUAL, 0.0, f"vertex-inclusion-1_{{{i},{d}}}")

        for edge in graph.edges:
            for k, vertex in enumerate(edge.endpoints):
                if vertex.kind is not VertexKind.CUSTOMER:
                    continue
                for depot in graph.depots:
                    if graph.includes_edge(edge, depot):
                        e, d = edge.edge_id, depot.depot_id
                        self.v_incl2[e, k, d] = solver.add_constraint(
                            LinExpr(), Relation.LESS_EQUAL, 0.0, f"vertex-inclusion-2_{{{e},{k},{d}}}")

        for depot in graph.depots:
            self.weight[depot.depot_id] = solver.add_constraint(
                LinExpr(), Relation.LESS_EQUAL, depot.capacity, f"weight_{{{depot.depot_id}}}")

        self.ev_count = solver.add_constraint(LinExpr(), Relation.EQUAL, 0.0, "edge-vertex-count")
        self.lambda_sum = solver.add_constraint(LinExpr(), Relation.LESS_EQUAL, 1.0, "lambda-sum")

        # column of the greedy solution
        forest = greedy_capacitated_forest(graph)
        column = self._empty_column()
        for i, d in enumerate(forest.customer_depot):
            if d >= 0:
                self._add_customer(column, i, int(d))
        for e, d in enumerate(forest.edge_depot):
            if d >= 0:
                self._add_edge(column, graph.edges[e], int(d))
        column.add_term(1.0, self.lambda_sum)
        logger.debug(
            "%s: %d rows, greedy column with %d customers and %d edges",
            graph.name, solver.num_constraints, column.customers.count(), column.edges.count(),
        )
        return [column]

    def solve_pricing_problem(self) -> List[Column]:
        solution = self._pricing.solve(self.extract_duals())
        self._record_pricing(solution)
        if not solution.has_column:
            return []
        return [self.column_from_pricing(solution)]

    def extract_duals(self) -> HMDuals:
        """Dual values of every constraint family of the master."""
        return HMDuals(
            alpha=self.dual_array(self.v_incl1),
            beta=self.dual_array(self.v_incl2),
            gamma=self.dual_array(self.weight),
            delta=self._solver.dual_value(self.ev_count),
            epsilon=self._solver.dual_value(self.lambda_sum),
        )

    def column_from_pricing(self, solution: PricingSolution) -> Column:
        """Replay a pricing selection into a new column."""
        column = self._empty_column()
        for i, d in solution.customers:
            self._add_customer(column, i, d)
        for e, d in solution.edges:
            self._add_edge(column, self._graph.edges[e], d)
        column.add_term(1.0, self.lambda_sum)
        return column

    # =========================================================================
    # Column coefficients
    # =========================================================================

    def _empty_column(self) -> Column:
        graph = self._graph
        return self.new_column(
            customers=MembershipMask((graph.num_depots, graph.num_customers)),
            edges=MembershipMask((graph.num_depots, graph.num_edges)),
        )

    def _add_customer(self, column: Column, i: int, d: int) -> None:
        customer = self._graph.customers[i]
        column.add_term(1.0, self.v_incl1[i, d])
        for edge in customer.adj:
            column.add_term(-1.0, self.v_incl2[edge.edge_id, edge.endpoint_index(customer), d])
        column.add_term(1.0, self.ev_count)
        column.customers.set(d, i)

    def _add_edge(self, column: Column, edge: Edge, d: int) -> None:
        for k, vertex in enumerate(edge.endpoints):
            if vertex.kind is VertexKind.CUSTOMER:
                column.add_term(-1.0, self.v_incl1[vertex.customer_id, d])
                column.add_term(1.0, self.v_incl2[edge.edge_id, k, d])
        column.add_term(float(edge.weight), self.weight[d])
        column.add_term(-1.0, self.ev_count)
        column.objective += 1.0
        column.edges.set(d, edge.edge_id)

    # =========================================================================
    # Solution read-back
    # =========================================================================

    def customer_utilization(self) -> np.ndarray:
        """Fraction to which each customer is assigned, summed over depots."""
        utilization = np.zeros(self._graph.num_customers)
        for column_id, value in self.column_values().items():
            if value > 0:
                for _, i in self._columns[column_id].customers:
                    utilization[i] += value
        return snap_fractions(utilization)

    def edge_utilization(self) -> np.ndarray:
        """Fraction to which each edge is selected, summed over depots."""
        utilization = np.zeros(self._graph.num_edges)
        for column_id, value in self.column_values().items():
            if value > 0:
                for _, e in self._columns[column_id].edges:
                    utilization[e] += value
        return snap_fractions(utilization)
