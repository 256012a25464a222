"""
TM relaxation: column generation over spanning trees.

The graph is augmented with a super-root depot (the last vertex and the
last depot) joined to every customer by a weight-0 edge. Exclusions of the
original graph are copied; the super-root excludes nothing.

Static variables:

    x[e, d] in [0, inf)   edge e labeled with depot d (objective 1, or 0
                          for the super-root), if e is included for d
    y[v, d] in [0, 1]     vertex v labeled with depot d, if v is not a
                          customer or is included for d

Constraints (a column t has coefficient 1 on each label row of its edges,
-1 on edge-label-upper-bound of its edges and 1 on lambda-sum):

    vertex-edge-label-1[e, k, d]:  -x[e, d] + y[v_k, d] + ...  <= 1
    vertex-edge-label-2[e, k, d]:   x[e, d] - y[v_k, d] + ...  <= 1
    edge-label-upper-bound[e]:      sum_d x[e, d] - ...         = 0
    depot-inclusion[d', d]:         y[d', d]                    = [d' == d]
    weight[d]:                      sum_e w_e x[e, d]          <= capacity (not for the super-root)
    lambda-sum:                                                 = 1

The initial column is the star of super-root edges.
"""

import logging
from typing import List, Optional

import numpy as np

from forestcg.core.column import Column, MembershipMask
from forestcg.core.graph import Depot, Edge, Graph, VertexKind
from forestcg.master import LinearRelaxationSolver, LinExpr, ObjectiveSense, Relation, term_sum
from forestcg.pricing import PricingSolution, SpanningTreePricing, TMDuals
from forestcg.solver import (
    CGConfig,
    ColumnGeneration,
    TerminationCriterion,
    make_handle_array,
    snap_fractions,
)

logger = logging.getLogger(__name__)


def augment_with_super_root(graph: Graph) -> Graph:
    """
    Copy ``graph`` and add a super-root depot joined to every customer.

    Vertex, depot, customer, edge and arc ids of ``graph`` are kept; the
    super-root is the last vertex and the last depot and has capacity 0.
    """
    builder = graph.to_builder()
    root = builder.add_vertex(capacity=0.0)
    for vertex in list(builder.vertices):
        if not vertex.is_depot:
            builder.add_edge(root, vertex, 0)
    augmented = builder.finalize()

    for depot in graph.depots:
        for arc in graph.arcs:
            if not graph.includes_arc(arc, depot):
                augmented.exclude_arc(augmented.arcs[arc.arc_id], augmented.depots[depot.depot_id])
        for customer in graph.customers:
            if not graph.includes_customer(customer, depot):
                augmented.exclude_customer(
                    augmented.customers[customer.customer_id], augmented.depots[depot.depot_id])
    logger.debug("augmented %s: %d vertices, %d edges", graph.name, augmented.num_vertices, augmented.num_edges)
    return augmented


class TMRelaxation(ColumnGeneration):
    """
    Spanning tree relaxation.

    Example:
        >>> relaxation = TMRelaxation(graph)
        >>> relaxation.solve().objective_value
        2.0
    """

    def __init__(
        self,
        graph: Graph,
        termination: Optional[TerminationCriterion] = None,
        solver: Optional[LinearRelaxationSolver] = None,
        config: Optional[CGConfig] = None,
    ):
        super().__init__(graph, ObjectiveSense.MAXIMIZE, termination, solver, config)
        self.tgraph = augment_with_super_root(graph)
        self.root: Depot = self.tgraph.depots[-1]
        if self.root is not self.tgraph.vertices[-1]:
            raise RuntimeError("super-root must be the last vertex of the augmented graph")
        self._pricing = SpanningTreePricing(self.tgraph, self._config.pricing_config)

        V, D, E = self.tgraph.num_vertices, self.tgraph.num_depots, self.tgraph.num_edges
        self.x = make_handle_array((E, D))
        self.y = make_handle_array((V, D))
        self.vel1 = make_handle_array((E, 2, D))
        self.vel2 = make_handle_array((E, 2, D))
        self.elub = make_handle_array((E,))
        self.depot_inclusion = make_handle_array((D, D))
        self.weight = make_handle_array((D,))
        self.lambda_sum = None

    @property
    def pricing(self) -> SpanningTreePricing:
        return self._pricing

    # =========================================================================
    # Master problem
    # =========================================================================

    def generate_rows_and_initial_columns(self) -> List[Column]:
        tgraph = self.tgraph
        solver = self._solver
        root_id = self.root.depot_id

        for edge in tgraph.edges:
            for depot in tgraph.depots:
                if tgraph.includes_edge(edge, depot):
                    e, d = edge.edge_id, depot.depot_id
                    objective = 0.0 if d == root_id else 1.0
                    self.x[e, d] = solver.add_variable(0.0, np.inf, objective, name=f"x_{{{e}}}^{{{d}}}")

        for vertex in tgraph.vertices:
            for depot in tgraph.depots:
                if vertex.kind is not VertexKind.CUSTOMER or tgraph.includes_customer(vertex, depot):
                    v, d = vertex.vertex_id, depot.depot_id
                    self.y[v, d] = solver.add_variable(0.0, 1.0, 0.0, name=f"y_{{{v}}}^{{{d}}}")

        for edge in tgraph.edges:
            e = edge.edge_id
            for k, vertex in enumerate(edge.endpoints):
                for depot in tgraph.depots:
                    d = depot.depot_id
                    if vertex.kind is not VertexKind.CUSTOMER or tgraph.includes_customer(vertex, depot):
                        expr = LinExpr().add_term(-1.0, self.x[e, d]).add_term(1.0, self.y[vertex.vertex_id, d])
                        self.vel1[e, k, d] = solver.add_constraint(
                            expr, Relation.LESS_EQUAL, 1.0, f"vertex-edge-label-1_{{{e},{k},{d}}}")

        for edge in tgraph.edges:
            e = edge.edge_id
            for k, vertex in enumerate(edge.endpoints):
                for depot in tgraph.depots:
                    d = depot.depot_id
                    if tgraph.includes_edge(edge, depot):
                        expr = LinExpr().add_term(1.0, self.x[e, d]).add_term(-1.0, self.y[vertex.vertex_id, d])
                        self.vel2[e, k, d] = solver.add_constraint(
                            expr, Relation.LESS_EQUAL, 1.0, f"vertex-edge-label-2_{{{e},{k},{d}}}")

        for edge in tgraph.edges:
            e = edge.edge_id
            expr = term_sum(LinExpr().add_term(1.0, self.x[e, d]) for d in range(tgraph.num_depots))
            self.elub[e] = solver.add_constraint(expr, Relation.EQUAL, 0.0, f"edge-label-upper-bound_{{{e}}}")

        for other in tgraph.depots:
            for depot in tgraph.depots:
                dp, d = other.depot_id, depot.depot_id
                expr = LinExpr().add_term(1.0, self.y[other.vertex_id, d])
                self.depot_inclusion[dp, d] = solver.add_constraint(
                    expr, Relation.EQUAL, 1.0 if dp == d else 0.0,
                    f"depot-inclusion_{{{other.vertex_id},{d}}}")

        for depot in tgraph.depots:
            d = depot.depot_id
            if d == root_id:
                continue
            expr = term_sum(
                LinExpr().add_term(float(edge.weight), self.x[edge.edge_id, d]) for edge in tgraph.edges
            )
            self.weight[d] = solver.add_constraint(expr, Relation.LESS_EQUAL, depot.capacity, f"weight_{{{d}}}")

        self.lambda_sum = solver.add_constraint(LinExpr(), Relation.EQUAL, 1.0, "lambda-sum")

        # tree of all super-root edges
        column = self._empty_column()
        for edge in self.root.adj:
            self._add_edge(column, edge)
        column.add_term(1.0, self.lambda_sum)
        return [column]

    def solve_pricing_problem(self) -> List[Column]:
        solution = self._pricing.solve(self.extract_duals())
        self._record_pricing(solution)
        if not solution.has_column:
            return []
        return [self.column_from_pricing(solution)]

    def extract_duals(self) -> TMDuals:
        """Dual values of every constraint family the pricing problem uses."""
        return TMDuals(
            alpha=self.dual_array(self.vel1),
            beta=self.dual_array(self.vel2),
            gamma=self.dual_array(self.elub),
            zeta=self._solver.dual_value(self.lambda_sum),
        )

    def column_from_pricing(self, solution: PricingSolution) -> Column:
        """Replay a spanning tree into a new column."""
        column = self._empty_column()
        for e, _ in solution.edges:
            self._add_edge(column, self.tgraph.edges[e])
        column.add_term(1.0, self.lambda_sum)
        return column

    # =========================================================================
    # Column coefficients
    # =========================================================================

    def _empty_column(self) -> Column:
        return self.new_column(edges=MembershipMask((self.tgraph.num_edges,)))

    def _add_edge(self, column: Column, edge: Edge) -> None:
        e = edge.edge_id
        for d in range(self.tgraph.num_depots):
            for k in range(2):
                column.add_term(1.0, self.vel1[e, k, d])
                column.add_term(1.0, self.vel2[e, k, d])
        column.add_term(-1.0, self.elub[e])
        column.edges.set(e)

    # =========================================================================
    # Solution read-back
    # =========================================================================

    def tree_superposition(self) -> np.ndarray:
        """Sum of column values per edge of the augmented graph."""
        superposition = np.zeros(self.tgraph.num_edges)
        for column_id, value in self.column_values().items():
            for (e,) in self._columns[column_id].edges:
                superposition[e] += value
        return snap_fractions(superposition)

    def customer_utilization(self) -> np.ndarray:
        """min(1, sum over real depots of y[i, d]) per customer."""
        y = np.nan_to_num(self.primal_array(self.y))[:, :self._graph.num_depots]
        utilization = np.zeros(self._graph.num_customers)
        for customer in self.tgraph.customers:
            utilization[customer.customer_id] = min(y[customer.vertex_id].sum(), 1.0)
        return snap_fractions(utilization)

    def edge_utilization(self) -> np.ndarray:
        """Sum over real depots of x[e, d] per edge of the original graph."""
        x = np.nan_to_num(self.primal_array(self.x))
        return snap_fractions(x[:self._graph.num_edges, :self._graph.num_depots].sum(axis=1))
