"""
forestcg: Column generation for capacitated multi-depot spanning forests

Solves the HM (subforest) and TM (spanning tree) linear relaxations of
capacitated multi-depot forest problems by column generation, with HiGHS
as the LP engine behind the restricted master.
"""

__version__ = "0.1.0"

# Configuration
from forestcg.config import config, configure_logging, get_data_path, set_data_path

# Core classes - these are the main user-facing API
from forestcg.core import (
    Arc,
    Column,
    Customer,
    Depot,
    Edge,
    Graph,
    GraphBuilder,
    MembershipMask,
    UnionFind,
    Vertex,
    VertexKind,
)

# Linear relaxation solver
from forestcg.master import (
    HIGHS_AVAILABLE,
    HiGHSSolver,
    LinearRelaxationSolver,
    SolutionStatus,
    SolverError,
)

# Pricing problem
from forestcg.pricing import (
    HMDuals,
    PricingConfig,
    PricingProblem,
    PricingSolution,
    PricingStatus,
    SpanningTreePricing,
    SubforestPricing,
    TMDuals,
)

# Column generation engine and formulations
from forestcg.solver import CGConfig, CGIteration, CGResult, CGState, CGStatus, ColumnGeneration
from forestcg.formulations import HMRelaxation, TMRelaxation

# Heuristics and preprocessing
from forestcg.heuristics import greedy_capacitated_forest, prim_dijkstra_mst, two_step_heuristic
from forestcg.preprocessing import assign_depots, exclude_dijkstra, exclude_triangle, geometry_based_cut

__all__ = [
    # Version
    "__version__",
    # Configuration
    "config",
    "configure_logging",
    "get_data_path",
    "set_data_path",
    # Core classes
    "VertexKind",
    "Vertex",
    "Depot",
    "Customer",
    "Edge",
    "Arc",
    "Graph",
    "GraphBuilder",
    "UnionFind",
    "Column",
    "MembershipMask",
    # Linear relaxation solver
    "LinearRelaxationSolver",
    "HiGHSSolver",
    "HIGHS_AVAILABLE",
    "SolutionStatus",
    "SolverError",
    # Pricing problem
    "PricingProblem",
    "PricingConfig",
    "PricingSolution",
    "PricingStatus",
    "SubforestPricing",
    "SpanningTreePricing",
    "HMDuals",
    "TMDuals",
    # Column generation
    "ColumnGeneration",
    "CGConfig",
    "CGState",
    "CGIteration",
    "CGResult",
    "CGStatus",
    "HMRelaxation",
    "TMRelaxation",
    # Heuristics and preprocessing
    "greedy_capacitated_forest",
    "two_step_heuristic",
    "prim_dijkstra_mst",
    "exclude_dijkstra",
    "exclude_triangle",
    "geometry_based_cut",
    "assign_depots",
]
