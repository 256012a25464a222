"""
Solver module - the column generation engine.

This module provides:
- ColumnGeneration: Abstract engine driving master and pricing
- CGState: Engine states
- CGConfig: Engine configuration
- CGResult, CGIteration, CGStatus: Results and iteration history
- PhaseTimer: Per-phase time accounting
"""

from forestcg.solver.solution import CGIteration, CGResult, CGStatus, PhaseTimer
from forestcg.solver.column_generation import (
    CGConfig,
    CGState,
    ColumnGeneration,
    TerminationCriterion,
    make_handle_array,
    never_terminate,
    snap_fractions,
)

__all__ = [
    'ColumnGeneration',
    'CGState',
    'CGConfig',
    'CGResult',
    'CGIteration',
    'CGStatus',
    'PhaseTimer',
    'TerminationCriterion',
    'make_handle_array',
    'never_terminate',
    'snap_fractions',
]
