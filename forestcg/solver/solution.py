"""
Column generation solution module.

This module defines the data structures for representing the results
of the column generation engine.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional


class CGStatus(Enum):
    """
    Status of the column generation run.
    """
    OPTIMAL = auto()           # Pricing found no improving column
    TERMINATED = auto()        # Termination predicate stopped the run
    ITERATION_LIMIT = auto()   # Iteration limit reached
    NOT_SOLVED = auto()        # Not yet solved


class PhaseTimer:
    """
    Profile-interval timer.

    Time is charged to the phase opened by the last profile(name) call
    until the next call; profile(None) closes the current interval.

    Example:
        >>> timer = PhaseTimer()
        >>> timer.profile("init")
        >>> timer.profile("optimize")
        >>> timer.profile(None)
        >>> sorted(timer.times)
        ['init', 'optimize']
    """

    def __init__(self):
        self.times: Dict[str, float] = {}
        self._current: Optional[str] = None
        self._start = time.perf_counter()

    def profile(self, name: Optional[str]) -> None:
        now = time.perf_counter()
        if self._current is not None:
            self.times[self._current] = self.times.get(self._current, 0.0) + (now - self._start)
        self._current = name
        self._start = now

    @property
    def current(self) -> Optional[str]:
        return self._current

    def total(self) -> float:
        return sum(self.times.values())


@dataclass
class CGIteration:
    """
    Information about a single column generation iteration.

    Attributes:
        iteration: Iteration number (1-based)
        num_columns: Columns in the master when it was optimized
        objective: Master objective value
        pricing_gap: -lambda_sum_dual - total_score of the pricing round
        columns_added: Number of columns added after pricing
    """
    iteration: int
    num_columns: int
    objective: float
    pricing_gap: Optional[float] = None
    columns_added: int = 0


@dataclass
class CGResult:
    """
    Result of the column generation engine.

    Attributes:
        objective_value: Final objective value of the restricted master
        phase_times: Seconds spent per phase ("init", "optimize", "pricing")
        status: Why the engine stopped
        iterations: Number of master optimizations
        num_columns: Columns in the master at termination
        history: One record per iteration

    Example:
        >>> result = relaxation.solve()
        >>> str(result)
        'obj 2 init 0.0 optimize 0.0 pricing 0.0'
    """
    objective_value: float
    phase_times: Dict[str, float] = field(default_factory=dict)
    status: CGStatus = CGStatus.NOT_SOLVED
    iterations: int = 0
    num_columns: int = 0
    history: List[CGIteration] = field(default_factory=list)

    @property
    def is_optimal(self) -> bool:
        return self.status is CGStatus.OPTIMAL

    @property
    def total_time(self) -> float:
        return sum(self.phase_times.values())

    def get_convergence_history(self) -> List[float]:
        """Objective values over iterations."""
        return [it.objective for it in self.history]

    def summary(self) -> str:
        """
        Return a human-readable summary.

        Returns:
            Summary string
        """
        lines = [
            "Column Generation Result:",
            f"  Status: {self.status.name}",
            f"  Objective: {self.objective_value:.6f}",
            "",
            f"  Iterations: {self.iterations}",
            f"  Columns: {self.num_columns}",
            "",
            f"  Total time: {self.total_time:.3f}s",
        ]
        total = max(self.total_time, 1e-6)
        for name, seconds in self.phase_times.items():
            lines.append(f"  {name.capitalize()} time: {seconds:.3f}s ({100 * seconds / total:.1f}%)")
        return "\n".join(lines)

    def __str__(self) -> str:
        times = " ".join(f"{name} {seconds:.1f}" for name, seconds in self.phase_times.items())
        return f"obj {int(self.objective_value)} {times}".rstrip()

    def __repr__(self) -> str:
        return f"CGResult({self.status.name}, obj={self.objective_value:.4f}, iter={self.iterations})"
