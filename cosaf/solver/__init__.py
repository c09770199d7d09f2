"""Fuzzy constraint solving.

A Problem holds bounded integer variables (candidate indices) and binary
constraints whose relations return a degree in [0, 1]. Solvers search for
assignments that raise the worst constraint degree and report every
improvement to their listeners.
"""

from cosaf.core.types import SolverType
from cosaf.solver.base import SolutionListener, Solver
from cosaf.solver.breakout import FuzzyBreakout
from cosaf.solver.forward_checking import ForwardChecking
from cosaf.solver.problem import Constraint, Problem, Variable
from cosaf.solver.spread_repair import SpreadRepair

_SOLVERS: dict[SolverType, type[Solver]] = {
    SolverType.FC: ForwardChecking,
    SolverType.SRS3: SpreadRepair,
    SolverType.FUZZY_BREAKOUT: FuzzyBreakout,
}


def create_solver(
    problem: Problem,
    solver_type: SolverType = SolverType.FC,
    *,
    time_limit: int | None = None,
    target_rate: float | None = None,
) -> Solver:
    """Solver for `solver_type`, configured the way the adjuster runs it."""
    solver = _SOLVERS[solver_type](problem)
    solver.time_limit = time_limit
    solver.target_rate = target_rate
    return solver


__all__ = [
    'Constraint',
    'ForwardChecking',
    'FuzzyBreakout',
    'Problem',
    'SolutionListener',
    'Solver',
    'SpreadRepair',
    'Variable',
    'create_solver',
]
