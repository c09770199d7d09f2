"""Fuzzy breakout: weighted hill climbing.

Minimises sum(w_c * (1 - degree_c)) by single-variable moves. At a local
minimum the weights of the worst constraints grow by one, reshaping the
landscape until a move becomes profitable again. Improvements of the worst
degree are reported. Without a time limit the search stops after
`max_idle` steps without improvement.
"""

from __future__ import annotations

import random

from cosaf.solver.base import Solver
from cosaf.solver.problem import Problem

WORST_EPSILON = 1e-9


class FuzzyBreakout(Solver):
    name = 'breakout'

    def __init__(self, problem: Problem):
        super().__init__(problem)
        self.randomness = False
        self.rng = random.Random(0)
        self.max_idle = 1000

    def _search(self) -> None:
        problem = self.problem
        assignment = problem.assignment()
        best = problem.worst_satisfaction_degree(assignment)
        if self._report(assignment, best) or not problem.constraints:
            return

        weights = [1.0] * len(problem.constraints)
        index_of = {id(c): k for k, c in enumerate(problem.constraints)}
        idle = 0
        while best < 1.0 and (self.time_limit is not None or idle < self.max_idle):
            self._check_deadline()
            move = self._best_move(assignment, weights, index_of)
            if move is None:
                degrees = [c.satisfaction_degree(assignment) for c in problem.constraints]
                lowest = min(degrees)
                for k, d in enumerate(degrees):
                    if d <= lowest + WORST_EPSILON:
                        weights[k] += 1.0
            else:
                index, value = move
                assignment[index] = value

            current = problem.worst_satisfaction_degree(assignment)
            if current > best:
                best = current
                idle = 0
                if self._report(assignment, best):
                    return
            else:
                idle += 1

    def _best_move(self, assignment: list[int], weights: list[float], index_of: dict[int, int]) -> tuple[int, int] | None:
        """(variable index, value) with the largest weighted gain, or None at a local minimum."""
        problem = self.problem
        indices = sorted(
            {
                v.index
                for c in problem.constraints
                if c.satisfaction_degree(assignment) < 1.0
                for v in (c.x, c.y)
            }
        )
        if self.randomness:
            self.rng.shuffle(indices)

        best_gain = 0.0
        best: tuple[int, int] | None = None
        for index in indices:
            var = problem.variable_at(index)
            cs = problem.constraints_of(var)
            others = [assignment[c.neighbour(var).index] for c in cs]
            now = [c.degree_from(var, assignment[index], o) for c, o in zip(cs, others)]
            for value in range(var.size):
                if value == assignment[index]:
                    continue
                gain = sum(
                    weights[index_of[id(c)]] * (c.degree_from(var, value, o) - d) for c, o, d in zip(cs, others, now)
                )
                if gain > best_gain + WORST_EPSILON:
                    best_gain = gain
                    best = (index, value)
        return best
