"""Spread repair: local search that lifts the worst constraint.

Starts from the variables' current values. Each step takes the worst
constraint not yet marked stuck and moves one of its two variables to the
value that raises that constraint the most, provided no other constraint on
the moved variable falls below the repaired degree (or below its own
degree, if that was already lower). Every accepted move strictly improves
the sorted degree vector, so the search terminates. A constraint that
cannot be repaired is marked stuck until the next successful repair.
"""

from __future__ import annotations

import random

from cosaf.solver.base import Solver
from cosaf.solver.problem import Constraint, Problem


class SpreadRepair(Solver):
    name = 'srs3'

    def __init__(self, problem: Problem):
        super().__init__(problem)
        self.randomness = False
        self.rng = random.Random(0)

    def _search(self) -> None:
        assignment = self.problem.assignment()
        worst = self.problem.worst_satisfaction_degree(assignment)
        if self._report(assignment, worst):
            return

        stuck: set[int] = set()
        while True:
            self._check_deadline()
            open_ = [k for k in range(len(self.problem.constraints)) if k not in stuck]
            if not open_:
                return
            if self.randomness:
                self.rng.shuffle(open_)
            k = min(open_, key=lambda k: self.problem.constraints[k].satisfaction_degree(assignment))
            if not self._repair(self.problem.constraints[k], assignment):
                stuck.add(k)
                continue

            stuck.clear()
            current = self.problem.worst_satisfaction_degree(assignment)
            if current > worst:
                worst = current
                if self._report(assignment, worst):
                    return

    def _repair(self, c: Constraint, assignment: list[int]) -> bool:
        before = c.satisfaction_degree(assignment)
        best: tuple[float, int, int] | None = None

        for var in (c.x, c.y):
            values = list(range(var.size))
            if self.randomness:
                self.rng.shuffle(values)
            other_value = assignment[c.neighbour(var).index]
            for value in values:
                if value == assignment[var.index]:
                    continue
                d = c.degree_from(var, value, other_value)
                if d <= before or (best is not None and d <= best[0]):
                    continue
                if self._keeps_others(c, var.index, value, d, assignment):
                    best = (d, var.index, value)

        if best is None:
            return False
        _, index, value = best
        assignment[index] = value
        return True

    def _keeps_others(self, repaired: Constraint, index: int, value: int, floor: float, assignment: list[int]) -> bool:
        var = self.problem.variable_at(index)
        for c in self.problem.constraints_of(var):
            if c is repaired:
                continue
            other_value = assignment[c.neighbour(var).index]
            now = c.degree_from(var, assignment[index], other_value)
            if c.degree_from(var, value, other_value) < min(floor, now):
                return False
        return True
