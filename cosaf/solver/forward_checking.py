"""Fuzzy forward checking.

Repeated depth-first search. Each pass looks for a complete assignment
whose every constraint degree reaches a threshold, pruning neighbour
domains as variables are assigned. The first pass uses threshold 0; after
each solution the threshold becomes its worst degree plus `increment`, so
every reported solution is strictly better than the last. The search ends
when a pass fails, the threshold passes 1, or the solve is stopped.
"""

from __future__ import annotations

from cosaf.solver.base import Solver
from cosaf.solver.problem import Problem

Domains = list[list[int]]


class ForwardChecking(Solver):
    name = 'fc'

    def __init__(self, problem: Problem):
        super().__init__(problem)
        self.increment = 0.05
        self.use_mrv = True  # minimum-remaining-values variable ordering

    def _search(self) -> None:
        threshold = 0.0
        while threshold <= 1.0:
            solution = self._branch(threshold)
            if solution is None:
                return
            worst = self.problem.worst_satisfaction_degree(solution)
            if self._report(solution, worst):
                return
            threshold = worst + self.increment

    def _branch(self, threshold: float) -> list[int] | None:
        domains = [list(range(v.size)) for v in self.problem.variables]
        assignment: list[int | None] = [None] * len(domains)
        return self._extend(assignment, domains, threshold)

    def _select(self, assignment: list[int | None], domains: Domains) -> int | None:
        free = [i for i, a in enumerate(assignment) if a is None]
        if not free:
            return None
        if self.use_mrv:
            return min(free, key=lambda i: len(domains[i]))
        return free[0]

    def _extend(self, assignment: list[int | None], domains: Domains, threshold: float) -> list[int] | None:
        self._check_deadline()
        index = self._select(assignment, domains)
        if index is None:
            return list(assignment)

        for value in domains[index]:
            assignment[index] = value
            pruned = self._prune(index, value, assignment, domains, threshold)
            if pruned is not None:
                result = self._extend(assignment, pruned, threshold)
                if result is not None:
                    return result
        assignment[index] = None
        return None

    def _prune(
        self, index: int, value: int, assignment: list[int | None], domains: Domains, threshold: float
    ) -> Domains | None:
        """Neighbour domains consistent with `index` = `value`, or None on a wipe-out."""
        var = self.problem.variable_at(index)
        pruned = list(domains)
        pruned[index] = [value]
        for c in self.problem.constraints_of(var):
            other = c.neighbour(var)
            other_value = assignment[other.index]
            if other_value is not None:
                if c.degree_from(var, value, other_value) < threshold:
                    return None
                continue
            kept = [w for w in pruned[other.index] if c.degree_from(var, value, w) >= threshold]
            if not kept:
                return None
            pruned[other.index] = kept
        return pruned
