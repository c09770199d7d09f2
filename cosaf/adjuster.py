"""Adjuster: builds the constraint problem for a scheme and drives a solver.

    IDLE -> PROBLEM_BUILT -> SOLVING -> SOLVED | NO_RESULT

One variable per slot (its candidate index) and one constraint per
adjacency edge, except edges between two fixed colours. Before solving, the
worst degree of the all-zero assignment (the unchanged scheme) is written
to the input scheme's quality.

Every assignment the solver reports becomes a new Scheme. All listeners see
it, in order. The search stops once the worst degree exceeds 0.999 or any
listener returned True.

Example:
    adjuster = Adjuster(Parameters(time_limit=2000))
    adjusted = adjuster.adjust(Scheme(['#e60012', '#009944', '#0068b7']))
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from cosaf import registry
from cosaf.core.diagnostics import NULL, Diagnostics
from cosaf.core.factory import DomainFactory, RelationFactory
from cosaf.core.parameters import Parameters
from cosaf.core.scheme import Scheme
from cosaf.core.value import Candidates
from cosaf.solver import Problem, Solver, create_solver

# Called with each proposed scheme; returning True accepts it and stops the search
AdjusterListener = Callable[[Scheme], bool]

AUTO_FINISH_DEGREE = 0.999


class State(Enum):
    IDLE = 'idle'
    PROBLEM_BUILT = 'problem_built'
    SOLVING = 'solving'
    SOLVED = 'solved'
    NO_RESULT = 'no_result'


class Adjuster:
    def __init__(self, parameters: Parameters | None = None, *, diagnostics: Diagnostics = NULL):
        self._parameters = parameters or Parameters()
        self.diagnostics = diagnostics
        self.state = State.IDLE
        self._listeners: list[AdjusterListener] = []

        self._original: Scheme | None = None
        self._candidates: list[Candidates] = []
        self._modified: Scheme | None = None

    @property
    def parameters(self) -> Parameters:
        return self._parameters

    @parameters.setter
    def parameters(self, parameters: Parameters) -> None:
        self._parameters = parameters

    @property
    def candidates(self) -> list[Candidates]:
        """Domains of the last built problem."""
        return self._candidates

    def add_listener(self, listener: AdjusterListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AdjusterListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def adjust(self, original: Scheme) -> Scheme | None:
        """The last proposed scheme, or None when the solver found nothing or failed."""
        self._original = original
        self._modified = None

        bottleneck = original.bottleneck_index if self._parameters.bottleneck_resolved else None
        problem = self.create_problem(original, bottleneck)
        original.set_quality_internally(problem.worst_satisfaction_degree())
        self.state = State.PROBLEM_BUILT

        solver = self._create_solver(problem)
        self.state = State.SOLVING
        try:
            found = solver.solve()
        except Exception as e:
            self.diagnostics.emit('adjuster', f'Exception occurred: {e!r}')
            self.state = State.NO_RESULT
            return None

        if not found or self._modified is None:
            self.diagnostics.emit('adjuster', 'No solution found.')
            self.state = State.NO_RESULT
            return None
        self.state = State.SOLVED
        return self._modified

    def create_problem(self, original: Scheme, bottleneck: int | None = None) -> Problem:
        """Domains and constraints for `original`; in bottleneck mode that slot is freed last."""
        domain_factory, relation_factory = self._create_factories(original, bottleneck)
        self._candidates = domain_factory.build(bottleneck)

        problem = Problem()
        for cd in self._candidates:
            problem.create_variable(len(cd), 0)

        for i, j in original.get_adjacencies():
            if original.is_fixed(i) and original.is_fixed(j):
                continue
            skip = None
            if i == bottleneck or original.is_fixed(i):
                skip = 0
            if j == bottleneck or original.is_fixed(j):
                skip = 1
            relation = relation_factory.new_instance(i, j, self._candidates[i], self._candidates[j], skip)
            problem.create_constraint(relation, i, j)

        relation_factory.finalize()
        return problem

    def _create_factories(self, original: Scheme, bottleneck: int | None) -> tuple[DomainFactory, RelationFactory]:
        domain_name, relation_name = self._parameters.strategy_names()
        self.diagnostics.emit('adjuster', f'Strategies: {domain_name} + {relation_name}')
        domain_factory = registry.get_domain_factory(domain_name).create(
            original, self._parameters, diagnostics=self.diagnostics
        )
        relation_factory = registry.get_relation_factory(relation_name).create(
            original, self._parameters, bottleneck=bottleneck, diagnostics=self.diagnostics
        )
        return domain_factory, relation_factory

    def _create_solver(self, problem: Problem) -> Solver:
        solver = create_solver(
            problem,
            self._parameters.solver,
            time_limit=self._parameters.time_limit,
            target_rate=self._parameters.target_desirability,
        )
        solver.add_listener(self._notify_result)
        return solver

    def _notify_result(self, assignment: list[int], worst: float) -> bool:
        colors = [self._candidates[i][value].color for i, value in enumerate(assignment)]
        self._modified = Scheme(colors, self._original.get_adjacencies(), None, worst)
        self.diagnostics.emit('adjuster', f'Solution found: worst degree {worst:.4f}')

        finish = worst > AUTO_FINISH_DEGREE
        for listener in self._listeners:
            if listener(self._modified):
                finish = True
        return finish
