"""Solver base: time limit, target rate and the solution listener chain."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from cosaf.solver.problem import Problem

# Called with (assignment, worst degree); returning True stops the search
SolutionListener = Callable[[list[int], float], bool]


class Expired(Exception):
    """The time limit passed during a search."""


class Solver(ABC):
    name = 'solver'

    def __init__(self, problem: Problem):
        self.problem = problem
        self.time_limit: int | None = None  # milliseconds
        self.target_rate: float | None = None
        self._listeners: list[SolutionListener] = []
        self._deadline: float | None = None
        self._found = False

    def add_listener(self, listener: SolutionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SolutionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def solve(self) -> bool:
        """Search until the target, a listener, the time limit or the strategy stops it.

        Returns True when at least one assignment was reported.
        """
        self._found = False
        self._deadline = None if self.time_limit is None else time.monotonic() + self.time_limit / 1000.0
        try:
            self._search()
        except Expired:
            pass
        return self._found

    @abstractmethod
    def _search(self) -> None:
        """Run the strategy, reporting improved assignments through `_report`."""

    def _report(self, assignment: Sequence[int], worst: float) -> bool:
        """Notify every listener; True when the search should stop."""
        self._found = True
        stop = False
        for listener in self._listeners:
            if listener(list(assignment), worst):
                stop = True
        if self.target_rate is not None and worst >= self.target_rate:
            stop = True
        return stop

    def _expired(self) -> bool:
        return self._deadline is not None and time.monotonic() > self._deadline

    def _check_deadline(self) -> None:
        if self._expired():
            raise Expired
