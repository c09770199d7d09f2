"""Fuzzy constraint problem: bounded integer variables and binary fuzzy relations."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from cosaf.core.types import Relation

# Degrees of one constraint kept per (value, value) pair
DEGREE_CACHE_SIZE = 2**18


class Variable:
    def __init__(self, index: int, size: int, value: int = 0):
        self.index = index
        self.size = size
        self.value = value

    def __repr__(self) -> str:
        return f'Variable({self.index}, size={self.size}, value={self.value})'


class Constraint:
    """A fuzzy relation between variables x and y."""

    def __init__(self, relation: Relation, x: Variable, y: Variable):
        self.relation = relation
        self.x = x
        self.y = y
        self._degree = lru_cache(maxsize=DEGREE_CACHE_SIZE)(relation)

    def degree(self, x_value: int, y_value: int) -> float:
        return self._degree(x_value, y_value)

    def degree_from(self, var: Variable, value: int, other_value: int) -> float:
        """Degree with `var` at `value` and the other end at `other_value`."""
        if var is self.x:
            return self._degree(value, other_value)
        return self._degree(other_value, value)

    def neighbour(self, var: Variable) -> Variable:
        return self.y if var is self.x else self.x

    def satisfaction_degree(self, assignment: Sequence[int]) -> float:
        return self._degree(assignment[self.x.index], assignment[self.y.index])


class Problem:
    def __init__(self):
        self.variables: list[Variable] = []
        self.constraints: list[Constraint] = []
        self._by_variable: list[list[Constraint]] = []

    def create_variable(self, size: int, value: int = 0) -> Variable:
        if size < 1:
            raise ValueError(f'Variable domain must not be empty, got size {size}')
        if not 0 <= value < size:
            raise ValueError(f'Initial value {value} outside domain of size {size}')
        var = Variable(len(self.variables), size, value)
        self.variables.append(var)
        self._by_variable.append([])
        return var

    def create_constraint(self, relation: Relation, x: Variable | int, y: Variable | int) -> Constraint:
        x = self.variables[x] if isinstance(x, int) else x
        y = self.variables[y] if isinstance(y, int) else y
        if x is y:
            raise ValueError('A constraint needs two distinct variables')
        c = Constraint(relation, x, y)
        self.constraints.append(c)
        self._by_variable[x.index].append(c)
        self._by_variable[y.index].append(c)
        return c

    def variable_at(self, index: int) -> Variable:
        return self.variables[index]

    def constraints_of(self, var: Variable | int) -> list[Constraint]:
        index = var if isinstance(var, int) else var.index
        return self._by_variable[index]

    def assignment(self) -> list[int]:
        """Current variable values."""
        return [v.value for v in self.variables]

    def worst_satisfaction_degree(self, assignment: Sequence[int] | None = None) -> float:
        """Lowest constraint degree under `assignment` (current values when None); 1 without constraints."""
        if assignment is None:
            assignment = self.assignment()
        return min((c.satisfaction_degree(assignment) for c in self.constraints), default=1.0)

    def __len__(self) -> int:
        return len(self.variables)
