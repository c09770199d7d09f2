"""Shared types for cosaf: Vision, SolverType, Combination, Strategy."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

Triplet = tuple[float, float, float]

# A fuzzy relation of two candidate indices, returning a degree in [0, 1]
Relation = Callable[[int, int], float]


class Vision(Enum):
    """Colour visions, in the fixed order used for tie-breaking."""

    TRICHROMACY = 0
    PROTANOPIA = 1
    DEUTERANOPIA = 2
    MONOCHROMACY = 3


VISIONS: tuple[Vision, ...] = tuple(Vision)

# Visions a simulated deficiency is checked against (trichromacy is the reference)
DEFICIENT_VISIONS: tuple[Vision, ...] = (Vision.PROTANOPIA, Vision.DEUTERANOPIA, Vision.MONOCHROMACY)


class SolverType(Enum):
    FC = 'fc'
    SRS3 = 'srs3'
    FUZZY_BREAKOUT = 'breakout'


@dataclass(frozen=True)
class Combination:
    """Two adjacent slots, their colours under one vision, and the difference between them."""

    index1: int
    index2: int
    color1: int  # 0xRRGGBB as seen under `vision`
    color2: int
    difference: float
    vision: Vision


class Strategy:
    """A self-registering domain or relation factory.

    Usage in a strategy module:

        strategy = Strategy(name='global_radius', kind='domain', help='...')

        @strategy.factory
        class GlobalRadiusDomainFactory(DomainFactory):
            ...
    """

    KINDS = ('domain', 'relation')

    def __init__(self, name: str, kind: str, help: str = ''):
        if kind not in self.KINDS:
            raise ValueError(f'Unknown strategy kind: {kind}. Expected one of: {", ".join(self.KINDS)}')
        self.name = name
        self.kind = kind
        self.help = help
        self._factory_cls: type | None = None

    def factory(self, cls: type) -> type:
        """Decorator to register the factory class."""
        self._factory_cls = cls
        return cls

    def create(self, *args: Any, **kwargs: Any) -> Any:
        """Instantiate the registered factory class."""
        if self._factory_cls is None:
            raise RuntimeError(f'Strategy {self.name} has no factory class')
        return self._factory_cls(*args, **kwargs)
