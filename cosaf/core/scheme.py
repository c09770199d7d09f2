"""Colour schemes: ordered colours plus the pairs that must stay distinguishable.

A Scheme derives two things once, at construction:

  bottleneck    the slot whose partition cell (see core.partition) holds the
                fewest grid points at resolution 5, i.e. the colour with the
                least perceptual room
  combinations  every adjacent pair under every vision, sorted by ascending
                difference, with the lowest one per vision kept aside
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence

from cosaf.core import colour
from cosaf.core.partition import Partition
from cosaf.core.types import Combination, Vision
from cosaf.core.value import Value

BOTTLENECK_RESOLUTION = 5

_VISION_LETTERS = {
    Vision.TRICHROMACY: 'T',
    Vision.PROTANOPIA: 'P',
    Vision.DEUTERANOPIA: 'D',
    Vision.MONOCHROMACY: 'M',
}


def complete_adjacencies(size: int) -> list[tuple[int, int]]:
    """Every pair (i, j) with i < j."""
    return [(i, j) for i in range(size) for j in range(i + 1, size)]


class Scheme:
    def __init__(
        self,
        colors: Sequence[int | str | Value],
        adjacencies: Sequence[tuple[int, int]] | None = None,
        fixed: Sequence[bool] | None = None,
        quality: float = 1.0,
    ):
        if not colors:
            raise ValueError('A scheme needs at least one colour')
        self._values = [c if isinstance(c, Value) else Value.from_color(c) for c in colors]
        n = len(self._values)

        if adjacencies is None:
            adjacencies = complete_adjacencies(n)
        self._adjacencies: list[tuple[int, int]] = []
        for i, j in adjacencies:
            if not (0 <= i < n and 0 <= j < n):
                raise ValueError(f'Adjacency ({i}, {j}) out of range for {n} colours')
            if i == j:
                raise ValueError(f'Adjacency ({i}, {j}) pairs a colour with itself')
            self._adjacencies.append((int(i), int(j)))

        self._fixed = [False] * n if fixed is None else [bool(f) for f in fixed]
        if len(self._fixed) != n:
            raise ValueError(f'Got {len(self._fixed)} fixed flags for {n} colours')
        self._quality = quality

        self._bottleneck_index, self._bottleneck_size = self._derive_bottleneck()
        self._lowest: dict[Vision, Combination | None] = {}
        self._combinations = self._create_combination_list()

    def set_fixed_flags(self, flags: Sequence[bool]) -> None:
        if len(flags) != len(self._values):
            raise ValueError(f'Got {len(flags)} fixed flags for {len(self._values)} colours')
        self._fixed = [bool(f) for f in flags]

    def set_quality_internally(self, quality: float) -> None:
        self._quality = quality

    def _derive_bottleneck(self) -> tuple[int, int]:
        partition = Partition()
        for v in self._values:
            partition.add_site(v.lab)
        partition.create_cells(self.get_adjacency_table())

        sizes = [partition.count_grids(i, BOTTLENECK_RESOLUTION) for i in range(len(self._values))]
        index = min(range(len(sizes)), key=sizes.__getitem__)
        return index, sizes[index]

    def _create_combination_list(self) -> list[Combination]:
        combs: list[Combination] = []
        for vision in Vision:
            lowest: Combination | None = None
            for i, j in self._unique_pairs():
                diff = self.get_difference(i, j, vision)
                c = Combination(i, j, self.get_color(i, vision), self.get_color(j, vision), diff, vision)
                combs.append(c)
                if lowest is None or diff < lowest.difference:
                    lowest = c
            self._lowest[vision] = lowest
        combs.sort(key=lambda c: c.difference)
        return combs

    def _unique_pairs(self) -> list[tuple[int, int]]:
        """Adjacent pairs as (low, high), duplicates dropped, in adjacency-table order."""
        table = self.get_adjacency_table()
        return [(i, j) for i, row in enumerate(table) for j in sorted(set(row)) if i < j]

    # -------------------------------------------------------------------------

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def value(self, index: int) -> Value:
        return self._values[index]

    def is_fixed(self, index: int) -> bool:
        return self._fixed[index]

    def get_color(self, index: int, vision: Vision = Vision.TRICHROMACY) -> int:
        """Colour of a slot as 0xRRGGBB, as seen under `vision`."""
        return self._values[index].get_color(vision)

    def get_adjacencies(self) -> list[tuple[int, int]]:
        return list(self._adjacencies)

    def get_adjacency_table(self, omit: int | None = None) -> list[list[int]]:
        """Neighbour list per slot; pairs touching `omit` are left out entirely."""
        table: list[list[int]] = [[] for _ in self._values]
        for i, j in self._adjacencies:
            if omit is not None and omit in (i, j):
                continue
            table[i].append(j)
            table[j].append(i)
        return table

    def get_conspicuity_array(self) -> list[float]:
        """Per-slot conspicuity normalised to [0, 1]."""
        cons = [v.conspicuity for v in self._values]
        lo, hi = min(cons), max(cons)
        if hi == lo:
            return [0.0] * len(cons)
        return [(c - lo) / (hi - lo) for c in cons]

    def get_difference(self, index1: int, index2: int, vision: Vision = Vision.TRICHROMACY) -> float:
        return self._values[index1].difference_from(self._values[index2], vision)

    @property
    def bottleneck_index(self) -> int:
        return self._bottleneck_index

    @property
    def bottleneck_size(self) -> int:
        return self._bottleneck_size

    def get_lowest_difference_combination(self, vision: Vision | None = Vision.TRICHROMACY) -> Combination | None:
        """Lowest combination for `vision`; with None, the lowest across visions (ties: T, P, D, M)."""
        if vision is not None:
            return self._lowest[vision]
        best: Combination | None = None
        for v in Vision:
            c = self._lowest[v]
            if c is not None and (best is None or c.difference < best.difference):
                best = c
        return best

    def get_lowest_difference(self, vision: Vision = Vision.TRICHROMACY) -> float:
        """Lowest difference among adjacent pairs; inf when there are none."""
        c = self._lowest[vision]
        return math.inf if c is None else c.difference

    def get_combination_list(
        self,
        trichromacy: bool = True,
        protanopia: bool = True,
        deuteranopia: bool = True,
        monochromacy: bool = True,
    ) -> list[Combination]:
        wanted = {
            Vision.TRICHROMACY: trichromacy,
            Vision.PROTANOPIA: protanopia,
            Vision.DEUTERANOPIA: deuteranopia,
            Vision.MONOCHROMACY: monochromacy,
        }
        return [c for c in self._combinations if wanted[c.vision]]

    def total_difference_from(self, other: Scheme) -> float:
        """Sum of same-slot trichromatic differences."""
        return sum(a.difference_from(b) for a, b in zip(self._values, other._values))

    @property
    def quality(self) -> float:
        return self._quality

    def ave_nabla_e(self, vision: Vision) -> float:
        """Average relative deviation of `vision` differences from trichromatic ones."""
        terms = []
        for i, j in self._adjacencies:
            d_t = self.get_difference(i, j)
            if d_t == 0:
                continue
            terms.append(abs(d_t - self.get_difference(i, j, vision)) / d_t)
        return sum(terms) / len(terms) if terms else 0.0

    @staticmethod
    def ave_delta_e(original: Scheme, modified: Scheme) -> float:
        """Average per-slot CIE76 drift."""
        return original.total_difference_from(modified) / original.size()

    @staticmethod
    def ave_delta_h(original: Scheme, modified: Scheme) -> float:
        """Average per-slot drift on the 24-step hue circle."""
        total = sum(colour.hue_distance(o.tone[0], m.tone[0]) for o, m in zip(original, modified))
        return total / original.size()

    @staticmethod
    def ave_delta_t(original: Scheme, modified: Scheme) -> float:
        """Average per-slot drift on the lightness/saturation plane."""
        total = sum(colour.tone_distance(o.tone, m.tone) for o, m in zip(original, modified))
        return total / original.size()

    def __str__(self) -> str:
        overall = self.get_lowest_difference_combination(None)
        parts = []
        for vision in Vision:
            c = self._lowest[vision]
            if c is None:
                parts.append(f' {_VISION_LETTERS[vision]}<-, ->-')
                continue
            mark = '*' if c is overall else ' '
            parts.append(f'{mark}{_VISION_LETTERS[vision]}<{c.index1:02d}, {c.index2:02d}>{c.difference:.2f}')
        return ', '.join(parts)

    def __repr__(self) -> str:
        hexes = ', '.join(colour.to_hex(v.color) for v in self._values)
        return f'Scheme([{hexes}], quality={self._quality:.3f})'
