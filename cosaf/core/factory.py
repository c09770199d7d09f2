"""Domain and relation factory interfaces plus the machinery they share.

Domain factories turn a Scheme into one Candidates list per slot. Every list
starts with the slot's current colour, so candidate index 0 always means
"unchanged" and an all-zero assignment reproduces the input scheme.

Relation factories are two-phase objects:

  accumulate  new_instance() is called once per adjacency edge; factories
              that learn from the candidates (ratio to trichromacy) update
              their statistics here
  sealed      finalize() fixes the derived scalars; only then may the
              returned relations be evaluated

Evaluating a relation before finalize(), or registering an edge after it,
raises RuntimeError.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

import numpy as np
from sklearn.metrics import pairwise_distances

from cosaf.core import colour
from cosaf.core.diagnostics import NULL, Diagnostics
from cosaf.core.parameters import Parameters
from cosaf.core.partition import Partition
from cosaf.core.scheme import Scheme
from cosaf.core.types import DEFICIENT_VISIONS, Relation, Vision
from cosaf.core.value import Candidates, Value

# Hue and tone ceilings of the ratio strategies (PCCS: half the hue circle, a 10x10 tone step)
MAX_DELTA_HUE = 12.0
MAX_DELTA_TONE = math.sqrt(10 * 10 + 10 * 10)

# math.exp overflows just above 709
MAX_EXPONENT = 700.0


def squash(scale: float, gain: float) -> float:
    """Logistic squash of a raw scale centred at 0.5."""
    z = -gain * (scale - 0.5)
    if z > MAX_EXPONENT:
        return 0.0
    return 1.0 / (1.0 + math.exp(z))


def linear_scale(deviation: float, tolerance: float, ceiling: float) -> float:
    """1 at `tolerance`, 0 at `ceiling`, linear in between and beyond.

    A degenerate band (ceiling == tolerance) becomes a step at the tolerance.
    """
    if ceiling == tolerance:
        return 1.0 if deviation <= tolerance else 0.0
    return 1.0 - (deviation - tolerance) / (ceiling - tolerance)


# -----------------------------------------------------------------------------
# Domains
# -----------------------------------------------------------------------------


class DomainFactory(ABC):
    """Builds per-slot candidate domains from the slots' partition cells.

    Subclasses decide the distance cap of each slot, the hue/tone ceilings,
    and what the omitted slot receives in `build(omit_index)`.
    """

    def __init__(self, scheme: Scheme, parameters: Parameters, *, diagnostics: Diagnostics = NULL):
        self.scheme = scheme
        self.diagnostics = diagnostics
        self.resolution = parameters.resolution
        self.hue_preserved = parameters.hue_preserved
        self.tone_preserved = parameters.tone_preserved
        self.max_hue, self.max_tone = self._ceilings(parameters)

    @abstractmethod
    def _ceilings(self, parameters: Parameters) -> tuple[float, float]:
        """(hue ceiling, tone ceiling) of the is-candidate filter."""

    @abstractmethod
    def _max_difference(self, table: list[list[int]], index: int) -> float:
        """Distance cap of slot `index` under `table`."""

    @abstractmethod
    def _full_domain(self, partition: Partition, samples: dict[int, np.ndarray], omit_index: int) -> np.ndarray:
        """Lab rows offered to the omitted slot. `samples` holds the gamut-valid cells of the others."""

    def build(self, omit_index: int | None = None) -> list[Candidates]:
        """One Candidates per slot; never empty, current colour first."""
        table = self.scheme.get_adjacency_table(omit_index)
        partition = self._create_partition(table)

        domains: list[Candidates] = []
        samples: dict[int, np.ndarray] = {}
        for i in range(self.scheme.size()):
            if i == omit_index:
                domains.append(Candidates())
                continue
            labs = np.empty((0, 3))
            if not self.scheme.is_fixed(i):
                labs = self._gamut_samples(partition, i)
                samples[i] = labs
                labs = labs[self._is_candidate(i, labs, self._max_difference(table, i))]
            domains.append(self._candidates(i, labs))

        if omit_index is not None:
            domains[omit_index] = self._candidates(omit_index, self._full_domain(partition, samples, omit_index))

        for i, cd in enumerate(domains):
            self.diagnostics.emit('domain', f'Candidate size of {i}: {len(cd)}')
        return domains

    def _create_partition(self, table: list[list[int]]) -> Partition:
        partition = Partition()
        for v in self.scheme:
            partition.add_site(v.lab)
        partition.create_cells(table)
        return partition

    def _gamut_samples(self, partition: Partition, index: int) -> np.ndarray:
        """Grid points of the slot's cell that are displayable in sRGB."""
        grid = partition.grids(index, self.resolution)
        if not len(grid):
            return grid
        return grid[colour.in_gamut(colour.lab_to_rgb1(grid))]

    def _is_candidate(self, index: int, labs: np.ndarray, max_difference: float) -> np.ndarray:
        """Row mask: within the distance cap and, when preserved, the hue and tone ceilings."""
        current = self.scheme.value(index)
        mask = colour.differences(current.lab, labs) <= max_difference
        if not (self.hue_preserved or self.tone_preserved) or not mask.any():
            return mask

        tones = colour.to_tone(labs)
        if self.hue_preserved:
            mask &= colour.hue_distance(tones[:, 0], current.tone[0]) <= self.max_hue
        if self.tone_preserved:
            dl = tones[:, 1] - current.tone[1]
            ds = tones[:, 2] - current.tone[2]
            mask &= np.hypot(dl, ds) <= self.max_tone
        return mask

    def _candidates(self, index: int, labs: np.ndarray) -> Candidates:
        current = self.scheme.value(index)
        return Candidates([current, *Value.create_all(labs)], original=current)


# -----------------------------------------------------------------------------
# Relations
# -----------------------------------------------------------------------------


class RelationFactory(ABC):
    """Creates one fuzzy relation per adjacency edge."""

    GAIN: float = 12.0

    def __init__(
        self,
        scheme: Scheme,
        parameters: Parameters,
        *,
        bottleneck: int | None = None,
        diagnostics: Diagnostics = NULL,
    ):
        self.scheme = scheme
        self.bottleneck = bottleneck
        self.diagnostics = diagnostics
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def new_instance(
        self,
        index1: int,
        index2: int,
        candidates1: Candidates,
        candidates2: Candidates,
        skip: int | None = None,
    ) -> Relation:
        """Relation over candidate indices of slots `index1` and `index2`.

        `skip` names the side (0 or 1) exempt from preservation scoring.
        """
        if self._finalized:
            raise RuntimeError('Relation factory is finalized; no more edges can be registered')
        if skip not in (None, 0, 1):
            raise ValueError(f'skip must be None, 0 or 1, got {skip!r}')
        return self._create(index1, index2, candidates1, candidates2, skip)

    def finalize(self) -> None:
        """Seal the factory. Idempotent."""
        if self._finalized:
            return
        self._seal()
        self._finalized = True

    def _seal(self) -> None:
        pass

    def _check_finalized(self) -> None:
        if not self._finalized:
            raise RuntimeError('Relation evaluated before finalize()')

    def _squash(self, scale: float) -> float:
        return squash(scale, self.GAIN)

    @abstractmethod
    def _create(self, index1: int, index2: int, cans1: Candidates, cans2: Candidates, skip: int | None) -> Relation:
        """Build the relation for one edge."""


class RatioRelationFactory(RelationFactory):
    """Shared part of the ratio-to-trichromacy strategies.

    The target separation of an edge under a deficient vision is the
    trichromatic difference of its originals times a ratio. The ratio is the
    running minimum, over registered edges, of the best separation reachable
    with fully preserved candidates divided by that trichromatic difference.
    It starts at 1 and never grows.

    Subclasses pick how visions are aggregated: `_pair_statistics` reduces a
    stack of per-vision distance matrices, `_edge_deviation` measures how far
    an existing scheme edge is from its target, `_separation` scores a pair.
    """

    GAIN = 9.19

    def __init__(
        self,
        scheme: Scheme,
        parameters: Parameters,
        *,
        bottleneck: int | None = None,
        diagnostics: Diagnostics = NULL,
    ):
        super().__init__(scheme, parameters, bottleneck=bottleneck, diagnostics=diagnostics)
        self.visions = [v for v in DEFICIENT_VISIONS if parameters.checks_vision(v)]

        self.hue_preserved = parameters.hue_preserved
        self.hue_tolerance = parameters.hue_tolerance
        self.max_hue = min(parameters.hue_tolerance * 2, MAX_DELTA_HUE)

        self.tone_preserved = parameters.tone_preserved
        self.tone_tolerance = parameters.tone_tolerance
        self.max_tone = min(parameters.tone_tolerance * 2, MAX_DELTA_TONE)

        self.ratios: dict[Vision, float] = {v: 1.0 for v in self.visions}
        self.max_differences: dict[Vision, float] = {v: math.nan for v in self.visions}
        self.ratio_history: list[dict[Vision, float]] = []

    # Accumulation -------------------------------------------------------------

    def preservation_scale(self, original: Value, modified: Value) -> float:
        """Raw preservation scale; identical colours score 1 outright."""
        if original.color == modified.color:
            return 1.0
        if not (self.hue_preserved or self.tone_preserved):
            return 1.0
        scales = []
        if self.hue_preserved:
            d = colour.hue_distance(modified.tone[0], original.tone[0])
            scales.append(linear_scale(d, self.hue_tolerance, self.max_hue))
        if self.tone_preserved:
            d = colour.tone_distance(original.tone, modified.tone)
            scales.append(linear_scale(d, self.tone_tolerance, self.max_tone))
        return min(scales)

    def _preserved(self, cans: Candidates) -> list[Value]:
        original = cans.original
        return [v for v in cans if self.preservation_scale(original, v) >= 1.0]

    def update_ratio(self, cans1: Candidates, cans2: Candidates) -> None:
        """Lower the ratio(s) to what this edge's fully preserved candidates can reach."""
        if not self.visions:
            return
        od = cans1.original.difference_from(cans2.original)
        if od == 0:
            return
        kept1, kept2 = self._preserved(cans1), self._preserved(cans2)
        if not kept1 or not kept2:
            return
        matrices = [
            pairwise_distances([v.lab_of(vision) for v in kept1], [v.lab_of(vision) for v in kept2])
            for vision in self.visions
        ]
        best = self._pair_statistics(np.stack(matrices))
        for vision, d in best.items():
            self.ratios[vision] = min(self.ratios[vision], d / od)
        self.ratio_history.append(dict(self.ratios))

    @abstractmethod
    def _pair_statistics(self, distances: np.ndarray) -> dict[Vision, float]:
        """Best reachable separation per ratio key from (visions, n1, n2) distances."""

    # Sealing ------------------------------------------------------------------

    def _seal(self) -> None:
        deviations: dict[Vision, float] = {v: 0.0 for v in self.visions}
        edges = self.scheme.get_adjacencies() if self.visions else []
        for i, j in edges:
            if self.bottleneck is not None and self.bottleneck in (i, j):
                continue
            if self.scheme.is_fixed(i) and self.scheme.is_fixed(j):
                continue
            d_t = self.scheme.get_difference(i, j)
            for vision, dev in self._edge_deviation(i, j, d_t).items():
                deviations[vision] = max(deviations[vision], dev)
        self.max_differences = deviations

        ratios = ', '.join(f'({v.name[0]}) {r:.4f}' for v, r in self.ratios.items())
        maxes = ', '.join(f'({v.name[0]}) {d:.4f}' for v, d in self.max_differences.items())
        self.diagnostics.emit('relation', f'Ratio to trichromacy: {ratios}')
        self.diagnostics.emit('relation', f'Max delta distance: {maxes}')

    @abstractmethod
    def _edge_deviation(self, i: int, j: int, d_t: float) -> dict[Vision, float]:
        """|target - actual| of a scheme edge per max-difference key."""

    # Scoring ------------------------------------------------------------------

    @staticmethod
    def _deviation_scale(deviation: float, max_difference: float) -> float:
        if max_difference == 0:
            return 1.0
        return 1.0 - deviation / max_difference

    @abstractmethod
    def _separation(self, v1: Value, v2: Value, od: float) -> float:
        """Raw separation scale of a candidate pair whose originals are `od` apart."""

    def _create(self, index1: int, index2: int, cans1: Candidates, cans2: Candidates, skip: int | None) -> Relation:
        if self._updates_ratio(skip):
            self.update_ratio(cans1, cans2)
        orig1, orig2 = cans1.original, cans2.original
        od = orig1.difference_from(orig2)
        values1, values2 = cans1.values, cans2.values

        def relation(val1: int, val2: int) -> float:
            self._check_finalized()
            v1, v2 = values1[val1], values2[val2]
            s = self._squash(self._separation(v1, v2, od))
            p1 = 1.0 if skip == 0 else self._squash(self.preservation_scale(orig1, v1))
            p2 = 1.0 if skip == 1 else self._squash(self.preservation_scale(orig2, v2))
            return min(s, p1, p2)

        return relation

    def _updates_ratio(self, skip: int | None) -> bool:
        return True
