"""Relations against a shared ratio to trichromacy, visions averaged.

The ratio is learnt from edges without a preservation exemption: over every
pair of fully preserved candidates, average the enabled deficient visions'
differences, keep the best pair, and divide by the trichromatic difference
of the originals. The shared ratio is the minimum over those edges.

separation    1 - |od * ratio - min_v d_v| / max_diff
preservation  identical colour scores 1, otherwise min of the hue and tone
              subscores 1 - (D - tol) / (ceil - tol), ceil = min(2 * tol, cap)

max_diff is the worst |dT * ratio - average_v d_v| over the scheme's edges,
leaving out edges between two fixed colours and, in bottleneck mode, edges
touching the bottleneck.
"""

from __future__ import annotations

import numpy as np

from cosaf.core.factory import RatioRelationFactory
from cosaf.core.types import Strategy, Vision
from cosaf.core.value import Value

strategy = Strategy(
    name='ratio_average',
    kind='relation',
    help='Separation towards one shared ratio to trichromacy, averaging the deficient visions.',
)


@strategy.factory
class RatioAverageRelationFactory(RatioRelationFactory):
    @property
    def ratio(self) -> float:
        """The shared ratio to trichromacy (1 when no deficient vision is checked)."""
        return min(self.ratios.values(), default=1.0)

    @property
    def max_difference(self) -> float:
        return max(self.max_differences.values(), default=0.0)

    def _updates_ratio(self, skip: int | None) -> bool:
        return skip is None

    def _pair_statistics(self, distances: np.ndarray) -> dict[Vision, float]:
        best = float(distances.mean(axis=0).max())
        return {v: best for v in self.visions}

    def _edge_deviation(self, i: int, j: int, d_t: float) -> dict[Vision, float]:
        ave = sum(self.scheme.get_difference(i, j, v) for v in self.visions) / len(self.visions)
        dev = abs(d_t * self.ratio - ave)
        return {v: dev for v in self.visions}

    def _separation(self, v1: Value, v2: Value, od: float) -> float:
        if not self.visions:
            return 1.0
        d = min(v1.difference_from(v2, v) for v in self.visions)
        return self._deviation_scale(abs(od * self.ratio - d), self.max_difference)
