"""Relations against an independent ratio to trichromacy per vision.

Like ratio_average, except every enabled deficient vision keeps its own
ratio and its own max_diff, every edge contributes to the ratios, and
the separation is the worst vision's:

    separation = min_v 1 - |od * ratio_v - d_v| / max_diff_v
"""

from __future__ import annotations

import numpy as np

from cosaf.core.factory import RatioRelationFactory
from cosaf.core.types import Strategy, Vision
from cosaf.core.value import Value

strategy = Strategy(
    name='ratio_per_vision',
    kind='relation',
    help='Separation towards a ratio to trichromacy per deficient vision, worst vision wins.',
)


@strategy.factory
class RatioPerVisionRelationFactory(RatioRelationFactory):
    def _pair_statistics(self, distances: np.ndarray) -> dict[Vision, float]:
        best = distances.max(axis=(1, 2))
        return {v: float(best[k]) for k, v in enumerate(self.visions)}

    def _edge_deviation(self, i: int, j: int, d_t: float) -> dict[Vision, float]:
        return {v: abs(d_t * self.ratios[v] - self.scheme.get_difference(i, j, v)) for v in self.visions}

    def _separation(self, v1: Value, v2: Value, od: float) -> float:
        scales = [
            self._deviation_scale(abs(od * self.ratios[v] - v1.difference_from(v2, v)), self.max_differences[v])
            for v in self.visions
        ]
        return min(scales, default=1.0)
