"""Relations against a fixed target difference per vision.

separation    min over enabled visions of 1 - (target - actual) / max_diff,
              where max_diff = max(0, target - lowest scheme difference)
              over the enabled visions
preservation  per side, min of the hue and tone subscores
              (max - deviation) / (max - tol); with conspicuity weighting
              the tolerance of slot i shrinks to tol * (1 - rate * c[i])

Each score is squashed (gain 12) and the degree is their minimum. A side is
exempt from preservation when `skip` names it or its candidate index is 0,
the unchanged colour.
"""

from __future__ import annotations

from cosaf.core import colour
from cosaf.core.diagnostics import NULL, Diagnostics
from cosaf.core.factory import RelationFactory, linear_scale
from cosaf.core.parameters import Parameters
from cosaf.core.scheme import Scheme
from cosaf.core.types import Relation, Strategy
from cosaf.core.value import Candidates, Value

strategy = Strategy(
    name='target_difference',
    kind='relation',
    help='Separation towards a fixed target difference per vision; hue/tone kept within the maxima.',
)


@strategy.factory
class TargetDifferenceRelationFactory(RelationFactory):
    GAIN = 12.0

    def __init__(
        self,
        scheme: Scheme,
        parameters: Parameters,
        *,
        bottleneck: int | None = None,
        diagnostics: Diagnostics = NULL,
    ):
        super().__init__(scheme, parameters, bottleneck=bottleneck, diagnostics=diagnostics)
        self.targets = {v: parameters.target_difference(v) for v in parameters.checked_visions()}
        self.max_difference = max(
            [0.0, *(t - scheme.get_lowest_difference(v) for v, t in self.targets.items())]
        )

        self.hue_preserved = parameters.hue_preserved
        self.hue_tolerance = parameters.hue_tolerance
        self.max_hue = parameters.max_hue_difference

        self.tone_preserved = parameters.tone_preserved
        self.tone_tolerance = parameters.tone_tolerance
        self.max_tone = parameters.max_tone_difference

        self.conspicuity_checked = parameters.conspicuity_checked
        self.conspicuity_rate = parameters.conspicuity_rate
        self.conspicuity = scheme.get_conspicuity_array() if self.conspicuity_checked else []

    def separation_scale(self, v1: Value, v2: Value) -> float:
        scales = [self._to_scale(v1.difference_from(v2, v), t) for v, t in self.targets.items()]
        return min(scales, default=1.0)

    def _to_scale(self, d: float, target: float) -> float:
        if self.max_difference == 0:
            return 1.0 if d >= target else 0.0
        return 1.0 - (target - d) / self.max_difference

    def preservation_scale(self, index: int, original: Value, modified: Value) -> float:
        if not (self.hue_preserved or self.tone_preserved):
            return 1.0
        scales = []
        if self.hue_preserved:
            d = colour.hue_distance(modified.tone[0], original.tone[0])
            scales.append(self._to_preservation(index, d, self.hue_tolerance, self.max_hue))
        if self.tone_preserved:
            d = colour.tone_distance(original.tone, modified.tone)
            scales.append(self._to_preservation(index, d, self.tone_tolerance, self.max_tone))
        return min(scales)

    def _to_preservation(self, index: int, d: float, tolerance: float, ceiling: float) -> float:
        if self.conspicuity_checked:
            tolerance *= 1 - self.conspicuity_rate * self.conspicuity[index]
        # (max - d) / (max - tol) is the same line as linear_scale
        return linear_scale(d, tolerance, ceiling)

    def _create(self, index1: int, index2: int, cans1: Candidates, cans2: Candidates, skip: int | None) -> Relation:
        orig1, orig2 = cans1.original, cans2.original
        values1, values2 = cans1.values, cans2.values

        def relation(val1: int, val2: int) -> float:
            self._check_finalized()
            v1, v2 = values1[val1], values2[val2]
            s = self._squash(self.separation_scale(v1, v2))
            p1 = 1.0 if skip == 0 or val1 == 0 else self._squash(self.preservation_scale(index1, orig1, v1))
            p2 = 1.0 if skip == 1 or val2 == 0 else self._squash(self.preservation_scale(index2, orig2, v2))
            return min(s, p1, p2)

        return relation

    def _seal(self) -> None:
        self.diagnostics.emit('relation', f'Max difference to target: {self.max_difference:.4f}')
