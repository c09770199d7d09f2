"""Candidate domains within one global radius of each current colour.

A grid sample of the slot's partition cell qualifies when it is
displayable, lies within `max_difference` (CIE76) of the current colour,
and stays inside `max_hue_difference` / `max_tone_difference` of its
hue and tone when those are preserved.

With an omitted slot, that slot is offered the largest unfiltered
sample set found among the other (non-fixed) slots.

Example:
    cosaf adjust '#e60012' '#009944' '#0068b7' --no-ratio
"""

import numpy as np

from cosaf.core.diagnostics import NULL, Diagnostics
from cosaf.core.factory import DomainFactory
from cosaf.core.parameters import Parameters
from cosaf.core.partition import Partition
from cosaf.core.scheme import Scheme
from cosaf.core.types import Strategy

strategy = Strategy(
    name='global_radius',
    kind='domain',
    help='Samples within one global CIE76 radius and the hue/tone maxima of each colour.',
)


@strategy.factory
class GlobalRadiusDomainFactory(DomainFactory):
    def __init__(self, scheme: Scheme, parameters: Parameters, *, diagnostics: Diagnostics = NULL):
        super().__init__(scheme, parameters, diagnostics=diagnostics)
        self.max_difference = parameters.max_difference

    def _ceilings(self, parameters: Parameters) -> tuple[float, float]:
        return parameters.max_hue_difference, parameters.max_tone_difference

    def _max_difference(self, table: list[list[int]], index: int) -> float:
        return self.max_difference

    def _full_domain(self, partition: Partition, samples: dict[int, np.ndarray], omit_index: int) -> np.ndarray:
        largest = np.empty((0, 3))
        for labs in samples.values():
            if len(labs) > len(largest):
                largest = labs
        return largest
