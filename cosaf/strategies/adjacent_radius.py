"""Candidate domains sized by each colour's distance to its neighbours.

A grid sample of the slot's partition cell qualifies when it is
displayable, lies no further from the current colour than the farthest
adjacent colour does, and stays within twice the hue / tone tolerance
(capped at 12 hue steps and a 10x10 tone step) when those are preserved.

The cap adapts the search radius to the perceptual room each slot
actually has. A slot without neighbours keeps its current colour.

With an omitted slot k, every other slot is built against the adjacency
table without k, and k is offered its own cell of that table. Having no
neighbours there, the cell is the whole Lab box.
"""

import numpy as np

from cosaf.core.factory import MAX_DELTA_HUE, MAX_DELTA_TONE, DomainFactory
from cosaf.core.parameters import Parameters
from cosaf.core.partition import Partition
from cosaf.core.types import Strategy

strategy = Strategy(
    name='adjacent_radius',
    kind='domain',
    help='Samples no further than the farthest neighbour, within 2x the hue/tone tolerances.',
)


@strategy.factory
class AdjacentRadiusDomainFactory(DomainFactory):
    def _ceilings(self, parameters: Parameters) -> tuple[float, float]:
        return (
            min(parameters.hue_tolerance * 2, MAX_DELTA_HUE),
            min(parameters.tone_tolerance * 2, MAX_DELTA_TONE),
        )

    def _max_difference(self, table: list[list[int]], index: int) -> float:
        return max((self.scheme.get_difference(index, j) for j in table[index]), default=0.0)

    def _full_domain(self, partition: Partition, samples: dict[int, np.ndarray], omit_index: int) -> np.ndarray:
        return self._gamut_samples(partition, omit_index)
