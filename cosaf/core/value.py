"""Value (one colour seen under every vision) and Candidates (a slot's domain)."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from cosaf.core import colour
from cosaf.core.types import Triplet, Vision


@dataclass(frozen=True)
class Value:
    """Immutable per-vision projection of one colour.

    Build with `Value.create(lab)`, `Value.create_all(labs)` or
    `Value.from_color(color)` rather than the constructor.
    """

    colors: tuple[int, int, int, int]  # 0xRRGGBB, indexed by Vision.value
    labs: tuple[Triplet, Triplet, Triplet, Triplet]
    tone: Triplet
    conspicuity: float

    @classmethod
    def create(cls, lab: Triplet) -> Value | None:
        """Value for a Lab triplet, or None when it is outside the sRGB gamut."""
        values = cls.create_all(np.asarray([lab], dtype=float))
        return values[0] if values else None

    @classmethod
    def create_all(cls, labs: np.ndarray) -> list[Value]:
        """Values for every in-gamut row of `labs`; out-of-gamut rows are dropped."""
        labs = np.asarray(labs, dtype=float).reshape(-1, 3)
        if not len(labs):
            return []
        rgb1 = colour.lab_to_rgb1(labs)
        mask = colour.in_gamut(rgb1)
        if not mask.any():
            return []
        return cls._from_projection(colour.project(rgb1[mask], labs[mask]))

    @classmethod
    def from_color(cls, color: int | str) -> Value:
        """Value for an 0xRRGGBB integer or a colour string."""
        rgb = np.asarray(colour.int_to_rgb(colour.parse_color(color)), dtype=float) / 255.0
        return cls._from_projection(colour.project(rgb))[0]

    @classmethod
    def _from_projection(cls, p: colour.Projection) -> list[Value]:
        visions = list(Vision)
        colors = np.stack([p.colors[v] for v in visions], axis=-1).tolist()
        labs = np.stack([p.labs[v] for v in visions], axis=1).tolist()
        tones = p.tone.tolist()
        cons = p.conspicuity.tolist()
        return [
            cls(
                colors=tuple(colors[i]),
                labs=tuple(tuple(lab) for lab in labs[i]),
                tone=tuple(tones[i]),
                conspicuity=cons[i],
            )
            for i in range(len(p))
        ]

    @property
    def color(self) -> int:
        """The trichromatic colour as 0xRRGGBB."""
        return self.colors[0]

    @property
    def lab(self) -> Triplet:
        return self.labs[0]

    def get_color(self, vision: Vision = Vision.TRICHROMACY) -> int:
        return self.colors[vision.value]

    def lab_of(self, vision: Vision = Vision.TRICHROMACY) -> Triplet:
        return self.labs[vision.value]

    def difference_from(self, other: Value, vision: Vision = Vision.TRICHROMACY) -> float:
        """CIE76 difference between the two colours as seen under `vision`."""
        return colour.difference(self.labs[vision.value], other.labs[vision.value])

    def __repr__(self) -> str:
        return f'Value({colour.to_hex(self.color)})'


class Candidates:
    """Substitute colours for one slot plus the designated original."""

    def __init__(self, values: list[Value] | None = None, original: Value | None = None):
        self.values: list[Value] = [] if values is None else values
        self._original = original

    @property
    def original(self) -> Value:
        """The assigned original, or the first candidate when none was assigned."""
        if self._original is not None:
            return self._original
        return self.values[0]

    def set_original(self, original: Value) -> None:
        self._original = original

    def is_original_assigned(self) -> bool:
        return self._original is not None

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> Value:
        return self.values[index]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.values)
