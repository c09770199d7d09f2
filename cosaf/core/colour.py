"""Colour service: parsing, CIELAB, vision simulation, tone and conspicuity.

Everything here is vectorised over arrays shaped (..., 3) unless the name
says otherwise. Colours travel through the package as 0xRRGGBB integers;
device coordinates are gamma-encoded sRGB in [0, 1] ("sRGB1") and
perceptual coordinates are CIELAB under D65, both as colorspacious
defines them.

Vision projections:
  protanopia / deuteranopia  colorspacious sRGB1+CVD, severity 100
                             (Machado et al. 2009)
  monochromacy               (L*, 0, 0)

Tone coordinate (a PCCS-like hue/tone system):
  axis 0  hue on a 24-step circle, derived from the CIELAB hue angle
  axis 1  lightness, L* / 10
  axis 2  saturation, C*ab / 13
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from colorspacious import cspace_convert
from PIL import ImageColor
from skimage.color import deltaE_cie76

from cosaf.core.types import Triplet, Vision

HUE_STEPS = 24
SATURATION_SCALE = 13.0

# CIELAB box the partition service works in
LAB_BOUNDS: tuple[tuple[float, float], ...] = ((0.0, 100.0), (-127.0, 127.0), (-127.0, 127.0))

CVD_SPACES: dict[Vision, dict] = {
    Vision.PROTANOPIA: {'name': 'sRGB1+CVD', 'cvd_type': 'protanomaly', 'severity': 100},
    Vision.DEUTERANOPIA: {'name': 'sRGB1+CVD', 'cvd_type': 'deuteranomaly', 'severity': 100},
}

GAMUT_EPSILON = 1e-6


def parse_color(color: int | str) -> int:
    """Parse '#f00', '#ff0000', 'red', 'rgb(255,0,0)' or an int into 0xRRGGBB."""
    if isinstance(color, str):
        try:
            rgb = ImageColor.getrgb(color.strip())
        except ValueError as e:
            raise ValueError(f'Invalid colour: {color!r}') from e
        return rgb_to_int(*rgb[:3])
    if not 0 <= int(color) <= 0xFFFFFF:
        raise ValueError(f'Colour out of range: {color!r}')
    return int(color)


def int_to_rgb(color: int) -> tuple[int, int, int]:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def rgb_to_int(r: int, g: int, b: int) -> int:
    return (int(r) << 16) | (int(g) << 8) | int(b)


def to_hex(color: int) -> str:
    r, g, b = int_to_rgb(color)
    return f'#{r:02x}{g:02x}{b:02x}'


def lab_to_rgb1(lab: np.ndarray) -> np.ndarray:
    """CIELAB -> sRGB1, unclipped, so out-of-gamut rows stay detectable."""
    return cspace_convert(np.asarray(lab, dtype=float), 'CIELab', 'sRGB1')


def rgb1_to_lab(rgb1: np.ndarray) -> np.ndarray:
    return cspace_convert(np.asarray(rgb1, dtype=float), 'sRGB1', 'CIELab')


def in_gamut(rgb1: np.ndarray) -> np.ndarray:
    """Row mask of colours displayable in sRGB."""
    return np.all((rgb1 >= -GAMUT_EPSILON) & (rgb1 <= 1.0 + GAMUT_EPSILON), axis=-1)


def to_ints(rgb1: np.ndarray) -> np.ndarray:
    """sRGB1 rows -> 0xRRGGBB integers (clipped and rounded)."""
    rgb = np.rint(np.clip(rgb1, 0.0, 1.0) * 255.0).astype(np.int64)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def simulate(rgb1: np.ndarray, vision: Vision) -> np.ndarray:
    """sRGB1 as seen with a red-green deficiency (clipped to the gamut)."""
    rgb1 = np.clip(rgb1, 0.0, 1.0)
    space = CVD_SPACES.get(vision)
    if space is None:
        return rgb1
    return np.clip(cspace_convert(rgb1, space, 'sRGB1'), 0.0, 1.0)


def monochrome(lab: np.ndarray) -> np.ndarray:
    """Project onto the achromatic axis: (L*, 0, 0)."""
    out = np.zeros_like(np.asarray(lab, dtype=float))
    out[..., 0] = np.asarray(lab)[..., 0]
    return out


def to_tone(lab: np.ndarray) -> np.ndarray:
    lab = np.asarray(lab, dtype=float)
    chroma = np.hypot(lab[..., 1], lab[..., 2])
    hue = (np.degrees(np.arctan2(lab[..., 2], lab[..., 1])) % 360.0) / (360.0 / HUE_STEPS)
    return np.stack([hue, lab[..., 0] / 10.0, chroma / SATURATION_SCALE], axis=-1)


def conspicuity(lab: np.ndarray) -> np.ndarray:
    """Salience score: chroma plus half the lightness distance from mid grey."""
    lab = np.asarray(lab, dtype=float)
    chroma = np.hypot(lab[..., 1], lab[..., 2])
    return np.hypot(chroma, 0.5 * (lab[..., 0] - 50.0))


def hue_distance(h0, h1):
    """Circular distance on the 24-step hue axis. Works on floats and arrays."""
    d = abs(h0 - h1)
    if isinstance(d, np.ndarray):
        return np.minimum(d, HUE_STEPS - d)
    return min(d, HUE_STEPS - d)


def tone_distance(t0: Triplet, t1: Triplet) -> float:
    """Euclidean distance on the lightness/saturation plane of two tone triplets."""
    return math.hypot(t1[1] - t0[1], t1[2] - t0[2])


def difference(lab0: Triplet, lab1: Triplet) -> float:
    """CIE76 colour difference of two Lab triplets."""
    return math.dist(lab0, lab1)


def differences(lab: Triplet, labs: np.ndarray) -> np.ndarray:
    """CIE76 difference from one Lab triplet to every row of `labs`."""
    return deltaE_cie76(np.broadcast_to(np.asarray(lab, dtype=float), labs.shape), labs)


@dataclass
class Projection:
    """Per-vision projection of N colours, as row-aligned arrays."""

    colors: dict[Vision, np.ndarray]  # (N,) 0xRRGGBB
    labs: dict[Vision, np.ndarray]  # (N, 3)
    tone: np.ndarray  # (N, 3)
    conspicuity: np.ndarray  # (N,)

    def __len__(self) -> int:
        return len(self.tone)


def project(rgb1: np.ndarray, lab: np.ndarray | None = None) -> Projection:
    """Project in-gamut sRGB1 rows into every vision.

    `lab` keeps the exact CIELAB coordinates a colour was requested with;
    when omitted it is derived from `rgb1`.
    """
    rgb1 = np.atleast_2d(np.asarray(rgb1, dtype=float))
    lab = rgb1_to_lab(rgb1) if lab is None else np.atleast_2d(np.asarray(lab, dtype=float))

    colors: dict[Vision, np.ndarray] = {Vision.TRICHROMACY: to_ints(rgb1)}
    labs: dict[Vision, np.ndarray] = {Vision.TRICHROMACY: lab}
    for vision in CVD_SPACES:
        seen = simulate(rgb1, vision)
        colors[vision] = to_ints(seen)
        labs[vision] = rgb1_to_lab(seen)

    grey = monochrome(lab)
    labs[Vision.MONOCHROMACY] = grey
    colors[Vision.MONOCHROMACY] = to_ints(lab_to_rgb1(grey))

    return Projection(colors=colors, labs=labs, tone=to_tone(lab), conspicuity=conspicuity(lab))
