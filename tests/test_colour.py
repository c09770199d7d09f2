"""Tests for cosaf.core.colour: parsing, Lab conversion, projections and distances."""

import math

import numpy as np
import pytest

from cosaf.core import colour
from cosaf.core.types import Vision


class TestParseColor:
    def test_hex(self):
        assert colour.parse_color('#ff0000') == 0xFF0000

    def test_short_hex(self):
        assert colour.parse_color('#0f0') == 0x00FF00

    def test_named(self):
        assert colour.parse_color('blue') == 0x0000FF

    def test_rgb_function(self):
        assert colour.parse_color('rgb(0, 104, 183)') == 0x0068B7

    def test_int_passthrough(self):
        assert colour.parse_color(0xE60012) == 0xE60012

    def test_invalid_string(self):
        with pytest.raises(ValueError, match='Invalid colour'):
            colour.parse_color('not-a-colour')

    def test_int_out_of_range(self):
        with pytest.raises(ValueError, match='out of range'):
            colour.parse_color(0x1000000)


class TestRgbInt:
    def test_split_and_join(self):
        assert colour.int_to_rgb(0x0068B7) == (0x00, 0x68, 0xB7)
        assert colour.rgb_to_int(0x00, 0x68, 0xB7) == 0x0068B7

    def test_to_hex(self):
        assert colour.to_hex(0xE60012) == '#e60012'


class TestLab:
    def test_white_lab(self):
        lab = colour.rgb1_to_lab(np.array([[1.0, 1.0, 1.0]]))
        assert lab[0, 0] == pytest.approx(100.0, abs=1e-2)
        assert abs(lab[0, 1]) < 0.05
        assert abs(lab[0, 2]) < 0.05

    def test_lab_rgb1_inverse(self):
        rgb1 = np.array([[0.2, 0.5, 0.1], [0.9, 0.05, 0.3]])
        back = colour.lab_to_rgb1(colour.rgb1_to_lab(rgb1))
        np.testing.assert_allclose(back, rgb1, atol=1e-4)

    def test_in_gamut_mask(self):
        labs = np.array([[50.0, 0.0, 0.0], [50.0, 120.0, 120.0]])
        mask = colour.in_gamut(colour.lab_to_rgb1(labs))
        assert mask.tolist() == [True, False]

    def test_out_of_gamut_stays_unclipped(self):
        rgb1 = colour.lab_to_rgb1(np.array([[50.0, 120.0, 120.0]]))
        assert rgb1.min() < 0.0 or rgb1.max() > 1.0

    def test_to_ints_rounds_and_clips(self):
        assert colour.to_ints(np.array([[1.2, 104 / 255, -0.1]])).tolist() == [0xFF6800]


class TestSimulation:
    def test_grey_is_unchanged(self):
        grey = np.array([[0.5, 0.5, 0.5]])
        for vision in (Vision.PROTANOPIA, Vision.DEUTERANOPIA):
            np.testing.assert_allclose(colour.simulate(grey, vision), grey, atol=1e-3)

    def test_trichromacy_passes_through(self):
        rgb1 = np.array([[0.9, 0.0, 0.07]])
        np.testing.assert_array_equal(colour.simulate(rgb1, Vision.TRICHROMACY), rgb1)

    def test_output_clipped(self):
        seen = colour.simulate(np.array([[0.0, 1.0, 0.0], [1.0, 0.0, 1.0]]), Vision.PROTANOPIA)
        assert seen.min() >= 0.0
        assert seen.max() <= 1.0


class TestProjection:
    def test_monochromacy_drops_chroma(self):
        p = colour.project(np.array([[0.9, 0.0, 0.07]]))
        grey = p.labs[Vision.MONOCHROMACY][0]
        assert grey[1] == 0.0
        assert grey[2] == 0.0
        assert grey[0] == pytest.approx(p.labs[Vision.TRICHROMACY][0][0])

    def test_trichromatic_colour_is_exact(self):
        p = colour.project(np.array([[0xE6, 0x00, 0x12]]) / 255.0)
        assert p.colors[Vision.TRICHROMACY].tolist() == [0xE60012]

    def test_red_green_confusion(self):
        red = colour.project(np.array([[0.9, 0.0, 0.07]]))
        green = colour.project(np.array([[0.0, 0.6, 0.27]]))
        d_t = colour.difference(red.labs[Vision.TRICHROMACY][0], green.labs[Vision.TRICHROMACY][0])
        d_p = colour.difference(red.labs[Vision.PROTANOPIA][0], green.labs[Vision.PROTANOPIA][0])
        assert d_p < d_t

    def test_row_aligned(self):
        p = colour.project(np.array([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6], [0.7, 0.8, 0.9]]))
        assert len(p) == 3
        for vision in Vision:
            assert p.colors[vision].shape == (3,)
            assert p.labs[vision].shape == (3, 3)


class TestHueDistance:
    def test_circular(self):
        assert colour.hue_distance(23.0, 1.0) == 2.0
        assert colour.hue_distance(1.0, 23.0) == 2.0

    def test_plain(self):
        assert colour.hue_distance(3.0, 5.5) == 2.5

    def test_half_circle(self):
        assert colour.hue_distance(0.0, 12.0) == 12.0

    def test_array(self):
        d = colour.hue_distance(np.array([23.0, 2.0]), 1.0)
        assert d.tolist() == [2.0, 1.0]


class TestDistances:
    def test_tone_distance_ignores_hue(self):
        assert colour.tone_distance((0.0, 5.0, 3.0), (12.0, 8.0, 7.0)) == 5.0

    def test_difference(self):
        assert colour.difference((50.0, 0.0, 0.0), (50.0, 3.0, 4.0)) == 5.0

    def test_vectorised_matches_scalar(self):
        labs = np.array([[50.0, 3.0, 4.0], [60.0, 0.0, 0.0]])
        d = colour.differences((50.0, 0.0, 0.0), labs)
        assert d.tolist() == pytest.approx([5.0, 10.0])

    def test_conspicuity_grey_is_lowest(self):
        c = colour.conspicuity(np.array([[50.0, 0.0, 0.0], [50.0, 40.0, 0.0], [90.0, 0.0, 0.0]]))
        assert c[0] == 0.0
        assert c[1] == pytest.approx(40.0)
        assert c[2] == pytest.approx(20.0)

    def test_tone_axes(self):
        tone = colour.to_tone(np.array([[60.0, 0.0, 26.0]]))[0]
        assert tone[0] == pytest.approx(6.0)  # 90 degrees on a 24-step circle
        assert tone[1] == pytest.approx(6.0)
        assert tone[2] == pytest.approx(2.0)
        assert math.isfinite(tone[0])
