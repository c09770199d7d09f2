"""Tests for cosaf.core.value: Value projections and Candidates."""

import numpy as np
import pytest

from cosaf.core import colour
from cosaf.core.types import Vision
from cosaf.core.value import Candidates, Value


@pytest.fixture(scope='module')
def red() -> Value:
    return Value.from_color('#e60012')


@pytest.fixture(scope='module')
def green() -> Value:
    return Value.from_color('#009944')


class TestCreate:
    def test_in_gamut(self) -> None:
        v = Value.create((50.0, 10.0, -10.0))
        assert v is not None
        assert v.lab == (50.0, 10.0, -10.0)

    def test_out_of_gamut_is_none(self) -> None:
        assert Value.create((50.0, 120.0, 120.0)) is None

    def test_create_all_drops_out_of_gamut(self) -> None:
        labs = np.array([[50.0, 0.0, 0.0], [50.0, 120.0, 120.0], [70.0, -20.0, 30.0]])
        values = Value.create_all(labs)
        assert [v.lab for v in values] == [(50.0, 0.0, 0.0), (70.0, -20.0, 30.0)]

    def test_create_all_empty(self) -> None:
        assert Value.create_all(np.empty((0, 3))) == []

    def test_from_color_round_trips_rgb(self, red: Value) -> None:
        assert red.color == 0xE60012
        assert red.get_color(Vision.TRICHROMACY) == 0xE60012

    def test_from_int_and_string_agree(self) -> None:
        assert Value.from_color(0x0068B7) == Value.from_color('#0068b7')


class TestDifference:
    def test_self_difference_zero_for_every_vision(self, red: Value) -> None:
        for vision in Vision:
            assert red.difference_from(red, vision) == 0.0

    def test_symmetric(self, red: Value, green: Value) -> None:
        for vision in Vision:
            assert red.difference_from(green, vision) == green.difference_from(red, vision)

    def test_non_negative(self, red: Value, green: Value) -> None:
        for vision in Vision:
            assert red.difference_from(green, vision) >= 0.0

    def test_default_vision_is_trichromacy(self, red: Value, green: Value) -> None:
        assert red.difference_from(green) == red.difference_from(green, Vision.TRICHROMACY)

    def test_protanopia_shrinks_red_green(self, red: Value, green: Value) -> None:
        assert red.difference_from(green, Vision.PROTANOPIA) < red.difference_from(green)


class TestTone:
    def test_tone_from_lab(self, red: Value) -> None:
        expected = colour.to_tone(np.array([red.lab]))[0]
        assert red.tone == pytest.approx(tuple(expected))

    def test_hue_axis_range(self, red: Value, green: Value) -> None:
        for v in (red, green):
            assert 0.0 <= v.tone[0] < 24.0


class TestCandidates:
    def test_original_falls_back_to_first(self, red: Value, green: Value) -> None:
        cd = Candidates()
        cd.values.append(red)
        cd.values.append(green)
        assert cd.original is red
        assert not cd.is_original_assigned()

    def test_explicit_original(self, red: Value, green: Value) -> None:
        cd = Candidates([red, green])
        cd.set_original(green)
        assert cd.original is green
        assert cd.is_original_assigned()

    def test_sequence_protocol(self, red: Value, green: Value) -> None:
        cd = Candidates([red, green])
        assert len(cd) == 2
        assert cd[1] is green
        assert list(cd) == [red, green]

    def test_values_is_live(self, red: Value) -> None:
        values: list[Value] = []
        cd = Candidates(values)
        values.append(red)
        assert len(cd) == 1
