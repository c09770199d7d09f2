"""Tests for the domain strategies: global_radius and adjacent_radius."""

import pytest

from cosaf.core import colour
from cosaf.core.diagnostics import Diagnostics
from cosaf.core.parameters import Parameters
from cosaf.core.scheme import Scheme
from cosaf.strategies.adjacent_radius import AdjacentRadiusDomainFactory
from cosaf.strategies.global_radius import GlobalRadiusDomainFactory

COLORS = ['#e60012', '#009944', '#0068b7']
FACTORIES = [GlobalRadiusDomainFactory, AdjacentRadiusDomainFactory]


class Recorder(Diagnostics):
    def __init__(self):
        self.lines: list[tuple[str, str]] = []

    def emit(self, source: str, message: str) -> None:
        self.lines.append((source, message))


@pytest.fixture(scope='module')
def scheme() -> Scheme:
    return Scheme(COLORS)


@pytest.fixture(scope='module')
def params() -> Parameters:
    return Parameters(resolution=10)


@pytest.mark.parametrize('factory_cls', FACTORIES)
class TestBuild:
    def test_one_domain_per_slot_never_empty(self, factory_cls, scheme: Scheme, params: Parameters) -> None:
        domains = factory_cls(scheme, params).build()
        assert len(domains) == scheme.size()
        assert all(len(cd) >= 1 for cd in domains)

    def test_current_colour_first(self, factory_cls, scheme: Scheme, params: Parameters) -> None:
        domains = factory_cls(scheme, params).build()
        for i, cd in enumerate(domains):
            assert cd[0] is scheme.value(i)
            assert cd.original is scheme.value(i)

    def test_candidates_within_ceilings(self, factory_cls, scheme: Scheme, params: Parameters) -> None:
        factory = factory_cls(scheme, params)
        for i, cd in enumerate(factory.build()):
            current = scheme.value(i)
            for v in cd.values[1:]:
                assert colour.hue_distance(v.tone[0], current.tone[0]) <= factory.max_hue + 1e-9
                assert colour.tone_distance(v.tone, current.tone) <= factory.max_tone + 1e-9

    def test_fixed_slot_is_singleton(self, factory_cls, params: Parameters) -> None:
        s = Scheme(COLORS, fixed=[False, True, False])
        domains = factory_cls(s, params).build()
        assert len(domains[1]) == 1
        assert domains[1][0] is s.value(1)

    def test_omit_sets_original(self, factory_cls, scheme: Scheme, params: Parameters) -> None:
        domains = factory_cls(scheme, params).build(1)
        assert domains[1].is_original_assigned()
        assert domains[1].original.color == scheme.get_color(1)
        assert len(domains) == 3
        assert all(len(cd) >= 1 for cd in domains)

    def test_reports_sizes(self, factory_cls, scheme: Scheme, params: Parameters) -> None:
        recorder = Recorder()
        factory_cls(scheme, params, diagnostics=recorder).build()
        assert [src for src, _ in recorder.lines] == ['domain'] * 3


class TestGlobalRadius:
    def test_ceilings_are_maxima(self, scheme: Scheme) -> None:
        p = Parameters(max_hue_difference=2.0, max_tone_difference=3.0)
        f = GlobalRadiusDomainFactory(scheme, p)
        assert (f.max_hue, f.max_tone) == (2.0, 3.0)

    def test_radius_bounds_candidates(self, scheme: Scheme) -> None:
        p = Parameters(resolution=10, max_difference=15.0)
        for i, cd in enumerate(GlobalRadiusDomainFactory(scheme, p).build()):
            for v in cd:
                assert v.difference_from(scheme.value(i)) <= 15.0 + 1e-9

    def test_zero_radius_keeps_current_only(self, scheme: Scheme) -> None:
        p = Parameters(resolution=10, max_difference=0.0)
        domains = GlobalRadiusDomainFactory(scheme, p).build()
        assert [len(cd) for cd in domains] == [1, 1, 1]

    def test_omitted_slot_gets_largest_unfiltered_set(self, scheme: Scheme, params: Parameters) -> None:
        domains = GlobalRadiusDomainFactory(scheme, params).build(0)
        others = max(len(domains[1]), len(domains[2]))
        assert len(domains[0]) >= others


class TestAdjacentRadius:
    def test_ceilings_double_tolerance(self, scheme: Scheme) -> None:
        f = AdjacentRadiusDomainFactory(scheme, Parameters(hue_tolerance=1.5, tone_tolerance=2.0))
        assert f.max_hue == 3.0
        assert f.max_tone == 4.0

    def test_ceilings_capped(self, scheme: Scheme) -> None:
        f = AdjacentRadiusDomainFactory(scheme, Parameters(hue_tolerance=10.0, tone_tolerance=10.0))
        assert f.max_hue == 12.0
        assert f.max_tone == pytest.approx(200**0.5)

    def test_cap_is_farthest_neighbour(self, params: Parameters) -> None:
        s = Scheme(COLORS, [(0, 1)])
        f = AdjacentRadiusDomainFactory(s, params)
        table = s.get_adjacency_table()
        assert f._max_difference(table, 0) == pytest.approx(s.get_difference(0, 1))
        assert f._max_difference(table, 2) == 0.0

    def test_isolated_slot_keeps_current(self, params: Parameters) -> None:
        s = Scheme(COLORS, [(0, 1)])
        domains = AdjacentRadiusDomainFactory(s, params).build()
        assert len(domains[2]) == 1

    def test_omitted_slot_gets_own_cell(self, scheme: Scheme, params: Parameters) -> None:
        domains = AdjacentRadiusDomainFactory(scheme, params).build(2)
        # no neighbours once omitted, so the cell is the whole displayable box
        assert len(domains[2]) > max(len(domains[0]), len(domains[1]))
