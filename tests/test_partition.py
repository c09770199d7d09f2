"""Tests for cosaf.core.partition: adjacency-restricted cells in the Lab box."""

import numpy as np
import pytest

from cosaf.core.partition import Partition

BOX = ((0.0, 100.0), (-127.0, 127.0), (-127.0, 127.0))
FULL_AT_5 = 21 * 51 * 51


def _partition(sites, table) -> Partition:
    p = Partition(BOX)
    for s in sites:
        p.add_site(s)
    p.create_cells(table)
    return p


class TestCells:
    def test_isolated_site_owns_whole_box(self) -> None:
        p = _partition([(50.0, 0.0, 0.0)], [[]])
        assert p.count_grids(0, 5) == FULL_AT_5

    def test_two_adjacent_sites_split_box(self) -> None:
        p = _partition([(22.0, 0.0, 0.0), (77.0, 0.0, 0.0)], [[1], [0]])
        low = p.grids(0, 5)
        high = p.grids(1, 5)
        assert (low[:, 0] < 49.5).all()
        assert (high[:, 0] > 49.5).all()
        assert len(low) + len(high) == FULL_AT_5

    def test_non_adjacent_sites_do_not_compete(self) -> None:
        p = _partition([(25.0, 0.0, 0.0), (75.0, 0.0, 0.0)], [[], []])
        assert p.count_grids(0, 5) == FULL_AT_5
        assert p.count_grids(1, 5) == FULL_AT_5

    def test_grid_spacing(self) -> None:
        p = _partition([(50.0, 0.0, 0.0)], [[]])
        grid = p.grids(0, 10)
        assert np.unique(grid[:, 0]).tolist() == [float(v) for v in range(0, 101, 10)]
        assert grid[:, 1].min() == -127.0

    def test_cells_cached(self) -> None:
        p = _partition([(25.0, 0.0, 0.0), (75.0, 0.0, 0.0)], [[1], [0]])
        assert p.grids(0, 5) is p.grids(0, 5)

    def test_adding_site_resets_cells(self) -> None:
        p = _partition([(25.0, 0.0, 0.0)], [[]])
        p.add_site((75.0, 0.0, 0.0))
        with pytest.raises(RuntimeError):
            p.grids(0, 5)


class TestErrors:
    def test_grids_before_cells(self) -> None:
        p = Partition(BOX)
        p.add_site((50.0, 0.0, 0.0))
        with pytest.raises(RuntimeError, match='create_cells'):
            p.grids(0, 5)

    def test_table_length_mismatch(self) -> None:
        p = Partition(BOX)
        p.add_site((50.0, 0.0, 0.0))
        with pytest.raises(ValueError, match='1 sites'):
            p.create_cells([[], []])

    def test_len(self) -> None:
        p = _partition([(25.0, 0.0, 0.0), (75.0, 0.0, 0.0)], [[], []])
        assert len(p) == 2
