"""Tests for bicubic subgrid weight tables."""

from __future__ import annotations

import numpy as np
import numpy.testing as npt
import pytest

from compgen.subgrid import D, W, edge_class, monomials, weight_tables

VARIANTS = [(ex, ey) for ex in range(3) for ey in range(3)]

# neighbourhood bone b sits at lattice offset (dx, dy) = divmod(b, 4) - 1
BONE_X = np.array([b // 4 - 1 for b in range(16)], dtype=np.float64)
BONE_Y = np.array([b % 4 - 1 for b in range(16)], dtype=np.float64)


def _sample_coords(subgrid):
    n = 2 + subgrid
    step = 1.0 / (1 + subgrid)
    return np.array([(sx * step, sy * step) for sx in range(n) for sy in range(n)])


class TestTables:
    def test_shapes(self):
        assert W.shape == (16, 16)
        for ex, ey in VARIANTS:
            assert D[ex][ey].shape == (16, 16)

    def test_function_rows_shared(self):
        for ex, ey in VARIANTS:
            npt.assert_array_equal(D[ex][ey][:4], D[1][1][:4])

    def test_derivative_rows_sum_to_zero(self):
        for ex, ey in VARIANTS:
            npt.assert_allclose(D[ex][ey][4:].sum(axis=1), 0.0)

    def test_monomial_layout(self):
        xy = monomials(1)
        assert xy.shape == (9, 16)
        # sample (sx=2, sy=1) is x=1, y=0.5; column 4*i + j is x**i * y**j
        row = xy[2 * 3 + 1]
        assert row[0] == 1.0
        assert row[4 * 3 + 0] == pytest.approx(1.0)
        assert row[4 * 0 + 2] == pytest.approx(0.25)
        assert row[4 * 1 + 1] == pytest.approx(0.5)

    @pytest.mark.parametrize("subgrid", [0, 1, 2, 4])
    def test_weight_table_shape(self, subgrid):
        assert weight_tables(subgrid).shape == (9, (2 + subgrid) ** 2, 16)


class TestEdgeClass:
    def test_classes(self):
        assert edge_class(0, 5) == 0
        assert edge_class(1, 5) == 1
        assert edge_class(2, 5) == 1
        assert edge_class(3, 5) == 2

    def test_first_wins_on_two_cells(self):
        assert edge_class(0, 3) == 0
        assert edge_class(1, 3) == 2


class TestWeights:
    @pytest.mark.parametrize("variant", range(9))
    def test_cell_corners_bind_one_bone(self, variant):
        weights = weight_tables(0)[variant]
        # samples 00, 01, 10, 11 land on bones (0,0), (0,1), (1,0), (1,1)
        for sample, bone in zip(range(4), (5, 6, 9, 10)):
            expected = np.zeros(16)
            expected[bone] = 1.0
            npt.assert_allclose(weights[sample], expected, atol=1e-12)

    @pytest.mark.parametrize("subgrid", [0, 1, 2, 3])
    def test_partition_of_unity(self, subgrid):
        npt.assert_allclose(weight_tables(subgrid).sum(axis=2), 1.0, atol=1e-12)

    @pytest.mark.parametrize("subgrid", [1, 2, 3])
    def test_linear_precision(self, subgrid):
        coords = _sample_coords(subgrid)
        for table in weight_tables(subgrid):
            npt.assert_allclose(table @ BONE_X, coords[:, 0], atol=1e-12)
            npt.assert_allclose(table @ BONE_Y, coords[:, 1], atol=1e-12)

    def test_interior_reproduces_bilinear(self):
        coords = _sample_coords(2)
        table = weight_tables(2)[3 * 1 + 1]
        npt.assert_allclose(table @ (BONE_X * BONE_Y), coords[:, 0] * coords[:, 1], atol=1e-12)

    def test_interior_cell_is_symmetric(self):
        # swapping the lattice axes swaps the sample and bone orderings
        table = weight_tables(1)[3 * 1 + 1]
        n = 3
        swap_sample = [sy * n + sx for sx in range(n) for sy in range(n)]
        swap_bone = [(b % 4) * 4 + b // 4 for b in range(16)]
        npt.assert_allclose(table[swap_sample][:, swap_bone], table, atol=1e-12)
