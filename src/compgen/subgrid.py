"""Bicubic subgrid interpolation tables for smooth 2D skins.

A lattice cell is refined into ``(1 + subgrid)**2`` sub-cells by a bicubic
patch. ``W`` maps the 16-vector ``[f; f_x; f_y; f_xy]`` at the four cell
corners to the coefficients of the monomials ``x**i * y**j`` (stored at
index ``4*i + j``). Derivatives are not available directly, so each selector
matrix ``D`` expresses the 16 corner quantities as finite differences of the
4x4 neighbourhood of lattice samples around the cell, indexed
``(dx + 1) * 4 + (dy + 1)`` for ``dx, dy`` in ``-1..2``. Cells on the first or
last row/column of the lattice use one-sided differences, hence nine variants
``D[ex][ey]`` with ``ex, ey`` in {0: first, 1: interior, 2: last}.
"""

from __future__ import annotations

import numpy as np

W = np.array(
    [
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0],
        [-3, 0, 0, 3, 0, 0, 0, 0, -2, 0, 0, -1, 0, 0, 0, 0],
        [2, 0, 0, -2, 0, 0, 0, 0, 1, 0, 0, 1, 0, 0, 0, 0],
        [0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 0, 0],
        [0, 0, 0, 0, -3, 0, 0, 3, 0, 0, 0, 0, -2, 0, 0, -1],
        [0, 0, 0, 0, 2, 0, 0, -2, 0, 0, 0, 0, 1, 0, 0, 1],
        [-3, 3, 0, 0, -2, -1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0, -3, 3, 0, 0, -2, -1, 0, 0],
        [9, -9, 9, -9, 6, 3, -3, -6, 6, -6, -3, 3, 4, 2, 1, 2],
        [-6, 6, -6, 6, -4, -2, 2, 4, -3, 3, 3, -3, -2, -1, -1, -2],
        [2, -2, 0, 0, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0, 2, -2, 0, 0, 1, 1, 0, 0],
        [-6, 6, -6, 6, -3, -3, 3, 3, -4, 4, 2, -2, -2, -2, -1, -1],
        [4, -4, 4, -4, 2, 2, -2, -2, 2, -2, -2, 2, 1, 1, 1, 1],
    ],
    dtype=np.float64,
)

# Sparse selector rows: one tuple of (sample, coefficient) pairs per row.
# Rows come in blocks of four corners (00, 10, 11, 01) for f, f_x, f_y, f_xy.
Row = tuple[tuple[int, float], ...]

_F: tuple[Row, ...] = (((5, 1),), ((9, 1),), ((10, 1),), ((6, 1),))

# f_x, by position along the first lattice axis
_FX_FIRST: tuple[Row, ...] = (
    ((5, -1), (9, 1)),
    ((5, -0.5), (13, 0.5)),
    ((6, -0.5), (14, 0.5)),
    ((6, -1), (10, 1)),
)
_FX_INNER: tuple[Row, ...] = (
    ((1, -0.5), (9, 0.5)),
    ((5, -0.5), (13, 0.5)),
    ((6, -0.5), (14, 0.5)),
    ((2, -0.5), (10, 0.5)),
)
_FX_LAST: tuple[Row, ...] = (
    ((1, -0.5), (9, 0.5)),
    ((5, -1), (9, 1)),
    ((6, -1), (10, 1)),
    ((2, -0.5), (10, 0.5)),
)

# f_y, by position along the second lattice axis
_FY_FIRST: tuple[Row, ...] = (
    ((5, -1), (6, 1)),
    ((9, -1), (10, 1)),
    ((9, -0.5), (11, 0.5)),
    ((5, -0.5), (7, 0.5)),
)
_FY_INNER: tuple[Row, ...] = (
    ((4, -0.5), (6, 0.5)),
    ((8, -0.5), (10, 0.5)),
    ((9, -0.5), (11, 0.5)),
    ((5, -0.5), (7, 0.5)),
)
_FY_LAST: tuple[Row, ...] = (
    ((4, -0.5), (6, 0.5)),
    ((8, -0.5), (10, 0.5)),
    ((9, -1), (10, 1)),
    ((5, -1), (6, 1)),
)

# f_xy depends on both axes at once
_FXY: dict[tuple[int, int], tuple[Row, ...]] = {
    (0, 0): (
        ((9, -1), (6, -1), (5, 1), (10, 1)),
        ((13, -0.5), (6, -0.5), (5, 0.5), (14, 0.5)),
        ((13, -0.25), (7, -0.25), (5, 0.25), (15, 0.25)),
        ((9, -0.5), (7, -0.5), (5, 0.5), (11, 0.5)),
    ),
    (1, 0): (
        ((9, -0.5), (2, -0.5), (1, 0.5), (10, 0.5)),
        ((13, -0.5), (6, -0.5), (5, 0.5), (14, 0.5)),
        ((13, -0.25), (7, -0.25), (5, 0.25), (15, 0.25)),
        ((9, -0.25), (3, -0.25), (1, 0.25), (11, 0.25)),
    ),
    (2, 0): (
        ((9, -0.5), (2, -0.5), (1, 0.5), (10, 0.5)),
        ((9, -1), (6, -1), (5, 1), (10, 1)),
        ((9, -0.5), (7, -0.5), (5, 0.5), (11, 0.5)),
        ((9, -0.25), (3, -0.25), (1, 0.25), (11, 0.25)),
    ),
    (0, 1): (
        ((8, -0.5), (6, -0.5), (4, 0.5), (10, 0.5)),
        ((12, -0.25), (6, -0.25), (4, 0.25), (14, 0.25)),
        ((13, -0.25), (7, -0.25), (5, 0.25), (15, 0.25)),
        ((9, -0.5), (7, -0.5), (5, 0.5), (11, 0.5)),
    ),
    (1, 1): (
        ((8, -0.25), (2, -0.25), (0, 0.25), (10, 0.25)),
        ((12, -0.25), (6, -0.25), (4, 0.25), (14, 0.25)),
        ((13, -0.25), (7, -0.25), (5, 0.25), (15, 0.25)),
        ((9, -0.25), (3, -0.25), (1, 0.25), (11, 0.25)),
    ),
    (2, 1): (
        ((8, -0.25), (2, -0.25), (0, 0.25), (10, 0.25)),
        ((8, -0.5), (6, -0.5), (4, 0.5), (10, 0.5)),
        ((9, -0.5), (7, -0.5), (5, 0.5), (11, 0.5)),
        ((9, -0.25), (3, -0.25), (1, 0.25), (11, 0.25)),
    ),
    (0, 2): (
        ((8, -0.5), (6, -0.5), (4, 0.5), (10, 0.5)),
        ((12, -0.25), (6, -0.25), (4, 0.25), (14, 0.25)),
        ((13, -0.5), (6, -0.5), (5, 0.5), (14, 0.5)),
        ((9, -1), (6, -1), (5, 1), (10, 1)),
    ),
    (1, 2): (
        ((8, -0.25), (2, -0.25), (0, 0.25), (10, 0.25)),
        ((12, -0.25), (6, -0.25), (4, 0.25), (14, 0.25)),
        ((13, -0.5), (6, -0.5), (5, 0.5), (14, 0.5)),
        ((9, -0.5), (2, -0.5), (1, 0.5), (10, 0.5)),
    ),
    (2, 2): (
        ((8, -0.25), (2, -0.25), (0, 0.25), (10, 0.25)),
        ((8, -0.5), (6, -0.5), (4, 0.5), (10, 0.5)),
        ((9, -1), (6, -1), (5, 1), (10, 1)),
        ((9, -0.5), (2, -0.5), (1, 0.5), (10, 0.5)),
    ),
}

_FX = (_FX_FIRST, _FX_INNER, _FX_LAST)
_FY = (_FY_FIRST, _FY_INNER, _FY_LAST)


def _dense(rows: tuple[Row, ...]) -> np.ndarray:
    mat = np.zeros((16, 16), dtype=np.float64)
    for r, row in enumerate(rows):
        for col, coef in row:
            mat[r, col] = coef
    return mat


def _selector(ex: int, ey: int) -> np.ndarray:
    return _dense(_F + _FX[ex] + _FY[ey] + _FXY[(ex, ey)])


# D[ex][ey], built once at import
D: tuple[tuple[np.ndarray, ...], ...] = tuple(
    tuple(_selector(ex, ey) for ey in range(3)) for ex in range(3)
)


def edge_class(i: int, n: int) -> int:
    """Position class of cell ``i`` among ``n - 1`` cells: 0 first, 2 last, 1 inside.

    The first class wins when a lattice axis has a single interior cell.
    """
    if i == 0:
        return 0
    if i == n - 2:
        return 2
    return 1


def monomials(subgrid: int) -> np.ndarray:
    """Rows ``x**i * y**j`` (index ``4*i + j``) for every sample of one cell.

    Samples are ordered ``sx * (2 + subgrid) + sy`` with ``x = sx * step`` and
    ``y = sy * step``, ``step = 1 / (1 + subgrid)``, so both cell borders are
    included.
    """
    step = 1.0 / (1 + subgrid)
    n = 2 + subgrid
    xy = np.empty((n * n, 16), dtype=np.float64)
    for sx in range(n):
        for sy in range(n):
            x, y = sx * step, sy * step
            xy[sx * n + sy] = [x**i * y**j for i in range(4) for j in range(4)]
    return xy


def weight_tables(subgrid: int) -> np.ndarray:
    """Per-variant sample weights, shape ``(9, (2 + subgrid)**2, 16)``.

    ``weights[3 * ex + ey, n, b]`` is the influence of neighbourhood bone ``b``
    on sample ``n`` of a cell in position class ``(ex, ey)``.
    """
    xy_w = monomials(subgrid) @ W
    return np.stack([xy_w @ D[ex][ey] for ex in range(3) for ey in range(3)])
