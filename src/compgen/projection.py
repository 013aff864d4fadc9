"""Map points of the unit cube [-1, 1]^3 onto a shell volume boundary."""

from __future__ import annotations

import numpy as np

from compgen.models import Family


def shell_half_extents(count: tuple[int, int, int], spacing: float) -> np.ndarray:
    """Half-size of the shell along each axis: ``0.5 * spacing * (count - 1)``."""
    return 0.5 * spacing * (np.asarray(count, dtype=np.float64) - 1.0)


def project(
    family: Family, pos: np.ndarray, count: tuple[int, int, int], spacing: float
) -> np.ndarray:
    """Reshape a cube-corner position onto the boundary of ``family``'s volume.

    Box scales each axis by its half-extent. Cylinder normalizes the xy part so
    the cross section is circular, keeping the Chebyshev radius as a scale, and
    scales z directly. Ellipsoid normalizes the whole vector before scaling.
    Zero-length vectors are left unnormalized.
    """
    size = shell_half_extents(count, spacing)
    p = np.array(pos, dtype=np.float64)

    if family == "box":
        return p * size

    if family == "cylinder":
        radius = max(abs(p[0]), abs(p[1]))
        xy = np.linalg.norm(p[:2])
        if xy > 0:
            p[:2] /= xy
        p[0] *= size[0] * radius
        p[1] *= size[1] * radius
        p[2] *= size[2]
        return p

    if family == "ellipsoid":
        norm = np.linalg.norm(p)
        if norm > 0:
            p /= norm
        return p * size

    raise AssertionError(f"No shell projection for family {family!r}")
