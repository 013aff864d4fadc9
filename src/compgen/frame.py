"""Quaternion helpers and moving-frame propagation along a polyline."""

from __future__ import annotations

import numpy as np

_EPSILON = 1e-10


# ---------------------------------------------------------------------------
# Quaternion helpers: Hamilton product, [w, x, y, z] convention
# ---------------------------------------------------------------------------


def quat_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compose rotations: ``quat_mul(a, b)`` applies ``b`` first, then ``a``.

    Quaternions are ``[w, x, y, z]``; the product is split into its scalar
    and vector parts.
    """
    aw, av = a[0], np.asarray(a[1:4], dtype=np.float64)
    bw, bv = b[0], np.asarray(b[1:4], dtype=np.float64)
    w = aw * bw - np.dot(av, bv)
    v = aw * bv + bw * av + np.cross(av, bv)
    return np.array([w, *v], dtype=np.float64)


def quat_conj(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    # unit q only: v + 2w(u x v) + 2u x (u x v)
    u = np.asarray(q[1:4], dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + q[0] * t + np.cross(u, t)


def quat_relative(prev: np.ndarray, cur: np.ndarray) -> np.ndarray:
    """Rotation taking frame ``prev`` to frame ``cur``, expressed in ``prev``."""
    return quat_mul(quat_conj(prev), cur)


def quat_between(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Minimal rotation taking unit vector ``a`` onto unit vector ``b``."""
    cos = float(np.dot(a, b))
    axis = np.cross(a, b)
    if cos < -1.0 + _EPSILON:
        # antiparallel: half turn about any axis perpendicular to a
        perp = np.cross(a, [1.0, 0.0, 0.0])
        if np.linalg.norm(perp) < 1e-6:
            perp = np.cross(a, [0.0, 1.0, 0.0])
        perp /= np.linalg.norm(perp)
        return np.array([0.0, *perp], dtype=np.float64)
    q = np.array([1.0 + cos, *axis], dtype=np.float64)
    return q / np.linalg.norm(q)


def mat_to_quat(mat: np.ndarray) -> np.ndarray:
    """Convert a 3x3 rotation matrix to a unit quaternion [w, x, y, z]."""
    m = mat
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        q = [0.25 / s, (m[2, 1] - m[1, 2]) * s, (m[0, 2] - m[2, 0]) * s, (m[1, 0] - m[0, 1]) * s]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = [(m[2, 1] - m[1, 2]) / s, 0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s]
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = [(m[0, 2] - m[2, 0]) / s, (m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s]
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = [(m[1, 0] - m[0, 1]) / s, (m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s]
    q = np.array(q, dtype=np.float64)
    if q[0] < 0:
        q = -q
    return q / np.linalg.norm(q)


def zaxis_to_quat(zaxis: np.ndarray) -> np.ndarray:
    """Orientation whose local z-axis points along ``zaxis``."""
    z = np.asarray(zaxis, dtype=np.float64)
    norm = np.linalg.norm(z)
    if norm < _EPSILON:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return quat_between(np.array([0.0, 0.0, 1.0]), z / norm)


def as_tuple(v: np.ndarray) -> tuple[float, ...]:
    return tuple(float(x) for x in v)


# ---------------------------------------------------------------------------
# Moving frame
# ---------------------------------------------------------------------------


def update_frame(
    normal: np.ndarray,
    edge: np.ndarray,
    tprev: np.ndarray | None,
    tnext: np.ndarray | None,
    first: bool,
) -> tuple[np.ndarray, np.ndarray, float]:
    """Advance a moving frame by one polyline segment.

    The frame's x-axis is the unit tangent of ``edge``, its y-axis the running
    normal and its z-axis the binormal. On the first segment the frame is
    initialized from the given ``normal``; if that is parallel to the tangent,
    the plane spanned with the next tangent ``tnext`` is used instead, and
    failing that any perpendicular axis. On later segments the normal is
    parallel-transported by the minimal rotation from ``tprev`` to the new
    tangent, so no twist accumulates along curved centerlines.

    Args:
        normal: Running normal from the previous call (or the initial guess).
        edge: Segment vector (non-unit tangent).
        tprev: Unit tangent of the previous segment, None on the first one.
        tnext: Unit tangent of the next segment, None on the last one.
        first: True if the frame requires initialization.

    Returns:
        (quat, normal, length): frame orientation, updated unit normal and the
        segment length.
    """
    edge = np.asarray(edge, dtype=np.float64)
    length = float(np.linalg.norm(edge))
    tangent = edge / length

    n = np.asarray(normal, dtype=np.float64)
    if not first and tprev is not None:
        n = quat_rotate(quat_between(np.asarray(tprev, dtype=np.float64), tangent), n)
    elif np.linalg.norm(np.cross(tangent, n)) < 1e-6:
        n = _initial_normal(tangent, tnext)

    binormal = np.cross(tangent, n)
    binormal /= np.linalg.norm(binormal)
    n = np.cross(binormal, tangent)

    mat = np.column_stack([tangent, n, binormal])
    return mat_to_quat(mat), n, length


def _initial_normal(tangent: np.ndarray, tnext: np.ndarray | None) -> np.ndarray:
    if tnext is not None:
        bend = np.cross(tangent, tnext)
        if np.linalg.norm(bend) > 1e-6:
            return np.cross(bend, tangent)
    for axis in (np.array([0.0, 0.0, 1.0]), np.array([1.0, 0.0, 0.0])):
        if np.linalg.norm(np.cross(tangent, axis)) > 1e-6:
            return axis
    raise AssertionError("unreachable: tangent is parallel to two coordinate axes")
