"""Cables: an open chain of ball-jointed segments along a centerline."""

from __future__ import annotations

import math

import numpy as np

from compgen import names
from compgen.assembly import Body, Model, PluginRef
from compgen.frame import as_tuple, quat_relative, update_frame
from compgen.models import CurveShape
from compgen.skin import make_skin2, make_skin2_subgrid
from compgen.validation import ResolvedComposite


def curve_coordinate(shape: CurveShape, ix: int, n: int, size: tuple[float, float, float]) -> float:
    """Coordinate of centerline vertex ``ix`` of ``n`` along one axis."""
    if shape == "s":
        return ix * size[0] / (n - 1)
    if shape == "cos(s)":
        return size[1] * math.cos(math.pi * ix * size[2] / (n - 1))
    if shape == "sin(s)":
        return size[1] * math.sin(math.pi * ix * size[2] / (n - 1))
    if shape == "0":
        return 0.0
    raise AssertionError(f"Invalid curve shape: {shape!r}")


def centerline(comp: ResolvedComposite) -> np.ndarray:
    """Explicit vertices, or the curve sampled at ``count[0]`` points."""
    if comp.vertices:
        return np.array(comp.vertices, dtype=np.float64)
    n = comp.count[0]
    spec = comp.spec
    return np.array(
        [[curve_coordinate(spec.curve[k], ix, n, spec.size) for k in range(3)] for ix in range(n)],
        dtype=np.float64,
    )


def _unit(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


def make_cable(model: Model, parent: Body, comp: ResolvedComposite, plugin: PluginRef | None) -> None:
    spec = comp.spec
    prefix = comp.prefix
    defaults = comp.defaults
    geom_type = defaults.geom.type

    model.add_text(f"composite_{prefix}", f"rope_{prefix}")

    verts = centerline(comp)
    nvert = len(verts)
    last_ix = nvert - 2

    normal = np.array([0.0, 1.0, 0.0])
    prev_quat = np.array([1.0, 0.0, 0.0, 0.0])
    prev_length = 0.0
    body = parent
    for ix in range(nvert - 1):
        first = ix == 0
        last = ix == last_ix
        edge = verts[ix + 1] - verts[ix]
        tprev = None if first else _unit(verts[ix] - verts[ix - 1])
        tnext = None if last else _unit(verts[ix + 2] - verts[ix + 1])
        quat, normal, length = update_frame(normal, edge, tprev, tnext, first)

        this_body = names.cable(prefix, "B", ix, first, last)
        if first:
            pos = as_tuple(np.asarray(spec.offset) + verts[ix])
            body = model.add_body(body, this_body, pos=pos, quat=as_tuple(quat))
        else:
            # child frame sits at the far end of the parent segment
            rel = quat_relative(prev_quat, quat)
            body = model.add_body(body, this_body, pos=(prev_length, 0.0, 0.0), quat=as_tuple(rel))

        if geom_type in ("cylinder", "capsule"):
            model.add_geom(body, defaults.geom, name=names.geom(prefix, ix), fromto=(0.0, 0.0, 0.0, length, 0.0, 0.0))
        else:
            size = (length / 2, defaults.geom.size[1], defaults.geom.size[2])
            model.add_geom(body, defaults.geom, name=names.geom(prefix, ix), pos=(length / 2, 0.0, 0.0), size=size)

        if plugin is not None:
            body.plugin = plugin

        prev_quat = quat
        prev_length = length

        if not first or spec.initial != "none":
            if first and spec.initial == "free":
                model.add_joint(
                    body,
                    defaults.joint(),
                    name=names.cable(prefix, "J", ix, first, last),
                    type="free",
                    damping=0.0,
                    armature=0.0,
                    frictionloss=0.0,
                )
            else:
                model.add_joint(body, defaults.joint(), name=names.cable(prefix, "J", ix, first, last), type="ball")

        if not last:
            next_body = names.cable(prefix, "B", ix + 1, first=False, last=ix + 1 == last_ix)
            model.add_exclude(this_body, next_body)

        if first or last:
            model.add_site(
                body,
                defaults.site,
                name=names.cable(prefix, "S", ix, first, last),
                pos=(length if last else 0.0, 0.0, 0.0),
            )

    if geom_type == "box":
        inflate = 2 * defaults.geom.size[2]
        if comp.skin.subgrid > 0:
            make_skin2_subgrid(model, comp, (nvert, 3), inflate)
        else:
            make_skin2(model, comp, (nvert, 2), inflate)
