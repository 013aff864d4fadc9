"""Hinged chains grown both ways from a root body, optionally closed into a loop."""

from __future__ import annotations

import math

from compgen import names
from compgen.assembly import Body, Model, PluginRef
from compgen.validation import ResolvedComposite, root_origin

# rotates the geom's z-axis onto the chain's x-axis
_GEOM_QUAT = (math.sqrt(0.5), 0.0, math.sqrt(0.5), 0.0)


def make_rope(model: Model, parent: Body, comp: ResolvedComposite, plugin: PluginRef | None) -> None:
    """Grow the chain from ``parent``, which must be named ``{prefix}B{origin}``."""
    n = comp.count[0]
    origin = comp.origin
    if origin is None:
        origin = root_origin(comp.prefix, parent.name, n)

    add_rope_body(model, parent, comp, origin, origin)

    body = parent
    for ix in range(origin, n - 1):
        body = add_rope_body(model, body, comp, ix, ix + 1)

    body = parent
    for ix in range(origin, 0, -1):
        body = add_rope_body(model, body, comp, ix, ix - 1)

    if comp.spec.type == "loop":
        first = names.body(comp.prefix, 0)
        last = names.body(comp.prefix, n - 1)
        smooth = comp.defaults.smooth
        model.add_equality(
            "connect",
            first,
            last,
            data=(-0.5 * comp.spec.spacing, 0.0, 0.0),
            solref=smooth.solref,
            solimp=smooth.solimp,
        )
        model.add_exclude(first, last)


def _loop_placement(spacing: float, n: int, forward: bool) -> tuple[tuple, tuple]:
    """Child pose bending a chain of ``n`` links of length ``spacing`` into a ring."""
    alpha = 2 * math.pi / n
    radius = 0.5 * spacing * math.sin(math.pi - alpha) / math.sin(0.5 * alpha)
    half = 0.5 * alpha if forward else -0.5 * alpha
    x = radius * math.cos(0.5 * alpha)
    pos = (x if forward else -x, radius * math.sin(0.5 * alpha), 0.0)
    quat = (math.cos(half), 0.0, 0.0, math.sin(half))
    return pos, quat


def add_rope_body(model: Model, body: Body, comp: ResolvedComposite, ix: int, ix1: int) -> Body:
    """Add link ``ix1`` as a child of link ``ix``; the root (``ix == ix1``) only gets a geom."""
    prefix = comp.prefix
    defaults = comp.defaults
    is_root = ix == ix1
    dx = comp.spec.spacing * (ix1 - ix)

    if not is_root:
        if comp.spec.type == "loop":
            pos, quat = _loop_placement(comp.spec.spacing, comp.count[0], ix1 > ix)
        else:
            pos, quat = (dx, 0.0, 0.0), (1.0, 0.0, 0.0, 0.0)
        body = model.add_body(body, names.body(prefix, ix1), pos=pos, quat=quat)

    model.add_geom(body, defaults.geom, name=names.geom(prefix, ix1), pos=(0.0, 0.0, 0.0), quat=_GEOM_QUAT)

    if is_root:
        return body

    hinge_pos = (-0.5 * dx, 0.0, 0.0)
    for i in range(2):
        axis = (0.0, float(i == 0), float(i == 1))
        model.add_joint(
            body, defaults.joint(), name=names.joint(prefix, i, ix1), type="hinge", pos=hinge_pos, axis=axis
        )

    if "twist" in defaults.added:
        jnt = model.add_joint(
            body,
            defaults.joint("twist"),
            name=names.element(prefix, "JT", ix1),
            type="hinge",
            pos=hinge_pos,
            axis=(1.0, 0.0, 0.0),
        )
        soft = defaults.equality("twist")
        model.add_equality("joint", jnt.name, solref=soft.solref, solimp=soft.solimp)

    if "stretch" in defaults.added:
        jnt = model.add_joint(
            body,
            defaults.joint("stretch"),
            name=names.element(prefix, "JS", ix1),
            type="slide",
            pos=hinge_pos,
            axis=(1.0, 0.0, 0.0),
        )
        soft = defaults.equality("stretch")
        model.add_equality("joint", jnt.name, solref=soft.solref, solimp=soft.solimp)

    return body
