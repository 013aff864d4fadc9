"""Soft 3D shells: sliding bodies on the surface of a box, cylinder or ellipsoid."""

from __future__ import annotations

import numpy as np

from compgen import names
from compgen.assembly import Body, Model, PluginRef
from compgen.frame import as_tuple, zaxis_to_quat
from compgen.projection import project
from compgen.skin import make_skin3
from compgen.validation import ResolvedComposite


def on_shell(idx: tuple[int, int, int], count: tuple[int, int, int]) -> bool:
    return any(i == 0 or i == c - 1 for i, c in zip(idx, count))


def shell_indices(count: tuple[int, int, int]) -> list[tuple[int, int, int]]:
    """Lattice indices on the outer layer, in body creation order."""
    c0, c1, c2 = count
    return [
        (ix, iy, iz)
        for ix in range(c0)
        for iy in range(c1)
        for iz in range(c2)
        if on_shell((ix, iy, iz), count)
    ]


def make_shell(model: Model, parent: Body, comp: ResolvedComposite, plugin: PluginRef | None) -> None:
    spec = comp.spec
    prefix = comp.prefix
    defaults = comp.defaults
    count = comp.count
    size = defaults.geom.size

    # oversized center sphere
    model.add_geom(
        parent,
        defaults.geom,
        name=prefix + "Gcenter",
        type="sphere",
        pos=(0.0, 0.0, 0.0),
        size=(2 * size[0], 0.0, 0.0),
    )

    # fixed tendon over all shell joints
    tendon = model.add_tendon(defaults.tendon("tendon"), name=names.tendon(prefix))
    fix = defaults.equality("joint")
    smooth = defaults.smooth

    for idx in shell_indices(count):
        cube = np.array([2.0 * i / (c - 1) - 1.0 for i, c in zip(idx, count)])
        pos = project(spec.type, cube, count, spec.spacing)
        body = model.add_body(parent, names.body(prefix, *idx), pos=as_tuple(pos), quat=as_tuple(zaxis_to_quat(pos)))

        # offset inwards
        if defaults.geom.type == "capsule":
            model.add_geom(body, defaults.geom, name=names.geom(prefix, *idx), pos=(0.0, 0.0, -(size[0] + size[1])))
        else:
            model.add_geom(
                body, defaults.geom, name=names.geom(prefix, *idx), type="sphere", pos=(0.0, 0.0, -size[0])
            )

        jnt = model.add_joint(
            body, defaults.joint(), name=names.joint(prefix, *idx), type="slide", axis=(0.0, 0.0, 1.0)
        )
        model.add_equality("joint", jnt.name, solref=fix.solref, solimp=fix.solimp)
        tendon.wrap_joint(jnt.name, 1.0)

        for i in range(3):
            neighbor = tuple(min(v + (k == i), c - 1) for k, (v, c) in enumerate(zip(idx, count)))
            if neighbor != idx and on_shell(neighbor, count):
                model.add_equality(
                    "joint",
                    jnt.name,
                    names.joint(prefix, *neighbor),
                    solref=smooth.solref,
                    solimp=smooth.solimp,
                )

    fixed = defaults.equality("tendon")
    model.add_equality("tendon", tendon.name, solref=fixed.solref, solimp=fixed.solimp)

    if spec.skin is not None:
        make_skin3(model, comp)
