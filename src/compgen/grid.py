"""1D and 2D grids of sliding bodies held together by fixed-length tendons."""

from __future__ import annotations

from compgen import names
from compgen.assembly import Body, Model, PluginRef
from compgen.skin import make_skin2, make_skin2_subgrid
from compgen.validation import ResolvedComposite

_AXES = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def make_grid(model: Model, parent: Body, comp: ResolvedComposite, plugin: PluginRef | None) -> None:
    spec = comp.spec
    prefix = comp.prefix
    c0, c1, _ = comp.count

    for ix in range(c0):
        for iy in range(c1):
            pos = (
                spec.offset[0] + spec.spacing * (ix - 0.5 * c0),
                spec.offset[1] + spec.spacing * (iy - 0.5 * c1),
                spec.offset[2],
            )
            body = model.add_body(parent, names.body(prefix, ix, iy), pos=pos)
            model.add_geom(body, comp.defaults.geom, name=names.geom(prefix, ix, iy), type="sphere")
            model.add_site(body, comp.defaults.site, name=names.site(prefix, ix, iy), type="sphere")

            if comp.pinned(ix, iy):
                continue
            for i, axis in enumerate(_AXES):
                model.add_joint(
                    body,
                    comp.defaults.joint(),
                    name=names.joint(prefix, i, ix, iy),
                    type="slide",
                    axis=axis,
                )

    softness = comp.defaults.equality("tendon")
    for i in range(2):
        for ix in range(c0 - (i == 0)):
            for iy in range(c1 - (i == 1)):
                tendon = model.add_tendon(comp.defaults.tendon("tendon"), name=names.tendon(prefix, i, ix, iy))
                tendon.wrap_site(names.site(prefix, ix, iy))
                tendon.wrap_site(names.site(prefix, ix + (i == 0), iy + (i == 1)))
                model.add_equality("tendon", tendon.name, solref=softness.solref, solimp=softness.solimp)

    if "shear" in comp.defaults.added:
        make_shear(model, comp)

    if spec.skin is not None:
        if comp.skin.subgrid > 0:
            make_skin2_subgrid(model, comp, (c0, c1), comp.skin.inflate)
        else:
            make_skin2(model, comp, (c0, c1), comp.skin.inflate)


def make_shear(model: Model, comp: ResolvedComposite) -> None:
    """Diagonal tendons across every cell of a 2D grid."""
    prefix = comp.prefix
    softness = comp.defaults.equality("shear")
    for ix in range(comp.count[0] - 1):
        for iy in range(comp.count[1] - 1):
            tendon = model.add_tendon(comp.defaults.tendon("shear"), name=names.element(prefix, "TS", ix, iy))
            tendon.wrap_site(names.site(prefix, ix, iy))
            tendon.wrap_site(names.site(prefix, ix + 1, iy + 1))
            model.add_equality("tendon", tendon.name, solref=softness.solref, solimp=softness.solimp)
