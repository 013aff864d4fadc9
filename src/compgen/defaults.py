"""Family-specific default templates (the SetDefault pass)."""

from __future__ import annotations

from dataclasses import dataclass

from compgen.errors import InvalidJointSet
from compgen.models import (
    DEFAULT_SOLIMP,
    DEFAULT_SOLREF,
    CompositeSpec,
    GeomDefaults,
    JointTemplate,
    SiteDefaults,
    TendonTemplate,
    Vec2,
    Vec5,
)

# element kinds; "joint" and "tendon" are the user-facing "main" kinds
KINDS: tuple[str, ...] = ("joint", "twist", "stretch", "tendon", "shear", "particle")

_JOINT_KIND = {"main": "joint", "twist": "twist", "stretch": "stretch", "particle": "particle"}
_TENDON_KIND = {"main": "tendon", "shear": "shear"}

HIDDEN_GROUP = 3
VISIBLE_GROUP = 0


@dataclass(frozen=True)
class Softness:
    """Constraint softness (solref, solimp) of a synthesized equality."""

    solref: Vec2 = DEFAULT_SOLREF
    solimp: Vec5 = DEFAULT_SOLIMP

    def hard(self) -> Softness:
        return Softness((0.01, self.solref[1]), (0.99, 0.99, *self.solimp[2:]))

    def soft(self) -> Softness:
        return Softness((0.02, self.solref[1]), (0.9, 0.9, *self.solimp[2:]))


@dataclass
class KindDefaults:
    geom: GeomDefaults
    site: SiteDefaults
    tendon: TendonTemplate
    equality: Softness = Softness()


@dataclass
class CompositeDefaults:
    """Resolved templates for every element kind of one composite."""

    kinds: dict[str, KindDefaults]
    joints: dict[str, list[JointTemplate]]
    added: frozenset[str]
    smooth: Softness

    @property
    def geom(self) -> GeomDefaults:
        return self.kinds["joint"].geom

    @property
    def site(self) -> SiteDefaults:
        return self.kinds["joint"].site

    def joint(self, kind: str = "joint") -> JointTemplate:
        return self.joints[kind][0]

    def equality(self, kind: str) -> Softness:
        return self.kinds[kind].equality

    def tendon(self, kind: str) -> TendonTemplate:
        return self.kinds[kind].tendon


def set_default(spec: CompositeSpec) -> CompositeDefaults:
    """Apply the family defaults to the templates of ``spec``.

    The spec itself is left untouched; attributes the user set explicitly
    always win over family defaults.

    Raises:
        InvalidJointSet: If a non-particle composite declares two joints of one kind.
    """
    dim = sum(1 for c in spec.count if c > 1)
    visible = (
        spec.skin is None
        or spec.type in ("particle", "rope", "loop", "cable")
        or (spec.type == "grid" and dim == 1)
    )
    group = VISIBLE_GROUP if visible else HIDDEN_GROUP

    geom_update: dict[str, object] = {}
    if spec.type == "particle":
        # no friction with anything
        geom_update = {"condim": 1, "priority": 1}
    elif spec.type in ("box", "cylinder", "ellipsoid"):
        # no self-collisions
        geom_update = {"contype": 0}
    geom = _fill_unset(spec.geom, {"group": group, "contype": 1, "condim": 3, "priority": 0}, geom_update)
    site = _fill_unset(spec.site, {"group": HIDDEN_GROUP})

    equality = {kind: Softness() for kind in KINDS}
    smooth = Softness()
    if spec.type == "grid":
        equality["tendon"] = equality["tendon"].hard()
    elif spec.type == "loop":
        smooth = smooth.hard()
    elif spec.type in ("box", "cylinder", "ellipsoid"):
        smooth = smooth.soft()
        equality = {kind: soft.soft() for kind, soft in equality.items()}
        equality["tendon"] = equality["tendon"].hard()

    if spec.solrefsmooth is not None or spec.solimpsmooth is not None:
        smooth = Softness(spec.solrefsmooth or smooth.solref, spec.solimpsmooth or smooth.solimp)

    tendons: dict[str, TendonTemplate] = {}
    for kind in KINDS:
        tendons[kind] = TendonTemplate(kind="main", group=group)
    for ten in spec.tendons:
        kind = _TENDON_KIND[ten.kind]
        tendons[kind] = _fill_unset(ten, {"group": group})
        equality[kind] = _override(equality[kind], ten.solreffix, ten.solimpfix)

    joints = _joint_lists(spec)
    for kind, templates in joints.items():
        equality[kind] = _override(equality[kind], templates[-1].solreffix, templates[-1].solimpfix)

    kinds = {
        kind: KindDefaults(geom=geom, site=site, tendon=tendons[kind], equality=equality[kind])
        for kind in KINDS
    }
    added = frozenset(
        {_JOINT_KIND[k] for k in spec.added_joint_kinds()}
        | {_TENDON_KIND[k] for k in spec.added_tendon_kinds()}
    )
    return CompositeDefaults(kinds=kinds, joints=joints, added=added, smooth=smooth)


def _joint_lists(spec: CompositeSpec) -> dict[str, list[JointTemplate]]:
    """Group joint templates by kind; kinds without templates get one default joint."""
    joints: dict[str, list[JointTemplate]] = {kind: [] for kind in KINDS}
    for jnt in spec.joints:
        kind = _JOINT_KIND[jnt.kind]
        if joints[kind] and spec.type != "particle":
            raise InvalidJointSet("Only particles are allowed to have multiple joints")
        joints[kind].append(_fill_unset(jnt, {"group": HIDDEN_GROUP}))
    for kind, templates in joints.items():
        if not templates:
            templates.append(JointTemplate(kind="main", group=HIDDEN_GROUP))
    return joints


def _fill_unset(model, defaults: dict[str, object], forced: dict[str, object] | None = None):
    """Copy ``model`` with ``None`` fields taken from ``defaults``, then ``forced``."""
    update = {key: value for key, value in defaults.items() if getattr(model, key) is None}
    for key, value in (forced or {}).items():
        if key not in model.model_fields_set:
            update[key] = value
    return model.model_copy(update=update)


def _override(soft: Softness, solref: Vec2 | None, solimp: Vec5 | None) -> Softness:
    if solref is None and solimp is None:
        return soft
    return Softness(solref or soft.solref, solimp or soft.solimp)
