"""Semantic validation of composite specs.

Every check runs before the model is touched, so a composite that fails
validation leaves no partial elements behind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from compgen.defaults import CompositeDefaults, set_default
from compgen.errors import (
    ConflictingVertexSpec,
    DeprecatedFamily,
    DimensionOrderError,
    DuplicateConfigKey,
    InsufficientSpacing,
    InvalidAttribute,
    InvalidCount,
    InvalidDimension,
    InvalidGeomType,
    InvalidPinShape,
    InvalidRootBody,
    MissingGeometryExtent,
    SubgridTooSmall,
    UnsupportedAttribute,
)
from compgen.models import CompositeSpec, SkinSpec, Vec3
from compgen.warning_policy import WarningPolicy, emit_warning

SHELL_FAMILIES = ("box", "cylinder", "ellipsoid")

_BODY_GEOMS = ("sphere", "capsule", "ellipsoid")
_CABLE_GEOMS = ("cylinder", "capsule", "box")

_DEPRECATED = {
    "rope": 'The "rope" composite type is deprecated. Please use "cable" instead.',
    "cloth": 'The "cloth" composite type is deprecated. Please use "shell" instead.',
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class ResolvedComposite:
    """A validated composite, ready for one of the shape builders.

    ``count`` is the final lattice extent (overridden by explicit vertices) and
    ``dim`` the number of non-singleton axes; neither changes afterwards.
    """

    spec: CompositeSpec
    defaults: CompositeDefaults
    count: tuple[int, int, int]
    dim: int
    vertices: list[Vec3] = field(default_factory=list)
    faces: list[tuple[int, int, int]] = field(default_factory=list)
    thickness: float = 1.0
    origin: int | None = None

    @property
    def prefix(self) -> str:
        return self.spec.prefix

    @property
    def skin(self) -> SkinSpec:
        """Skin attributes; cables get a default skin even when none was requested."""
        return self.spec.skin or SkinSpec()

    def pinned(self, ix: int, iy: int) -> bool:
        pin = self.spec.pin
        return any(pin[i] == ix and pin[i + 1] == iy for i in range(0, len(pin), 2))


def validate(
    spec: CompositeSpec,
    *,
    parent_name: str | None = None,
    warning_policy: WarningPolicy | None = None,
) -> ResolvedComposite:
    """Check ``spec`` and resolve its final counts, dimension and explicit geometry.

    Args:
        spec: Composite as produced by the loader.
        parent_name: Name of the body the composite will be attached to. Rope
            and loop composites decode their origin from it; when None that
            check is skipped.
        warning_policy: Optional policy for coded warnings.

    Raises:
        ValidationError: On the first violated rule.
    """
    _check_deprecated(spec)
    defaults = set_default(spec)

    _check_geom_type(spec)
    _check_pin_shape(spec)
    _check_counts(spec)
    _check_spacing(spec)
    _check_cable_extent(spec)
    _check_explicit_geometry(spec)

    vertices = _vertex_triples(spec.vertex)
    count = _resolved_count(spec, vertices)
    dim = _dimension(count)
    _check_subgrid(spec, count)
    _warn_loop(spec, warning_policy)

    faces = _faces(spec, count, vertices)
    if spec.type == "particle" and spec.face is not None:
        # explicit faces always describe a surface
        dim = 2

    comp = ResolvedComposite(spec=spec, defaults=defaults, count=count, dim=dim, vertices=vertices, faces=faces)
    _FAMILY_CHECKS[spec.type](comp, parent_name, warning_policy)
    return comp


# ---------------------------------------------------------------------------
# Global checks
# ---------------------------------------------------------------------------


def _check_geom_type(spec: CompositeSpec) -> None:
    geom_type = spec.geom.type
    if spec.type == "cable":
        if geom_type not in _CABLE_GEOMS:
            raise InvalidGeomType("Cable geom type must be cylinder, capsule or box")
    elif spec.type != "particle" and geom_type not in _BODY_GEOMS:
        raise InvalidGeomType("Composite geom type must be sphere, capsule or ellipsoid")


def _check_pin_shape(spec: CompositeSpec) -> None:
    if len(spec.pin) % 2:
        raise InvalidPinShape("Pin coordinate number must be a multiple of 2")


def _check_counts(spec: CompositeSpec) -> None:
    if any(c < 1 for c in spec.count):
        raise InvalidCount(f"Positive counts expected in composite, got {list(spec.count)}")


def _check_spacing(spec: CompositeSpec) -> None:
    lattice = spec.type == "grid" or (spec.type == "particle" and spec.vertex is None)
    if lattice and spec.spacing < max(spec.geom.size):
        raise InsufficientSpacing(
            f"Spacing must be larger than geometry size ({spec.spacing} < {max(spec.geom.size)})"
        )


def _check_cable_extent(spec: CompositeSpec) -> None:
    if spec.type != "cable":
        return
    if spec.vertex is None and sum(s * s for s in spec.size) < 1e-15:
        raise MissingGeometryExtent("Positive spacing or length expected in composite")
    if spec.spacing:
        raise UnsupportedAttribute("Spacing is not supported by cable composite")


def _check_explicit_geometry(spec: CompositeSpec) -> None:
    if spec.vertex is not None:
        if spec.type not in ("particle", "cable"):
            raise UnsupportedAttribute(f"Explicit vertices are not supported by {spec.type} composite")
        if spec.count[0] > 1:
            raise ConflictingVertexSpec("Either vertex or count can be specified, not both")
        if not spec.vertex:
            raise InvalidCount("Explicit vertex list is empty")
    if spec.face is not None and spec.type != "particle":
        raise UnsupportedAttribute(f"Explicit faces are not supported by {spec.type} composite")


def _vertex_triples(vertex: list[float] | None) -> list[Vec3]:
    if vertex is None:
        return []
    return [(vertex[i], vertex[i + 1], vertex[i + 2]) for i in range(0, len(vertex), 3)]


def _resolved_count(spec: CompositeSpec, vertices: list[Vec3]) -> tuple[int, int, int]:
    if vertices:
        return (len(vertices), 1, spec.count[2])
    return spec.count


def _dimension(count: tuple[int, int, int]) -> int:
    """Number of non-singleton axes; singleton axes must come last."""
    dim = 0
    singleton = False
    for c in count:
        if c == 1:
            singleton = True
        else:
            if singleton:
                raise DimensionOrderError(f"Singleton counts must come last, got {list(count)}")
            dim += 1
    return dim


def _check_subgrid(spec: CompositeSpec, count: tuple[int, int, int]) -> None:
    if spec.skin is None or spec.skin.subgrid == 0 or spec.type == "cable":
        return
    if count[0] < 3 or count[1] < 3:
        raise SubgridTooSmall("At least 3x3 required for skin subgrid")


def _check_deprecated(spec: CompositeSpec) -> None:
    if spec.type in _DEPRECATED:
        raise DeprecatedFamily(_DEPRECATED[spec.type])


def _warn_loop(spec: CompositeSpec, warning_policy: WarningPolicy | None) -> None:
    if spec.type == "loop":
        emit_warning(
            "W01",
            'The "loop" composite type is deprecated. Please use "cable" instead.',
            policy=warning_policy,
        )


def _faces(
    spec: CompositeSpec, count: tuple[int, int, int], vertices: list[Vec3]
) -> list[tuple[int, int, int]]:
    """Explicit faces converted to 0-based triangles."""
    if spec.face is None:
        return []
    nvert = len(vertices) if vertices else count[0] * count[1] * count[2]
    for index in spec.face:
        if not 1 <= index <= nvert:
            raise InvalidAttribute(f"Face index {index} out of range 1..{nvert}")
    f = [i - 1 for i in spec.face]
    return [(f[i], f[i + 1], f[i + 2]) for i in range(0, len(f), 3)]


# ---------------------------------------------------------------------------
# Family checks
# ---------------------------------------------------------------------------


def _check_particle(comp: ResolvedComposite, parent_name: str | None, policy: WarningPolicy | None) -> None:
    plugin = comp.spec.plugin
    if plugin is None or plugin.instance is not None:
        # named instances are checked against the model they live in
        return
    if plugin.config.get("face"):
        raise DuplicateConfigKey("Face attribute already exists in plugin")
    if comp.dim == 2:
        comp.thickness = parse_thickness(plugin.config)


def parse_thickness(config: dict[str, str]) -> float:
    """Shell thickness of a deformable-plugin surface.

    Raises:
        InvalidAttribute: If ``thickness`` is missing or not a number.
    """
    raw = config.get("thickness", "")
    try:
        return float(raw)
    except ValueError:
        raise InvalidAttribute(f"Invalid thickness attribute: {raw!r}") from None


def _check_grid(comp: ResolvedComposite, parent_name: str | None, policy: WarningPolicy | None) -> None:
    if comp.dim > 2:
        raise InvalidDimension("Grid can only be 1D or 2D")
    if "shear" in comp.defaults.added and comp.dim != 2:
        raise InvalidDimension("Shear requires 2D grid")
    if comp.spec.skin is not None and comp.dim != 2:
        raise InvalidDimension("Skin requires 2D grid")


def _check_cable(comp: ResolvedComposite, parent_name: str | None, policy: WarningPolicy | None) -> None:
    if comp.dim != 1:
        raise InvalidDimension("Cable must be one-dimensional")
    if comp.spec.geom.type != "box":
        if comp.spec.skin is not None:
            emit_warning(
                "W02",
                f"Cable skin is only generated for box geoms, not {comp.spec.geom.type}",
                policy=policy,
            )
    elif comp.skin.subgrid > 0 and comp.count[0] < 3:
        raise SubgridTooSmall("At least 3 vertices required for cable skin subgrid")


def _check_rope(comp: ResolvedComposite, parent_name: str | None, policy: WarningPolicy | None) -> None:
    if comp.dim != 1:
        raise InvalidDimension("Rope must be one-dimensional")
    if parent_name is not None:
        comp.origin = root_origin(comp.prefix, parent_name, comp.count[0])


def root_origin(prefix: str, root: str, count: int) -> int:
    """Decode the origin index ``ox`` from a root body named ``{prefix}B{ox}``.

    Raises:
        InvalidRootBody: If the name does not start with ``{prefix}B`` followed
            by an integer in ``[0, count)``.
    """
    head = prefix + "B"
    if not root.startswith(head):
        raise InvalidRootBody(f"{head} must be the beginning of root body name, got {root!r}")
    match = _LEADING_INT.match(root, len(head))
    if match is None:
        raise InvalidRootBody(f"Root body name must contain X coordinate, got {root!r}")
    origin = int(match.group(1))
    if not 0 <= origin < count:
        raise InvalidRootBody(f"Root body coordinate {origin} out of range [0, {count})")
    return origin


def _check_shell(comp: ResolvedComposite, parent_name: str | None, policy: WarningPolicy | None) -> None:
    if comp.dim != 3:
        raise InvalidDimension("Box and ellipsoid must be three-dimensional")


_FAMILY_CHECKS = {
    "particle": _check_particle,
    "grid": _check_grid,
    "cable": _check_cable,
    "loop": _check_rope,
    "box": _check_shell,
    "cylinder": _check_shell,
    "ellipsoid": _check_shell,
}
