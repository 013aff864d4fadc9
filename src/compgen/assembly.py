"""In-memory model builder that receives generated elements.

Elements are stored in per-kind arenas and indexed by name. Cross references
between elements (tendon wraps, equality targets, excluded pairs, skin bones)
are kept as plain name strings and only resolved by ``check_references``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from compgen.errors import DuplicateName, UnresolvedReference
from compgen.models import (
    DEFAULT_SOLIMP,
    DEFAULT_SOLREF,
    GeomDefaults,
    JointTemplate,
    SiteDefaults,
    TendonTemplate,
)

_IDENTITY_QUAT = (1.0, 0.0, 0.0, 0.0)


@dataclass
class PluginRef:
    plugin: str
    instance: str


@dataclass
class Body:
    name: str
    parent: str | None = None
    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    quat: tuple[float, float, float, float] = _IDENTITY_QUAT
    plugin: PluginRef | None = None
    children: list[str] = field(default_factory=list)


@dataclass
class Joint:
    name: str
    body: str
    type: str = "hinge"
    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    axis: tuple[float, float, float] = (0.0, 0.0, 1.0)
    group: int = 0
    stiffness: float = 0.0
    damping: float = 0.0
    armature: float = 0.0
    frictionloss: float = 0.0
    limited: bool | None = None
    range: tuple[float, float] = (0.0, 0.0)
    margin: float = 0.0


@dataclass
class Geom:
    name: str
    body: str
    type: str = "sphere"
    size: tuple[float, float, float] = (0.0, 0.0, 0.0)
    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    quat: tuple[float, float, float, float] = _IDENTITY_QUAT
    fromto: tuple[float, ...] | None = None
    contype: int = 1
    conaffinity: int = 1
    condim: int = 3
    group: int = 0
    priority: int = 0
    friction: tuple[float, float, float] = (1.0, 0.005, 0.0001)
    solmix: float = 1.0
    solref: tuple[float, ...] = DEFAULT_SOLREF
    solimp: tuple[float, ...] = DEFAULT_SOLIMP
    margin: float = 0.0
    gap: float = 0.0
    material: str | None = None
    rgba: tuple[float, float, float, float] = (0.5, 0.5, 0.5, 1.0)
    mass: float | None = None
    density: float = 1000.0


@dataclass
class Site:
    name: str
    body: str
    type: str = "sphere"
    size: tuple[float, float, float] = (0.005, 0.0, 0.0)
    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    quat: tuple[float, float, float, float] = _IDENTITY_QUAT
    group: int = 0
    material: str | None = None
    rgba: tuple[float, float, float, float] = (0.5, 0.5, 0.5, 1.0)


@dataclass
class Wrap:
    type: str  # "site" or "joint"
    target: str
    coef: float = 1.0


@dataclass
class Tendon:
    name: str
    group: int = 0
    stiffness: float = 0.0
    damping: float = 0.0
    frictionloss: float = 0.0
    limited: bool | None = None
    range: tuple[float, float] = (0.0, 0.0)
    margin: float = 0.0
    material: str | None = None
    rgba: tuple[float, float, float, float] = (0.5, 0.5, 0.5, 1.0)
    width: float = 0.003
    wraps: list[Wrap] = field(default_factory=list)

    def wrap_site(self, name: str) -> None:
        self.wraps.append(Wrap("site", name))

    def wrap_joint(self, name: str, coef: float) -> None:
        self.wraps.append(Wrap("joint", name, coef))


@dataclass
class Equality:
    type: str  # "connect", "joint" or "tendon"
    name1: str
    name2: str | None = None
    data: tuple[float, ...] = (0.0, 0.0, 0.0)
    solref: tuple[float, ...] = DEFAULT_SOLREF
    solimp: tuple[float, ...] = DEFAULT_SOLIMP


@dataclass
class ExcludePair:
    body1: str
    body2: str


@dataclass
class SkinBone:
    body: str
    bindpos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    bindquat: tuple[float, float, float, float] = _IDENTITY_QUAT
    vertid: list[int] = field(default_factory=list)
    vertweight: list[float] = field(default_factory=list)

    def bind(self, vertex: int, weight: float) -> None:
        self.vertid.append(vertex)
        self.vertweight.append(weight)


@dataclass
class Skin:
    name: str
    material: str | None = None
    rgba: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    inflate: float = 0.0
    group: int = 0
    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    texcoords: list[tuple[float, float]] = field(default_factory=list)
    faces: list[tuple[int, int, int]] = field(default_factory=list)
    bones: list[SkinBone] = field(default_factory=list)


@dataclass
class Text:
    name: str
    data: str


@dataclass
class PluginInstance:
    name: str
    plugin: str
    config: dict[str, str] = field(default_factory=dict)


ELEMENT_KINDS: tuple[str, ...] = (
    "body",
    "joint",
    "geom",
    "site",
    "tendon",
    "equality",
    "exclude",
    "skin",
    "text",
    "plugin",
)

_PLURAL = {"body": "bodies", "equality": "equalities"}


class Model:
    """Arena of named model elements.

    Unnamed elements (equalities, excluded pairs, some geoms) live in the
    arenas but not in the name index.
    """

    def __init__(self, root: str = "world") -> None:
        self._arenas: dict[str, list[Any]] = {kind: [] for kind in ELEMENT_KINDS}
        self._index: dict[str, dict[str, Any]] = {kind: {} for kind in ELEMENT_KINDS}
        self.root = self._register("body", Body(name=root))

    # --- element creation ---

    def add_body(
        self,
        parent: Body,
        name: str,
        pos: tuple[float, float, float] = (0.0, 0.0, 0.0),
        quat: tuple[float, float, float, float] = _IDENTITY_QUAT,
    ) -> Body:
        body = self._register("body", Body(name=name, parent=parent.name, pos=pos, quat=quat))
        parent.children.append(name)
        return body

    def add_joint(self, body: Body, template: JointTemplate | None, name: str = "", **attrs: Any) -> Joint:
        values = _template_values(template, Joint)
        values.update(attrs)
        return self._register("joint", Joint(name=name, body=body.name, **values))

    def add_geom(self, body: Body, template: GeomDefaults | None, name: str = "", **attrs: Any) -> Geom:
        values = _template_values(template, Geom)
        values.update(attrs)
        return self._register("geom", Geom(name=name, body=body.name, **values))

    def add_site(self, body: Body, template: SiteDefaults | None, name: str = "", **attrs: Any) -> Site:
        values = _template_values(template, Site)
        values.update(attrs)
        return self._register("site", Site(name=name, body=body.name, **values))

    def add_tendon(self, template: TendonTemplate | None, name: str = "") -> Tendon:
        return self._register("tendon", Tendon(name=name, **_template_values(template, Tendon)))

    def add_equality(self, type: str, name1: str, name2: str | None = None, **attrs: Any) -> Equality:
        return self._register("equality", Equality(type=type, name1=name1, name2=name2, **attrs))

    def add_exclude(self, body1: str, body2: str) -> ExcludePair:
        return self._register("exclude", ExcludePair(body1, body2))

    def add_skin(self, name: str) -> Skin:
        return self._register("skin", Skin(name=name))

    def add_text(self, name: str, data: str) -> Text:
        return self._register("text", Text(name=name, data=data))

    def add_plugin(self, name: str, plugin: str, config: dict[str, str] | None = None) -> PluginInstance:
        instance = PluginInstance(name=name, plugin=plugin, config=dict(config or {}))
        return self._register("plugin", instance)

    # --- lookup ---

    def find(self, kind: str, name: str) -> Any | None:
        return self._index[kind].get(name)

    def elements(self, kind: str) -> list[Any]:
        return list(self._arenas[kind])

    def names(self, kind: str) -> list[str]:
        return [el.name for el in self._arenas[kind] if getattr(el, "name", "")]

    def count(self, kind: str) -> int:
        return len(self._arenas[kind])

    def counts(self) -> dict[str, int]:
        return {kind: len(arena) for kind, arena in self._arenas.items()}

    def joints_of(self, body: str) -> list[Joint]:
        return [jnt for jnt in self._arenas["joint"] if jnt.body == body]

    def geoms_of(self, body: str) -> list[Geom]:
        return [g for g in self._arenas["geom"] if g.body == body]

    def check_references(self) -> None:
        """Resolve every name-based cross reference.

        Raises:
            UnresolvedReference: On the first reference that names no element.
        """
        for ten in self._arenas["tendon"]:
            for wrap in ten.wraps:
                self._resolve(wrap.type, wrap.target, f"tendon {ten.name!r}")
        for eq in self._arenas["equality"]:
            target = {"connect": "body", "joint": "joint", "tendon": "tendon"}[eq.type]
            self._resolve(target, eq.name1, f"{eq.type} equality")
            if eq.name2:
                self._resolve(target, eq.name2, f"{eq.type} equality")
        for pair in self._arenas["exclude"]:
            self._resolve("body", pair.body1, "exclude pair")
            self._resolve("body", pair.body2, "exclude pair")
        for skin in self._arenas["skin"]:
            for bone in skin.bones:
                self._resolve("body", bone.body, f"skin {skin.name!r}")

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            _PLURAL.get(kind, kind + "s"): [asdict(el) for el in arena]
            for kind, arena in self._arenas.items()
        }

    # --- internals ---

    def _register(self, kind: str, element: Any) -> Any:
        name = getattr(element, "name", "")
        if name:
            if name in self._index[kind]:
                raise DuplicateName(f"Duplicate {kind} name: {name!r}")
            self._index[kind][name] = element
        self._arenas[kind].append(element)
        return element

    def _resolve(self, kind: str, name: str, context: str) -> None:
        if name not in self._index[kind]:
            raise UnresolvedReference(f"{context} refers to unknown {kind} {name!r}")


def _template_values(template: Any, target: type) -> dict[str, Any]:
    """Template attributes that the target element type also carries."""
    if template is None:
        return {}
    fields = target.__dataclass_fields__
    return {
        key: value
        for key, value in template.model_dump().items()
        if key in fields and key not in ("name", "body") and value is not None
    }
