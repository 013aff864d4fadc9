"""Pydantic v2 schema models for composite specifications."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Family = Literal[
    "particle",
    "grid",
    "rope",
    "loop",
    "cable",
    "cloth",
    "box",
    "cylinder",
    "ellipsoid",
]

GeomType = Literal["sphere", "capsule", "ellipsoid", "cylinder", "box"]

CurveShape = Literal["s", "cos(s)", "sin(s)", "0"]

JointKind = Literal["main", "twist", "stretch", "particle"]

TendonKind = Literal["main", "shear"]

JointType = Literal["free", "ball", "slide", "hinge"]

# MuJoCo-style constraint softness defaults
DEFAULT_SOLREF: tuple[float, float] = (0.02, 1.0)
DEFAULT_SOLIMP: tuple[float, float, float, float, float] = (0.9, 0.95, 0.001, 0.5, 2.0)

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]
Vec5 = tuple[float, float, float, float, float]


def _flatten(v: object) -> object:
    """Accept ``[[a, b, c], ...]`` as well as flat ``[a, b, c, ...]``."""
    if isinstance(v, (list, tuple)) and v and isinstance(v[0], (list, tuple)):
        return [x for row in v for x in row]
    return v


class GeomDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: GeomType = "sphere"
    size: Vec3 = (0.005, 0.0, 0.0)
    # None means "resolved by the family defaults"
    contype: int | None = None
    conaffinity: int = 1
    condim: int | None = None
    group: int | None = None
    priority: int | None = None
    friction: Vec3 = (1.0, 0.005, 0.0001)
    solmix: float = 1.0
    solref: Vec2 = DEFAULT_SOLREF
    solimp: Vec5 = DEFAULT_SOLIMP
    margin: float = 0.0
    gap: float = 0.0
    material: str | None = None
    rgba: Vec4 = (0.5, 0.5, 0.5, 1.0)
    mass: float | None = None
    density: float = 1000.0


class SiteDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    size: Vec3 = (0.005, 0.0, 0.0)
    group: int | None = None
    material: str | None = None
    rgba: Vec4 = (0.5, 0.5, 0.5, 1.0)


class JointTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: JointKind
    type: JointType | None = None
    axis: Vec3 | None = None
    group: int | None = None
    stiffness: float = 0.0
    damping: float = 0.0
    armature: float = 0.0
    frictionloss: float = 0.0
    limited: bool | None = None
    range: Vec2 = (0.0, 0.0)
    margin: float = 0.0
    # softness of the equality constraint synthesized for this joint
    solreffix: Vec2 | None = None
    solimpfix: Vec5 | None = None


class TendonTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: TendonKind
    group: int | None = None
    stiffness: float = 0.0
    damping: float = 0.0
    frictionloss: float = 0.0
    limited: bool | None = None
    range: Vec2 = (0.0, 0.0)
    margin: float = 0.0
    material: str | None = None
    rgba: Vec4 = (0.5, 0.5, 0.5, 1.0)
    width: float = 0.003
    solreffix: Vec2 | None = None
    solimpfix: Vec5 | None = None


class SkinSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    texcoord: bool = False
    material: str | None = None
    rgba: Vec4 = (1.0, 1.0, 1.0, 1.0)
    inflate: float = 0.0
    subgrid: int = Field(default=0, ge=0)
    group: int = Field(default=0, ge=0, le=5)


class PluginSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    plugin: str
    instance: str | None = None
    config: dict[str, str] = {}


class CompositeSpec(BaseModel):
    """Declarative description of one composite, as produced by the loader."""

    model_config = ConfigDict(extra="forbid")

    prefix: str = ""
    type: Family = "particle"
    count: tuple[int, int, int] = (1, 1, 1)
    spacing: float = 0.0
    offset: Vec3 = (0.0, 0.0, 0.0)
    pin: list[int] = []
    solrefsmooth: Vec2 | None = None
    solimpsmooth: Vec5 | None = None
    geom: GeomDefaults = GeomDefaults()
    site: SiteDefaults = SiteDefaults()
    joints: list[JointTemplate] = []
    tendons: list[TendonTemplate] = []
    # cable
    curve: tuple[CurveShape, CurveShape, CurveShape] = ("0", "0", "0")
    size: Vec3 = (1.0, 0.0, 0.0)
    initial: Literal["none", "ball", "free"] = "ball"
    # explicit geometry
    vertex: list[float] | None = None
    face: list[int] | None = None
    skin: SkinSpec | None = None
    plugin: PluginSpec | None = None

    @field_validator("pin", "vertex", "face", mode="before")
    @classmethod
    def flatten_nested(cls, v: object) -> object:
        return _flatten(v)

    @field_validator("curve", mode="before")
    @classmethod
    def split_curve(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.split()
        if isinstance(v, (list, tuple)):
            if len(v) > 3:
                raise ValueError("The curve array must have a maximum of 3 components")
            return tuple(v) + ("0",) * (3 - len(v))
        return v

    @model_validator(mode="after")
    def _check_triples(self) -> CompositeSpec:
        if self.vertex is not None and len(self.vertex) % 3:
            raise ValueError("vertex must hold whole (x, y, z) triples")
        if self.face is not None and len(self.face) % 3:
            raise ValueError("face must hold whole triangles")
        return self

    def added_joint_kinds(self) -> set[str]:
        return {jnt.kind for jnt in self.joints}

    def added_tendon_kinds(self) -> set[str]:
        return {ten.kind for ten in self.tendons}
