"""Particle clouds: one free-sliding body per vertex."""

from __future__ import annotations

import math

import numpy as np

from compgen import names
from compgen.assembly import Body, Model, PluginRef
from compgen.skin import make_mesh_skin, make_skin2, make_skin2_subgrid, make_skin3
from compgen.validation import ResolvedComposite

# corner order: 000, 100, 110, 010, 001, 101, 111, 011
CUBE_TO_TETS: tuple[tuple[int, int, int, int], ...] = (
    (0, 3, 1, 7),
    (0, 1, 4, 7),
    (1, 3, 2, 7),
    (1, 2, 6, 7),
    (1, 5, 4, 7),
    (1, 6, 5, 7),
)
QUAD_TO_TRIS: tuple[tuple[int, int, int], ...] = ((0, 1, 2), (0, 2, 3))

ISOMETRY_TENDON_GROUP = 4


def lattice_vertices(count: tuple[int, int, int], spacing: float) -> np.ndarray:
    """Lattice points ``spacing * (i - 0.5 * count)``, last axis fastest."""
    c0, c1, c2 = count
    return np.array(
        [
            (spacing * (ix - 0.5 * c0), spacing * (iy - 0.5 * c1), spacing * (iz - 0.5 * c2))
            for ix in range(c0)
            for iy in range(c1)
            for iz in range(c2)
        ],
        dtype=np.float64,
    ).reshape(-1, 3)


def lattice_faces(count: tuple[int, int, int], dim: int) -> list[tuple[int, ...]]:
    """Six tetrahedra per lattice cube (3D) or two triangles per quad (2D)."""
    c0, c1, c2 = count

    def vid(ix: int, iy: int, iz: int = 0) -> int:
        return c2 * c1 * ix + c2 * iy + iz

    faces: list[tuple[int, ...]] = []
    if dim == 3:
        for ix in range(c0 - 1):
            for iy in range(c1 - 1):
                for iz in range(c2 - 1):
                    corners = [
                        vid(ix + dx, iy + dy, iz + dz)
                        for dz in (0, 1)
                        for dx, dy in ((0, 0), (1, 0), (1, 1), (0, 1))
                    ]
                    faces.extend(tuple(corners[v] for v in tet) for tet in CUBE_TO_TETS)
    elif dim == 2:
        for ix in range(c0 - 1):
            for iy in range(c1 - 1):
                corners = [vid(ix, iy), vid(ix + 1, iy), vid(ix + 1, iy + 1), vid(ix, iy + 1)]
                faces.extend(tuple(corners[v] for v in tri) for tri in QUAD_TO_TRIS)
    return faces


def vertex_volumes(
    vertices: np.ndarray, faces: list[tuple[int, int, int]], thickness: float
) -> np.ndarray:
    """Volume per vertex: a third of each incident triangle's area times thickness."""
    volume = np.zeros(len(vertices), dtype=np.float64)
    for tri in faces:
        v0, v1, v2 = (vertices[i] for i in tri)
        area = 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0))
        for i in tri:
            volume[i] += area / 3.0 * thickness
    return volume


def unique_edges(faces: list[tuple[int, ...]]) -> list[tuple[int, int]]:
    """Sorted, deduplicated undirected edges of a triangle list."""
    edges = set()
    for tri in faces:
        for j in range(3):
            v0, v1 = tri[j], tri[(j + 1) % 3]
            edges.add((min(v0, v1), max(v0, v1)))
    return sorted(edges)


def make_particle(model: Model, parent: Body, comp: ResolvedComposite, plugin: PluginRef | None) -> None:
    spec = comp.spec
    prefix = comp.prefix
    defaults = comp.defaults

    lattice = not comp.vertices
    if lattice:
        vertices = lattice_vertices(comp.count, spec.spacing)
        body_names = [
            names.body(prefix, ix, iy, iz)
            for ix in range(comp.count[0])
            for iy in range(comp.count[1])
            for iz in range(comp.count[2])
        ]
    else:
        vertices = np.array(comp.vertices, dtype=np.float64)
        body_names = [names.body(prefix, i) for i in range(len(vertices))]

    faces = comp.faces or lattice_faces(comp.count, comp.dim)
    if comp.faces:
        volume = vertex_volumes(vertices, comp.faces, comp.thickness)
    else:
        volume = np.full(len(vertices), 6 * spec.spacing**2 / 2 * comp.thickness)

    if plugin is not None:
        config = model.find("plugin", plugin.instance).config
        config["face"] = " ".join(str(v) for f in faces for v in f)
        config["edge"] = ""

    custom_joints = "particle" in defaults.added
    offset = np.asarray(spec.offset, dtype=np.float64)
    for i, name in enumerate(body_names):
        body = model.add_body(parent, name, pos=tuple(float(x) for x in offset + vertices[i]))
        if custom_joints:
            for template in defaults.joints["particle"]:
                model.add_joint(body, template)
        else:
            for axis in np.eye(3):
                model.add_joint(body, defaults.joint(), type="slide", axis=tuple(axis))

        geom = model.add_geom(body, defaults.geom)
        model.add_site(body, defaults.site, name=names.site(prefix, i), type="sphere")

        if plugin is not None:
            body.plugin = plugin
            if comp.dim == 2:
                geom.density *= volume[i] / (4.0 / 3.0 * math.pi * geom.size[0] ** 3)

    if comp.dim == 2:
        _add_isometry(model, comp, faces)

    if spec.skin is not None:
        if comp.dim == 3:
            make_skin3(model, comp)
        elif comp.dim == 2:
            if not lattice:
                make_mesh_skin(model, comp)
            elif comp.skin.subgrid > 0:
                make_skin2_subgrid(model, comp, comp.count[:2], comp.skin.inflate)
            else:
                make_skin2(model, comp, comp.count[:2], comp.skin.inflate)


def _add_isometry(model: Model, comp: ResolvedComposite, faces: list[tuple[int, ...]]) -> None:
    """Pin the length of every mesh edge with a tendon and an equality."""
    prefix = comp.prefix
    softness = comp.defaults.equality("tendon")
    for v0, v1 in unique_edges(faces):
        tendon = model.add_tendon(comp.defaults.tendon("tendon"), name=names.tendon(prefix, v0, v1))
        tendon.group = ISOMETRY_TENDON_GROUP
        tendon.wrap_site(names.site(prefix, v0))
        tendon.wrap_site(names.site(prefix, v1))
        model.add_equality("tendon", tendon.name, solref=softness.solref, solimp=softness.solimp)
