"""Skin meshes and their bone bindings.

2D skins are two-sided: the front layer holds vertices ``0..N-1`` and the back
layer ``N..2N-1``, stitched together by thin strips along the four open
borders. Flat skins bind every vertex to exactly one bone; subgrid skins
refine each lattice cell and spread each vertex over up to 16 bones with the
weights from ``compgen.subgrid``.
"""

from __future__ import annotations

from collections.abc import Callable

from compgen import names
from compgen.assembly import Model, Skin, SkinBone
from compgen.subgrid import edge_class, weight_tables
from compgen.validation import ResolvedComposite

Triangle = tuple[int, int, int]


def new_skin(model: Model, comp: ResolvedComposite, inflate: float) -> Skin:
    """Add the composite's skin element with its render attributes."""
    spec = comp.skin
    skin = model.add_skin(names.skin(comp.spec.prefix))
    skin.material = spec.material
    skin.rgba = spec.rgba
    skin.inflate = inflate
    skin.group = spec.group
    return skin


# ---------------------------------------------------------------------------
# Lattice topology
# ---------------------------------------------------------------------------


def grid_faces(c0: int, c1: int, side: int, base: int = 0) -> list[Triangle]:
    """Two triangles per quad of a ``c0 x c1`` vertex grid.

    ``side`` flips the winding so front (0) and back (1) layers face apart.
    """
    faces: list[Triangle] = []
    front, back = int(side == 0), int(side == 1)
    for ix in range(c0 - 1):
        for iy in range(c1 - 1):
            v = base + ix * c1 + iy
            faces.append((v, base + (ix + 1) * c1 + iy + back, base + (ix + 1) * c1 + iy + front))
            faces.append((v, base + (ix + front) * c1 + iy + 1, base + (ix + back) * c1 + iy + 1))
    return faces


def stitch_faces(c0: int, c1: int) -> list[Triangle]:
    """Thin triangles joining the front and back layers along the borders."""
    n = c0 * c1
    top = c1 - 1
    right = (c0 - 1) * c1
    faces: list[Triangle] = []
    for ix in range(c0 - 1):
        a, b = ix * c1, (ix + 1) * c1
        faces.append((a, n + b, b))
        faces.append((a, n + a, n + b))
    for ix in range(c0 - 1):
        a, b = ix * c1 + top, (ix + 1) * c1 + top
        faces.append((a, b, n + b))
        faces.append((a, n + b, n + a))
    for iy in range(c1 - 1):
        faces.append((iy, iy + 1, n + iy + 1))
        faces.append((iy, n + iy + 1, n + iy))
    for iy in range(c1 - 1):
        a = right + iy
        faces.append((a, n + a + 1, a + 1))
        faces.append((a, n + a, n + a + 1))
    return faces


def two_sided_faces(c0: int, c1: int) -> list[Triangle]:
    n = c0 * c1
    return grid_faces(c0, c1, 0) + grid_faces(c0, c1, 1, base=n) + stitch_faces(c0, c1)


def _texcoords(c0: int, c1: int) -> list[tuple[float, float]]:
    return [(ix / (c0 - 1), iy / (c1 - 1)) for ix in range(c0) for iy in range(c1)]


# ---------------------------------------------------------------------------
# Bone binding strategies
# ---------------------------------------------------------------------------


def cloth_bones(comp: ResolvedComposite, count: tuple[int, int], subgrid: bool) -> list[SkinBone]:
    """One bone per lattice body of a grid or particle sheet.

    Flat bones sit at the body origin and own their front and back vertex.
    Subgrid bones are placed at their rest offset in the lattice and receive
    vertices later.
    """
    c0, c1 = count
    n = c0 * c1
    spacing = comp.spec.spacing
    bones = []
    for ix in range(c0):
        for iy in range(c1):
            if comp.spec.type == "grid":
                body = names.body(comp.spec.prefix, ix, iy)
            else:
                body = names.body(comp.spec.prefix, ix, iy, 0)
            if subgrid:
                bones.append(SkinBone(body, bindpos=(ix * spacing, iy * spacing, 0.0)))
            else:
                v = ix * c1 + iy
                bones.append(SkinBone(body, vertid=[v, n + v], vertweight=[1.0, 1.0]))
    return bones


def cable_bones(comp: ResolvedComposite, count: tuple[int, int], subgrid: bool) -> list[SkinBone]:
    """Bones along a cable: one row per centerline vertex, offset across the strip.

    The last row belongs to the last body, shifted back by one box length.
    """
    c0, c1 = count
    n = c0 * c1
    size = comp.defaults.geom.size
    bones = []
    for ix in range(c0):
        body = names.cable_bone(comp.spec.prefix, ix, c0)
        x = -2 * size[0] if ix == c0 - 1 else 0.0
        for iy in range(c1):
            if iy == 0:
                y = -size[1]
            elif subgrid and iy == 1:
                y = 0.0
            else:
                y = size[1]
            if subgrid:
                bones.append(SkinBone(body, bindpos=(x, y, 0.0)))
            else:
                v = ix * c1 + iy
                bones.append(SkinBone(body, bindpos=(x, y, 0.0), vertid=[v, n + v], vertweight=[1.0, 1.0]))
    return bones


BoneStrategy = Callable[[ResolvedComposite, tuple[int, int], bool], list[SkinBone]]


def _bone_strategy(comp: ResolvedComposite) -> BoneStrategy:
    if comp.spec.type == "cable":
        return cable_bones
    return cloth_bones


# ---------------------------------------------------------------------------
# 2D skins
# ---------------------------------------------------------------------------


def make_skin2(model: Model, comp: ResolvedComposite, count: tuple[int, int], inflate: float) -> Skin:
    """Flat two-sided skin over a ``count[0] x count[1]`` lattice."""
    c0, c1 = count
    skin = new_skin(model, comp, inflate)
    skin.vertices = [(0.0, 0.0, 0.0)] * (2 * c0 * c1)
    if comp.skin.texcoord:
        skin.texcoords = _texcoords(c0, c1) * 2
    skin.faces = two_sided_faces(c0, c1)
    skin.bones = _bone_strategy(comp)(comp, count, False)
    return skin


def make_skin2_subgrid(
    model: Model, comp: ResolvedComposite, count: tuple[int, int], inflate: float
) -> Skin:
    """Two-sided skin refined by ``skin.subgrid`` samples per cell edge.

    Every big cell binds its refined vertices through the weight table of its
    position class. Each cell owns the samples on its lower borders; cells on
    the last row or column also own the upper border.
    """
    c0, c1 = count
    sub = comp.skin.subgrid
    step = comp.spec.spacing / (1 + sub)
    big0 = c0 + (c0 - 1) * sub
    big1 = c1 + (c1 - 1) * sub
    nn = big0 * big1

    skin = new_skin(model, comp, inflate)
    skin.vertices = [(ix * step, iy * step, 0.0) for ix in range(big0) for iy in range(big1)] * 2
    if comp.skin.texcoord:
        skin.texcoords = _texcoords(big0, big1) * 2
    skin.faces = two_sided_faces(big0, big1)
    skin.bones = _bone_strategy(comp)(comp, count, True)

    weights = weight_tables(sub)
    samples = 2 + sub
    for ix in range(c0 - 1):
        for iy in range(c1 - 1):
            table = weights[3 * edge_class(ix, c0) + edge_class(iy, c1)]
            bone_ids = [(ix + dx) * c1 + (iy + dy) for dx in range(-1, 3) for dy in range(-1, 3)]
            for dx in range(1 + sub + (ix == c0 - 2)):
                for dy in range(1 + sub + (iy == c1 - 2)):
                    vid = (ix * (1 + sub) + dx) * big1 + iy * (1 + sub) + dy
                    for b, w in enumerate(table[dx * samples + dy]):
                        if w != 0:
                            bone = skin.bones[bone_ids[b]]
                            bone.bind(vid, float(w))
                            bone.bind(vid + nn, float(w))
    return skin


def make_mesh_skin(model: Model, comp: ResolvedComposite) -> Skin:
    """Two-sided copy of a user-supplied particle surface, one bone per vertex."""
    nvert = len(comp.vertices)
    skin = new_skin(model, comp, comp.skin.inflate)
    skin.vertices = [(0.0, 0.0, 0.0)] * (2 * nvert)
    for side in range(2):
        base = side * nvert
        for i in range(nvert):
            skin.bones.append(
                SkinBone(names.body(comp.spec.prefix, i), vertid=[base + i], vertweight=[1.0])
            )
        for f0, f1, f2 in comp.faces:
            if side == 0:
                skin.faces.append((base + f0, base + f1, base + f2))
            else:
                skin.faces.append((base + f0, base + f2, base + f1))
    return skin


# ---------------------------------------------------------------------------
# 3D skins
# ---------------------------------------------------------------------------

BodyName = Callable[[int, int], str]


def _shell_face_names(comp: ResolvedComposite) -> dict[str, tuple[int, int, int, BodyName]]:
    """Shell faces as ``(c0, c1, side, name(i0, i1))``."""
    p = comp.spec.prefix
    c0, c1, c2 = comp.count
    return {
        "z0": (c0, c1, 1, lambda i, j: names.body(p, i, j, 0)),
        "z1": (c0, c1, 0, lambda i, j: names.body(p, i, j, c2 - 1)),
        "y0": (c0, c2, 0, lambda i, j: names.body(p, i, 0, j)),
        "y1": (c0, c2, 1, lambda i, j: names.body(p, i, c1 - 1, j)),
        "x0": (c1, c2, 1, lambda i, j: names.body(p, 0, i, j)),
        "x1": (c1, c2, 0, lambda i, j: names.body(p, c0 - 1, i, j)),
    }


def _box_face(skin: Skin, c0: int, c1: int, side: int, name: BodyName, texcoord: bool) -> None:
    """Independent flat grid for one face, one bone per vertex."""
    base = len(skin.vertices)
    skin.vertices.extend([(0.0, 0.0, 0.0)] * (c0 * c1))
    if texcoord:
        skin.texcoords.extend(_texcoords(c0, c1))
    skin.faces.extend(grid_faces(c0, c1, side, base))
    for i0 in range(c0):
        for i1 in range(c1):
            skin.bones.append(SkinBone(name(i0, i1), vertid=[base + i0 * c1 + i1], vertweight=[1.0]))


def _smooth_face(skin: Skin, c0: int, c1: int, side: int, name: BodyName, vmap: dict[str, int]) -> None:
    """Face over shared vertices looked up by body name."""
    for i0 in range(c0):
        for i1 in range(c1):
            v00 = vmap[name(i0, i1)]
            if i0 < c0 - 1 and i1 < c1 - 1:
                v01 = vmap[name(i0, i1 + 1)]
                v10 = vmap[name(i0 + 1, i1)]
                v11 = vmap[name(i0 + 1, i1 + 1)]
                if side == 0:
                    skin.faces.extend([(v00, v10, v11), (v00, v11, v01)])
                else:
                    skin.faces.extend([(v00, v01, v11), (v00, v11, v10)])
            skin.bones.append(SkinBone(name(i0, i1), vertid=[v00], vertweight=[1.0]))


def _shared_vertices(skin: Skin, comp: ResolvedComposite, with_z: bool, texcoord: bool) -> dict[str, int]:
    """One vertex per shell body on a side face, keyed by body name."""
    c0, c1, c2 = comp.count
    vmap: dict[str, int] = {}
    for ix in range(c0):
        for iy in range(c1):
            for iz in range(c2):
                xedge = ix in (0, c0 - 1)
                yedge = iy in (0, c1 - 1)
                zedge = with_z and iz in (0, c2 - 1)
                if not (xedge or yedge or zedge):
                    continue
                vmap[names.body(comp.spec.prefix, ix, iy, iz)] = len(skin.vertices)
                skin.vertices.append((0.0, 0.0, 0.0))
                if texcoord:
                    if xedge:
                        skin.texcoords.append((iy / (c1 - 1), iz / (c2 - 1)))
                    elif yedge:
                        skin.texcoords.append((ix / (c0 - 1), iz / (c2 - 1)))
                    else:
                        skin.texcoords.append((ix / (c0 - 1), iy / (c1 - 1)))
    return vmap


def make_skin3(model: Model, comp: ResolvedComposite) -> Skin:
    """Skin over the six faces of a 3D lattice shell.

    Box (and 3D particle) faces are meshed independently. Cylinder sides share
    vertices while its caps stay flat; ellipsoid shares vertices everywhere.
    """
    texcoord = comp.skin.texcoord
    skin = new_skin(model, comp, comp.skin.inflate)
    faces = _shell_face_names(comp)

    if comp.spec.type in ("box", "particle"):
        for key in ("z0", "z1", "y0", "y1", "x0", "x1"):
            _box_face(skin, *faces[key], texcoord)
    elif comp.spec.type == "cylinder":
        vmap = _shared_vertices(skin, comp, with_z=False, texcoord=texcoord)
        for key in ("y0", "y1", "x0", "x1"):
            _smooth_face(skin, *faces[key], vmap)
        for key in ("z0", "z1"):
            _box_face(skin, *faces[key], texcoord)
    else:
        vmap = _shared_vertices(skin, comp, with_z=True, texcoord=texcoord)
        for key in ("z0", "z1", "y0", "y1", "x0", "x1"):
            _smooth_face(skin, *faces[key], vmap)
    return skin
