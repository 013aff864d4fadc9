"""Tests for particle composites."""

from __future__ import annotations

import math

import numpy as np
import numpy.testing as npt
import pytest

from compgen.composite import make
from compgen.errors import DuplicateConfigKey
from compgen.particle import lattice_faces, lattice_vertices, unique_edges, vertex_volumes

SHELL_PLUGIN = {"plugin": "mujoco.elasticity.shell", "config": {"thickness": "0.01"}}


class TestLattice:
    def test_vertices_centered_on_count(self):
        verts = lattice_vertices((2, 1, 1), 1.0)
        npt.assert_allclose(verts, [[-1.0, -0.5, -0.5], [0.0, -0.5, -0.5]])

    def test_last_axis_fastest(self):
        verts = lattice_vertices((1, 2, 2), 1.0)
        npt.assert_allclose(verts[1] - verts[0], [0.0, 0.0, 1.0])

    def test_tetrahedra(self):
        tets = lattice_faces((2, 2, 2), 3)
        assert len(tets) == 6
        assert all(len(t) == 4 for t in tets)
        # every tet shares the cube diagonal from vertex 100 (id 4) to 011 (id 3)
        assert all(4 in t and 3 in t for t in tets)

    def test_tetrahedra_fill_cube(self):
        verts = lattice_vertices((2, 2, 2), 1.0)
        volume = 0.0
        for a, b, c, d in lattice_faces((2, 2, 2), 3):
            volume += abs(np.linalg.det(np.array([verts[b] - verts[a], verts[c] - verts[a], verts[d] - verts[a]]))) / 6
        assert volume == pytest.approx(1.0)

    def test_triangles(self):
        tris = lattice_faces((3, 3, 1), 2)
        assert len(tris) == 8
        assert tris[:2] == [(0, 3, 4), (0, 4, 1)]

    def test_one_dimensional_has_no_faces(self):
        assert lattice_faces((4, 1, 1), 1) == []


class TestMeshHelpers:
    def test_unique_edges(self):
        assert unique_edges([(0, 1, 2), (0, 2, 3)]) == [(0, 1), (0, 2), (0, 3), (1, 2), (2, 3)]

    def test_vertex_volumes(self):
        verts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]])
        volume = vertex_volumes(verts, [(0, 1, 2), (1, 3, 2)], 0.3)
        npt.assert_allclose(volume, [0.05, 0.1, 0.1, 0.05])


class TestVolumeParticles:
    def test_cube(self, model, make_spec):
        make(make_spec(prefix="p", count=(2, 2, 2), spacing=1.0), model, model.root)
        assert model.count("body") == 1 + 8
        assert model.count("joint") == 8 * 3
        assert model.count("geom") == 8
        assert model.names("site") == [f"pS{i}" for i in range(8)]
        assert model.find("body", "pB1_1_1").pos == (0.0, 0.0, 0.0)
        assert model.find("body", "pB0_0_0").pos == (-1.0, -1.0, -1.0)

    def test_default_slide_joints(self, model, make_spec):
        make(make_spec(prefix="p", count=(2, 1, 1), spacing=0.1), model, model.root)
        joints = model.joints_of("pB0_0_0")
        assert [j.type for j in joints] == ["slide"] * 3
        assert [j.axis for j in joints] == [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]
        assert all(j.name == "" for j in joints)

    def test_custom_particle_joints(self, model, make_spec):
        spec = make_spec(
            count=(2, 2, 1),
            spacing=0.1,
            joints=[{"kind": "particle", "type": "ball"}, {"kind": "particle", "type": "slide", "axis": [0, 0, 1]}],
        )
        make(spec, model, model.root)
        joints = model.joints_of("B0_0_0")
        assert [j.type for j in joints] == ["ball", "slide"]
        assert joints[1].axis == (0.0, 0.0, 1.0)

    def test_offset(self, model, make_spec):
        make(make_spec(prefix="p", count=(2, 1, 1), spacing=1.0, offset=(0, 0, 5)), model, model.root)
        assert model.find("body", "pB0_0_0").pos == (-1.0, -0.5, 4.5)

    def test_geom_frictionless(self, model, make_spec):
        make(make_spec(count=(2, 1, 1), spacing=0.1), model, model.root)
        geom = model.geoms_of("B0_0_0")[0]
        assert geom.condim == 1
        assert geom.priority == 1

    def test_volume_plugin_gets_tetrahedra(self, model, make_spec):
        spec = make_spec(prefix="p", count=(2, 2, 2), spacing=0.1, plugin={"plugin": "mujoco.elasticity.solid"})
        make(spec, model, model.root)
        instance = model.find("plugin", "compositep")
        assert len(instance.config["face"].split()) == 6 * 4
        assert instance.config["edge"] == ""
        assert model.find("body", "pB0_0_0").plugin.instance == "compositep"

    def test_skin_over_volume(self, model, make_spec):
        make(make_spec(prefix="p", count=(2, 2, 2), spacing=0.1, skin={}), model, model.root)
        skin = model.find("skin", "pSkin")
        assert len(skin.vertices) == 6 * 4
        model.check_references()


class TestSurfaceParticles:
    def test_isometry_tendons(self, model, make_spec):
        make(make_spec(prefix="p", count=(3, 3, 1), spacing=0.1), model, model.root)
        assert model.count("tendon") == 16
        assert model.count("equality") == 16
        tendon = model.find("tendon", "pT0_4")
        assert [w.target for w in tendon.wraps] == ["pS0", "pS4"]
        assert tendon.group == 4
        assert model.find("tendon", "pT0_2") is None
        model.check_references()

    def test_isometry_softness(self, model, make_spec):
        spec = make_spec(count=(3, 3, 1), spacing=0.1, tendons=[{"kind": "main", "solreffix": [0.005, 1.0]}])
        make(spec, model, model.root)
        assert all(eq.solref == (0.005, 1.0) for eq in model.elements("equality"))

    def test_plugin_scales_density(self, model, make_spec):
        make(make_spec(prefix="p", count=(3, 3, 1), spacing=0.1, plugin=SHELL_PLUGIN), model, model.root)
        geom = model.geoms_of("pB0_0_0")[0]
        volume = 6 * 0.1**2 / 2 * 0.01
        expected = 1000.0 * volume / (4.0 / 3.0 * math.pi * 0.005**3)
        assert geom.density == pytest.approx(expected)
        assert len(model.find("plugin", "compositep").config["face"].split()) == 8 * 3

    def test_explicit_mesh(self, model, make_spec):
        spec = make_spec(
            prefix="m",
            vertex=[[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
            face=[[1, 2, 3], [1, 3, 4]],
            plugin=SHELL_PLUGIN,
            skin={},
        )
        make(spec, model, model.root)
        assert model.names("body")[1:] == ["mB0", "mB1", "mB2", "mB3"]
        assert model.find("body", "mB2").pos == (1.0, 1.0, 0.0)
        assert model.find("plugin", "compositem").config["face"] == "0 1 2 0 2 3"
        assert model.count("tendon") == 5
        # vertex 0 touches both triangles of area 0.5
        geom0 = model.geoms_of("mB0")[0]
        geom1 = model.geoms_of("mB1")[0]
        assert geom0.density / geom1.density == pytest.approx(2.0)
        assert len(model.find("skin", "mSkin").faces) == 4
        model.check_references()

    def test_flat_skin(self, model, make_spec):
        make(make_spec(prefix="p", count=(3, 3, 1), spacing=0.1, skin={}), model, model.root)
        skin = model.find("skin", "pSkin")
        assert len(skin.bones) == 9
        model.check_references()

    def test_subgrid_skin(self, model, make_spec):
        make(make_spec(prefix="p", count=(3, 3, 1), spacing=0.1, skin={"subgrid": 1}), model, model.root)
        assert len(model.find("skin", "pSkin").vertices) == 2 * 25
        model.check_references()


class TestExplicitInstance:
    def test_existing_instance_is_used(self, model, make_spec):
        model.add_plugin("sheet", "mujoco.elasticity.shell", {"thickness": "0.02"})
        plugin = {"plugin": "mujoco.elasticity.shell", "instance": "sheet"}
        comp = make(make_spec(count=(3, 3, 1), spacing=0.1, plugin=plugin), model, model.root)
        assert comp.thickness == pytest.approx(0.02)
        assert model.find("plugin", "sheet").config["face"]
        assert model.count("plugin") == 1

    def test_face_already_set(self, model, make_spec):
        model.add_plugin("sheet", "mujoco.elasticity.shell", {"thickness": "0.02", "face": "0 1 2"})
        plugin = {"plugin": "mujoco.elasticity.shell", "instance": "sheet"}
        with pytest.raises(DuplicateConfigKey):
            make(make_spec(count=(3, 3, 1), spacing=0.1, plugin=plugin), model, model.root)
        assert model.count("body") == 1
