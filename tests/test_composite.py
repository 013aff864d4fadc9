"""Tests for composite dispatch and document building."""

from __future__ import annotations

import pytest

from compgen.assembly import Model
from compgen.composite import BUILDERS, build_document, make
from compgen.errors import DuplicateName, InsufficientSpacing, ValidationError
from compgen.parser import CompositeEntry
from compgen.warning_policy import WarningPolicy

QUIET = WarningPolicy(suppress=frozenset({"W01", "W02"}))

ENTRIES = {
    "particle": [{"composite": {"prefix": "p", "count": [3, 3, 1], "spacing": 0.1, "skin": {"subgrid": 1}}}],
    "grid": [{"composite": {"prefix": "g", "type": "grid", "count": [4, 3, 1], "spacing": 0.1, "tendons": [{"kind": "shear"}]}}],
    "cable": [
        {
            "composite": {
                "prefix": "c",
                "type": "cable",
                "count": [7, 1, 1],
                "curve": "s cos(s) sin(s)",
                "size": [1.0, 0.2, 1.0],
                "geom": {"type": "box", "size": [0.01, 0.02, 0.002]},
                "skin": {"subgrid": 2},
            }
        }
    ],
    "loop": [{"parent": "lB3", "composite": {"prefix": "l", "type": "loop", "count": [8, 1, 1], "spacing": 0.05}}],
    "box": [{"composite": {"prefix": "b", "type": "box", "count": [3, 4, 3], "spacing": 0.1, "skin": {}}}],
    "cylinder": [{"composite": {"prefix": "y", "type": "cylinder", "count": [4, 4, 3], "spacing": 0.1, "skin": {}}}],
    "ellipsoid": [{"composite": {"prefix": "e", "type": "ellipsoid", "count": [4, 4, 4], "spacing": 0.1, "skin": {}}}],
}


def _entries(raw):
    return [CompositeEntry(**entry) for entry in raw]


class TestBuilders:
    def test_registered_families(self):
        assert set(BUILDERS) == {"particle", "grid", "cable", "loop", "box", "cylinder", "ellipsoid"}

    @pytest.mark.parametrize("family", sorted(ENTRIES))
    def test_deterministic(self, family):
        first = build_document(_entries(ENTRIES[family]), warning_policy=QUIET)
        second = build_document(_entries(ENTRIES[family]), warning_policy=QUIET)
        assert first.to_dict() == second.to_dict()

    @pytest.mark.parametrize("family", sorted(ENTRIES))
    def test_references_resolve(self, family):
        model = build_document(_entries(ENTRIES[family]), warning_policy=QUIET)
        model.check_references()
        assert model.count("body") > 1


class TestMake:
    def test_returns_resolved_composite(self, model, make_spec):
        comp = make(make_spec(type="grid", count=(3, 3, 1), spacing=0.1), model, model.root)
        assert comp.dim == 2
        assert comp.count == (3, 3, 1)

    def test_failure_leaves_model_untouched(self, model, make_spec):
        make(make_spec(prefix="a", type="grid", count=(3, 3, 1), spacing=0.1), model, model.root)
        before = model.to_dict()
        with pytest.raises(InsufficientSpacing):
            make(make_spec(prefix="b", type="grid", count=(3, 3, 1), spacing=0.001), model, model.root)
        assert model.to_dict() == before

    def test_two_composites_share_model(self, model, make_spec):
        make(make_spec(prefix="a", type="grid", count=(3, 3, 1), spacing=0.1), model, model.root)
        make(make_spec(prefix="b", type="grid", count=(2, 2, 1), spacing=0.1), model, model.root)
        assert model.count("body") == 1 + 9 + 4
        model.check_references()

    def test_name_collision(self, model, make_spec):
        spec = make_spec(prefix="a", type="grid", count=(3, 3, 1), spacing=0.1)
        make(spec, model, model.root)
        with pytest.raises(DuplicateName):
            make(spec, model, model.root)


class TestPlugins:
    def test_implicit_instance_created(self, model, make_spec):
        spec = make_spec(
            prefix="g", type="grid", count=(3, 3, 1), spacing=0.1, plugin={"plugin": "my.plugin", "config": {"k": "1"}}
        )
        make(spec, model, model.root)
        instance = model.find("plugin", "compositeg")
        assert instance.plugin == "my.plugin"
        assert instance.config == {"k": "1"}

    def test_implicit_instance_reused(self, model, make_spec):
        model.add_plugin("compositec", "mujoco.elasticity.cable", {"twist": "1e6"})
        spec = make_spec(
            prefix="c",
            type="cable",
            count=(4, 1, 1),
            curve="s",
            geom={"type": "capsule"},
            plugin={"plugin": "mujoco.elasticity.cable"},
        )
        make(spec, model, model.root)
        assert model.count("plugin") == 1
        assert model.find("plugin", "compositec").config == {"twist": "1e6"}

    def test_unknown_explicit_instance(self, model, make_spec):
        spec = make_spec(count=(2, 2, 2), spacing=0.1, plugin={"plugin": "mujoco.elasticity.solid", "instance": "x"})
        with pytest.raises(ValidationError, match="Unknown plugin instance"):
            make(spec, model, model.root)
        assert model.count("body") == 1

    def test_plugin_mismatch(self, model, make_spec):
        model.add_plugin("x", "mujoco.elasticity.shell")
        spec = make_spec(count=(2, 2, 2), spacing=0.1, plugin={"plugin": "mujoco.elasticity.solid", "instance": "x"})
        with pytest.raises(ValidationError, match="belongs to"):
            make(spec, model, model.root)


class TestBuildDocument:
    def test_parents_created_under_root(self):
        entries = _entries(
            [
                {"parent": "anchor", "composite": {"prefix": "a", "type": "grid", "count": [3, 3, 1], "spacing": 0.1}},
                {"parent": "anchor", "composite": {"prefix": "b", "type": "grid", "count": [2, 2, 1], "spacing": 0.1}},
            ]
        )
        model = build_document(entries)
        anchor = model.find("body", "anchor")
        assert anchor.parent == "world"
        assert model.find("body", "aB0_0").parent == "anchor"
        assert model.find("body", "bB0_0").parent == "anchor"

    def test_root_parent(self):
        entries = _entries([{"parent": "ground", "composite": {"type": "grid", "count": [2, 2, 1], "spacing": 0.1}}])
        model = build_document(entries, root="ground")
        assert model.find("body", "B0_0").parent == "ground"

    def test_composite_as_parent(self):
        entries = _entries(
            [
                {"composite": {"prefix": "g", "type": "grid", "count": [3, 3, 1], "spacing": 0.1}},
                {"parent": "gB1_1", "composite": {"prefix": "p", "count": [2, 1, 1], "spacing": 0.01}},
            ]
        )
        model = build_document(entries)
        assert model.find("body", "pB0_0_0").parent == "gB1_1"

    def test_fresh_model(self):
        entries = _entries(ENTRIES["grid"])
        assert isinstance(build_document(entries), Model)
        assert build_document(entries).count("body") == 1 + 12

    def test_error_propagates(self):
        entries = _entries([{"composite": {"type": "grid", "count": [0, 1, 1]}}])
        with pytest.raises(ValidationError):
            build_document(entries)
