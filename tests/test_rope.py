"""Tests for loop composites grown from a root body."""

from __future__ import annotations

import math

import numpy as np
import numpy.testing as npt
import pytest

from compgen.composite import make
from compgen.errors import InvalidRootBody
from compgen.frame import quat_mul, quat_rotate
from compgen.warning_policy import CompgenWarning, WarningPolicy

QUIET = WarningPolicy(suppress=frozenset({"W01"}))


def _loop(make_spec, count=6, **overrides):
    values = {"prefix": "l", "type": "loop", "count": (count, 1, 1), "spacing": 0.1}
    values.update(overrides)
    return make_spec(**values)


def _build(model, spec, root="lB0"):
    parent = model.add_body(model.root, root)
    make(spec, model, parent, warning_policy=QUIET)
    return parent


class TestLoop:
    def test_counts(self, model, make_spec):
        _build(model, _loop(make_spec))
        assert model.names("body")[1:] == ["lB0", "lB1", "lB2", "lB3", "lB4", "lB5"]
        assert model.count("geom") == 6
        assert model.count("joint") == 5 * 2
        model.check_references()

    def test_root_only_gets_geom(self, model, make_spec):
        _build(model, _loop(make_spec))
        assert model.joints_of("lB0") == []
        geom = model.geoms_of("lB0")[0]
        assert geom.name == "lG0"
        npt.assert_allclose(geom.quat, [math.sqrt(0.5), 0.0, math.sqrt(0.5), 0.0])

    def test_closing_constraint(self, model, make_spec):
        _build(model, _loop(make_spec))
        (eq,) = model.elements("equality")
        assert eq.type == "connect"
        assert (eq.name1, eq.name2) == ("lB0", "lB5")
        assert eq.data == pytest.approx((-0.05, 0.0, 0.0))
        assert eq.solref == (0.01, 1.0)
        pairs = [(p.body1, p.body2) for p in model.elements("exclude")]
        assert pairs == [("lB0", "lB5")]

    def test_user_smooth_softness(self, model, make_spec):
        _build(model, _loop(make_spec, solrefsmooth=(0.05, 1.0)))
        assert model.elements("equality")[0].solref == (0.05, 1.0)

    def test_hinges(self, model, make_spec):
        _build(model, _loop(make_spec))
        joints = model.joints_of("lB1")
        assert [j.name for j in joints] == ["lJ0_1", "lJ1_1"]
        assert [j.axis for j in joints] == [(0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]
        assert joints[0].pos == pytest.approx((-0.05, 0.0, 0.0))

    def test_links_close_into_ring(self, model, make_spec):
        n = 6
        _build(model, _loop(make_spec, count=n))
        pos = np.zeros(3)
        quat = np.array([1.0, 0.0, 0.0, 0.0])
        step = None
        for ix in range(1, n):
            body = model.find("body", f"lB{ix}")
            step = np.array(body.pos)
            pos = pos + quat_rotate(quat, step)
            quat = quat_mul(quat, np.array(body.quat))
        # one more link returns to the root with a full turn
        npt.assert_allclose(pos + quat_rotate(quat, step), np.zeros(3), atol=1e-12)
        turn = quat_mul(quat, np.array(model.find("body", "lB1").quat))
        npt.assert_allclose(abs(turn[0]), 1.0, atol=1e-12)

    def test_grows_both_ways_from_origin(self, model, make_spec):
        _build(model, _loop(make_spec, count=5), root="lB2")
        parents = {b.name: b.parent for b in model.elements("body")[2:]}
        assert parents == {"lB3": "lB2", "lB4": "lB3", "lB1": "lB2", "lB0": "lB1"}
        forward = model.find("body", "lB3")
        backward = model.find("body", "lB1")
        assert forward.pos[0] > 0
        assert backward.pos[0] == pytest.approx(-forward.pos[0])
        assert backward.pos[1] == pytest.approx(forward.pos[1])
        assert backward.quat[3] == pytest.approx(-forward.quat[3])
        assert model.joints_of("lB1")[0].pos == pytest.approx((0.05, 0.0, 0.0))
        model.check_references()

    def test_twist_and_stretch(self, model, make_spec):
        spec = _loop(make_spec, joints=[{"kind": "twist", "stiffness": 2.0}, {"kind": "stretch"}])
        _build(model, spec)
        assert model.find("joint", "lJT3").stiffness == 2.0
        assert model.find("joint", "lJS3").type == "slide"
        joint_eqs = [eq for eq in model.elements("equality") if eq.type == "joint"]
        assert len(joint_eqs) == 2 * 5
        model.check_references()

    def test_deprecation_warning(self, model, make_spec):
        parent = model.add_body(model.root, "lB0")
        with pytest.warns(CompgenWarning, match="W01"):
            make(_loop(make_spec), model, parent)

    def test_bad_root_leaves_model_untouched(self, model, make_spec):
        with pytest.raises(InvalidRootBody):
            make(_loop(make_spec), model, model.root, warning_policy=QUIET)
        assert model.count("body") == 1
        assert model.count("geom") == 0
