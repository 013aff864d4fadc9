"""Shared fixtures for compgen tests."""

from __future__ import annotations

import pytest

from compgen.assembly import Model
from compgen.models import CompositeSpec

GRID_YAML = """\
version: "0.1"
composites:
  - composite:
      prefix: g
      type: grid
      count: [3, 4, 1]
      spacing: 0.1
      tendons:
        - kind: shear
"""

CABLE_YAML = """\
version: "0.1"
composites:
  - parent: anchor
    composite:
      prefix: c
      type: cable
      count: [6, 1, 1]
      curve: s 0 0
      size: [1, 0, 0]
      initial: none
      geom:
        type: capsule
        size: [0.01, 0, 0]
"""

LOOP_YAML = """\
version: "0.1"
composites:
  - parent: lB0
    composite:
      prefix: l
      type: loop
      count: [8, 1, 1]
      spacing: 0.05
      geom:
        type: capsule
        size: [0.01, 0.02, 0]
"""

SCENE_YAML = """\
version: "0.1"
composites:
  - composite:
      prefix: cloth
      type: grid
      count: [4, 4, 1]
      spacing: 0.05
      skin:
        texcoord: true
        subgrid: 1
  - parent: ball
    composite:
      prefix: soft
      type: ellipsoid
      count: [4, 4, 4]
      spacing: 0.05
      skin: {}
  - parent: hook
    composite:
      prefix: rod
      type: cable
      count: [5, 1, 1]
      size: [0.5, 0, 0]
      curve: [s]
      geom:
        type: box
        size: [0.01, 0.01, 0.002]
"""


@pytest.fixture
def model() -> Model:
    return Model()


@pytest.fixture
def grid_yaml() -> str:
    return GRID_YAML


@pytest.fixture
def cable_yaml() -> str:
    return CABLE_YAML


@pytest.fixture
def loop_yaml() -> str:
    return LOOP_YAML


@pytest.fixture
def scene_yaml() -> str:
    return SCENE_YAML


@pytest.fixture
def make_spec():
    """Factory for CompositeSpec with keyword overrides."""

    def _make(**overrides) -> CompositeSpec:
        return CompositeSpec(**overrides)

    return _make
