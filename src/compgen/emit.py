"""YAML rendering of a generated model for inspection and debugging."""

from __future__ import annotations

from io import StringIO

from ruamel.yaml import YAML

from compgen.assembly import Model


def render_model_yaml(model: Model) -> str:
    """Dump every element arena of ``model`` as block-style YAML."""
    data = _plain(model.to_dict())

    yml = YAML(typ="rt")
    yml.allow_unicode = True
    yml.default_flow_style = False
    stream = StringIO()
    yml.dump(data, stream)
    return stream.getvalue()


def _plain(obj: object) -> object:
    """Lists instead of tuples, and no unset (None) attributes."""
    if isinstance(obj, dict):
        return {key: _plain(value) for key, value in obj.items() if value is not None}
    if isinstance(obj, (list, tuple)):
        return [_plain(item) for item in obj]
    if isinstance(obj, float):
        return float(obj)
    return obj
