"""Composite expansion entry point: validate, then dispatch to a shape builder."""

from __future__ import annotations

from collections.abc import Callable

from compgen.assembly import Body, Model, PluginRef
from compgen.cable import make_cable
from compgen.errors import DuplicateConfigKey, ValidationError
from compgen.grid import make_grid
from compgen.models import CompositeSpec
from compgen.parser import CompositeEntry
from compgen.particle import make_particle
from compgen.rope import make_rope
from compgen.shell import make_shell
from compgen.validation import ResolvedComposite, parse_thickness, validate
from compgen.warning_policy import WarningPolicy

Builder = Callable[[Model, Body, ResolvedComposite, PluginRef | None], None]

BUILDERS: dict[str, Builder] = {
    "particle": make_particle,
    "grid": make_grid,
    "cable": make_cable,
    "loop": make_rope,
    "box": make_shell,
    "cylinder": make_shell,
    "ellipsoid": make_shell,
}


def make(
    spec: CompositeSpec,
    model: Model,
    parent: Body,
    *,
    warning_policy: WarningPolicy | None = None,
) -> ResolvedComposite:
    """Expand ``spec`` into ``model`` under ``parent``.

    Validation (including plugin resolution) completes before the model is
    modified, so a failing composite adds nothing.

    Returns:
        The resolved composite that was built.

    Raises:
        ValidationError: If the spec or its plugin reference is invalid.
    """
    comp = validate(spec, parent_name=parent.name, warning_policy=warning_policy)
    plugin = _check_plugin(spec, model, comp)

    if plugin is not None and model.find("plugin", plugin.instance) is None:
        model.add_plugin(plugin.instance, plugin.plugin, spec.plugin.config)

    BUILDERS[spec.type](model, parent, comp, plugin)
    return comp


def _check_plugin(spec: CompositeSpec, model: Model, comp: ResolvedComposite) -> PluginRef | None:
    """Resolve the plugin reference without touching the model.

    An explicit instance must already exist in the model; otherwise an
    implicit instance ``composite{prefix}`` is created from the spec's config.
    """
    if spec.plugin is None:
        return None
    name = spec.plugin.instance or "composite" + spec.prefix
    instance = model.find("plugin", name)
    if instance is None:
        if spec.plugin.instance is None:
            return PluginRef(plugin=spec.plugin.plugin, instance=name)
        raise ValidationError(f"Unknown plugin instance: {spec.plugin.instance!r}")
    if instance.plugin != spec.plugin.plugin:
        raise ValidationError(
            f"Plugin instance {instance.name!r} belongs to {instance.plugin!r}, not {spec.plugin.plugin!r}"
        )
    if spec.type == "particle":
        if instance.config.get("face"):
            raise DuplicateConfigKey("Face attribute already exists in plugin")
        if comp.dim == 2:
            comp.thickness = parse_thickness(instance.config)
    return PluginRef(plugin=spec.plugin.plugin, instance=instance.name)


def build_document(
    entries: list[CompositeEntry],
    *,
    root: str = "world",
    warning_policy: WarningPolicy | None = None,
) -> Model:
    """Build every composite entry into one fresh model.

    A named parent body that does not exist yet is created under the root.
    Cross references are checked once all composites are built.
    """
    model = Model(root=root)
    for entry in entries:
        parent = model.root
        if entry.parent is not None and entry.parent != root:
            parent = model.find("body", entry.parent) or model.add_body(model.root, entry.parent)
        make(entry.composite, model, parent, warning_policy=warning_policy)
    model.check_references()
    return model
