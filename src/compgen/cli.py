"""Click CLI entry point for the composite generator."""

from __future__ import annotations

from pathlib import Path

import click

from compgen import __version__
from compgen.assembly import Model
from compgen.composite import build_document
from compgen.emit import render_model_yaml
from compgen.errors import CompgenError
from compgen.parser import parse_yaml
from compgen.validation import validate
from compgen.warning_policy import WarningPolicy

_SUMMARY_KINDS = ("body", "joint", "geom", "site", "tendon", "equality", "skin")


def _build_warning_policy(
    warn_as_error: str | None, suppress_warning: str | None
) -> WarningPolicy | None:
    """Parse CLI warning options into a WarningPolicy, or None if unset."""
    try:
        return WarningPolicy.from_options(warn_as_error, suppress_warning)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _write_output(text: str, destination: str) -> None:
    """Write rendered YAML either to a file path or stdout ('-')."""
    if destination == "-":
        click.echo(text, nl=False)
        return

    output_path = Path(destination)
    try:
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot write model YAML to {output_path}: {e}") from e


def summarize(model: Model) -> str:
    counts = model.counts()
    # the root body is not generated
    counts["body"] -= 1
    plural = {"body": "bodies", "equality": "equalities"}
    return ", ".join(f"{counts[kind]} {plural.get(kind, kind + 's')}" for kind in _SUMMARY_KINDS)


warn_as_error_option = click.option(
    "--warn-as-error",
    "warn_as_error",
    type=str,
    default=None,
    help="Comma-separated W-codes to treat as errors (e.g. W01,W02).",
)
suppress_warning_option = click.option(
    "--suppress-warning",
    "suppress_warning",
    type=str,
    default=None,
    help="Comma-separated W-codes to suppress (e.g. W01).",
)


@click.group()
@click.version_option(version=__version__, prog_name="compgen")
def main() -> None:
    """compgen: expand declarative composites into bodies, joints and skins."""


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=str,
    default=None,
    help="Write the generated model as YAML to a path, or '-' for stdout.",
)
@warn_as_error_option
@suppress_warning_option
def build(
    input_file: Path,
    output: str | None = None,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Build every composite of a document into one model."""
    warning_policy = _build_warning_policy(warn_as_error, suppress_warning)

    try:
        loaded = parse_yaml(input_file)
        model = build_document(loaded.composites, warning_policy=warning_policy)
    except CompgenError as e:
        raise click.ClickException(str(e))

    if output is not None:
        _write_output(render_model_yaml(model), output)
    click.echo(f"Built: {summarize(model)}", err=output == "-")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@warn_as_error_option
@suppress_warning_option
def check(
    input_file: Path,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Validate every composite of a document without building it."""
    warning_policy = _build_warning_policy(warn_as_error, suppress_warning)

    try:
        loaded = parse_yaml(input_file)
        for entry in loaded.composites:
            comp = validate(
                entry.composite, parent_name=entry.parent or "world", warning_policy=warning_policy
            )
            label = comp.prefix or comp.spec.type
            click.echo(f"OK: {label} (dim={comp.dim})")
    except CompgenError as e:
        raise click.ClickException(str(e))
