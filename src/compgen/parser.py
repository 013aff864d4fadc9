"""YAML loading and version checking for composite documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from compgen.errors import ParseError
from compgen.models import CompositeSpec

SUPPORTED_VERSION = (0, 1)


class CompositeEntry(BaseModel):
    """One declared composite and the body it attaches to."""

    model_config = ConfigDict(extra="forbid")

    parent: str | None = None
    composite: CompositeSpec


class CompositeDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str
    composites: list[CompositeEntry] = []


@dataclass
class LoadedDocument:
    path: Path | None
    document: CompositeDocument

    @property
    def composites(self) -> list[CompositeEntry]:
        return self.document.composites


def _make_yaml() -> YAML:
    """Create a ruamel.yaml safe loader that errors on duplicate keys."""
    yml = YAML(typ="safe")
    yml.allow_duplicate_keys = False
    return yml


def _read_source_text(source: str | Path) -> str:
    """Read YAML content from a path, or treat the input as raw YAML text."""
    if isinstance(source, Path):
        try:
            return source.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(f"Cannot read file: {e}") from e
    return source


def load_yaml_data(source: str | Path) -> dict:
    """Load YAML and run the top-level shape and version checks."""
    text = _read_source_text(source)
    try:
        data = _make_yaml().load(text)
    except YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Top-level YAML value must be a mapping")

    version = data.get("version")
    if version is None:
        raise ParseError("Missing required field: version")
    data["version"] = _check_version(version)
    return data


def parse_yaml(source: str | Path) -> LoadedDocument:
    """Parse a composite document from a string or file path.

    Args:
        source: YAML string or path to a document file.

    Returns:
        The schema-validated document.

    Raises:
        ParseError: On YAML syntax errors, schema violations, or version mismatches.
    """
    data = load_yaml_data(source)
    try:
        document = CompositeDocument(**data)
    except PydanticValidationError as e:
        raise ParseError(f"Schema validation failed:\n{e}") from e
    return LoadedDocument(path=source if isinstance(source, Path) else None, document=document)


def _check_version(version: object) -> str:
    """Validate version compatibility; YAML may hand ``0.1`` over as a float."""
    text = str(version)
    parts = text.split(".")
    if len(parts) != 2:
        raise ParseError(f"Invalid version format: {text!r}")

    try:
        major = int(parts[0])
        minor = int(parts[1])
    except ValueError:
        raise ParseError(f"Invalid version format: {text!r}")

    if (major, minor) != SUPPORTED_VERSION:
        raise ParseError(f"Unsupported version: {text!r} (supported is 0.1)")
    return text
