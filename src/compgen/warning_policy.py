"""Coded warnings raised while composites are expanded.

Each diagnostic carries a short code so the CLI can silence it or turn it
into a hard failure:

``W01``
    A ``loop`` composite was built. The family still works but cables are
    the supported way to model closed chains.
``W02``
    A cable asked for a skin while its bodies carry non-box geoms; the skin
    is skipped.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from compgen.errors import ValidationError

KNOWN_CODES: dict[str, str] = {
    "W01": "loop composite is deprecated in favour of cable",
    "W02": "cable skin is only generated for box geoms",
}


class CompgenWarning(UserWarning):
    """A diagnostic tagged with one of ``KNOWN_CODES``."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(f"[{code}] {message}")


@dataclass(frozen=True)
class WarningPolicy:
    """Which codes the caller wants dropped and which should abort the build."""

    warn_as_error: frozenset[str] = frozenset()
    suppress: frozenset[str] = frozenset()

    @classmethod
    def from_options(
        cls, warn_as_error: str | None, suppress: str | None
    ) -> WarningPolicy | None:
        """Build a policy from comma-separated code lists, or None when both are unset."""
        if warn_as_error is None and suppress is None:
            return None
        return cls(
            warn_as_error=parse_code_list(warn_as_error) if warn_as_error else frozenset(),
            suppress=parse_code_list(suppress) if suppress else frozenset(),
        )

    def action(self, code: str) -> str:
        """``"drop"``, ``"raise"`` or ``"warn"``; suppression takes precedence."""
        if code in self.suppress:
            return "drop"
        if code in self.warn_as_error:
            return "raise"
        return "warn"


def emit_warning(code: str, message: str, *, policy: WarningPolicy | None = None) -> None:
    action = "warn" if policy is None else policy.action(code)
    if action == "drop":
        return
    if action == "raise":
        raise ValidationError(f"[{code}] {message}")
    warnings.warn(CompgenWarning(code, message), stacklevel=3)


def parse_code_list(raw: str) -> frozenset[str]:
    """Turn ``"W01, W02"`` into a set of codes.

    Blank entries are ignored. Raises ``ValueError`` naming the first
    unknown code.
    """
    codes = {token.strip() for token in raw.split(",") if token.strip()}
    unknown = sorted(codes - KNOWN_CODES.keys())
    if unknown:
        raise ValueError(f"Unknown warning code: {unknown[0]!r} (known: {sorted(KNOWN_CODES)})")
    return frozenset(codes)
