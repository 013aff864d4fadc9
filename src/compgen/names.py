"""Deterministic element names.

Generated elements refer to each other by name only, so every name is a pure
function of the composite prefix, an element tag and lattice indices.
"""

from __future__ import annotations


def element(prefix: str, tag: str, *idx: int) -> str:
    """``element("p", "B", 1, 2)`` -> ``"pB1_2"``."""
    return prefix + tag + "_".join(str(i) for i in idx)


def body(prefix: str, *idx: int) -> str:
    return element(prefix, "B", *idx)


def geom(prefix: str, *idx: int) -> str:
    return element(prefix, "G", *idx)


def site(prefix: str, *idx: int) -> str:
    return element(prefix, "S", *idx)


def joint(prefix: str, *idx: int) -> str:
    return element(prefix, "J", *idx)


def tendon(prefix: str, *idx: int) -> str:
    return element(prefix, "T", *idx)


def skin(prefix: str) -> str:
    return prefix + "Skin"


def cable(prefix: str, tag: str, ix: int, first: bool, last: bool) -> str:
    """Cable chain names: ``B_first``, ``B_3``, ``B_last`` (same for J and S)."""
    if first:
        return f"{prefix}{tag}_first"
    if last:
        return f"{prefix}{tag}_last"
    return f"{prefix}{tag}_{ix}"


def cable_bone(prefix: str, ix: int, nvert: int) -> str:
    """Body owning skin row ``ix`` of a cable with ``nvert`` centerline vertices."""
    k = min(ix, nvert - 2)
    return cable(prefix, "B", k, first=k == 0, last=k == nvert - 2)
