"""Layered resolution of operator-edited fields over derived values.

Every document view resolves its fields the same way: the first value that
is actually filled in wins, walking from the most specific source (the
per-document overlay) down to the most generic one (the linked client, then a
literal placeholder).
"""
from __future__ import annotations

from dataclasses import fields, is_dataclass, replace
from typing import Optional, TypeVar

T = TypeVar("T")


def is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def first_present(*values: object, default: object = None):
    for v in values:
        if is_present(v):
            return v
    return default


def resolve(base: T, overlay: Optional[object]) -> T:
    """Return ``base`` with every present field of ``overlay`` laid over it.

    ``overlay`` is a sparse record of the same shape (a dataclass with the same
    field names, or a plain dict). Missing and empty overlay fields leave the
    base untouched.
    """
    if overlay is None:
        return base
    if not is_dataclass(base):
        raise TypeError(f"Cannot resolve overlay onto {type(base).__name__}")

    if isinstance(overlay, dict):
        patch = overlay
    else:
        patch = {f.name: getattr(overlay, f.name) for f in fields(overlay)}

    known = {f.name for f in fields(base)}
    changes = {k: v for k, v in patch.items() if k in known and is_present(v)}
    if not changes:
        return base
    return replace(base, **changes)
