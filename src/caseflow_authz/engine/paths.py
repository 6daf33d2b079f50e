"""Null-safe field path traversal and identifier comparison.

``safe_get`` walks a dot-separated path through a tree of mappings,
objects and sequences.  A missing intermediate field yields ``MISSING``
rather than raising.

``canonical_id`` reduces identifiers to a single comparable form so that an
owner id stored as ``5`` matches an actor id that arrived as ``"5"``:

- ``int`` values stay ``int``;
- integral ``float`` values become ``int`` (``5.0`` -> ``5``);
- strings are stripped; a string of ASCII digits with an optional leading
  sign becomes ``int`` (``" 007 "`` -> ``7``); other strings stay strings;
- any other value (``UUID`` and friends) is compared by ``str()``;
- ``None``, ``bool``, empty strings, non-integral floats and containers
  have no canonical form and never match anything.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def split_path(path: str) -> tuple[str, ...]:
    """Split ``"a.b.c"`` into its segments."""
    return tuple(path.split("."))


def safe_get(target: object, path: str) -> object:
    """Resolve ``path`` inside ``target``.

    Mappings are indexed by key, sequences (other than strings) by integer
    segment, and any other object by attribute.

    Returns
    -------
    object
        The resolved value, or ``MISSING`` when any segment is absent or
        an intermediate value is ``None``.
    """
    current: object = target
    for segment in split_path(path):
        if current is None or current is MISSING:
            return MISSING
        if isinstance(current, Mapping):
            current = current.get(segment, MISSING)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.isdigit():
                return MISSING
            index = int(segment)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            current = getattr(current, segment, MISSING)
    return current


def canonical_id(value: object) -> int | str | None:
    """Return the canonical comparable form of an identifier, or ``None``."""
    if value is None or value is MISSING or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _INTEGER_RE.fullmatch(text):
            try:
                return int(text)
            except ValueError:
                # beyond the interpreter's int conversion limit
                return text
        return text
    if isinstance(value, (Mapping, Sequence, set, frozenset)):
        return None
    return str(value)


def ids_equal(left: object, right: object) -> bool:
    """Return True when both identifiers have the same canonical form.

    Two values without a canonical form never compare equal, so a missing
    owner field cannot match an actor whose id is also missing.
    """
    canonical_left = canonical_id(left)
    if canonical_left is None:
        return False
    return canonical_left == canonical_id(right)
