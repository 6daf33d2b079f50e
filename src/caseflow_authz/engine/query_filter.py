"""Storage-agnostic query filter descriptors.

A list operation receives exactly one of three descriptors from the
filter generator:

- :class:`MatchAll`: no predicate; every row may be returned.
- :class:`FieldEquals`: rows whose (possibly nested) field equals a value.
- :class:`MatchNothing`: no row may be returned.

The data-access layer translates these into its native predicate form and
must apply them verbatim.  ``matches()`` gives the in-memory reading of the
same descriptor, used by :meth:`AuthorizationEngine.filter_resources`.

Example
-------
>>> f = FieldEquals("createdBy", 5)
>>> f.matches({"createdBy": "5"})
True
>>> f.to_dict()
{'type': 'field_equals', 'path': 'createdBy', 'value': 5}
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from caseflow_authz.engine.paths import ids_equal, safe_get


@dataclass(frozen=True)
class MatchAll:
    """No restriction."""

    kind: ClassVar[str] = "any"

    def matches(self, record: object) -> bool:
        return True

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind}


@dataclass(frozen=True)
class FieldEquals:
    """Equality on a dot-separated field path.

    Attributes
    ----------
    path:
        Field path inside a row (e.g. ``"createdBy.id"``).
    value:
        The actor id the field must equal.
    """

    path: str
    value: object
    kind: ClassVar[str] = "field_equals"

    def matches(self, record: object) -> bool:
        return ids_equal(safe_get(record, self.path), self.value)

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "path": self.path, "value": self.value}


@dataclass(frozen=True)
class MatchNothing:
    """Matches no row.  A listing under this filter must be empty."""

    kind: ClassVar[str] = "none"

    def matches(self, record: object) -> bool:
        return False

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind}


QueryFilter = Union[MatchAll, FieldEquals, MatchNothing]

MATCH_ALL = MatchAll()
MATCH_NOTHING = MatchNothing()
