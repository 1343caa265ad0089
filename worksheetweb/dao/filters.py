"""Filter predicates for list queries.

Each listable entity declares a closed mapping of filter names to
:data:`FilterSpec` variants. :func:`build_predicate` turns the values a
caller supplied into predicate fragments. Values always travel as bound
parameters; only column expressions from the filter declarations reach
the SQL text.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from sqlalchemy import ColumnElement, and_, or_, true


class UnknownFilterError(ValueError):
    """Raised when a filter name is not declared for the entity."""


@dataclass(frozen=True)
class ExactMatch:
    """``column = :value``."""

    column: ColumnElement[Any]

    def bind(self, value: Any) -> Any:
        return value

    def fragment(self, bound: Any) -> ColumnElement[bool]:
        return self.column == bound


@dataclass(frozen=True)
class SubstringMatch:
    """``col1 ILIKE :pattern OR col2 ILIKE :pattern ...`` with ``%value%``."""

    columns: tuple[ColumnElement[Any], ...]

    def __post_init__(self) -> None:
        if not self.columns:
            raise ValueError("SubstringMatch needs at least one column")

    def bind(self, value: Any) -> str:
        return f"%{value}%"

    def fragment(self, bound: str) -> ColumnElement[bool]:
        return or_(*(col.ilike(bound) for col in self.columns))


FilterSpec = Union[ExactMatch, SubstringMatch]


@dataclass
class Predicate:
    """Ordered predicate fragments and their bound values, index for index."""

    fragments: list[ColumnElement[bool]] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)

    @property
    def clause(self) -> ColumnElement[bool]:
        """AND of all fragments, or ``true`` when there are none."""
        if not self.fragments:
            return true()
        return and_(*self.fragments)


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def build_predicate(specs: Mapping[str, FilterSpec], filters: Mapping[str, Any]) -> Predicate:
    """Build the WHERE predicate for *filters* against the declared *specs*.

    Fragments follow the declaration order of *specs*, not the order of
    *filters*. Absent values (``None`` or ``""``) are skipped.

    Raises :class:`UnknownFilterError` for a name missing from *specs*.
    """
    unknown = set(filters) - set(specs)
    if unknown:
        raise UnknownFilterError(f"unknown filter(s): {', '.join(sorted(unknown))}")

    predicate = Predicate()
    for name, spec in specs.items():
        value = filters.get(name)
        if _is_absent(value):
            continue
        bound = spec.bind(value)
        predicate.fragments.append(spec.fragment(bound))
        predicate.values.append(bound)
    return predicate
