"""Type-aware, explicitly stable single-key ordering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Any, Iterable

from .fields import FieldAccessor, Record, to_number, to_text, to_timestamp


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @property
    def flipped(self) -> SortDirection:
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


class TypeHint(str, Enum):
    STRING = "string"
    NUMERIC = "numeric"
    DATE = "date"


@dataclass(frozen=True)
class SortSpec:
    """The one active sort: column, direction and how to compare it."""

    key: FieldAccessor
    direction: SortDirection = SortDirection.DESCENDING
    comparator: TypeHint = TypeHint.STRING

    def toggled(self, key: FieldAccessor, comparator: TypeHint | None = None) -> SortSpec:
        """Spec after a click on the *key* column header.

        Clicking the active column flips its direction; clicking another
        column starts it in descending order.
        """
        if key.name == self.key.name:
            return SortSpec(self.key, self.direction.flipped, self.comparator)
        return SortSpec(key, SortDirection.DESCENDING, comparator or TypeHint.STRING)


class SortComparator:
    @staticmethod
    def sort_value(record: Record, spec: SortSpec) -> Any:
        raw = spec.key.get(record)
        if spec.comparator is TypeHint.NUMERIC:
            return to_number(raw)
        if spec.comparator is TypeHint.DATE:
            return to_timestamp(raw, 0.0)
        return to_text(raw).lower()

    @staticmethod
    def _cmp_values(left: Any, right: Any, direction: SortDirection) -> int:
        result = (left > right) - (left < right)
        return -result if direction is SortDirection.DESCENDING else result

    @classmethod
    def compare(cls, a: Record, b: Record, spec: SortSpec) -> int:
        """-1, 0 or 1 for *a* against *b* under *spec*."""
        return cls._cmp_values(cls.sort_value(a, spec), cls.sort_value(b, spec), spec.direction)


def stable_sort(records: Iterable[Record], spec: SortSpec) -> list[Record]:
    """Sort *records* by *spec*, ties keeping their input order.

    Each record is tagged with its input position and the position is the
    final tiebreaker, so stability does not depend on the sort algorithm.
    """
    decorated = [
        (SortComparator.sort_value(record, spec), position, record)
        for position, record in enumerate(records)
    ]

    def _cmp(x: tuple[Any, int, Record], y: tuple[Any, int, Record]) -> int:
        result = SortComparator._cmp_values(x[0], y[0], spec.direction)
        if result:
            return result
        return (x[1] > y[1]) - (x[1] < y[1])

    decorated.sort(key=cmp_to_key(_cmp))
    return [record for _, _, record in decorated]
