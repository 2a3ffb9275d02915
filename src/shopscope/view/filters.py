"""Typed filter criteria composed with AND semantics.

A criterion with no value (or no bounds) is *absent*: it stays in the
:class:`FilterSet` so the UI can show it, but it never excludes a record.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from .fields import FieldAccessor, Record, parse_datetime, to_number


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _optional_float(value: Any) -> float | None:
    if _blank(value):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return None if math.isnan(value) else float(value)
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return None if math.isnan(number) else number


# ---------------------------------------------------------------------------
# Criteria
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Equality:
    """Passes iff the field value equals *value*."""

    field: FieldAccessor
    value: Any = None
    key: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", self.field.name)

    @property
    def is_present(self) -> bool:
        return not _blank(self.value)

    def passes(self, record: Record, now: datetime) -> bool:
        return self.field.get(record) == self.value


@dataclass(frozen=True)
class NumericRange:
    """Passes iff ``min <= number(field) <= max``; open bounds are infinite."""

    field: FieldAccessor
    min: float | None = None
    max: float | None = None
    key: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", self.field.name)
        object.__setattr__(self, "min", _optional_float(self.min))
        object.__setattr__(self, "max", _optional_float(self.max))

    @property
    def is_present(self) -> bool:
        return self.min is not None or self.max is not None

    def passes(self, record: Record, now: datetime) -> bool:
        low = -math.inf if self.min is None else self.min
        high = math.inf if self.max is None else self.max
        return low <= to_number(self.field.get(record)) <= high


@dataclass(frozen=True)
class DateRange:
    """Passes iff the field date lies in ``[start, end]`` (inclusive).

    A record whose date is missing or unparsable is evaluated as if it
    were dated *now*.
    """

    field: FieldAccessor
    start: datetime | None = None
    end: datetime | None = None
    key: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", self.field.name)
        object.__setattr__(self, "start", parse_datetime(self.start))
        object.__setattr__(self, "end", parse_datetime(self.end))

    @property
    def is_present(self) -> bool:
        return self.start is not None or self.end is not None

    def passes(self, record: Record, now: datetime) -> bool:
        when = parse_datetime(self.field.get(record)) or now
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when > self.end:
            return False
        return True


FilterCriterion = Union[Equality, NumericRange, DateRange]


# ---------------------------------------------------------------------------
# Filter set
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterSet:
    """Ordered, immutable collection of criteria (AND-combined)."""

    criteria: tuple[FilterCriterion, ...] = ()

    def __iter__(self) -> Iterator[FilterCriterion]:
        return iter(self.criteria)

    def __len__(self) -> int:
        return len(self.criteria)

    def present(self) -> tuple[FilterCriterion, ...]:
        return tuple(c for c in self.criteria if c.is_present)

    @property
    def is_active(self) -> bool:
        return any(c.is_present for c in self.criteria)

    def get(self, key: str) -> FilterCriterion | None:
        for criterion in self.criteria:
            if criterion.key == key:
                return criterion
        return None

    def with_criterion(self, criterion: FilterCriterion) -> FilterSet:
        """Replace the criterion sharing *criterion.key*, or append it."""
        out: list[FilterCriterion] = []
        replaced = False
        for existing in self.criteria:
            if existing.key == criterion.key:
                out.append(criterion)
                replaced = True
            else:
                out.append(existing)
        if not replaced:
            out.append(criterion)
        return FilterSet(tuple(out))

    def without(self, key: str) -> FilterSet:
        return FilterSet(tuple(c for c in self.criteria if c.key != key))

    def cleared(self) -> FilterSet:
        """Same criteria with every value/bound emptied."""
        emptied: list[FilterCriterion] = []
        for c in self.criteria:
            if isinstance(c, Equality):
                emptied.append(replace(c, value=None))
            elif isinstance(c, NumericRange):
                emptied.append(replace(c, min=None, max=None))
            else:
                emptied.append(replace(c, start=None, end=None))
        return FilterSet(tuple(emptied))

    @classmethod
    def from_values(
        cls,
        definitions: tuple[FilterDefinition, ...] | list[FilterDefinition],
        values: Mapping[str, Any] | None = None,
    ) -> FilterSet:
        values = values or {}
        return cls(tuple(d.build(values.get(d.key)) for d in definitions))


# ---------------------------------------------------------------------------
# Definitions (per-screen configuration)
# ---------------------------------------------------------------------------

class FilterKind(str, Enum):
    EQUALITY = "equality"
    NUMERIC_RANGE = "numeric_range"
    DATE_RANGE = "date_range"


def _bounds(raw: Any, low_key: str, high_key: str) -> tuple[Any, Any]:
    if raw is None:
        return None, None
    if isinstance(raw, Mapping):
        return raw.get(low_key), raw.get(high_key)
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return raw[0], raw[1]
    raise ValueError(f"Expected a ({low_key}, {high_key}) pair, got {raw!r}")


@dataclass(frozen=True)
class FilterDefinition:
    """How one filter control on a list screen maps onto a criterion."""

    key: str
    kind: FilterKind
    field: FieldAccessor
    label: str = ""
    options: tuple[str, ...] = ()

    def build(self, raw: Any = None) -> FilterCriterion:
        """Criterion for a loosely typed UI value (``""`` means absent)."""
        if self.kind is FilterKind.EQUALITY:
            return Equality(self.field, None if _blank(raw) else raw, key=self.key)
        if self.kind is FilterKind.NUMERIC_RANGE:
            low, high = _bounds(raw, "min", "max")
            return NumericRange(self.field, low, high, key=self.key)
        start, end = _bounds(raw, "start", "end")
        return DateRange(self.field, start, end, key=self.key)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class FilterEvaluator:
    @staticmethod
    def evaluate(record: Record, filter_set: FilterSet, now: datetime | None = None) -> bool:
        """``True`` iff *record* passes every present criterion."""
        now = now or datetime.now(timezone.utc)
        return all(c.passes(record, now) for c in filter_set.criteria if c.is_present)
