"""Field accessors and value coercion for loosely shaped records.

Records arrive from the admin API as plain dicts whose shape differs
between screens (and sometimes between records of the same screen), so
every read goes through a :class:`FieldAccessor` and every comparison
through one of the ``to_*`` coercion helpers.  Coercion never raises:
malformed values fall back to ``""``, ``0.0`` or a caller-supplied
timestamp.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as dt_parser

Record = Mapping[str, Any]

_MISSING = object()

# Numeric timestamps at or above this are read as milliseconds (1e11 s is
# past the year 5000).
_MS_THRESHOLD = 1e11


def _lookup(record: Any, path: str) -> Any:
    """Walk a dotted *path* (``"user.email"``, ``"images.0.url"``)."""
    current = record
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def _is_blank(value: Any) -> bool:
    return value is _MISSING or value is None or (isinstance(value, str) and value == "")


@dataclass(frozen=True)
class FieldAccessor:
    """Named read access into a record with a fallback chain of paths.

    ``FieldAccessor("price", ("price", "unitPrice"))`` reads ``price`` and
    falls back to ``unitPrice`` when the first is missing, ``None`` or an
    empty string.
    """

    name: str
    paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.paths:
            object.__setattr__(self, "paths", (self.name,))

    @classmethod
    def of(cls, spec: str | FieldAccessor) -> FieldAccessor:
        """Build an accessor from ``"name"`` or ``"name|fallback|..."``."""
        if isinstance(spec, FieldAccessor):
            return spec
        paths = tuple(p.strip() for p in spec.split("|") if p.strip())
        if not paths:
            raise ValueError(f"Empty field spec: {spec!r}")
        return cls(name=paths[0], paths=paths)

    def get(self, record: Record, default: Any = None) -> Any:
        for path in self.paths:
            value = _lookup(record, path)
            if not _is_blank(value):
                return value
        return default


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

def to_text(value: Any) -> str:
    """String form used for search and string sorting (not lower-cased)."""
    if value is None or value is _MISSING:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return " ".join(to_text(v) for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return " ".join(to_text(v) for v in value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_number(value: Any) -> float:
    """Numeric form of *value*; anything non-numeric becomes ``0.0``."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return 0.0 if math.isnan(number) else number


def parse_datetime(value: Any) -> datetime | None:
    """Parse *value* into an aware datetime, or ``None`` if it can't be.

    Naive values are taken as UTC.  Numbers are epoch seconds, or epoch
    milliseconds once they pass :data:`_MS_THRESHOLD`.
    """
    if value is None or value is _MISSING or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            seconds = float(value)
            if abs(seconds) >= _MS_THRESHOLD:
                seconds /= 1000
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = dt_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            try:
                parsed = dt_parser.parse(value)
            except (ValueError, OverflowError):
                return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_timestamp(value: Any, default: float) -> float:
    """Epoch seconds for *value*, or *default* when it does not parse."""
    parsed = parse_datetime(value)
    if parsed is None:
        return default
    return parsed.timestamp()


def record_id(record: Record) -> str:
    """Identifier of *record* (``id`` first, then Mongo-style ``_id``)."""
    value = record.get("id")
    if _is_blank(value):
        value = record.get("_id")
    return "" if _is_blank(value) else str(value)
