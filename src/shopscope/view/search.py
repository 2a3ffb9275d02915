"""Free-text search gate over a configurable set of record fields."""

from __future__ import annotations

from dataclasses import dataclass, field

from .fields import FieldAccessor, Record, to_text


@dataclass(frozen=True)
class SearchSpec:
    """Raw user query plus the fields it is matched against."""

    query: str = ""
    fields: tuple[FieldAccessor, ...] = field(default_factory=tuple)

    @property
    def normalized_query(self) -> str:
        return self.query.strip().lower()

    def with_query(self, query: str) -> SearchSpec:
        return SearchSpec(query=query, fields=self.fields)


class SearchMatcher:
    """Case-insensitive substring match, OR-combined across fields.

    No tokenization, ranking or fuzziness: a record either contains the
    trimmed query in at least one field or it doesn't.  Array-valued
    fields are joined with a space before matching.
    """

    @staticmethod
    def matches(record: Record, spec: SearchSpec) -> bool:
        needle = spec.normalized_query
        if not needle:
            return True
        for accessor in spec.fields:
            if needle in to_text(accessor.get(record)).lower():
                return True
        return False
