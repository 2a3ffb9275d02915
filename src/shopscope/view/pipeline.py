"""Search -> filter -> sort over the in-memory source snapshot."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from .fields import Record
from .filters import FilterEvaluator, FilterSet
from .search import SearchMatcher, SearchSpec
from .sorting import SortSpec, stable_sort

logger = logging.getLogger(__name__)

OrderedResult = tuple[Record, ...]


class ViewPipeline:
    """Derives the ordered, visible result set from the current inputs.

    Every real change reruns the full filter + sort over the whole source;
    the snapshot is bounded by the fetch limit so there is no incremental
    path.  The last result is memoized: the source is compared by identity
    (callers replace it, never mutate it) and the specs by value.
    """

    def __init__(self) -> None:
        self._last_key: tuple | None = None
        self._last_source: Sequence[Record] | None = None
        self._last_result: OrderedResult = ()
        self.recompute_count = 0

    def recompute(
        self,
        source: Sequence[Record],
        search: SearchSpec,
        filters: FilterSet,
        sort: SortSpec | None,
        now: datetime | None = None,
    ) -> OrderedResult:
        key = (search, filters, sort)
        if self._last_source is source and self._last_key == key:
            return self._last_result

        now = now or datetime.now(timezone.utc)
        matched = [
            record for record in source
            if SearchMatcher.matches(record, search)
            and FilterEvaluator.evaluate(record, filters, now)
        ]
        result: OrderedResult = tuple(stable_sort(matched, sort) if sort else matched)

        self.recompute_count += 1
        self._last_source = source
        self._last_key = key
        self._last_result = result
        logger.debug(
            "Pipeline recompute #%d: %d of %d records visible",
            self.recompute_count, len(result), len(source),
        )
        return result

    def invalidate(self) -> None:
        """Forget the memoized result."""
        self._last_key = None
        self._last_source = None
        self._last_result = ()
