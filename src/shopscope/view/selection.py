"""Row-selection bookkeeping for list screens.

Selection is kept across filter and page changes: an id selected while
visible stays selected after a search hides it.  Rendering only ever
flags rows that are visible, and bulk actions act on the whole set, so
callers that want "visible only" semantics call :meth:`prune` first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class SelectionTracker:
    """Set of selected record ids plus the currently visible id set.

    The visible set is whatever the owning view last reported through
    :meth:`set_visible` (or :meth:`select_all`); the ``visible_ids``
    arguments below override it for a single call.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)
        self._visible: frozenset[str] = frozenset()

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def selected_count(self) -> int:
        return len(self._ids)

    @property
    def visible(self) -> frozenset[str]:
        return self._visible

    def set_visible(self, visible_ids: Iterable[str]) -> None:
        self._visible = frozenset(visible_ids)

    def is_selected(self, record_id: str) -> bool:
        return record_id in self._ids

    def toggle(self, record_id: str) -> bool:
        """Flip *record_id*; return whether it is now selected."""
        if record_id in self._ids:
            self._ids.discard(record_id)
            return False
        self._ids.add(record_id)
        return True

    def discard(self, record_id: str) -> None:
        self._ids.discard(record_id)

    def select_all(self, visible_ids: Iterable[str]) -> None:
        """Replace the selection with exactly *visible_ids*."""
        self._visible = frozenset(visible_ids)
        self._ids = set(self._visible)

    def clear(self) -> None:
        self._ids.clear()

    def _resolve(self, visible_ids: Iterable[str] | None) -> frozenset[str]:
        return self._visible if visible_ids is None else frozenset(visible_ids)

    def is_all_selected(self, visible_ids: Iterable[str] | None = None) -> bool:
        visible = self._resolve(visible_ids)
        return bool(visible) and self._ids == visible

    def is_indeterminate(self, visible_ids: Iterable[str] | None = None) -> bool:
        """Some, but not exactly all, of the visible rows are selected.

        Drives the third visual state of the header checkbox.
        """
        return bool(self._ids) and self._ids != self._resolve(visible_ids)

    def visible_selection(self, visible_ids: Iterable[str] | None = None) -> frozenset[str]:
        return frozenset(self._ids & self._resolve(visible_ids))

    def prune(self, visible_ids: Iterable[str] | None = None) -> int:
        """Drop ids outside the visible set; return how many went."""
        before = len(self._ids)
        self._ids &= self._resolve(visible_ids)
        dropped = before - len(self._ids)
        if dropped:
            logger.debug("Pruned %d selected ids outside the visible set", dropped)
        return dropped
