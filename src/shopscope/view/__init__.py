"""Search, filter, sort, paginate and select over an in-memory record snapshot."""

from .bulk import BulkAction, BulkItemResult, BulkOperation, BulkOperationRunner, BulkResult
from .debounce import Debouncer
from .fields import FieldAccessor, record_id
from .filters import (
    DateRange,
    Equality,
    FilterDefinition,
    FilterEvaluator,
    FilterKind,
    FilterSet,
    NumericRange,
)
from .pagination import PAGE_SIZE_OPTIONS, PageSlice, PageState, Paginator
from .pipeline import ViewPipeline
from .search import SearchMatcher, SearchSpec
from .selection import SelectionTracker
from .sorting import SortComparator, SortDirection, SortSpec, TypeHint, stable_sort

__all__ = [
    "BulkAction",
    "BulkItemResult",
    "BulkOperation",
    "BulkOperationRunner",
    "BulkResult",
    "DateRange",
    "Debouncer",
    "Equality",
    "FieldAccessor",
    "FilterDefinition",
    "FilterEvaluator",
    "FilterKind",
    "FilterSet",
    "NumericRange",
    "PAGE_SIZE_OPTIONS",
    "PageSlice",
    "PageState",
    "Paginator",
    "SearchMatcher",
    "SearchSpec",
    "SelectionTracker",
    "SortComparator",
    "SortDirection",
    "SortSpec",
    "TypeHint",
    "ViewPipeline",
    "record_id",
    "stable_sort",
]
