"""Tests for filter criteria, filter sets and the evaluator."""

from datetime import datetime, timezone

import pytest

from shopscope.view.fields import FieldAccessor
from shopscope.view.filters import (
    DateRange,
    Equality,
    FilterDefinition,
    FilterEvaluator,
    FilterKind,
    FilterSet,
    NumericRange,
)

NOW = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)

STATUS = FieldAccessor.of("status")
PRICE = FieldAccessor.of("price|unitPrice")
CREATED = FieldAccessor.of("createdAt|createdDate")

PRODUCTS = [
    {"id": 1, "name": "Widget", "price": 10, "stock": 0, "status": "active"},
    {"id": 2, "name": "Gadget", "price": 25, "stock": 5, "status": "draft"},
    {"id": 3, "name": "Gizmo", "price": 10, "stock": 50, "status": "active"},
]


def passing_ids(filter_set: FilterSet) -> list[int]:
    return [r["id"] for r in PRODUCTS if FilterEvaluator.evaluate(r, filter_set, NOW)]


class TestEquality:
    def test_matches_exact_value(self):
        crit = Equality(STATUS, "active")
        assert crit.passes({"status": "active"}, NOW)
        assert not crit.passes({"status": "Active"}, NOW)

    def test_blank_value_is_absent(self):
        assert not Equality(STATUS, "").is_present
        assert not Equality(STATUS, None).is_present
        assert Equality(STATUS, "draft").is_present

    def test_key_defaults_to_field_name(self):
        assert Equality(STATUS, "x").key == "status"
        assert Equality(STATUS, "x", key="state").key == "state"


class TestNumericRange:
    def test_inclusive_bounds(self):
        crit = NumericRange(PRICE, 10, 25)
        assert crit.passes({"price": 10}, NOW)
        assert crit.passes({"price": 25}, NOW)
        assert not crit.passes({"price": 25.01}, NOW)

    def test_open_bounds(self):
        assert NumericRange(PRICE, min=15).passes({"price": 1e9}, NOW)
        assert NumericRange(PRICE, max=15).passes({"price": -3}, NOW)

    def test_string_bounds_are_coerced(self):
        crit = NumericRange(PRICE, "15", "")
        assert crit.min == 15.0
        assert crit.max is None
        assert crit.is_present

    def test_both_bounds_blank_is_absent(self):
        assert not NumericRange(PRICE, "", None).is_present

    def test_malformed_value_counts_as_zero(self):
        crit = NumericRange(PRICE, -1, 1)
        assert crit.passes({"price": "n/a"}, NOW)
        assert crit.passes({}, NOW)

    def test_fallback_field(self):
        assert NumericRange(PRICE, 5, 5).passes({"unitPrice": 5}, NOW)


class TestDateRange:
    def test_inclusive_range(self):
        crit = DateRange(CREATED, "2024-01-01", "2024-02-01")
        assert crit.passes({"createdAt": "2024-01-15T00:00:00Z"}, NOW)
        assert crit.passes({"createdAt": "2024-01-01T00:00:00Z"}, NOW)
        assert not crit.passes({"createdAt": "2023-12-31T23:59:59Z"}, NOW)

    def test_missing_date_is_evaluated_as_now(self):
        past = DateRange(CREATED, end="2024-01-01")
        assert not past.passes({}, NOW)
        recent = DateRange(CREATED, start="2024-05-01")
        assert recent.passes({"createdAt": "garbage"}, NOW)

    def test_fallback_field(self):
        crit = DateRange(CREATED, start="2024-01-01")
        assert crit.passes({"createdDate": "2024-03-03"}, NOW)

    def test_unset_bounds_absent(self):
        assert not DateRange(CREATED).is_present


class TestFilterEvaluator:
    def test_status_filter(self):
        fs = FilterSet((Equality(STATUS, "active"),))
        assert passing_ids(fs) == [1, 3]

    def test_price_min_only(self):
        fs = FilterSet((NumericRange(PRICE, min=15, key="priceRange"),))
        assert passing_ids(fs) == [2]

    def test_and_composition(self):
        fs = FilterSet((
            Equality(STATUS, "active"),
            NumericRange(FieldAccessor.of("stock"), min=1),
        ))
        assert passing_ids(fs) == [3]

    def test_absent_criteria_never_exclude(self):
        fs = FilterSet((Equality(STATUS, ""), NumericRange(PRICE)))
        assert passing_ids(fs) == [1, 2, 3]

    def test_empty_set_passes_everything(self):
        assert passing_ids(FilterSet()) == [1, 2, 3]


class TestFilterSet:
    def test_with_criterion_replaces_same_key(self):
        fs = FilterSet((Equality(STATUS, "active"),))
        fs = fs.with_criterion(Equality(STATUS, "draft"))
        assert len(fs) == 1
        assert fs.get("status").value == "draft"

    def test_with_criterion_appends_new_key(self):
        fs = FilterSet().with_criterion(Equality(STATUS, "draft"))
        fs = fs.with_criterion(NumericRange(PRICE, 1, 2, key="priceRange"))
        assert [c.key for c in fs] == ["status", "priceRange"]

    def test_without_and_cleared(self):
        fs = FilterSet((Equality(STATUS, "active"), NumericRange(PRICE, 1, 2)))
        assert [c.key for c in fs.without("status")] == ["price"]
        cleared = fs.cleared()
        assert len(cleared) == 2
        assert not cleared.is_active

    def test_present(self):
        fs = FilterSet((Equality(STATUS, ""), NumericRange(PRICE, 1)))
        assert [c.key for c in fs.present()] == ["price"]

    def test_from_values(self):
        definitions = (
            FilterDefinition("status", FilterKind.EQUALITY, STATUS),
            FilterDefinition("priceRange", FilterKind.NUMERIC_RANGE, PRICE),
            FilterDefinition("dateRange", FilterKind.DATE_RANGE, CREATED),
        )
        fs = FilterSet.from_values(definitions, {
            "status": "",
            "priceRange": {"min": "15", "max": ""},
            "dateRange": ("2024-01-01", None),
        })
        assert not fs.get("status").is_present
        assert fs.get("priceRange").min == 15.0
        assert fs.get("dateRange").start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert passing_ids(fs) == [2]

    def test_definition_rejects_bad_range_value(self):
        definition = FilterDefinition("priceRange", FilterKind.NUMERIC_RANGE, PRICE)
        with pytest.raises(ValueError):
            definition.build("15")
