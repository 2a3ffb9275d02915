"""Tests for the free-text search gate."""

from shopscope.view.fields import FieldAccessor
from shopscope.view.search import SearchMatcher, SearchSpec

FIELDS = tuple(FieldAccessor.of(f) for f in ("name", "sku", "tags"))


def spec(query: str) -> SearchSpec:
    return SearchSpec(query, FIELDS)


class TestSearchMatcher:
    def test_empty_query_matches_everything(self):
        assert SearchMatcher.matches({}, spec(""))
        assert SearchMatcher.matches({"name": "x"}, spec("   "))

    def test_case_insensitive_substring(self):
        record = {"name": "Blue Widget"}
        assert SearchMatcher.matches(record, spec("widg"))
        assert SearchMatcher.matches(record, spec("BLUE"))
        assert not SearchMatcher.matches(record, spec("gadget"))

    def test_query_is_trimmed(self):
        assert SearchMatcher.matches({"name": "Widget"}, spec("  widget  "))

    def test_or_across_fields(self):
        record = {"name": "Widget", "sku": "SKU-991"}
        assert SearchMatcher.matches(record, spec("991"))

    def test_array_field_joined_with_space(self):
        record = {"name": "Shirt", "tags": ["summer", "cotton"]}
        assert SearchMatcher.matches(record, spec("cotton"))
        assert SearchMatcher.matches(record, spec("summer cotton"))

    def test_missing_fields_do_not_match(self):
        assert not SearchMatcher.matches({"price": 5}, spec("5"))

    def test_with_query_keeps_fields(self):
        s = spec("a").with_query("b")
        assert s.query == "b"
        assert s.fields == FIELDS
