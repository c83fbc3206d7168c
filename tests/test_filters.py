"""Tests for filter(): literals, primitive search, wildcards, nesting."""

import os
import sys
from dataclasses import dataclass
from enum import Enum

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from deep_filter import TypeMismatchError, filter


def matches(item, expression, **options):
    return filter([item], expression, **options) == [item]


class Status(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# =========================================================================
# Exact match
# =========================================================================


class TestExactMatch:
    def test_simple_equality(self):
        assert matches({"symbol": "AAPL"}, {"symbol": "AAPL"}) is True

    def test_simple_inequality(self):
        assert matches({"symbol": "AAPL"}, {"symbol": "GOOG"}) is False

    def test_multiple_fields_all_match(self):
        item = {"symbol": "AAPL", "side": "buy"}
        assert matches(item, {"symbol": "AAPL", "side": "buy"}) is True

    def test_multiple_fields_one_mismatch(self):
        item = {"symbol": "AAPL", "side": "sell"}
        assert matches(item, {"symbol": "AAPL", "side": "buy"}) is False

    def test_empty_expression_matches_everything(self, customers):
        assert filter(customers, {}) == customers

    def test_missing_field_does_not_match(self):
        assert matches({"other": "value"}, {"symbol": "AAPL"}) is False

    def test_none_matches_none(self):
        assert matches({"symbol": None}, {"symbol": None}) is True
        assert matches({"symbol": "AAPL"}, {"symbol": None}) is False

    def test_numeric_equality(self):
        assert matches({"qty": 10}, {"qty": 10}) is True
        assert matches({"qty": 10.0}, {"qty": 10}) is True
        assert matches({"qty": 11}, {"qty": 10}) is False

    def test_boolean_equality(self):
        assert matches({"active": True}, {"active": True}) is True
        assert matches({"active": True}, {"active": False}) is False

    def test_booleans_are_not_numbers(self):
        assert matches({"flag": True}, {"flag": 1}) is False
        assert matches({"flag": 0}, {"flag": False}) is False

    def test_enum_members(self):
        items = [{"status": Status.ACTIVE}, {"status": Status.INACTIVE}]
        assert filter(items, {"status": Status.ACTIVE}) == [items[0]]
        assert filter(items, {"status": [Status.ACTIVE]}) == [items[0]]
        assert filter(items, {"status": {"$ne": Status.ACTIVE}}) == [items[1]]

    def test_field_strings_fold_case_by_default(self):
        assert matches({"symbol": "AAPL"}, {"symbol": "aapl"}) is True
        assert matches({"symbol": "AAPL"}, {"symbol": "aapl"}, case_sensitive=True) is False

    def test_field_strings_are_not_substrings(self):
        assert matches({"city": "Berlin"}, {"city": "Berl"}) is False

    def test_function_values_are_ignored(self):
        assert matches({"city": "Berlin"}, {"city": "Berlin", "extra": lambda v: False}) is True


# =========================================================================
# Primitive search
# =========================================================================


class TestPrimitiveSearch:
    def test_matches_any_property(self, customers):
        assert filter(customers, "Berlin") == [customers[0]]

    def test_is_case_insensitive_by_default(self):
        items = [{"city": "BERLIN"}]
        assert filter(items, "berlin") == items
        assert filter(items, "berlin", case_sensitive=True) == []

    def test_matches_substrings(self, customers):
        assert filter(customers, "Comidas") == [customers[3], customers[6]]

    def test_strings_as_items(self):
        assert filter(["Apple", "Banana", "Cherry"], "an") == ["Banana"]

    def test_numbers(self):
        assert filter([{"age": 30}, {"age": 3}], 30) == [{"age": 30}]

    def test_searches_nested_records(self):
        items = [{"name": "x", "address": {"city": "Berlin"}}, {"name": "y", "address": {"city": "Rome"}}]
        assert filter(items, "Berlin") == [items[0]]

    def test_searches_sequences(self):
        items = [{"tags": ["red", "blue"]}, {"tags": ["green"]}]
        assert filter(items, "blue") == [items[0]]

    def test_skips_dollar_keys(self):
        assert filter([{"$meta": "Berlin"}], "Berlin") == []

    def test_any_property_key(self, customers):
        assert filter(customers, {"$": "Berlin"}) == filter(customers, "Berlin")

    def test_any_property_key_combined_with_fields(self, customers):
        assert filter(customers, {"$": "London", "name": "B%"}) == [customers[2]]


# =========================================================================
# Wildcards and negation
# =========================================================================


class TestWildcards:
    def test_underscore_matches_one_character(self):
        items = [{"city": "Berlin"}, {"city": "Berln"}, {"city": "Bxxerlin"}]
        assert filter(items, {"city": "B__lin"}) == [{"city": "Berlin"}]

    def test_percent_matches_any_run(self, customers):
        assert filter(customers, "%erli%") == [customers[0]]

    def test_percent_matches_empty_run(self):
        assert matches({"city": "Berlin"}, {"city": "Berlin%"}) is True

    def test_wildcards_match_the_whole_value(self):
        assert matches({"city": "Berlin"}, {"city": "B_r"}) is False

    def test_regex_metacharacters_are_literal(self):
        assert matches({"code": "a.b"}, {"code": "a.%"}) is True
        assert matches({"code": "axb"}, {"code": "a.%"}) is False

    def test_wildcard_case_sensitivity(self):
        assert matches({"city": "Berlin"}, {"city": "b__lin"}) is True
        assert matches({"city": "Berlin"}, {"city": "b__lin"}, case_sensitive=True) is False

    def test_wildcards_apply_to_strings_only(self):
        assert matches({"zip": "10115"}, {"zip": "101%"}) is True
        assert matches({"zip": 10115}, {"zip": "101%"}) is False
        assert filter([{"age": 34}, {"age": "34"}], {"age": "3_"}) == [{"age": "34"}]


class TestNegation:
    def test_negated_literal(self, customers):
        result = filter(customers, {"city": "!Berlin"})
        assert customers[0] not in result
        assert len(result) == 6

    def test_negated_wildcard(self, customers):
        assert filter(customers, {"name": "!B%"}) == [customers[0], customers[1], customers[6]]

    def test_negated_primitive(self):
        assert filter(["Apple", "Banana", "Cherry"], "!Apple") == ["Banana", "Cherry"]

    def test_negation_keeps_missing_field(self):
        items = [{"city": "Berlin"}, {"city": "Paris"}, {"name": "no city"}]
        assert filter(items, {"city": "!Berlin"}) == [items[1], items[2]]


# =========================================================================
# Nested objects and dot paths
# =========================================================================


class TestNestedFields:
    def test_dot_notation(self):
        item = {"data": {"symbol": "AAPL", "price": 150.0}}
        assert matches(item, {"data.symbol": "AAPL"}) is True

    def test_deeply_nested_dot_notation(self):
        item = {"a": {"b": {"c": "deep"}}}
        assert matches(item, {"a.b.c": "deep"}) is True

    def test_missing_path(self):
        assert matches({"data": {"other": 1}}, {"data.symbol": "AAPL"}) is False

    def test_path_through_scalar(self):
        assert matches({"data": "flat"}, {"data.nested": "x"}) is False
        assert matches({"data": 42}, {"data.nested": "x"}) is False

    def test_literal_dotted_key_wins(self):
        item = {"a.b": 1, "a": {"b": 2}}
        assert matches(item, {"a.b": 1}) is True
        assert matches(item, {"a.b": 2}) is False

    def test_nested_object(self):
        item = {"address": {"city": "Berlin", "zip": "10115"}}
        assert matches(item, {"address": {"city": "Berlin"}}) is True
        assert matches(item, {"address": {"city": "Paris"}}) is False

    def test_nested_object_against_scalar(self):
        assert matches({"address": "Berlin"}, {"address": {"city": "Berlin"}}) is False

    def test_nested_object_matches_any_element(self):
        item = {"orders": [{"status": "open"}, {"status": "paid"}]}
        assert matches(item, {"orders": {"status": "paid"}}) is True
        assert matches(item, {"orders": {"status": "void"}}) is False

    def test_nesting_within_max_depth(self):
        assert matches({"a": {"b": {"c": 1}}}, {"a": {"b": {"c": 1}}}) is True

    def test_nesting_beyond_max_depth_never_matches(self):
        item = {"a": {"b": {"c": {"d": 1}}}}
        expression = {"a": {"b": {"c": {"d": 1}}}}
        assert matches(item, expression) is False
        assert matches(item, expression, max_depth=4) is True

    def test_logical_operators_do_not_use_depth(self):
        item = {"a": 1}
        expression = {"$and": [{"$or": [{"$not": {"$and": [{"a": 2}]}}]}]}
        assert matches(item, expression, max_depth=1) is True


# =========================================================================
# Sequence shorthand
# =========================================================================


class TestSequenceShorthand:
    def test_list_means_in(self, customers):
        assert filter(customers, {"city": ["Berlin", "London"]}) == customers[:3]

    @pytest.mark.parametrize(
        "item",
        [
            {"city": "Berlin"},
            {"city": "Rome"},
            {"city": ["Rome", "Berlin"]},
            {"city": None},
            {"city": 1},
            {"city": True},
            {},
        ],
    )
    def test_same_as_in_operator(self, item):
        values = ["Berlin", None, 1]
        assert filter([item], {"city": values}) == filter([item], {"city": {"$in": values}})


# =========================================================================
# Functions, comparators, objects
# =========================================================================


@dataclass
class Person:
    name: str
    age: int
    city: str


class TestControlFilters:
    def test_function_expression(self, users):
        result = filter(users, lambda u: u["name"].islower())
        assert [u["name"] for u in result] == ["alice", "dave"]

    def test_custom_comparator_replaces_leaf_rule(self, customers):
        exact = lambda actual, expected: actual == expected  # noqa: E731
        assert filter(customers, "Berlin", custom_comparator=exact) == [customers[0]]
        assert filter(customers, "Berl", custom_comparator=exact) == []

    def test_custom_comparator_on_fields(self, customers):
        def same_initial(actual, expected):
            return str(actual)[:1] == str(expected)[:1]

        result = filter(customers, {"city": "Mxx"}, {"customComparator": same_initial})
        assert [c["city"] for c in result] == ["Madrid", "Marseille"]

    def test_dataclass_items(self):
        people = [Person("Ann", 41, "Oslo"), Person("Ben", 29, "Rome")]
        assert filter(people, {"age": {"$gt": 30}}) == [people[0]]
        assert filter(people, "rome") == [people[1]]

    def test_plain_object_items(self):
        class Row:
            def __init__(self, status):
                self.status = status
                self._secret = "open"

        rows = [Row("open"), Row("closed")]
        assert filter(rows, {"status": "open"}) == [rows[0]]
        assert filter(rows, {"_secret": "open"}) == []


# =========================================================================
# Result properties
# =========================================================================


class TestResultProperties:
    EXPRESSIONS = [
        "London",
        {"city": "M%"},
        {"name": {"$startsWith": "B"}},
        {"$or": [{"city": "Berlin"}, {"name": "%Horn"}]},
        {"city": ["Madrid", "Tsawassen"]},
    ]

    @pytest.mark.parametrize("expression", EXPRESSIONS)
    def test_result_is_ordered_subset(self, customers, expression):
        result = filter(customers, expression)
        positions = [customers.index(item) for item in result]
        assert positions == sorted(positions)

    @pytest.mark.parametrize("expression", EXPRESSIONS)
    def test_filtering_is_idempotent(self, customers, expression):
        once = filter(customers, expression)
        assert filter(once, expression) == once

    @pytest.mark.parametrize("expression", EXPRESSIONS)
    def test_not_is_the_complement(self, customers, expression):
        kept = filter(customers, expression)
        dropped = filter(customers, {"$not": expression})
        assert len(kept) + len(dropped) == len(customers)
        assert all(item not in kept for item in dropped)

    def test_input_is_not_modified(self, customers):
        snapshot = [dict(c) for c in customers]
        filter(customers, {"city": "London"}, order_by="name", limit=1)
        assert customers == snapshot

    def test_tuple_collection_returns_list(self, customers):
        assert filter(tuple(customers), "Berlin") == [customers[0]]


# =========================================================================
# Edge cases
# =========================================================================


class TestEdgeCases:
    def test_empty_collection(self):
        assert filter([], {"symbol": "AAPL"}) == []

    @pytest.mark.parametrize("collection", ["abc", {"a": 1}, 42, None])
    def test_non_list_collection_raises(self, collection):
        with pytest.raises(TypeMismatchError):
            filter(collection, {})

    def test_unicode_values(self):
        assert matches({"city": "Zürich"}, {"city": "zürich"}) is True
        assert filter([{"name": "Straße"}], "STRASSE") == [{"name": "Straße"}]

    def test_none_items_are_skipped_by_field_expressions(self):
        assert filter([None, {"a": 1}], {"a": 1}) == [{"a": 1}]
