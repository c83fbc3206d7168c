"""Tests for cache keys, predicate/result caches and cache management."""

import os
import sys
from dataclasses import dataclass

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from deep_filter import (
    FilterConfig,
    FilterEngine,
    PredicateCache,
    ResultCache,
    clear_filter_cache,
    filter,
    get_filter_cache_stats,
    make_cache_key,
)
from deep_filter.cache import canonicalize


def key(expression, **config):
    return make_cache_key(expression, FilterConfig(**config))


class Owner:
    def __init__(self, name):
        self.name = name


@dataclass
class Tag:
    label: str


# =========================================================================
# Keys
# =========================================================================


class TestCacheKeys:
    def test_structurally_equal_expressions(self):
        assert key({"a": 1, "b": [1, 2]}) == key({"a": 1, "b": [1, 2]})

    def test_key_order_does_not_matter(self):
        assert key({"a": 1, "b": 2}) == key({"b": 2, "a": 1})

    def test_set_order_does_not_matter(self):
        assert key({"a": {"$in": {1, 2, 3}}}) == key({"a": {"$in": {3, 2, 1}}})

    def test_list_order_matters(self):
        assert key({"a": [1, 2]}) != key({"a": [2, 1]})

    def test_types_are_distinguished(self):
        keys = {key({"a": 1}), key({"a": "1"}), key({"a": True}), key({"a": 1.0}), key({"a": None})}
        assert len(keys) == 5

    def test_matching_options_change_the_key(self):
        base = key({"a": "x"})
        assert key({"a": "x"}, case_sensitive=True) != base
        assert key({"a": "x"}, max_depth=5) != base

    def test_post_processing_options_do_not_change_the_key(self):
        assert key({"a": "x"}, limit=3) == key({"a": "x"})

    def test_functions_by_identity(self):
        def fn(item):
            return True

        def other(item):
            return True

        assert key(fn) == key(fn)
        assert key(fn) != key(other)
        assert key({"a": 1}, custom_comparator=fn) != key({"a": 1}, custom_comparator=other)

    def test_objects_without_eq_by_identity(self):
        a, b = Owner("x"), Owner("x")
        assert key({"owner": {"$eq": a}}) == key({"owner": {"$eq": a}})
        assert key({"owner": {"$eq": a}}) != key({"owner": {"$eq": b}})

    def test_value_objects_by_fields(self):
        assert key({"tag": Tag("x")}) == key({"tag": Tag("x")})
        assert key({"tag": Tag("x")}) != key({"tag": Tag("y")})

    def test_canonical_form_is_tagged(self):
        assert canonicalize(1) == ["int", "1"]
        assert canonicalize(True) == ["bool", True]
        assert canonicalize({"b": 1, "a": 2}) == ["map", [[["str", "a"], ["int", "2"]], [["str", "b"], ["int", "1"]]]]

    def test_keys_are_hashable(self):
        store = {key({"a": 1}): "first"}
        assert store[key({"a": 1})] == "first"


# =========================================================================
# Stores
# =========================================================================


class TestPredicateCache:
    def test_get_or_compile_compiles_once(self):
        cache = PredicateCache()
        calls = []

        def factory():
            calls.append(1)
            return lambda item: True

        first = cache.get_or_compile(key({"a": 1}), factory)
        second = cache.get_or_compile(key({"a": 1}), factory)
        assert first is second
        assert len(calls) == 1
        assert cache.get_stats()["hits"] == 1
        assert cache.get_stats()["misses"] == 1

    def test_lru_bound(self):
        cache = PredicateCache(max_entries=2)
        k1, k2, k3 = key({"a": 1}), key({"a": 2}), key({"a": 3})
        cache.set(k1, len)
        cache.set(k2, len)
        cache.get(k1)
        cache.set(k3, len)
        assert len(cache) == 2
        assert cache.get(k2) is None
        assert cache.get(k1) is len

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValueError):
            PredicateCache(max_entries=0)

    def test_clear(self):
        cache = PredicateCache()
        cache.set(key({"a": 1}), len)
        cache.clear()
        assert len(cache) == 0
        assert cache.get_stats()["hits"] == 0


class TestResultCache:
    def test_results_are_copied(self):
        cache = ResultCache()
        source = [1, 2, 3]
        items = [1]
        cache.set(source, key({}), items)
        items.append(99)
        cached = cache.get(source, key({}))
        assert cached == [1]
        cached.append(42)
        assert cache.get(source, key({})) == [1]

    def test_keyed_by_collection_identity(self):
        cache = ResultCache()
        cache.set([1, 2], key({}), [1])
        assert cache.get([1, 2], key({})) is None


# =========================================================================
# Engine caching
# =========================================================================


class TestEngineCaching:
    def test_same_predicate_for_equal_expressions(self, engine):
        first = engine.compile({"age": {"$gt": 30}}, enable_cache=True)
        second = engine.compile({"age": {"$gt": 30}}, enable_cache=True)
        assert first is second

    def test_no_memoization_without_cache(self, engine):
        first = engine.compile({"age": {"$gt": 30}})
        second = engine.compile({"age": {"$gt": 30}})
        assert first is not second
        assert engine.get_cache_stats()["predicate_cache_size"] == 0

    @pytest.mark.parametrize(
        "expression",
        ["berlin", {"city": "P%"}, {"age": {"$gte": 30}}, {"$or": [{"name": "bob"}, {"age": None}]}],
    )
    def test_cache_is_transparent(self, engine, users, expression):
        plain = engine.filter(users, expression)
        assert engine.filter(users, expression, enable_cache=True) == plain
        assert engine.filter(users, expression, enable_cache=True) == plain

    def test_lookalike_objects_are_not_confused(self, engine):
        a, b = Owner("x"), Owner("x")
        items = [{"owner": a}, {"owner": b}]
        assert engine.filter(items, {"owner": {"$eq": a}}, enable_cache=True) == [items[0]]
        assert engine.filter(items, {"owner": {"$eq": b}}, enable_cache=True) == [items[1]]
        assert engine.filter(items, {"owner": {"$eq": b}}) == [items[1]]

    def test_cached_result_is_a_fresh_list(self, engine, users):
        first = engine.filter(users, {"city": "Paris"}, enable_cache=True)
        first.append("extra")
        second = engine.filter(users, {"city": "Paris"}, enable_cache=True)
        assert "extra" not in second
        assert len(second) == 2

    def test_separate_collections(self, engine, users, customers):
        assert engine.filter(users, "berlin", enable_cache=True) == [users[0], users[2]]
        assert engine.filter(customers, "berlin", enable_cache=True) == [customers[0]]

    def test_case_sensitivity_is_part_of_the_key(self, engine, users):
        folded = engine.filter(users, "berlin", enable_cache=True)
        exact = engine.filter(users, "berlin", enable_cache=True, case_sensitive=True)
        assert len(folded) == 2
        assert exact == [users[2]]

    def test_limit_applies_after_cached_filtering(self, engine, users):
        assert len(engine.filter(users, {"city": "%"}, enable_cache=True, limit=2)) == 2
        assert len(engine.filter(users, {"city": "%"}, enable_cache=True)) == 5

    def test_stats_and_clear(self, engine, users):
        engine.filter(users, {"name": "b%"}, enable_cache=True)
        stats = engine.get_cache_stats()
        assert stats["predicate_cache_size"] == 1
        assert stats["result_cache_size"] == 1
        assert stats["regex_cache_size"] >= 1

        engine.clear_cache()
        assert engine.get_cache_stats() == {
            "predicate_cache_size": 0,
            "result_cache_size": 0,
            "regex_cache_size": 0,
        }

    def test_engines_are_isolated(self, users):
        one, two = FilterEngine(), FilterEngine()
        one.filter(users, {"city": "Paris"}, enable_cache=True)
        assert len(one.result_cache) == 1
        assert len(two.result_cache) == 0


class TestModuleLevelCache:
    def test_stats_keys(self):
        assert set(get_filter_cache_stats()) == {"predicate_cache_size", "result_cache_size", "regex_cache_size"}

    def test_clear_filter_cache(self, users):
        filter(users, {"city": "Paris"}, enable_cache=True)
        assert get_filter_cache_stats()["result_cache_size"] == 1
        clear_filter_cache()
        assert get_filter_cache_stats()["result_cache_size"] == 0
