"""Tests for filter_debug and the debug tree renderer."""

import io
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from deep_filter import DebugResult, filter, filter_debug
from deep_filter.compiler import NodeKind
from deep_filter.debug import format_value, render_stats

BRANCHES = {
    "$or": [
        {"$and": [{"active": True}, {"value": {"$lt": 15}}]},
        {"$and": [{"active": False}, {"value": {"$gt": 35}}]},
    ]
}


def ids(items):
    return [item["id"] for item in items]


# =========================================================================
# Tree and statistics
# =========================================================================


class TestDebugTree:
    def test_items_match_plain_filter(self, logical_data):
        result = filter_debug(logical_data, BRANCHES)
        assert isinstance(result, DebugResult)
        assert ids(result.items) == [1, 3, 5]

    def test_root_counts(self, logical_data):
        tree = filter_debug(logical_data, BRANCHES).tree
        assert tree.kind == NodeKind.LOGICAL
        assert tree.operator == "$or"
        assert (tree.matched, tree.total) == (3, 5)

    def test_short_circuit_counts(self, logical_data):
        first, second = filter_debug(logical_data, BRANCHES).tree.children
        assert (first.matched, first.total) == (2, 5)
        # only items rejected by the first branch reach the second
        assert (second.matched, second.total) == (1, 3)

        active, value = first.children
        assert active.kind == NodeKind.FIELD
        assert active.field == "active"
        assert (active.matched, active.total) == (3, 5)
        assert (value.matched, value.total) == (2, 3)

    def test_tests_inherit_their_field(self, logical_data):
        first = filter_debug(logical_data, BRANCHES).tree.children[0]
        (test,) = first.children[1].children
        assert test.kind == NodeKind.OPERATOR
        assert test.operator == "$lt"
        assert test.field == "value"
        assert test.value == 15

    def test_stats(self, logical_data):
        stats = filter_debug(logical_data, BRANCHES).stats
        assert stats.matched == 3
        assert stats.total == 5
        assert stats.percentage == pytest.approx(60.0)
        assert stats.cache_hit is False
        assert stats.conditions_evaluated == 11
        assert stats.execution_time_ms >= 0.0

    def test_multi_field_root(self, users):
        tree = filter_debug(users, {"city": "Paris", "age": {"$gt": 26}}).tree
        assert tree.operator == "$and"
        assert [child.field for child in tree.children] == ["city", "age"]

    def test_primitive_root(self, customers):
        tree = filter_debug(customers, "Berlin").tree
        assert tree.kind == NodeKind.PRIMITIVE
        assert (tree.matched, tree.total) == (1, 7)

    def test_function_root(self, users):
        def is_adult(user):
            return (user.get("age") or 0) >= 30

        result = filter_debug(users, is_adult)
        assert result.tree.operator == "fn"
        assert "fn is_adult" in result.render()

    def test_empty_collection(self):
        result = filter_debug([], BRANCHES)
        assert result.items == []
        assert result.stats.percentage == 0.0
        assert result.tree.percentage == 0.0

    def test_to_dict(self, logical_data):
        data = filter_debug(logical_data, BRANCHES).tree.to_dict()
        assert data["operator"] == "$or"
        assert data["children"][0]["children"][0]["field"] == "active"
        assert "value" not in data


class TestDebugEquivalence:
    @pytest.mark.parametrize(
        "expression",
        [
            {},
            "berlin",
            {"city": "P%"},
            {"$not": {"age": {"$gte": 30}}},
            {"city": ["Paris", "Rome"], "name": "!eve"},
            {"$or": [{"age": None}, {"name": {"$regex": "^[A-C]"}}]},
        ],
    )
    def test_same_items_as_filter(self, users, expression):
        assert filter_debug(users, expression).items == filter(users, expression)

    def test_post_processing(self, users):
        result = filter_debug(users, {}, order_by="name", limit=2)
        assert [u["name"] for u in result.items] == ["alice", "Bob"]
        assert result.stats.matched == 5

    def test_bypasses_caches(self, engine, users):
        engine.filter_debug(users, {"city": "Paris"}, enable_cache=True)
        stats = engine.get_cache_stats()
        assert stats["predicate_cache_size"] == 0
        assert stats["result_cache_size"] == 0


# =========================================================================
# Rendering
# =========================================================================


class TestRendering:
    def test_render_tree(self, logical_data):
        text = filter_debug(logical_data, BRANCHES).render()
        lines = text.splitlines()
        assert lines[0] == "Filter Debug Tree"
        assert lines[1] == "└── OR (3/5 matched, 60.0%)"
        assert "    ├── AND (2/5 matched, 40.0%)" in lines
        assert "    │   ├── active = true (3/5 matched, 60.0%)" in lines
        assert "    │   └── value < 15 (2/3 matched, 66.7%)" in lines
        assert "    └── AND (1/3 matched, 33.3%)" in lines

    def test_render_stats(self, logical_data):
        text = filter_debug(logical_data, BRANCHES).render()
        assert "Statistics:" in text
        assert "├── Matched: 3 / 5 items (60.0%)" in text
        assert "Cache Hit: No" in text
        assert "└── Conditions Evaluated: 11" in text

    def test_options_from_config(self, logical_data):
        result = filter_debug(logical_data, BRANCHES, show_timings=True, verbose=True)
        text = result.render()
        assert "ms]" in text
        assert "Value: true" in text
        assert "\x1b[" not in text

    def test_colorize(self, logical_data):
        text = filter_debug(logical_data, BRANCHES).render(colorize=True)
        assert "\x1b[" in text

    def test_print(self, logical_data):
        out = io.StringIO()
        filter_debug(logical_data, BRANCHES).print(file=out)
        assert out.getvalue().startswith("Filter Debug Tree")

    def test_filter_with_debug_option(self, logical_data, capsys):
        result = filter(logical_data, BRANCHES, debug=True)
        assert ids(result) == [1, 3, 5]
        assert "Filter Debug Tree" in capsys.readouterr().out

    def test_format_value(self):
        assert format_value(None) == "null"
        assert format_value(False) == "false"
        assert format_value("x") == '"x"'
        assert format_value([1, "a"]) == '[1, "a"]'
        assert format_value({"lat": 1}) == '{"lat":1}'

    def test_render_stats_alone(self, logical_data):
        stats = filter_debug(logical_data, BRANCHES).stats
        assert render_stats(stats).splitlines()[0] == "Statistics:"
