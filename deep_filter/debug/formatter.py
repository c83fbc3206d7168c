# =============================================================================
# deep-filter -- Debug Tree Rendering
# =============================================================================

"""
Text rendering of a DebugResult::

    Filter Debug Tree
    └── OR (2/5 matched, 40.0%)
        ├── AND (5/5 matched, 100.0%)
        │   ├── active = true (5/5 matched, 100.0%)
        │   └── value < 15 (3/5 matched, 60.0%)
        ...

A field with a single test is drawn on one line (``value < 15``).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import orjson

from ..compiler import NodeKind
from ..constants import (
    ANSI_BLUE,
    ANSI_BOLD,
    ANSI_CYAN,
    ANSI_DIM,
    ANSI_GRAY,
    ANSI_GREEN,
    ANSI_MAGENTA,
    ANSI_RESET,
    ANSI_YELLOW,
    DEBUG_TITLE,
    OPERATOR_LABELS,
    TREE_BRANCH,
    TREE_LAST,
    TREE_PIPE,
    TREE_SPACE,
)
from ..types import MISSING

if TYPE_CHECKING:
    from .tree import DebugNode, DebugStats


def _paint(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{ANSI_RESET}" if enabled else text


def operator_label(operator: str | None) -> str:
    if operator is None:
        return ""
    return OPERATOR_LABELS.get(operator, operator)


def format_value(value: Any) -> str:
    if value is MISSING:
        return ""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if isinstance(value, Mapping):
        return orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS).decode()
    if callable(value):
        return getattr(value, "__name__", None) or repr(value)
    return str(value)


def _test_label(node: DebugNode, colorize: bool) -> str:
    if node.operator == "fn":
        name = format_value(node.value) or "predicate"
        return _paint(f"fn {name}", ANSI_BLUE, colorize)
    field = _paint(node.field or "", ANSI_CYAN, colorize)
    op = _paint(operator_label(node.operator), ANSI_MAGENTA, colorize)
    value = _paint(format_value(node.value), ANSI_GREEN, colorize)
    return f"{field} {op} {value}".strip()


def node_label(node: DebugNode, colorize: bool = False) -> str:
    if node.kind == NodeKind.LOGICAL:
        return _paint(operator_label(node.operator), ANSI_YELLOW + ANSI_BOLD, colorize)
    if node.kind == NodeKind.FIELD:
        return _paint(node.field or "", ANSI_CYAN, colorize)
    if node.kind == NodeKind.PRIMITIVE:
        value = _paint(format_value(node.value), ANSI_GREEN, colorize)
        if node.operator == "$":
            return f"{_paint('any property', ANSI_CYAN, colorize)} ~ {value}"
        return value
    return _test_label(node, colorize)


def _stats(node: DebugNode, colorize: bool) -> str:
    return _paint(f" ({node.matched}/{node.total} matched, {node.percentage:.1f}%)", ANSI_GRAY, colorize)


def _collapse(node: DebugNode) -> DebugNode:
    if (
        node.kind == NodeKind.FIELD
        and len(node.children) == 1
        and node.children[0].kind in (NodeKind.OPERATOR, NodeKind.COMPARISON)
    ):
        return node.children[0]
    return node


def _render_node(
    node: DebugNode,
    prefix: str,
    is_last: bool,
    lines: list[str],
    verbose: bool,
    show_timings: bool,
    colorize: bool,
) -> None:
    node = _collapse(node)
    connector = TREE_LAST if is_last else TREE_BRANCH
    line = f"{prefix}{connector}{node_label(node, colorize)}{_stats(node, colorize)}"
    if show_timings:
        line += " " + _paint(f"[{node.elapsed_ms:.2f}ms]", ANSI_DIM, colorize)
    lines.append(line)

    child_prefix = prefix + (TREE_SPACE if is_last else TREE_PIPE)
    if verbose and node.value is not MISSING and node.kind != NodeKind.PRIMITIVE:
        lines.append(f"{child_prefix}{TREE_PIPE.rstrip()} Value: {format_value(node.value)}")

    for index, child in enumerate(node.children):
        _render_node(
            child,
            child_prefix,
            index == len(node.children) - 1,
            lines,
            verbose,
            show_timings,
            colorize,
        )


def render_tree(node: DebugNode, verbose: bool = False, show_timings: bool = False, colorize: bool = False) -> str:
    lines = [_paint(DEBUG_TITLE, ANSI_BOLD + ANSI_CYAN, colorize)]
    _render_node(node, "", True, lines, verbose, show_timings, colorize)
    return "\n".join(lines)


def render_stats(stats: DebugStats, colorize: bool = False) -> str:
    rows = [
        f"Matched: {stats.matched} / {stats.total} items ({stats.percentage:.1f}%)",
        f"Execution Time: {stats.execution_time_ms:.2f}ms",
        f"Cache Hit: {'Yes' if stats.cache_hit else 'No'}",
        f"Conditions Evaluated: {stats.conditions_evaluated}",
    ]
    lines = [_paint("Statistics:", ANSI_BOLD, colorize)]
    for index, row in enumerate(rows):
        connector = TREE_LAST if index == len(rows) - 1 else TREE_BRANCH
        lines.append(f"{connector}{row}")
    return "\n".join(lines)


def render_debug(
    tree: DebugNode,
    stats: DebugStats,
    *,
    verbose: bool = False,
    show_timings: bool = False,
    colorize: bool = False,
) -> str:
    return render_tree(tree, verbose, show_timings, colorize) + "\n\n" + render_stats(stats, colorize)
