# =============================================================================
# deep-filter -- Debug Tree
# =============================================================================

from __future__ import annotations

import dataclasses
import logging
import sys
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import IO, Any

from ..compiler import NodeKind, Predicate, PredicateCompiler
from ..config import FilterConfig
from ..timing import Timer
from ..types import MISSING

log = logging.getLogger("deep_filter.debug")


@dataclass
class DebugNode:
    """One compiled piece of an expression and how it fared.

    Attributes:
        kind: One of ``NodeKind`` (logical, comparison, field, operator, primitive).
        operator: Wire operator (``$gt``, ``$or``...) when the piece has one.
        field: Field path for field nodes and the tests directly under them.
        value: Literal or operator payload, ``MISSING`` when there is none.
        children: Sub-pieces in evaluation order.
        matched: Evaluations that returned True.
        total: Evaluations. Short-circuited pieces are not counted.
        elapsed_ms: Time spent evaluating this piece, children included.
    """

    kind: str
    operator: str | None = None
    field: str | None = None
    value: Any = MISSING
    children: list[DebugNode] = dataclasses.field(default_factory=list)
    matched: int = 0
    total: int = 0
    elapsed_ms: float = 0.0

    @property
    def percentage(self) -> float:
        return (self.matched / self.total * 100.0) if self.total else 0.0

    def walk(self) -> Iterator[DebugNode]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "matched": self.matched,
            "total": self.total,
            "elapsed_ms": self.elapsed_ms,
        }
        if self.operator is not None:
            data["operator"] = self.operator
        if self.field is not None:
            data["field"] = self.field
        if self.value is not MISSING:
            data["value"] = self.value
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class DebugStats:
    matched: int
    total: int
    percentage: float
    execution_time_ms: float
    cache_hit: bool
    conditions_evaluated: int
    evaluations: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "matched": self.matched,
            "total": self.total,
            "percentage": self.percentage,
            "execution_time_ms": self.execution_time_ms,
            "cache_hit": self.cache_hit,
            "conditions_evaluated": self.conditions_evaluated,
            "evaluations": self.evaluations,
        }


@dataclass
class DebugResult:
    """Items that matched plus the annotated expression tree."""

    items: list[Any]
    tree: DebugNode
    stats: DebugStats
    config: FilterConfig = dataclasses.field(default_factory=FilterConfig, repr=False)

    def render(
        self,
        verbose: bool | None = None,
        show_timings: bool | None = None,
        colorize: bool | None = None,
    ) -> str:
        from .formatter import render_debug

        return render_debug(
            self.tree,
            self.stats,
            verbose=self.config.verbose if verbose is None else verbose,
            show_timings=self.config.show_timings if show_timings is None else show_timings,
            colorize=self.config.colorize if colorize is None else colorize,
        )

    def print(self, file: IO[str] | None = None, **render_options: Any) -> None:
        print(self.render(**render_options), file=file or sys.stdout)


# =============================================================================
# Instrumented compilation
# =============================================================================


def _instrument(predicate: Predicate, node: DebugNode) -> Predicate:
    def instrumented(item: Any) -> bool:
        started = time.perf_counter()
        result = bool(predicate(item))
        node.elapsed_ms += (time.perf_counter() - started) * 1000.0
        node.total += 1
        if result:
            node.matched += 1
        return result

    return instrumented


class DebugCompiler(PredicateCompiler):
    """Compiler that records a DebugNode per compiled piece.

    Every piece is wrapped to count its evaluations. Combinators keep their
    short-circuiting, so results match the plain compiler exactly.
    """

    def __init__(self, config: FilterConfig) -> None:
        super().__init__(config)
        self._stack: list[DebugNode] = []

    def _node(
        self,
        kind: str,
        build: Callable[[], Predicate],
        *,
        operator: str | None = None,
        field: str | None = None,
        value: Any = MISSING,
    ) -> Predicate:
        parent = self._stack[-1]
        if field is None and parent.kind == NodeKind.FIELD:
            field = parent.field
        node = DebugNode(kind, operator=operator, field=field, value=value)
        parent.children.append(node)
        self._stack.append(node)
        try:
            predicate = build()
        finally:
            self._stack.pop()
        return _instrument(predicate, node)

    def build_tree(self, expression: Any) -> tuple[Predicate, DebugNode]:
        root = DebugNode(NodeKind.LOGICAL, operator="$and")
        self._stack = [root]
        predicate = self.compile(expression)
        self._stack = []
        if len(root.children) == 1:
            return predicate, root.children[0]
        return _instrument(predicate, root), root


def run_debug(collection: Iterable[Any], expression: Any, config: FilterConfig) -> DebugResult:
    """Filter *collection* with an instrumented predicate. Expects a
    validated expression.
    """
    predicate, tree = DebugCompiler(config).build_tree(expression)
    timer = Timer().start()
    items = []
    total = 0
    for item in collection:
        total += 1
        if predicate(item):
            items.append(item)
    elapsed = timer.stop()

    nodes = list(tree.walk())
    stats = DebugStats(
        matched=len(items),
        total=total,
        percentage=(len(items) / total * 100.0) if total else 0.0,
        execution_time_ms=elapsed,
        cache_hit=False,
        conditions_evaluated=len(nodes),
        evaluations=sum(node.total for node in nodes),
    )
    log.debug("Debug filter matched %d/%d items in %.3fms", stats.matched, stats.total, elapsed)
    return DebugResult(items=items, tree=tree, stats=stats, config=config)
