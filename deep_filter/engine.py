# =============================================================================
# deep-filter -- Filter Engine
# =============================================================================

"""
FilterEngine ties the pipeline together:

    validate options -> validate expression -> compile (predicate cache)
    -> traverse (result cache) -> order and limit

Each engine owns its caches and performance monitor. The module-level
functions use ``default_engine``; pass ``engine=`` for an isolated one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from .cache import CacheKey, PredicateCache, ResultCache, make_cache_key
from .compiler import Predicate, compile_predicate
from .config import FilterConfig, merge_config
from .debug import DebugResult, run_debug
from .errors import TypeMismatchError, type_name
from .patterns import clear_pattern_cache, pattern_cache_size
from .sorting import post_process
from .timing import PerformanceMonitor
from .validation import validate_expression

log = logging.getLogger("deep_filter.engine")

Options = FilterConfig | Mapping[str, Any] | None


def is_list_like(collection: Any) -> bool:
    return isinstance(collection, Sequence) and not isinstance(collection, (str, bytes, bytearray))


class FilterEngine:
    """Filters collections with its own predicate/result caches.

    Usage::

        engine = FilterEngine()
        engine.filter(users, {"age": {"$gte": 18}}, {"orderBy": "name"})
        engine.get_cache_stats()
        engine.clear_cache()
    """

    def __init__(
        self,
        predicate_cache: PredicateCache | None = None,
        result_cache: ResultCache | None = None,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        self.predicate_cache = predicate_cache if predicate_cache is not None else PredicateCache()
        self.result_cache = result_cache if result_cache is not None else ResultCache()
        self.monitor = monitor if monitor is not None else PerformanceMonitor()

    @contextmanager
    def _phase(self, config: FilterConfig, name: str) -> Iterator[None]:
        if not config.enable_performance_monitoring:
            yield
            return
        stop = self.monitor.start(name)
        try:
            yield
        finally:
            stop()

    # -- compilation -----------------------------------------------------------

    def _predicate(self, expression: Any, config: FilterConfig, key: CacheKey | None) -> Predicate:
        if key is None:
            return compile_predicate(expression, config)
        return self.predicate_cache.get_or_compile(key, lambda: compile_predicate(expression, config))

    def prepare(self, expression: Any, options: Options = None, **overrides: Any) -> tuple[Predicate, FilterConfig]:
        """Validate, merge options and compile. Nothing is traversed."""
        config = merge_config(options, **overrides)
        with self._phase(config, "filter:validation"):
            validate_expression(expression)
        with self._phase(config, "filter:predicate-creation"):
            key = make_cache_key(expression, config) if config.enable_cache else None
            predicate = self._predicate(expression, config, key)
        return predicate, config

    def compile(self, expression: Any, options: Options = None, **overrides: Any) -> Predicate:
        """Compiled predicate for *expression*.

        With ``enable_cache`` the same predicate object is returned for
        structurally equal expressions.
        """
        predicate, _ = self.prepare(expression, options, **overrides)
        return predicate

    # -- filtering -------------------------------------------------------------

    def filter(self, collection: Sequence[Any], expression: Any, options: Options = None, **overrides: Any) -> list[Any]:
        """Items of *collection* matching *expression*, in their original
        order unless ``order_by`` is set.

        Raises:
            TypeMismatchError: *collection* is not list-like.
            InvalidExpressionError: malformed expression (OperatorError for
                operator payloads).
            ConfigurationError: invalid options.
        """
        if not is_list_like(collection):
            raise TypeMismatchError("list-like collection", type_name(collection))

        config = merge_config(options, **overrides)
        with self._phase(config, "filter:total"):
            with self._phase(config, "filter:validation"):
                validate_expression(expression)

            if config.debug:
                result = run_debug(collection, expression, config)
                result.print()
                return post_process(result.items, config)

            key = make_cache_key(expression, config) if config.enable_cache else None
            items = self.result_cache.get(collection, key) if key is not None else None
            if items is None:
                with self._phase(config, "filter:predicate-creation"):
                    predicate = self._predicate(expression, config, key)
                with self._phase(config, "filter:filtering"):
                    items = [item for item in collection if predicate(item)]
                if key is not None:
                    self.result_cache.set(collection, key, items)
            else:
                log.debug("Result cache hit %s", key.digest[:12])

            return post_process(items, config)

    def filter_debug(
        self,
        collection: Sequence[Any],
        expression: Any,
        options: Options = None,
        **overrides: Any,
    ) -> DebugResult:
        """Filter with an instrumented predicate and return the annotated
        tree. Caches are bypassed. ``items`` are ordered and limited like
        ``filter``; stats describe the unlimited match.
        """
        if not is_list_like(collection):
            raise TypeMismatchError("list-like collection", type_name(collection))
        config = merge_config(options, **overrides)
        validate_expression(expression)
        result = run_debug(collection, expression, config)
        result.items = post_process(result.items, config)
        return result

    # -- cache management ------------------------------------------------------

    def clear_cache(self) -> None:
        self.predicate_cache.clear()
        self.result_cache.clear()
        clear_pattern_cache()
        log.debug("Filter caches cleared")

    def get_cache_stats(self) -> dict[str, int]:
        return {
            "predicate_cache_size": len(self.predicate_cache),
            "result_cache_size": len(self.result_cache),
            "regex_cache_size": pattern_cache_size(),
        }


default_engine = FilterEngine()


def _engine(engine: FilterEngine | None) -> FilterEngine:
    return engine if engine is not None else default_engine


# =============================================================================
# Module-level API
# =============================================================================


def filter(  # noqa: A001
    collection: Sequence[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> list[Any]:
    return _engine(engine).filter(collection, expression, options, **overrides)


def filter_debug(
    collection: Sequence[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> DebugResult:
    return _engine(engine).filter_debug(collection, expression, options, **overrides)


def compile_expression(
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> Callable[[Any], bool]:
    return _engine(engine).compile(expression, options, **overrides)


def clear_filter_cache(engine: FilterEngine | None = None) -> None:
    _engine(engine).clear_cache()


def get_filter_cache_stats(engine: FilterEngine | None = None) -> dict[str, int]:
    return _engine(engine).get_cache_stats()
