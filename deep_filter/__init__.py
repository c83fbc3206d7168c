"""Declarative filtering of in-memory collections.

Basic usage::

    from deep_filter import filter

    filter(customers, "Berlin")                       # any property contains "berlin"
    filter(customers, {"city": "B__lin"})             # wildcard: _ one char, % any run
    filter(customers, {"age": {"$gte": 18}, "city": ["Berlin", "Paris"]})
    filter(customers, {"$or": [{"vip": True}, {"orders": {"$size": 0}}]})

Options::

    filter(users, {}, {"orderBy": [{"field": "age", "direction": "desc"}], "limit": 10})
    filter(users, "berlin", case_sensitive=True)

Streaming::

    from deep_filter import filter_first, filter_lazy

    first_admin = filter_first(read_users(), {"role": "admin"})
    for row in filter_lazy(read_rows(), {"status": {"$in": ["open", "pending"]}}):
        ...

Debugging::

    result = filter_debug(users, {"$or": [{"age": {"$lt": 18}}, {"vip": True}]})
    result.print(show_timings=True)
"""

from ._version import __version__
from .cache import CacheKey, PredicateCache, ResultCache, make_cache_key
from .config import DEFAULT_CONFIG, FilterConfig, merge_config
from .debug import DebugNode, DebugResult, DebugStats
from .engine import (
    FilterEngine,
    clear_filter_cache,
    compile_expression,
    default_engine,
    filter,
    filter_debug,
    get_filter_cache_stats,
)
from .errors import (
    ConfigurationError,
    FilterError,
    GeospatialError,
    InvalidExpressionError,
    OperatorError,
    TypeMismatchError,
    ValidationError,
    Violation,
)
from .lazy import (
    AsyncFilteredIterator,
    ChunkedIterator,
    FilteredIterator,
    filter_chunked,
    filter_count,
    filter_exists,
    filter_first,
    filter_lazy,
    filter_lazy_async,
    filter_lazy_chunked,
)
from .timing import PerformanceMonitor, Timer
from .types import (
    MISSING,
    AgeQuery,
    BoundingBox,
    ExpressionKind,
    GeoPoint,
    NearQuery,
    OrderByField,
    Polygon,
    RelativeTimeQuery,
    SortDirection,
    TimeOfDayQuery,
)
from .validation import validate_expression, validate_options

__all__ = [
    "__version__",
    # Filtering
    "filter",
    "filter_debug",
    "filter_lazy",
    "filter_lazy_async",
    "filter_chunked",
    "filter_lazy_chunked",
    "filter_first",
    "filter_exists",
    "filter_count",
    "compile_expression",
    "validate_expression",
    "validate_options",
    # Engine and caches
    "FilterEngine",
    "default_engine",
    "clear_filter_cache",
    "get_filter_cache_stats",
    "CacheKey",
    "PredicateCache",
    "ResultCache",
    "make_cache_key",
    "PerformanceMonitor",
    "Timer",
    # Configuration
    "FilterConfig",
    "DEFAULT_CONFIG",
    "merge_config",
    # Iterators
    "FilteredIterator",
    "AsyncFilteredIterator",
    "ChunkedIterator",
    # Debug
    "DebugNode",
    "DebugResult",
    "DebugStats",
    # Types
    "MISSING",
    "AgeQuery",
    "BoundingBox",
    "ExpressionKind",
    "GeoPoint",
    "NearQuery",
    "OrderByField",
    "Polygon",
    "RelativeTimeQuery",
    "SortDirection",
    "TimeOfDayQuery",
    # Errors
    "FilterError",
    "ValidationError",
    "InvalidExpressionError",
    "OperatorError",
    "ConfigurationError",
    "TypeMismatchError",
    "GeospatialError",
    "Violation",
]
