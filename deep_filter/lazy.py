# =============================================================================
# deep-filter -- Lazy and Chunked Filtering
# =============================================================================

"""
Streaming variants of ``filter``.

Everything that can fail (arguments, options, the expression itself) is
checked when the function is called, before the source is touched. The
returned iterators pull from the source only as far as the consumer
asks, consume it once and cannot be restarted.

Example:
    ```python
    for order in filter_lazy(read_orders(), {"total": {"$gt": 100}}):
        ...

    async for event in filter_lazy_async(stream, {"type": "click"}):
        ...
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator, Mapping
from typing import Any

from .compiler import Predicate
from .constants import DEFAULT_CHUNK_SIZE, DEFAULT_FIRST_COUNT
from .engine import FilterEngine, Options, default_engine
from .errors import TypeMismatchError, ValidationError, type_name

_EXHAUSTED = object()


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}", field=name)
    return value


def _source(iterable: Any) -> Iterator[Any]:
    if isinstance(iterable, (str, bytes, bytearray, Mapping)) or not isinstance(iterable, Iterable):
        raise TypeMismatchError("iterable of items", type_name(iterable))
    return iter(iterable)


async def _from_sync(iterator: Iterator[Any]) -> AsyncIterator[Any]:
    for item in iterator:
        yield item


def _async_source(iterable: Any) -> AsyncIterator[Any]:
    if isinstance(iterable, AsyncIterable):
        return aiter(iterable)
    return _from_sync(_source(iterable))


def _compile(expression: Any, options: Options, engine: FilterEngine | None, overrides: dict[str, Any]) -> Predicate:
    return (engine if engine is not None else default_engine).compile(expression, options, **overrides)


# =============================================================================
# Iterators
# =============================================================================


class FilteredIterator:
    """Yields the matching items of a source iterator on demand."""

    def __init__(self, source: Iterator[Any], predicate: Predicate) -> None:
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> FilteredIterator:
        return self

    def __next__(self) -> Any:
        for item in self._source:
            if self._predicate(item):
                return item
        raise StopIteration


class AsyncFilteredIterator:
    """Async counterpart of FilteredIterator.

    Awaiting the source is the only suspension point; the predicate itself
    runs synchronously.
    """

    def __init__(self, source: AsyncIterator[Any], predicate: Predicate) -> None:
        self._source = source
        self._predicate = predicate

    def __aiter__(self) -> AsyncFilteredIterator:
        return self

    async def __anext__(self) -> Any:
        while True:
            item = await anext(self._source)
            if self._predicate(item):
                return item


class ChunkedIterator:
    """Yields lists of up to ``chunk_size`` matches as soon as each fills.
    The final chunk may be shorter.
    """

    def __init__(self, matches: Iterator[Any], chunk_size: int) -> None:
        self._matches = matches
        self._chunk_size = chunk_size

    def __iter__(self) -> ChunkedIterator:
        return self

    def __next__(self) -> list[Any]:
        chunk = []
        for item in self._matches:
            chunk.append(item)
            if len(chunk) == self._chunk_size:
                return chunk
        if chunk:
            return chunk
        raise StopIteration


# =============================================================================
# API
# =============================================================================


def filter_lazy(
    iterable: Iterable[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> FilteredIterator:
    source = _source(iterable)
    return FilteredIterator(source, _compile(expression, options, engine, overrides))


def filter_lazy_async(
    iterable: AsyncIterable[Any] | Iterable[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> AsyncFilteredIterator:
    source = _async_source(iterable)
    return AsyncFilteredIterator(source, _compile(expression, options, engine, overrides))


def filter_lazy_chunked(
    iterable: Iterable[Any],
    expression: Any,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> ChunkedIterator:
    size = _positive_int(chunk_size, "chunk_size")
    source = _source(iterable)
    matches = FilteredIterator(source, _compile(expression, options, engine, overrides))
    return ChunkedIterator(matches, size)


def filter_chunked(
    iterable: Iterable[Any],
    expression: Any,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> list[list[Any]]:
    """All matches in batches of ``chunk_size``, after a full pass."""
    return list(filter_lazy_chunked(iterable, expression, chunk_size, options, engine=engine, **overrides))


def filter_first(
    iterable: Iterable[Any],
    expression: Any,
    count: int = DEFAULT_FIRST_COUNT,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> list[Any]:
    """The first ``count`` matches. Stops pulling once they are found."""
    limit = _positive_int(count, "count")
    matches = filter_lazy(iterable, expression, options, engine=engine, **overrides)
    found = []
    for item in matches:
        found.append(item)
        if len(found) == limit:
            break
    return found


def filter_exists(
    iterable: Iterable[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> bool:
    matches = filter_lazy(iterable, expression, options, engine=engine, **overrides)
    return next(matches, _EXHAUSTED) is not _EXHAUSTED


def filter_count(
    iterable: Iterable[Any],
    expression: Any,
    options: Options = None,
    *,
    engine: FilterEngine | None = None,
    **overrides: Any,
) -> int:
    return sum(1 for _ in filter_lazy(iterable, expression, options, engine=engine, **overrides))
