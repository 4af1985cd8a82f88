"""Helpers for lazy, fallible result streams.

A stream is any ``AsyncIterable``, typically the async generator returned by
:meth:`IncidentService.search`.  Streams are one-shot and pull-driven:

* values are produced only when the consumer asks for the next one;
* a failure is raised from the iterator exactly once and ends the stream;
* a consumer that stops pulling (``break`` or ``aclose()``) stops all further
  work upstream, including page fetches.

The combinators below take ownership of the stream they wrap and close it as
soon as they stop pulling, so arbitrarily nested chains release the
underlying paginator promptly::

    urgent = filter_items(client.incidents.search(flt), lambda i: i.severity >= 4)
    names = map_items(urgent, lambda i: i.name)
    items, err = await collect(take(names, 10))
"""

from __future__ import annotations

from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Generic,
    List,
    NamedTuple,
    Optional,
    TypeVar,
)

from xsoar_client.domain.exceptions import EmptyIteratorError

T = TypeVar("T")
U = TypeVar("U")


class Collected(NamedTuple, Generic[T]):
    """Values drained from a stream and the error that ended it, if any."""

    items: List[T]
    error: Optional[Exception] = None

    def raise_for_error(self) -> List[T]:
        if self.error is not None:
            raise self.error
        return self.items


async def _close(iterator: Any) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


# ======================================================================
# Consumers
# ======================================================================


async def collect(source: AsyncIterable[T]) -> Collected[T]:
    """Drain *source* into a list.

    Stops at the first error and returns everything gathered before it
    alongside that error.
    """
    items: List[T] = []
    try:
        async for item in source:
            items.append(item)
    except Exception as exc:
        return Collected(items, exc)
    return Collected(items, None)


async def collect_n(source: AsyncIterable[T], n: int) -> Collected[T]:
    """Drain at most *n* values; the (n+1)-th value is never requested."""
    items: List[T] = []
    if n <= 0:
        await _close(source)
        return Collected(items, None)
    iterator = aiter(source)
    try:
        async for item in iterator:
            items.append(item)
            if len(items) >= n:
                break
    except Exception as exc:
        return Collected(items, exc)
    finally:
        await _close(iterator)
    return Collected(items, None)


async def first(source: AsyncIterable[T]) -> T:
    """Return the first value of *source*.

    Raises :class:`EmptyIteratorError` when the stream ends without a value;
    an error raised by the first pull propagates unchanged.
    """
    iterator = aiter(source)
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        raise EmptyIteratorError() from None
    finally:
        await _close(iterator)


# ======================================================================
# Transforms
# ======================================================================


async def take(source: AsyncIterable[T], n: int) -> AsyncIterator[T]:
    """Yield at most *n* values.

    After the n-th value the source is closed rather than polled again, so an
    error the source would have raised later is never observed.
    """
    if n <= 0:
        await _close(source)
        return
    iterator = aiter(source)
    count = 0
    try:
        async for item in iterator:
            yield item
            count += 1
            if count >= n:
                return
    finally:
        await _close(iterator)


async def filter_items(
    source: AsyncIterable[T], predicate: Callable[[T], bool]
) -> AsyncIterator[T]:
    """Yield only the values for which *predicate* is true."""
    iterator = aiter(source)
    try:
        async for item in iterator:
            if predicate(item):
                yield item
    finally:
        await _close(iterator)


async def map_items(
    source: AsyncIterable[T], fn: Callable[[T], U]
) -> AsyncIterator[U]:
    """Yield ``fn(value)`` for every value; errors pass through untouched."""
    iterator = aiter(source)
    try:
        async for item in iterator:
            yield fn(item)
    finally:
        await _close(iterator)
