"""
Async Stream Operators
======================

A small push-stream toolkit built on async generators.

Every operator takes one or more async iterables and returns a new async
iterator; none of them keeps state outside its own generator frame, so two
pipelines built from the same operators never interfere with each other.

Operators:
- from_iterable: lift a plain iterable into a stream
- defer: like from_iterable, building the iterable on first iteration
- map_stream / filter_stream: element-wise transforms
- expand: flat-map each element to a sub-stream, concatenated in order
- merge: interleave several streams in arrival order
- take: stop after n elements
- drop_repeats: suppress consecutive duplicates
- fold / collect: consume a stream into a single value

Example:
    >>> async def demo():
    ...     words = from_iterable(["call", "call", "jane"])
    ...     return await collect(map_stream(drop_repeats(words), str.upper))
    >>> asyncio.run(demo())
    ['CALL', 'JANE']
"""

import asyncio
from typing import (
    Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, List,
    Optional, TypeVar, Union
)

T = TypeVar('T')
U = TypeVar('U')
A = TypeVar('A')

_NOTHING = object()


async def _close(iterator: Any) -> None:
    """Finalize an async iterator if it supports it (async generators do)."""
    aclose = getattr(iterator, 'aclose', None)
    if aclose is not None:
        await aclose()


async def from_iterable(iterable: Iterable[T]) -> AsyncIterator[T]:
    """
    Lift a synchronous iterable into a stream.

    Control is handed back to the event loop after each element so that
    merged producers interleave instead of running one after the other.
    """
    for item in iterable:
        yield item
        await asyncio.sleep(0)


async def defer(factory: Callable[[], Iterable[T]]) -> AsyncIterator[T]:
    """
    Lift the iterable returned by factory into a stream.

    factory is only called once the stream is first iterated.
    """
    for item in factory():
        yield item
        await asyncio.sleep(0)


async def map_stream(source: AsyncIterable[T], fn: Callable[[T], U]) -> AsyncIterator[U]:
    """Apply fn to every element."""
    async for item in source:
        yield fn(item)


async def filter_stream(source: AsyncIterable[T], predicate: Callable[[T], bool]) -> AsyncIterator[T]:
    """Keep elements for which predicate is true."""
    async for item in source:
        if predicate(item):
            yield item


async def expand(
    source: AsyncIterable[T],
    fn: Callable[[T], Union[AsyncIterable[U], Iterable[U]]]
) -> AsyncIterator[U]:
    """
    Flat-map every element to a sub-stream.

    fn may return either an async iterable or a plain iterable. Sub-streams
    are consumed one after another, in source order.
    """
    async for item in source:
        inner = fn(item)
        if hasattr(inner, '__aiter__'):
            async for value in inner:
                yield value
        else:
            for value in inner:
                yield value
                await asyncio.sleep(0)


async def merge(sources: Iterable[AsyncIterable[T]]) -> AsyncIterator[T]:
    """
    Interleave several streams, yielding elements as they arrive.

    No order is defined between elements of different sources. The merged
    stream ends once every source has ended. If a source raises, the other
    sources are cancelled and the error is re-raised to the consumer.
    """
    sources = list(sources)
    if not sources:
        return

    queue: asyncio.Queue = asyncio.Queue()

    async def pump(source: AsyncIterable[T]) -> None:
        iterator = source.__aiter__()
        try:
            async for item in iterator:
                await queue.put((item, None))
        except Exception as e:
            await queue.put((_NOTHING, e))
            return
        finally:
            await _close(iterator)
        await queue.put((_NOTHING, None))

    tasks = [asyncio.ensure_future(pump(source)) for source in sources]
    remaining = len(tasks)
    try:
        while remaining:
            item, error = await queue.get()
            if error is not None:
                raise error
            if item is _NOTHING:
                remaining -= 1
                continue
            yield item
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def take(source: AsyncIterable[T], n: int) -> AsyncIterator[T]:
    """Yield at most n elements, then stop consuming the source."""
    if n <= 0:
        return
    iterator = source.__aiter__()
    count = 0
    try:
        async for item in iterator:
            yield item
            count += 1
            if count >= n:
                break
    finally:
        await _close(iterator)


async def drop_repeats(
    source: AsyncIterable[T],
    key: Optional[Callable[[T], Any]] = None
) -> AsyncIterator[T]:
    """
    Suppress elements equal to the one immediately before them.

    Args:
        source: Input stream
        key: Optional function computing the value to compare
    """
    previous = _NOTHING
    async for item in source:
        current = key(item) if key else item
        if previous is not _NOTHING and current == previous:
            continue
        previous = current
        yield item


async def fold(
    source: AsyncIterable[T],
    fn: Callable[[A, T], Union[A, Awaitable[A]]],
    initial: A
) -> A:
    """
    Reduce a stream to a single value.

    fn(accumulator, item) may be a plain function or a coroutine function.
    """
    accumulator = initial
    async for item in source:
        result = fn(accumulator, item)
        if asyncio.iscoroutine(result):
            result = await result
        accumulator = result
    return accumulator


async def collect(source: AsyncIterable[T]) -> List[T]:
    """Gather every element of a stream into a list."""
    return [item async for item in source]
