"""
Peek-and-splice cursors.

Inputs such as generators can only be read once, yet their shape is only
known after looking at the first value. These wrappers own the peeked
value and replay it as the first item of the iteration that follows.
"""
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator

_MISSING = object()


class Peekable:
    """Iterator with one value of lookahead."""
    
    def __init__(self, iterable: Iterable):
        self._iterator = iter(iterable)
        self._peeked: list = []
    
    def peek(self, default: Any = _MISSING) -> Any:
        """
        Return the next value without consuming it.
        
        Raises:
            StopIteration: If exhausted and no default is given
        """
        if not self._peeked:
            try:
                self._peeked.append(next(self._iterator))
            except StopIteration:
                if default is _MISSING:
                    raise
                return default
        return self._peeked[0]
    
    def __iter__(self) -> 'Peekable':
        return self
    
    def __next__(self) -> Any:
        if self._peeked:
            return self._peeked.pop()
        return next(self._iterator)


class AsyncPeekable:
    """
    Async iterator with one value of lookahead.
    
    The source is only touched when peek() or __anext__() is awaited.
    
    Example:
        >>> stream = AsyncPeekable(source)
        >>> first = await stream.peek()
        >>> chunks = [chunk async for chunk in stream]  # starts with first
    """
    
    def __init__(self, source: AsyncIterable):
        self._source = source
        self._iterator = None
        self._peeked: list = []
    
    @property
    def source(self) -> AsyncIterable:
        return self._source
    
    def _get_iterator(self) -> AsyncIterator:
        if self._iterator is None:
            self._iterator = self._source.__aiter__()
        return self._iterator
    
    async def peek(self, default: Any = _MISSING) -> Any:
        """
        Return the next value without consuming it.
        
        Raises:
            StopAsyncIteration: If exhausted and no default is given
        """
        if not self._peeked:
            try:
                self._peeked.append(await self._get_iterator().__anext__())
            except StopAsyncIteration:
                if default is _MISSING:
                    raise
                return default
        return self._peeked[0]
    
    def __aiter__(self) -> 'AsyncPeekable':
        return self
    
    async def __anext__(self) -> Any:
        if self._peeked:
            return self._peeked.pop()
        return await self._get_iterator().__anext__()
    
    async def aclose(self) -> None:
        self._peeked.clear()
        aclose = getattr(self._iterator, 'aclose', None)
        if aclose is not None:
            await aclose()
