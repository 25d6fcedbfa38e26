"""
Cooperative cancellation.

A CancellationToken is created by the caller, passed to an operation and
observed at every suspension point of that operation: reading the next
content chunk, waiting for the response and reading each response line.
"""
import asyncio
import inspect
from typing import Awaitable, Optional, TypeVar

from .exceptions import CancellationError

T = TypeVar('T')


class CancellationToken:
    """
    Shared cancellation flag backed by an asyncio.Event.
    
    Example:
        >>> token = CancellationToken()
        >>> async for result in client.add(data, cancel_token=token):
        ...     if too_slow:
        ...         token.cancel()
    """
    
    def __init__(self):
        self._event = asyncio.Event()
        self._reason: Optional[str] = None
    
    @property
    def cancelled(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()
    
    @property
    def reason(self) -> Optional[str]:
        return self._reason
    
    def cancel(self, reason: Optional[str] = None) -> None:
        """Fire the token. Calling it again is a no-op."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()
    
    def raise_if_cancelled(self) -> None:
        """Raise CancellationError if the token has fired."""
        if self._event.is_set():
            raise CancellationError(self._reason or "Operation cancelled")
    
    async def wait(self) -> None:
        """Block until the token fires."""
        await self._event.wait()
    
    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await a value unless the token fires first.
        
        The pending awaitable is cancelled when the token wins, so the
        underlying I/O is aborted rather than left to complete.
        
        Raises:
            CancellationError: If the token fired before the value arrived
        """
        if self.cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait(
                {task, waiter},
                return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()
        
        if task.done():
            return task.result()
        
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.raise_if_cancelled()
        raise CancellationError("Operation cancelled")


async def guarded(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await through token.guard() when a token is given."""
    if token is None:
        return await awaitable
    return await token.guard(awaitable)
