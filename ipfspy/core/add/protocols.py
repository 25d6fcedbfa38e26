"""
Protocol definitions for the add module.

Defines the collaborators the add coordinator depends on, so transports
and body encoders can be swapped (e.g. in tests).
"""
from typing import Protocol, Any, AsyncIterable, AsyncIterator, Dict, Mapping, Optional

from .models import Entry
from ..cancellation import CancellationToken


class BodyEncoderProtocol(Protocol):
    """
    Turns entries into a streamed request body.
    
    Encoders may expose an error attribute holding the exception raised
    by a content source, which the coordinator reports instead of the
    transport failure it causes.
    """
    
    @property
    def headers(self) -> Dict[str, str]:
        """Headers framing the body, e.g. Content-Type with boundary."""
        ...
    
    def __aiter__(self) -> AsyncIterator[bytes]:
        ...


class BodyEncoderFactory(Protocol):
    def __call__(
        self,
        entries: AsyncIterable[Entry],
        cancel_token: Optional[CancellationToken] = None
    ) -> BodyEncoderProtocol:
        ...


class TransportProtocol(Protocol):
    """HTTP transport for streaming requests."""
    
    def post_stream(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Async context manager yielding a success-checked response.
        
        Raises:
            TransportError: On network failure or non-success status
        """
        ...
    
    def iter_chunks(
        self,
        response: Any,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncIterator[bytes]:
        """Yield the response body as it arrives."""
        ...
