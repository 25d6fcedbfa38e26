"""
Streaming multipart/form-data body encoder.

Produces the add request body from a lazy sequence of entries without
buffering entry content: each chunk is written as soon as its source
yields it.
"""
import uuid
from typing import AsyncIterable, AsyncIterator, Dict, Optional
from urllib.parse import quote

from .models import Entry
from ..cancellation import CancellationToken, guarded
from ..exceptions import CancellationError
from ..logging import get_logger

logger = get_logger('ipfspy.add.multipart')

CRLF = b'\r\n'
FILE_CONTENT_TYPE = 'application/octet-stream'
DIRECTORY_CONTENT_TYPE = 'application/x-directory'

_END = object()


async def _next_or_end(iterator: AsyncIterator):
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _END


class MultipartEncoder:
    """
    Encodes entries as multipart/form-data.
    
    Iterating the encoder yields the body; headers holds the matching
    Content-Type. Every entry becomes one part named file-<n> (dir-<n> for
    directory placeholders) whose filename is the URL-quoted entry path.
    
    The cancellation token is checked before every entry and chunk read,
    so no source is read again once it has fired. The exception
    raised by an entry source is kept in error. The content being read is
    closed if encoding stops early.
    
    Example:
        >>> encoder = MultipartEncoder(normalise_input(b'hello'))
        >>> async with session.post(url, data=encoder, headers=encoder.headers):
        ...     ...
    """
    
    def __init__(
        self,
        entries: AsyncIterable[Entry],
        cancel_token: Optional[CancellationToken] = None,
        boundary: Optional[str] = None
    ):
        self._entries = entries
        self._cancel_token = cancel_token
        self._boundary = boundary or uuid.uuid4().hex
        self._started = False
        self.parts_written = 0
        self.bytes_written = 0
        self.error: Optional[Exception] = None
    
    @property
    def boundary(self) -> str:
        return self._boundary
    
    @property
    def content_type(self) -> str:
        return f'multipart/form-data; boundary={self._boundary}'
    
    @property
    def headers(self) -> Dict[str, str]:
        return {'Content-Type': self.content_type}
    
    def part_header(self, index: int, entry: Entry) -> bytes:
        """Boundary line and headers opening the part for one entry."""
        if entry.is_directory:
            name, content_type = f'dir-{index}', DIRECTORY_CONTENT_TYPE
        else:
            name, content_type = f'file-{index}', FILE_CONTENT_TYPE
        filename = quote(entry.path, safe='')
        return (
            f'--{self._boundary}\r\n'
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f'Content-Type: {content_type}\r\n'
            f'\r\n'
        ).encode('utf-8')
    
    def closing(self) -> bytes:
        return f'--{self._boundary}--\r\n'.encode('utf-8')
    
    async def _next(self, iterator: AsyncIterator):
        if self._cancel_token is not None:
            self._cancel_token.raise_if_cancelled()
        try:
            return await guarded(_next_or_end(iterator), self._cancel_token)
        except CancellationError:
            raise
        except Exception as e:
            # aiohttp reports this as a connection error
            self.error = e
            raise
    
    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._started:
            raise RuntimeError("MultipartEncoder can only be iterated once")
        self._started = True
        return self._encode()
    
    async def _encode(self) -> AsyncIterator[bytes]:
        entries = self._entries.__aiter__()
        content = None
        try:
            while True:
                entry = await self._next(entries)
                if entry is _END:
                    break
                
                index = self.parts_written
                logger.debug(f"Encoding part {index}: {entry.path!r} (length={entry.content.length if entry.content else None})")
                yield self.part_header(index, entry)
                
                content = entry.content
                if content is not None:
                    chunks = content.__aiter__()
                    while True:
                        chunk = await self._next(chunks)
                        if chunk is _END:
                            break
                        if chunk:
                            self.bytes_written += len(chunk)
                            yield chunk
                content = None
                
                yield CRLF
                self.parts_written += 1
            
            yield self.closing()
            logger.debug(f"Encoded {self.parts_written} part(s), {self.bytes_written} content bytes")
        finally:
            if content is not None:
                await content.aclose()
            aclose = getattr(entries, 'aclose', None)
            if aclose is not None:
                await aclose()
