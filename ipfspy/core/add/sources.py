"""
Byte source adapters.

Turns one content value into a ByteStream. The value has already been
classified as content (not a file descriptor) by the input normaliser.

Supported content:
    bytes / bytearray / memoryview      one chunk, exact length
    Iterable[int]                       one chunk, exact length
    Iterable[bytes]                     streamed, unknown length
    file object (sync or aiofiles)      read incrementally, length from size
    os.PathLike                         read with aiofiles, length from stat
    AsyncIterable[bytes]                streamed, unknown length
    callable pull stream                streamed, unknown length
"""
import asyncio
import inspect
import io
import os
from pathlib import Path
from typing import Any, AsyncIterator, Iterator, Mapping, Optional

import aiofiles

from .models import ByteStream
from .peekable import Peekable
from ..exceptions import NormalisationError, UnsupportedInputError
from ..logging import get_logger

DEFAULT_CHUNK_SIZE = 256 * 1024

_EMPTY = object()

logger = get_logger('ipfspy.add.sources')


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_file_like(value: Any) -> bool:
    """File objects: anything with a callable read() that is not a buffer."""
    return not is_bytes_like(value) and callable(getattr(value, 'read', None))


def is_path(value: Any) -> bool:
    return isinstance(value, os.PathLike)


def is_descriptor(value: Any) -> bool:
    """A {'path': ..., 'content': ...} mapping."""
    return isinstance(value, Mapping) and ('path' in value or 'content' in value)


def is_async_iterable(value: Any) -> bool:
    return callable(getattr(value, '__aiter__', None))


def is_sync_iterable(value: Any) -> bool:
    """Iterables other than text, buffers and mappings."""
    if isinstance(value, (str, Mapping)) or is_bytes_like(value):
        return False
    return callable(getattr(value, '__iter__', None))


def is_content(value: Any) -> bool:
    """True if to_byte_stream() accepts the value."""
    return (
        is_bytes_like(value)
        or is_file_like(value)
        or is_path(value)
        or is_async_iterable(value)
        or is_sync_iterable(value)
        or callable(value)
    )


async def _single(data: bytes) -> AsyncIterator[bytes]:
    yield data


def _from_buffer(data: bytes) -> ByteStream:
    return ByteStream(_single(data), length=len(data))


def _is_async_file(file_obj: Any) -> bool:
    return inspect.iscoroutinefunction(getattr(file_obj, 'read', None))


def _fileno(file_obj: Any) -> Optional[int]:
    try:
        return file_obj.fileno()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


def file_length(file_obj: Any) -> Optional[int]:
    """
    Best-effort count of the bytes left to read in a file object.

    Async file handles only expose their total size, since their tell()
    would need awaiting.
    """
    fd = _fileno(file_obj)
    if _is_async_file(file_obj):
        return os.fstat(fd).st_size if fd is not None else None

    try:
        position = file_obj.tell()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        position = None

    if fd is not None:
        try:
            size = os.fstat(fd).st_size
        except OSError:
            size = None
        if size is not None:
            return max(size - (position or 0), 0)

    if isinstance(file_obj, io.BytesIO):
        return max(file_obj.getbuffer().nbytes - file_obj.tell(), 0)

    if position is not None and getattr(file_obj, 'seekable', lambda: False)():
        end = file_obj.seek(0, io.SEEK_END)
        file_obj.seek(position)
        return max(end - position, 0)

    return None


def _to_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        # Text-mode file objects
        return data.encode('utf-8')
    if isinstance(data, int):
        raise UnsupportedInputError(data, "Stream chunks must be bytes, got int")
    return bytes(data)


async def _read_file(file_obj: Any, chunk_size: int) -> AsyncIterator[bytes]:
    """Read a sync or async file object chunk by chunk."""
    blocking = _fileno(file_obj) is not None and not _is_async_file(file_obj)
    loop = asyncio.get_running_loop()

    while True:
        if blocking:
            # Real files: keep disk reads off the event loop
            data = await loop.run_in_executor(None, file_obj.read, chunk_size)
        else:
            data = file_obj.read(chunk_size)
            if inspect.isawaitable(data):
                data = await data
        if not data:
            return
        yield _to_bytes(data)


async def _read_path(path: Path, chunk_size: int) -> AsyncIterator[bytes]:
    """Read a file on disk without blocking the event loop."""
    async with aiofiles.open(path, 'rb') as f:
        while True:
            data = await f.read(chunk_size)
            if not data:
                return
            yield data


async def _forward(source: Any) -> AsyncIterator[bytes]:
    try:
        async for chunk in source:
            yield _to_bytes(chunk)
    finally:
        aclose = getattr(source, 'aclose', None)
        if aclose is not None:
            await aclose()


async def _iter_chunks(chunks: Iterator) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield _to_bytes(chunk)


async def _pull(pull: Any) -> AsyncIterator[bytes]:
    """Drain a pull stream: each call returns the next chunk, None or b'' ends it."""
    while True:
        chunk = pull()
        if inspect.isawaitable(chunk):
            chunk = await chunk
        if chunk is None or len(chunk) == 0:
            return
        yield _to_bytes(chunk)


def _from_sync_iterable(content: Any) -> ByteStream:
    chunks = Peekable(content)
    first = chunks.peek(_EMPTY)

    if first is _EMPTY:
        return _from_buffer(b'')

    if isinstance(first, int):
        # A byte array in disguise, e.g. [104, 105]
        try:
            return _from_buffer(bytes(chunks))
        except (TypeError, ValueError) as e:
            raise UnsupportedInputError(
                content, f"Invalid byte sequence: {e}"
            ) from e

    if is_bytes_like(first):
        return ByteStream(_iter_chunks(chunks))

    raise UnsupportedInputError(
        content,
        f"Iterable content must yield ints or bytes, got {type(first).__name__}"
    )


def to_byte_stream(content: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> ByteStream:
    """
    Adapt one content value to a ByteStream.

    Args:
        content: Content value (see module docstring for accepted shapes)
        chunk_size: Read size for file objects and files on disk

    Returns:
        ByteStream with a length hint where the size is known up front

    Raises:
        NormalisationError: If the value is not content. Input is checked
            before it gets here, so this indicates a bug in the caller.
    """
    if is_bytes_like(content):
        return _from_buffer(bytes(content))

    if is_file_like(content):
        length = file_length(content)
        logger.debug(f"Streaming file object {getattr(content, 'name', '')!r} (length={length})")
        return ByteStream(_read_file(content, chunk_size), length=length)

    if is_path(content):
        path = Path(content)
        length = path.stat().st_size
        logger.debug(f"Streaming {path} ({length} bytes)")
        return ByteStream(_read_path(path, chunk_size), length=length)

    if is_async_iterable(content):
        return ByteStream(_forward(content))

    if is_sync_iterable(content):
        return _from_sync_iterable(content)

    if callable(content):
        return ByteStream(_pull(content))

    raise NormalisationError(f"Unexpected content: {type(content).__name__}")
