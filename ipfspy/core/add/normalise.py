"""
Input normalisation for add().

Accepts any of:

    bytes / bytearray / memoryview
    file object (sync or aiofiles)
    os.PathLike
    {'path': ..., 'content': <content>}
    Iterable[int]
    Iterable[bytes]
    Iterable[{'path': ..., 'content': <content>}]
    AsyncIterable[bytes]
    AsyncIterable[{'path': ..., 'content': <content>}]
    callable pull stream

where <content> is any of the non-descriptor shapes above, and produces:

    AsyncIterator[Entry]

Matchers run in order and the first match wins. Iterables of bytes and
iterables of descriptors can only be told apart by their first value, so
iterables are wrapped in a peekable cursor and the peeked value is
replayed into whatever is built from them.
"""
import re
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Mapping, Optional

from .models import Entry
from .peekable import AsyncPeekable, Peekable
from .sources import (
    to_byte_stream,
    is_bytes_like,
    is_file_like,
    is_path,
    is_descriptor,
    is_async_iterable,
    is_sync_iterable,
    is_content,
)
from ..exceptions import UnsupportedInputError
from ..logging import get_logger

logger = get_logger('ipfspy.add.normalise')

_PATH_SEPARATORS = re.compile(r'[/\\]')
_EMPTY = object()

Matcher = Callable[[Any], Optional[AsyncIterator[Entry]]]


def normalise_entry(candidate: Mapping[str, Any]) -> Entry:
    """
    Turn a {'path', 'content'} candidate into an Entry.

    Raises:
        UnsupportedInputError: If the content is not an accepted shape
    """
    path = candidate.get('path') or ''
    content = candidate.get('content')

    if content is None:
        return Entry(path=str(path), content=None)

    if isinstance(content, str) or not is_content(content):
        raise UnsupportedInputError(
            content,
            f"Unexpected content for entry {path!r}: {type(content).__name__}"
        )

    return Entry(path=str(path), content=to_byte_stream(content))


def _as_candidate(value: Any) -> Mapping[str, Any]:
    # Bare content inside a stream of descriptors becomes an unnamed entry
    if is_descriptor(value):
        return value
    return {'path': '', 'content': value}


def _path_hint(source: Any) -> str:
    """Entry name for streams that know their file, e.g. custom readers with .path"""
    for attr in ('path', 'name'):
        hint = getattr(source, attr, None)
        if isinstance(hint, str) and hint:
            return _PATH_SEPARATORS.split(hint)[-1]
    return ''


async def _one(candidate: Mapping[str, Any]) -> AsyncIterator[Entry]:
    yield normalise_entry(candidate)


def _match_buffer(value: Any) -> Optional[AsyncIterator[Entry]]:
    if is_bytes_like(value):
        return _one({'path': '', 'content': value})
    return None


def _match_file(value: Any) -> Optional[AsyncIterator[Entry]]:
    if is_file_like(value):
        return _one({'path': '', 'content': value})
    return None


def _match_path(value: Any) -> Optional[AsyncIterator[Entry]]:
    if not is_path(value):
        return None
    path = Path(value)
    if path.is_dir():
        raise UnsupportedInputError(value, f"Directories are not supported: {path}")
    if not path.is_file():
        raise UnsupportedInputError(value, f"No such file: {path}")
    return _one({'path': path.name, 'content': path})


async def _from_sync_iterable(value: Any) -> AsyncIterator[Entry]:
    items = Peekable(value)
    first = items.peek(_EMPTY)
    if first is _EMPTY:
        return

    if not is_descriptor(first):
        # The iterable is itself the content (e.g. a list of byte values)
        yield normalise_entry({'path': '', 'content': items})
        return

    for item in items:
        yield normalise_entry(_as_candidate(item))


def _match_sync_iterable(value: Any) -> Optional[AsyncIterator[Entry]]:
    if is_sync_iterable(value):
        return _from_sync_iterable(value)
    return None


async def _from_async_iterable(value: Any) -> AsyncIterator[Entry]:
    stream = AsyncPeekable(value)
    first = await stream.peek(_EMPTY)
    if first is _EMPTY:
        return

    if not is_descriptor(first):
        # Single byte stream. The peeked chunk is replayed by the cursor.
        path = _path_hint(value)
        logger.debug(f"Input is a single byte stream (path={path!r})")
        yield normalise_entry({'path': path, 'content': stream})
        return

    try:
        async for item in stream:
            yield normalise_entry(_as_candidate(item))
    finally:
        await stream.aclose()


def _match_async_iterable(value: Any) -> Optional[AsyncIterator[Entry]]:
    if is_async_iterable(value):
        return _from_async_iterable(value)
    return None


def _match_descriptor(value: Any) -> Optional[AsyncIterator[Entry]]:
    if is_descriptor(value):
        return _one(value)
    return None


def _match_pull_stream(value: Any) -> Optional[AsyncIterator[Entry]]:
    if callable(value):
        return _one({'path': '', 'content': value})
    return None


MATCHERS: List[Matcher] = [
    _match_buffer,
    _match_file,
    _match_path,
    _match_sync_iterable,
    _match_async_iterable,
    _match_descriptor,
    _match_pull_stream,
]


def normalise_input(value: Any) -> AsyncIterator[Entry]:
    """
    Classify an add() input and return its entries.

    Classification happens immediately; reading the input does not start
    until the returned iterator is consumed.

    Args:
        value: Any supported input shape (see module docstring)

    Returns:
        Lazy async iterator of Entry objects

    Raises:
        UnsupportedInputError: If the input matches no supported shape
    """
    for matcher in MATCHERS:
        entries = matcher(value)
        if entries is not None:
            logger.debug(f"Input classified by {matcher.__name__}: {type(value).__name__}")
            return entries

    raise UnsupportedInputError(value)
