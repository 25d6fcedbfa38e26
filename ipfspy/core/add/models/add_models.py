"""
Data models for the add module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, AsyncIterator, Callable, Awaitable, Union

from ...cancellation import CancellationToken
from ...exceptions import NormalisationError

ProgressCallback = Callable[[int], Union[None, Awaitable[None]]]


class ByteStream:
    """
    Lazy, single-pass async sequence of byte chunks.
    
    Attributes:
        length: Exact byte count when the source size is known up front
            (buffers, sized file objects, files on disk), otherwise None
    
    A ByteStream can be iterated once; a second iteration raises
    NormalisationError.
    """
    
    def __init__(self, chunks: AsyncIterator[bytes], length: Optional[int] = None):
        self._chunks = chunks
        self._started = False
        self.length = length
    
    @property
    def consumed(self) -> bool:
        return self._started
    
    def __aiter__(self) -> 'ByteStream':
        if self._started:
            raise NormalisationError("ByteStream can only be consumed once")
        self._started = True
        return self
    
    async def __anext__(self) -> bytes:
        return await self._chunks.__anext__()
    
    async def read(self) -> bytes:
        """Drain the stream into memory. Intended for small content."""
        return b''.join([chunk async for chunk in self])
    
    async def aclose(self) -> None:
        """Close the underlying source if it supports closing."""
        aclose = getattr(self._chunks, 'aclose', None)
        if aclose is not None:
            await aclose()
    
    def __repr__(self) -> str:
        return f"ByteStream(length={self.length})"


@dataclass(frozen=True)
class Entry:
    """
    Canonical upload entry.
    
    Attributes:
        path: Relative name of the entry ('' when the input carries none)
        content: Content stream, or None for a directory placeholder
    """
    path: str = ''
    content: Optional[ByteStream] = None
    
    @property
    def is_directory(self) -> bool:
        return self.content is None


@dataclass(frozen=True)
class AddOptions:
    """
    Per-call options for add().
    
    Every option defaults to None, meaning "not sent": the node applies
    its own default. Only options with a value end up in the query string.
    
    Attributes:
        chunker: Chunking algorithm, e.g. 'size-262144' or 'rabin'
        cid_version: CID version (0 or 1)
        cid_base: Multibase encoding of returned CIDs
        enable_sharding_experiment: Use HAMT sharded directories
        hash_alg: Hash function name, e.g. 'sha2-256'
        only_hash: Compute CIDs without storing data
        pin: Pin added content
        progress: Callback receiving bytes processed so far
        quiet: Return only the final CIDs
        quieter: Return only the last CID
        silent: Write no output
        raw_leaves: Use raw blocks for leaf nodes
        shard_split_threshold: Directory entry count before sharding
        trickle: Use the trickle DAG layout
        wrap_with_directory: Wrap entries in a directory
        headers: Headers sent with this request
        cancel_token: Token aborting the upload when fired
        timeout: Total timeout in seconds for this call
    """
    chunker: Optional[str] = None
    cid_version: Optional[int] = None
    cid_base: Optional[str] = None
    enable_sharding_experiment: Optional[bool] = None
    hash_alg: Optional[str] = None
    only_hash: Optional[bool] = None
    pin: Optional[bool] = None
    progress: Optional[ProgressCallback] = None
    quiet: Optional[bool] = None
    quieter: Optional[bool] = None
    silent: Optional[bool] = None
    raw_leaves: Optional[bool] = None
    shard_split_threshold: Optional[int] = None
    trickle: Optional[bool] = None
    wrap_with_directory: Optional[bool] = None
    headers: Optional[Dict[str, str]] = None
    cancel_token: Optional[CancellationToken] = None
    timeout: Optional[float] = None
    
    # option attribute -> query parameter
    QUERY_PARAMS = {
        'chunker': 'chunker',
        'cid_version': 'cid-version',
        'cid_base': 'cid-base',
        'enable_sharding_experiment': 'enable-sharding-experiment',
        'hash_alg': 'hash',
        'only_hash': 'only-hash',
        'pin': 'pin',
        'quiet': 'quiet',
        'quieter': 'quieter',
        'raw_leaves': 'raw-leaves',
        'shard_split_threshold': 'shard-split-threshold',
        'silent': 'silent',
        'trickle': 'trickle',
        'wrap_with_directory': 'wrap-with-directory',
    }
    
    @staticmethod
    def _format(value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)
    
    def to_params(self) -> Dict[str, str]:
        """
        Build the add query string parameters.
        
        Example:
            >>> AddOptions(cid_version=1, pin=False).to_params()
            {'stream-channels': 'true', 'cid-version': '1', 'pin': 'false'}
        """
        params = {'stream-channels': 'true'}
        for attr, name in self.QUERY_PARAMS.items():
            value = getattr(self, attr)
            if value is not None:
                params[name] = self._format(value)
        if self.progress is not None:
            params['progress'] = 'true'
        return params
    
    @classmethod
    def option_names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))


@dataclass(frozen=True)
class AddResult:
    """
    One added item as reported by the node.
    
    Attributes:
        path: Name of the added entry ('' for unnamed content)
        cid: Content identifier
        size: Cumulative size in bytes as reported by the node
        mode: POSIX mode, when reported
        mtime: Modification time record, when reported
        bytes: Bytes processed, present on progress records
        raw: The key-normalized record
    """
    path: str
    cid: str
    size: int = 0
    mode: Optional[int] = None
    mtime: Optional[Any] = None
    bytes: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)
    
    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'AddResult':
        """Create from a key-normalized response record."""
        cid = record.get('hash', record.get('cid', ''))
        if isinstance(cid, dict):
            # {'/': 'bafy...'} link form
            cid = cid.get('/', '')
        
        mode = record.get('mode')
        if isinstance(mode, str):
            mode = int(mode, 8)
        
        size = record.get('size')
        return cls(
            path=record.get('name', record.get('path', '')) or '',
            cid=cid or '',
            size=int(size) if size not in (None, '') else 0,
            mode=mode,
            mtime=record.get('mtime'),
            bytes=record.get('bytes'),
            raw=record
        )
