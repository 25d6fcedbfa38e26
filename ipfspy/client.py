"""
IpfsClient - High-level async client for an IPFS node.

Example:
    >>> async with IpfsClient('http://127.0.0.1:5001') as ipfs:
    ...     async for result in ipfs.add(b'hello'):
    ...         print(result.cid)
"""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any

from .core.api import AsyncAPIClient, APIConfig, to_snake_case
from .core.add import AddCoordinator, AddOptions, AddResult
from .core.cancellation import CancellationToken
from .core.logging import get_logger

logger = get_logger('ipfspy.client')


@dataclass
class NodeIdentity:
    """Identity of the connected node."""
    id: str
    public_key: str = ''
    addresses: List[str] = field(default_factory=list)
    agent_version: str = ''
    protocol_version: str = ''
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NodeIdentity':
        return cls(
            id=data.get('id', ''),
            public_key=data.get('public_key') or '',
            addresses=list(data.get('addresses') or []),
            agent_version=data.get('agent_version') or '',
            protocol_version=data.get('protocol_version') or ''
        )


@dataclass
class NodeVersion:
    """Version information of the connected node."""
    version: str
    commit: str = ''
    repo: str = ''
    system: str = ''
    golang: str = ''
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NodeVersion':
        return cls(
            version=data.get('version', ''),
            commit=data.get('commit') or '',
            repo=str(data.get('repo') or ''),
            system=data.get('system') or '',
            golang=data.get('golang') or ''
        )
    
    def __str__(self) -> str:
        commit = f"-{self.commit}" if self.commit else ''
        return f"{self.version}{commit}"


class IpfsClient:
    """
    High-level async client for an IPFS node.
    
    Example:
        >>> async with IpfsClient() as ipfs:
        ...     results = await ipfs.add_all([
        ...         {'path': 'a.txt', 'content': b'first'},
        ...         {'path': 'b.txt', 'content': open('b.txt', 'rb')},
        ...     ], wrap_with_directory=True)
    """
    
    def __init__(
        self,
        api_url: Optional[str] = None,
        config: Optional[APIConfig] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize client.
        
        Args:
            api_url: Node API address, e.g. 'http://127.0.0.1:5001'
            config: Full API configuration (takes precedence over api_url)
            headers: Headers sent with every request
        """
        if config is None:
            config = APIConfig.from_url(api_url) if api_url else APIConfig.default()
        if headers:
            config = replace(config, extra_headers={**config.extra_headers, **headers})
        
        self._config = config
        self._api = AsyncAPIClient(config)
        self._coordinator = AddCoordinator(self._api)
    
    @property
    def config(self) -> APIConfig:
        return self._config
    
    @property
    def api(self) -> AsyncAPIClient:
        """Low-level transport."""
        return self._api
    
    async def __aenter__(self) -> 'IpfsClient':
        await self._api.__aenter__()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    async def close(self):
        """Close the HTTP session."""
        await self._api.close()
    
    def add(self, value: Any, **options: Any):
        """
        Add content to the node.
        
        Args:
            value: bytes, a file object, a path, a {'path', 'content'}
                mapping, a sync or async iterable of chunks or of such
                mappings, or a pull-stream callable
            **options: Any AddOptions field (pin, cid_version, progress,
                cancel_token, ...)
            
        Returns:
            Async iterator of AddResult
            
        Raises:
            UnsupportedInputError: If value has no supported shape
            TypeError: If an unknown option is passed
            
        Example:
            >>> async for result in ipfs.add(b'hello', cid_version=1):
            ...     print(result.path, result.cid, result.size)
        """
        return self._coordinator.add(value, AddOptions(**options))
    
    async def add_all(self, value: Any, **options: Any) -> List[AddResult]:
        """Add content and collect every result into a list."""
        return [result async for result in self.add(value, **options)]
    
    async def id(
        self,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> NodeIdentity:
        """Get the identity of the node."""
        data = await self._api.request_json('id', headers=headers, cancel_token=cancel_token)
        return NodeIdentity.from_dict(to_snake_case(data))
    
    async def version(
        self,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> NodeVersion:
        """Get the version of the node."""
        data = await self._api.request_json('version', headers=headers, cancel_token=cancel_token)
        return NodeVersion.from_dict(to_snake_case(data))
