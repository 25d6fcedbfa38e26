"""
API configuration module.

Provides configuration for the IPFS HTTP API client.
Open for extension through custom configurations.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
import ssl

DEFAULT_API_URL = 'http://127.0.0.1:5001'
DEFAULT_API_PATH = '/api/v0'


@dataclass
class ProxyConfig:
    """
    Proxy configuration.
    
    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    
    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None
        
        if self.username and self.password:
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"
        
        return self.url


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.
    
    Only used when the API URL is https.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True
    
    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False  # Disable SSL verification
        
        context = ssl.create_default_context()
        
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        
        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )
        
        context.check_hostname = self.check_hostname
        
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.
    
    total is unset by default: an add streams arbitrarily large content
    and the response stays open until the node has processed all of it.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: Optional[float] = None
    sock_connect: float = 30.0
    
    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete API configuration.
    
    Centralizes connection options for the IPFS API client. Per-call
    options (pinning, CID version, ...) live in AddOptions instead.
    """
    # Node location
    api_url: str = DEFAULT_API_URL
    api_path: str = DEFAULT_API_PATH
    
    user_agent: str = 'ipfspy/1.0.0'
    
    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    # Sent with every request unless a call overrides headers
    extra_headers: Dict[str, str] = field(default_factory=dict)
    
    log_level: int = 20  # logging.INFO
    
    # Connection pool settings
    limit_per_host: int = 10
    limit: int = 100
    
    def __post_init__(self):
        self.api_url = self.api_url.rstrip('/')
        if self.api_path and not self.api_path.startswith('/'):
            self.api_path = '/' + self.api_path
        self.api_path = self.api_path.rstrip('/')
    
    @property
    def base_url(self) -> str:
        """API root, e.g. http://127.0.0.1:5001/api/v0"""
        return f"{self.api_url}{self.api_path}"
    
    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()
    
    @classmethod
    def from_url(cls, api_url: str, **kwargs) -> 'APIConfig':
        """Create configuration for a node at the given URL."""
        return cls(api_url=api_url, **kwargs)
    
    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )
    
    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        kwargs: Dict[str, Any] = {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
        }
        if self.api_url.startswith('https://'):
            kwargs['ssl'] = self.ssl.create_ssl_context()
        return kwargs
    
    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }
        
        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
