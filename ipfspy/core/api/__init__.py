"""IPFS HTTP API transport."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .async_client import AsyncAPIClient
from .errors import IpfsAPIError
from .ndjson import iter_ndjson
from .casing import to_snake_case

__all__ = [
    'AsyncAPIClient',
    
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    
    # Errors
    'IpfsAPIError',
    
    # Decoding
    'iter_ndjson',
    'to_snake_case',
]
