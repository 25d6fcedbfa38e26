"""
ipfspy - Async Python client for the IPFS HTTP API.

Usage:
    >>> from ipfspy import IpfsClient
    >>> 
    >>> async with IpfsClient("http://127.0.0.1:5001") as ipfs:
    ...     async for result in ipfs.add(b"hello"):
    ...         print(result.cid)
"""
import logging
from .client import IpfsClient, NodeIdentity, NodeVersion

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    IpfsAPIError,
)

from .core.add import AddOptions, AddResult, Entry, ByteStream
from .core.cancellation import CancellationToken
from .core.logging import set_level
from .core.exceptions import (
    IpfsException,
    UnsupportedInputError,
    NormalisationError,
    TransportError,
    DecodeError,
    CancellationError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for ipfspy modules.
    
    This ensures that all ipfspy loggers are properly configured
    to show log messages at the specified level.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    set_level(level)


__all__ = [
    'IpfsClient',
    'NodeIdentity',
    'NodeVersion',
    'AddOptions',
    'AddResult',
    'Entry',
    'ByteStream',
    'CancellationToken',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'IpfsException',
    'UnsupportedInputError',
    'NormalisationError',
    'TransportError',
    'DecodeError',
    'CancellationError',
    'IpfsAPIError',
    'setup_logging',
]
