"""IPFS API errors and exceptions."""
from .api_errors import IpfsAPIError

__all__ = [
    'IpfsAPIError',
]
