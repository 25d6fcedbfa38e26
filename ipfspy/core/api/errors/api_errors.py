"""IPFS API error responses."""
import json
from typing import Optional, Any

from ...exceptions import TransportError


class IpfsAPIError(TransportError):
    """
    Exception raised when the node rejects a request.
    
    The node answers failures with a JSON body such as
    {"Message": "invalid path", "Code": 0, "Type": "error"}; when the body
    has that shape its message is surfaced, otherwise the HTTP reason.
    """
    
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[int] = None
    ):
        self.status = status
        super().__init__(message, code)
    
    @property
    def code(self) -> Optional[int]:
        return self.error_code
    
    @classmethod
    def from_response(
        cls,
        status: int,
        body: bytes,
        reason: Optional[str] = None
    ) -> 'IpfsAPIError':
        """Build the error from a non-success HTTP response."""
        message = None
        code = None
        try:
            data = json.loads(body.decode('utf-8'))
        except (ValueError, UnicodeDecodeError):
            data = None
        
        if isinstance(data, dict):
            message = data.get('Message') or data.get('message')
            code = data.get('Code', data.get('code'))
        elif body:
            message = body.decode('utf-8', errors='replace').strip() or None
        
        return cls(message or reason or f"HTTP {status}", status=status, code=code)
    
    @classmethod
    def from_record(cls, record: Any) -> 'IpfsAPIError':
        """Build the error from an error record embedded in a stream."""
        return cls(
            record.get('message') or 'Unknown error from node',
            code=record.get('code')
        )
    
    def __str__(self) -> str:
        if self.status is not None:
            return f"HTTP {self.status}: {self.message}"
        return self.message
