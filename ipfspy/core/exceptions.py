"""
Custom exceptions for ipfspy operations.

Every error raised by the client derives from IpfsException so callers
can catch the whole family at once, while the subclasses keep
"I stopped it" (CancellationError) apart from "it failed" (TransportError).
"""
from typing import Optional, Any


class IpfsException(Exception):
    """Base exception for all ipfspy errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class UnsupportedInputError(IpfsException, TypeError):
    """Raised when add() receives a value of a shape it cannot upload."""
    
    def __init__(self, value: Any, message: Optional[str] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            value: The offending input value
            message: Optional override for the default message
        """
        self.input_type = type(value).__name__
        super().__init__(message or f"Unexpected input: {self.input_type}")


class NormalisationError(IpfsException):
    """Internal error: content reached the byte adapter in an unknown shape."""
    pass


class TransportError(IpfsException):
    """Raised for network failures while talking to the node."""
    pass


class DecodeError(IpfsException):
    """Raised when a response line is not valid JSON."""
    
    def __init__(self, message: str, line: Optional[bytes] = None) -> None:
        self.line = line
        super().__init__(message)


class CancellationError(IpfsException):
    """Raised when the caller's cancellation token fires mid-operation."""
    pass
