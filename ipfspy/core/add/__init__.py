"""
Add module for IPFS uploads.

Normalises many input shapes into canonical entries, streams them to the
node as multipart/form-data and decodes the NDJSON response.
"""
from .coordinator import AddCoordinator
from .models import AddOptions, AddResult, ByteStream, Entry
from .multipart import MultipartEncoder
from .multiplexer import ResponseMultiplexer
from .normalise import normalise_input, normalise_entry
from .sources import to_byte_stream
from .protocols import BodyEncoderProtocol, TransportProtocol

__all__ = [
    # Main classes
    'AddCoordinator',
    'MultipartEncoder',
    'ResponseMultiplexer',
    
    # Normalisation
    'normalise_input',
    'normalise_entry',
    'to_byte_stream',
    
    # Models
    'AddOptions',
    'AddResult',
    'ByteStream',
    'Entry',
    
    # Protocols
    'BodyEncoderProtocol',
    'TransportProtocol',
]
