"""Add models."""
from .add_models import (
    ByteStream,
    Entry,
    AddOptions,
    AddResult,
)

__all__ = [
    'ByteStream',
    'Entry',
    'AddOptions',
    'AddResult',
]
