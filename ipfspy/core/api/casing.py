"""
Key normalization for decoded API records.

The node answers with PascalCase keys (Name, Hash, CidVersion, ...).
Records are converted to snake_case before they reach callers.
"""
import re
from typing import Any

_FIRST_CAP = re.compile(r'(.)([A-Z][a-z]+)')
_ALL_CAP = re.compile(r'([a-z0-9])([A-Z])')


def snake_key(key: str) -> str:
    """Convert one key: 'CidVersion' -> 'cid_version', 'ID' -> 'id'."""
    key = _FIRST_CAP.sub(r'\1_\2', key)
    return _ALL_CAP.sub(r'\1_\2', key).lower()


def to_snake_case(value: Any) -> Any:
    """
    Recursively convert mapping keys to snake_case.
    
    Lists are walked, other values are returned unchanged. Applying it to
    an already converted record is a no-op.
    """
    if isinstance(value, dict):
        return {
            (snake_key(k) if isinstance(k, str) else k): to_snake_case(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [to_snake_case(item) for item in value]
    return value
