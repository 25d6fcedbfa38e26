"""
Newline-delimited JSON framing.

Turns a stream of byte chunks into parsed JSON values, one per line.
"""
import json
from typing import Any, AsyncIterable, AsyncIterator

from ..exceptions import DecodeError


def _decode_line(line: bytes) -> Any:
    try:
        return json.loads(line.decode('utf-8'))
    except (ValueError, UnicodeDecodeError) as e:
        preview = line[:200]
        raise DecodeError(f"Invalid JSON in response line: {e}", line=preview) from e


async def iter_ndjson(chunks: AsyncIterable[bytes]) -> AsyncIterator[Any]:
    """
    Parse NDJSON from an async byte stream.
    
    Lines may be split across chunk boundaries; blank lines are skipped
    and a trailing line without a newline is still parsed.
    
    Raises:
        DecodeError: If a line is not valid JSON
    """
    buffer = b''
    async for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        *lines, buffer = buffer.split(b'\n')
        for line in lines:
            if line.strip():
                yield _decode_line(line)
    
    if buffer.strip():
        yield _decode_line(buffer)
