"""
Response multiplexer.

Splits the decoded add response into progress notifications and results.
"""
import inspect
from typing import Any, AsyncIterable, AsyncIterator, Optional

from .models import AddResult
from .models.add_models import ProgressCallback
from ..api.casing import to_snake_case
from ..api.errors import IpfsAPIError
from ..exceptions import DecodeError
from ..logging import get_logger

logger = get_logger('ipfspy.add')


class ResponseMultiplexer:
    """
    Routes each decoded record to exactly one output.
    
    With a progress callback, records carrying 'bytes' go to the callback
    and are not yielded; every other record is yielded as an AddResult.
    Keys are normalized to snake_case first.
    """
    
    def __init__(self, progress: Optional[ProgressCallback] = None):
        self._progress = progress
        self.progress_events = 0
        self.results = 0
    
    async def _report(self, processed: int) -> None:
        outcome = self._progress(processed)
        if inspect.isawaitable(outcome):
            await outcome
    
    async def demux(self, records: AsyncIterable[Any]) -> AsyncIterator[AddResult]:
        """
        Consume decoded records and yield results.
        
        Raises:
            DecodeError: If a record is not a JSON object
            IpfsAPIError: If the node reports an error inside the stream
        """
        async for record in records:
            if not isinstance(record, dict):
                raise DecodeError(f"Unexpected response record: {record!r}")
            record = to_snake_case(record)
            
            if record.get('type') == 'error':
                raise IpfsAPIError.from_record(record)
            
            if self._progress is not None and record.get('bytes') is not None:
                self.progress_events += 1
                await self._report(record['bytes'])
                continue
            
            self.results += 1
            logger.debug(f"Added {record.get('name', '')!r} -> {record.get('hash')}")
            yield AddResult.from_record(record)
