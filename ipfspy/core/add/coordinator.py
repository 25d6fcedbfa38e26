"""
Add coordinator.

Orchestrates one add call: input normalisation, streaming the multipart
body, issuing the request and demultiplexing the NDJSON response.
Follows Dependency Inversion Principle - the transport and body encoder
are injected.
"""
import time
from typing import Any, AsyncIterator, Optional

from .models import AddOptions, AddResult, Entry
from .multipart import MultipartEncoder
from .multiplexer import ResponseMultiplexer
from .normalise import normalise_input
from .protocols import BodyEncoderFactory, TransportProtocol
from ..api.ndjson import iter_ndjson
from ..exceptions import TransportError
from ..logging import get_logger

logger = get_logger('ipfspy.add')

ADD_ENDPOINT = 'add'


class AddCoordinator:
    """
    Coordinates the add process.
    
    Uses dependency injection for all collaborators, making it:
    - Testable (fake transports)
    - Extensible (swap body encoders)
    
    Exactly one request is in flight per add() call and nothing is read
    or sent until the returned iterator is consumed.
    """
    
    def __init__(
        self,
        transport: TransportProtocol,
        encoder_factory: Optional[BodyEncoderFactory] = None
    ):
        """
        Initialize add coordinator.
        
        Args:
            transport: Transport issuing the request (AsyncAPIClient)
            encoder_factory: Builds the request body from entries
        """
        self._transport = transport
        self._encoder_factory = encoder_factory or MultipartEncoder
    
    def add(
        self,
        value: Any,
        options: Optional[AddOptions] = None
    ) -> AsyncIterator[AddResult]:
        """
        Add content to the node.
        
        Args:
            value: Content in any supported input shape
            options: Per-call options
            
        Returns:
            Async iterator of results in the order the node reports them
            
        Raises:
            UnsupportedInputError: Immediately, if value has no supported shape
            
        The iterator raises TransportError, DecodeError or
        CancellationError if the upload fails or is cancelled. An error
        raised while reading the content itself is re-raised unchanged.
        """
        options = options or AddOptions()
        entries = normalise_input(value)
        return self._run(entries, options)
    
    async def _run(
        self,
        entries: AsyncIterator[Entry],
        options: AddOptions
    ) -> AsyncIterator[AddResult]:
        token = options.cancel_token
        encoder = self._encoder_factory(entries, cancel_token=token)
        multiplexer = ResponseMultiplexer(options.progress)
        
        params = options.to_params()
        headers = {**(options.headers or {}), **encoder.headers}
        
        started = time.time()
        logger.info(f"Starting add ({', '.join(f'{k}={v}' for k, v in params.items())})")
        
        try:
            async with self._transport.post_stream(
                ADD_ENDPOINT,
                params=params,
                data=encoder,
                headers=headers,
                cancel_token=token,
                timeout=options.timeout
            ) as response:
                records = iter_ndjson(self._transport.iter_chunks(response, token))
                async for result in multiplexer.demux(records):
                    if token is not None:
                        token.raise_if_cancelled()
                    yield result
        except TransportError:
            # A failing content source aborts the body; report the source error
            source_error = getattr(encoder, 'error', None)
            if source_error is None:
                raise
            logger.error(f"Add aborted by content source: {source_error!r}")
            raise source_error from None
        
        elapsed = time.time() - started
        logger.info(
            f"Add finished in {elapsed:.2f}s: {multiplexer.results} result(s), "
            f"{multiplexer.progress_events} progress event(s)"
        )
