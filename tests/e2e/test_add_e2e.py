"""
End-to-end tests against an in-process fake node.

Every test goes through the real stack: IpfsClient, aiohttp client
session, streamed multipart body, NDJSON response decoding.
"""
import pytest

from ipfspy import (
    IpfsClient,
    CancellationToken,
    CancellationError,
    DecodeError,
    IpfsAPIError,
    TransportError,
    UnsupportedInputError,
)


class TestAddContent:
    """Adding the different input shapes."""

    @pytest.mark.asyncio
    async def test_add_bytes(self, ipfs, fake_node):
        results = await ipfs.add_all(b'hello')

        assert len(results) == 1
        assert results[0].cid
        assert results[0].size == 5
        assert results[0].path == ''
        assert fake_node.requests[0]['parts'][0][3] == b'hello'

    @pytest.mark.asyncio
    async def test_add_async_stream_keeps_first_chunk(self, ipfs, fake_node):
        """Test a peeked leading chunk is uploaded exactly once."""
        async def source():
            yield bytes([1, 2, 3])
            yield bytes([4, 5])

        results = await ipfs.add_all(source())

        assert len(results) == 1
        parts = fake_node.requests[0]['parts']
        assert len(parts) == 1
        assert parts[0][3] == b'\x01\x02\x03\x04\x05'

    @pytest.mark.asyncio
    async def test_add_path(self, ipfs, fake_node, sample_file):
        results = await ipfs.add_all(sample_file)

        assert [(r.path, r.size) for r in results] == [('notes.txt', 20)]

    @pytest.mark.asyncio
    async def test_add_file_object(self, ipfs, fake_node, sample_file):
        with open(sample_file, 'rb') as f:
            results = await ipfs.add_all(f)

        assert results[0].size == 20
        assert fake_node.requests[0]['parts'][0][3] == b'0123456789ABCDEFGHIJ'

    @pytest.mark.asyncio
    async def test_add_pull_stream(self, ipfs, fake_node):
        chunks = [b'pull', b'ed']

        def pull():
            return chunks.pop(0) if chunks else None

        results = await ipfs.add_all(pull)

        assert results[0].size == 6

    @pytest.mark.asyncio
    async def test_add_descriptors_with_directory(self, ipfs, fake_node):
        """Test directory placeholders and names reach the node."""
        results = await ipfs.add_all([
            {'path': 'docs'},
            {'path': 'docs/read me.txt', 'content': b'read'},
            {'path': 'docs/b.bin', 'content': [0, 1]},
        ])

        parts = fake_node.requests[0]['parts']
        assert [(name, filename, content_type) for name, filename, content_type, _ in parts] == [
            ('dir-0', 'docs', 'application/x-directory'),
            ('file-1', 'docs/read me.txt', 'application/octet-stream'),
            ('file-2', 'docs/b.bin', 'application/octet-stream'),
        ]
        assert [r.path for r in results] == ['docs', 'docs/read me.txt', 'docs/b.bin']

    @pytest.mark.asyncio
    async def test_wrap_with_directory(self, ipfs, fake_node):
        results = await ipfs.add_all(
            [{'path': 'a.txt', 'content': b'a'}, {'path': 'b.txt', 'content': b'b'}],
            wrap_with_directory=True
        )

        assert [r.path for r in results] == ['a.txt', 'b.txt', '']
        assert fake_node.requests[0]['query']['wrap-with-directory'] == 'true'

    @pytest.mark.asyncio
    async def test_results_stream_in_order(self, ipfs, fake_node):
        paths = []
        async for result in ipfs.add([{'path': str(i), 'content': b'x'} for i in range(5)]):
            paths.append(result.path)

        assert paths == ['0', '1', '2', '3', '4']


class TestAddOptions:
    """Query parameters and headers."""

    @pytest.mark.asyncio
    async def test_unset_options_omitted(self, ipfs, fake_node):
        await ipfs.add_all(b'x', pin=False, cid_version=1)

        query = fake_node.requests[0]['query']
        assert query['pin'] == 'false'
        assert query['cid-version'] == '1'
        assert query['stream-channels'] == 'true'
        assert 'chunker' not in query
        assert 'progress' not in query

    @pytest.mark.asyncio
    async def test_headers(self, fake_node):
        async with IpfsClient(fake_node.url, headers={'X-Client': 'ipfspy'}) as ipfs:
            await ipfs.add_all(b'x', headers={'Authorization': 'Bearer token'})

        headers = fake_node.requests[0]['headers']
        assert headers['Authorization'] == 'Bearer token'
        assert headers['X-Client'] == 'ipfspy'

    @pytest.mark.asyncio
    async def test_progress(self, ipfs, fake_node):
        """Test progress records reach the callback and not the results."""
        seen = []

        results = await ipfs.add_all(b'0123456789', progress=seen.append)

        assert fake_node.requests[0]['query']['progress'] == 'true'
        assert seen == [5, 10]
        assert len(results) == 1
        assert results[0].bytes is None

    @pytest.mark.asyncio
    async def test_async_progress(self, ipfs, fake_node):
        seen = []

        async def on_progress(processed):
            seen.append(processed)

        await ipfs.add_all(b'abcd', progress=on_progress)

        assert seen == [2, 4]


class TestAddErrors:
    """Failure and cancellation behaviour."""

    @pytest.mark.asyncio
    async def test_unsupported_input_sends_nothing(self, ipfs, fake_node):
        with pytest.raises(UnsupportedInputError):
            ipfs.add(42)

        assert fake_node.requests == []

    @pytest.mark.asyncio
    async def test_http_error(self, ipfs, fake_node):
        fake_node.fail_with = (500, {'Message': 'disk full', 'Code': 0, 'Type': 'error'})

        with pytest.raises(IpfsAPIError) as exc_info:
            await ipfs.add_all(b'x')

        assert exc_info.value.status == 500
        assert exc_info.value.message == 'disk full'

    @pytest.mark.asyncio
    async def test_error_record_in_stream(self, ipfs, fake_node):
        fake_node.raw_response = b'{"Message": "pin failed", "Code": 0, "Type": "error"}\n'

        with pytest.raises(IpfsAPIError, match='pin failed'):
            await ipfs.add_all(b'x')

    @pytest.mark.asyncio
    async def test_bad_json_after_result(self, ipfs, fake_node):
        """Test results before a bad line are still delivered."""
        fake_node.raw_response = b'{"Name": "a", "Hash": "bafyA", "Size": "1"}\nnot json\n'
        results = []

        with pytest.raises(DecodeError):
            async for result in ipfs.add(b'x'):
                results.append(result)

        assert [r.cid for r in results] == ['bafyA']

    @pytest.mark.asyncio
    async def test_connection_refused(self, unused_tcp_port):
        async with IpfsClient(f'http://127.0.0.1:{unused_tcp_port}') as ipfs:
            with pytest.raises(TransportError):
                await ipfs.add_all(b'x')

    @pytest.mark.asyncio
    async def test_cancel_while_uploading(self, ipfs, fake_node):
        """Test a fired token stops reading the source."""
        token = CancellationToken()
        reads = []

        async def source():
            reads.append(1)
            yield b'first'
            reads.append(2)
            token.cancel('stop')
            yield b'second'
            reads.append(3)
            yield b'third'

        with pytest.raises(CancellationError):
            await ipfs.add_all(source(), cancel_token=token)

        assert 3 not in reads

    @pytest.mark.asyncio
    async def test_cancel_before_start(self, ipfs, fake_node):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(CancellationError):
            await ipfs.add_all(b'x', cancel_token=token)

        assert fake_node.requests == []


class TestStreamingErrors:
    """Errors that end an add after the request has started."""

    @pytest.mark.asyncio
    async def test_timeout_mid_response(self, ipfs, fake_node):
        """Test a timeout while results stream in is a TransportError."""
        fake_node.stall = True
        results = []

        with pytest.raises(TransportError, match='timed out') as exc_info:
            async for result in ipfs.add(b'hello', timeout=0.5):
                results.append(result)

        assert not isinstance(exc_info.value, CancellationError)
        assert len(results) == 1
        assert results[0].size == 5

    @pytest.mark.asyncio
    async def test_timeout_with_fired_token(self, ipfs, fake_node):
        """Test a fired token wins over the timeout it races."""
        fake_node.stall = True
        token = CancellationToken()

        with pytest.raises(CancellationError):
            async for _ in ipfs.add(b'hello', timeout=0.5, cancel_token=token):
                token.cancel('done waiting')

    @pytest.mark.asyncio
    async def test_failing_source(self, ipfs, fake_node):
        """Test a content source error surfaces unchanged."""
        closed = []

        async def source():
            try:
                yield b'a'
                raise ValueError('disk broke')
            finally:
                closed.append(True)

        with pytest.raises(ValueError, match='disk broke'):
            await ipfs.add_all(source())

        assert closed == [True]

    @pytest.mark.asyncio
    async def test_failing_descriptor_source(self, ipfs, fake_node):
        """Test a source failing in a later entry surfaces unchanged."""
        def broken():
            raise OSError('device not ready')

        with pytest.raises(OSError, match='device not ready') as exc_info:
            await ipfs.add_all([
                {'path': 'ok.txt', 'content': b'ok'},
                {'path': 'bad.txt', 'content': broken},
            ])

        assert not isinstance(exc_info.value, TransportError)

    @pytest.mark.asyncio
    async def test_missing_path(self, ipfs, fake_node, tmp_path):
        """Test a path that does not exist is rejected before sending."""
        with pytest.raises(UnsupportedInputError, match='No such file'):
            ipfs.add(tmp_path / 'missing.bin')

        assert fake_node.requests == []

    @pytest.mark.asyncio
    async def test_missing_path_in_descriptor(self, ipfs, fake_node, tmp_path):
        """Test a descriptor naming a missing file reports the file error."""
        with pytest.raises(FileNotFoundError):
            await ipfs.add_all([{'path': 'missing.bin', 'content': tmp_path / 'missing.bin'}])


class TestNodeInfo:
    """id and version endpoints."""

    @pytest.mark.asyncio
    async def test_id(self, ipfs):
        identity = await ipfs.id()

        assert identity.id == '12D3KooWFakeNode'
        assert identity.agent_version == 'kubo/0.30.0/'
        assert identity.addresses == ['/ip4/127.0.0.1/tcp/4001/p2p/12D3KooWFakeNode']

    @pytest.mark.asyncio
    async def test_version(self, ipfs):
        version = await ipfs.version()

        assert version.version == '0.30.0'
        assert version.repo == '16'
        assert str(version) == '0.30.0-abc123'
