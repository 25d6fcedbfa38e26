"""Pytest fixtures for ipfspy tests."""
import asyncio
import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from ipfspy import IpfsClient


def fake_cid(data: bytes) -> str:
    """Deterministic stand-in for a real CID."""
    return 'bafk' + hashlib.sha256(data).hexdigest()[:52]


class FakeNode:
    """
    In-process stand-in for an IPFS daemon.

    Implements /api/v0/add (multipart in, NDJSON out), /api/v0/id and
    /api/v0/version, and records every add request it receives.

    Attributes:
        requests: One dict per add call with 'query', 'headers' and 'parts'
            (a list of (field name, filename, content type, data) tuples)
        fail_with: (status, body) to answer add with instead of results
        raw_response: NDJSON bytes to answer add with instead of results
        stall: Hold the add response open after its first line until
            release is set
    """

    def __init__(self):
        self.url = ''
        self.requests: List[Dict[str, Any]] = []
        self.fail_with: Optional[Tuple[int, Dict[str, Any]]] = None
        self.raw_response: Optional[bytes] = None
        self.stall = False
        self.release = asyncio.Event()

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post('/api/v0/add', self.handle_add)
        app.router.add_post('/api/v0/id', self.handle_id)
        app.router.add_post('/api/v0/version', self.handle_version)
        return app

    async def _read_parts(self, request: web.Request) -> List[Tuple[str, str, str, bytes]]:
        parts = []
        reader = await request.multipart()
        while True:
            part = await reader.next()
            if part is None:
                break
            data = await part.read()
            parts.append((
                part.name,
                unquote(part.filename or ''),
                part.headers.get('Content-Type', ''),
                bytes(data)
            ))
        return parts

    async def handle_add(self, request: web.Request) -> web.StreamResponse:
        parts = await self._read_parts(request)
        self.requests.append({
            'query': dict(request.query),
            'headers': dict(request.headers),
            'parts': parts,
        })

        if self.fail_with is not None:
            status, body = self.fail_with
            return web.json_response(body, status=status)

        response = web.StreamResponse(headers={'Content-Type': 'application/x-ndjson'})
        await response.prepare(request)

        if self.raw_response is not None:
            await response.write(self.raw_response)
            await response.write_eof()
            return response

        progress = request.query.get('progress') == 'true'
        for name, filename, content_type, data in parts:
            if progress and not name.startswith('dir-'):
                for half in (len(data) // 2, len(data)):
                    await response.write(self._line({'Name': filename, 'Bytes': half}))
            await response.write(self._line({
                'Name': filename,
                'Hash': fake_cid(data + filename.encode()),
                'Size': str(len(data)),
            }))
            if self.stall:
                await self.release.wait()
                return response

        if request.query.get('wrap-with-directory') == 'true':
            everything = b''.join(part[3] for part in parts)
            await response.write(self._line({
                'Name': '',
                'Hash': fake_cid(b'dir:' + everything),
                'Size': str(len(everything)),
            }))

        await response.write_eof()
        return response

    @staticmethod
    def _line(record: Dict[str, Any]) -> bytes:
        return json.dumps(record).encode('utf-8') + b'\n'

    async def handle_id(self, request: web.Request) -> web.Response:
        return web.json_response({
            'ID': '12D3KooWFakeNode',
            'PublicKey': 'CAESIFakeKey',
            'Addresses': ['/ip4/127.0.0.1/tcp/4001/p2p/12D3KooWFakeNode'],
            'AgentVersion': 'kubo/0.30.0/',
            'ProtocolVersion': 'ipfs/0.1.0',
        })

    async def handle_version(self, request: web.Request) -> web.Response:
        return web.json_response({
            'Version': '0.30.0',
            'Commit': 'abc123',
            'Repo': '16',
            'System': 'amd64/linux',
            'Golang': 'go1.22.0',
        })


@pytest_asyncio.fixture
async def fake_node():
    """Runs a FakeNode on a local port."""
    node = FakeNode()
    server = TestServer(node.make_app())
    await server.start_server()
    node.url = str(server.make_url('/'))
    yield node
    node.release.set()
    await server.close()


@pytest_asyncio.fixture
async def ipfs(fake_node):
    """IpfsClient connected to the fake node."""
    async with IpfsClient(fake_node.url) as client:
        yield client


@pytest.fixture
def sample_file(tmp_path):
    """A small file on disk."""
    path = tmp_path / 'notes.txt'
    path.write_bytes(b'0123456789ABCDEFGHIJ')
    return path
