"""
Add content to IPFS
"""
import asyncio
from pathlib import Path

from ipfspy import IpfsClient


async def chunks():
    yield b'streamed '
    yield b'content'


async def main():
    async with IpfsClient("http://127.0.0.1:5001") as ipfs:
        
        # Raw bytes
        async for result in ipfs.add(b"hello world"):
            print(f"Added: {result.cid} ({result.size} bytes)")
        
        # A file on disk (named after the file)
        results = await ipfs.add_all(Path("document.pdf"), pin=True)
        print(f"Added: {results[0].path} -> {results[0].cid}")
        
        # An open file object
        with open("photo.jpg", "rb") as f:
            results = await ipfs.add_all(f, cid_version=1, raw_leaves=True)
            print(f"Added: {results[0].cid}")
        
        # An async stream
        results = await ipfs.add_all(chunks())
        print(f"Added stream: {results[0].cid}")
        
        # Several named files wrapped in a directory
        results = await ipfs.add_all([
            {'path': 'docs/a.txt', 'content': b'first'},
            {'path': 'docs/b.txt', 'content': Path('b.txt')},
            {'path': 'docs/empty'},
        ], wrap_with_directory=True)
        for result in results:
            print(f"{result.cid} {result.path}")


if __name__ == "__main__":
    asyncio.run(main())
