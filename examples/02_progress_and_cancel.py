"""
Progress reporting and cancellation
"""
import asyncio
from pathlib import Path

from ipfspy import IpfsClient, CancellationToken, CancellationError


async def main():
    async with IpfsClient() as ipfs:
        
        # Progress events go to the callback, results to the iterator
        path = Path("large_file.zip")
        total = path.stat().st_size
        
        def on_progress(processed):
            print(f"Progress: {processed / total * 100:.1f}%")
        
        async for result in ipfs.add(path, progress=on_progress):
            print(f"Added: {result.cid}")
        
        # Cancel an add after 5 seconds
        token = CancellationToken()
        asyncio.get_running_loop().call_later(5, token.cancel)
        
        try:
            async for result in ipfs.add(path, cancel_token=token):
                print(f"Added: {result.cid}")
        except CancellationError:
            print("Add cancelled")
        
        # Node info
        print(await ipfs.id())
        print(f"Node version: {await ipfs.version()}")


if __name__ == "__main__":
    asyncio.run(main())
