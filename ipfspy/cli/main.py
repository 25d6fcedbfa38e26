"""ipfspy CLI - Main commands."""
import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from ipfspy.core.api.config import DEFAULT_API_URL

app = typer.Typer(
    name="ipfspy",
    help="IPFS HTTP API client",
    add_completion=False
)
console = Console()

API_OPTION = typer.Option(
    DEFAULT_API_URL, "--api", envvar="IPFS_API", help="Node API address"
)


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


class ProgressTracker:
    """
    Turns per-item progress events into overall progress.

    The node reports bytes processed for the item currently being added;
    a value lower than the previous one means the next item has started.
    """

    def __init__(self):
        self.completed = 0
        self._current = 0

    def update(self, processed: int) -> int:
        if processed < self._current:
            self.completed += self._current
        self._current = processed
        return self.completed + processed


@app.command()
def add(
    paths: List[Path] = typer.Argument(
        ..., help="Files to add", exists=True, dir_okay=False, readable=True
    ),
    api: str = API_OPTION,
    pin: Optional[bool] = typer.Option(None, "--pin/--no-pin", help="Pin added content"),
    cid_version: Optional[int] = typer.Option(None, "--cid-version", help="CID version"),
    hash_alg: Optional[str] = typer.Option(None, "--hash", help="Hash function"),
    chunker: Optional[str] = typer.Option(None, "--chunker", help="Chunking algorithm"),
    raw_leaves: bool = typer.Option(False, "--raw-leaves", help="Use raw blocks for leaves"),
    only_hash: bool = typer.Option(False, "--only-hash", "-n", help="Only compute CIDs"),
    wrap: bool = typer.Option(False, "--wrap", "-w", help="Wrap files in a directory"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Print CIDs only"),
    show_progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
):
    """Add files to IPFS."""
    from ipfspy import IpfsClient, IpfsException

    entries = [{'path': path.name, 'content': path} for path in paths]
    total = sum(path.stat().st_size for path in paths)

    options = dict(
        pin=pin,
        cid_version=cid_version,
        hash_alg=hash_alg,
        chunker=chunker,
        raw_leaves=raw_leaves or None,
        only_hash=only_hash or None,
        wrap_with_directory=wrap or None,
    )

    async def do_add():
        results = []
        async with IpfsClient(api) as ipfs:
            if not show_progress or quiet:
                return await ipfs.add_all(entries, **options)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                label = paths[0].name if len(paths) == 1 else f"{len(paths)} files"
                task = progress.add_task(f"Adding {label}", total=total or None)
                tracker = ProgressTracker()

                def on_progress(processed: int):
                    progress.update(task, completed=tracker.update(processed))

                async for result in ipfs.add(entries, progress=on_progress, **options):
                    results.append(result)
                progress.update(task, completed=total)
        return results

    try:
        results = run_async(do_add())
    except IpfsException as e:
        console.print(f"[red]Add failed: {e}[/red]")
        raise typer.Exit(1)

    for result in results:
        if quiet:
            console.print(result.cid)
        else:
            console.print(f"[green]added[/green] {result.cid} {result.path}")


@app.command()
def id(api: str = API_OPTION):
    """Show the identity of the node."""
    from ipfspy import IpfsClient, IpfsException

    async def show_id():
        async with IpfsClient(api) as ipfs:
            return await ipfs.id()

    try:
        identity = run_async(show_id())
    except IpfsException as e:
        console.print(f"[red]Request failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]ID:[/bold] {identity.id}")
    console.print(f"[bold]Agent:[/bold] {identity.agent_version}")
    console.print(f"[bold]Protocol:[/bold] {identity.protocol_version}")

    if identity.addresses:
        table = Table(title="Addresses")
        table.add_column("Multiaddr", style="cyan")
        for address in identity.addresses:
            table.add_row(address)
        console.print(table)


@app.command()
def version(api: str = API_OPTION):
    """Show the version of the node."""
    from ipfspy import IpfsClient, IpfsException

    async def show_version():
        async with IpfsClient(api) as ipfs:
            return await ipfs.version()

    try:
        node_version = run_async(show_version())
    except IpfsException as e:
        console.print(f"[red]Request failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Version:[/bold] {node_version}")
    if node_version.repo:
        console.print(f"[bold]Repo:[/bold] {node_version.repo}")
    if node_version.system:
        console.print(f"[bold]System:[/bold] {node_version.system}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
