"""Command-line interface."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from docview.cache.manager import DocumentCache
from docview.config import ViewerConfig
from docview.core.document_factory import DocumentFactory
from docview.models.content import ImageBlock, TextBlock
from docview.models.source import DocumentSource, DocumentType, SourceKind
from docview.viewer.machine import DocumentViewer

app = typer.Typer(
    name="docview",
    help="Load PDF/EPUB documents, list pages and render thumbnails.",
    add_completion=False,
)

console = Console()

# Cache subcommand group
cache_app = typer.Typer(help="Cache management commands")
app.add_typer(cache_app, name="cache")

DEFAULT_DATA_DIR = Path.home() / ".docview"

SourceArg = Annotated[
    str,
    typer.Argument(help="File path, bundled asset path, or http(s) URL"),
]
KindOpt = Annotated[
    Optional[SourceKind],
    typer.Option("--kind", "-k", help="Source kind (default: inferred)"),
]
TypeOpt = Annotated[
    Optional[DocumentType],
    typer.Option("--type", "-t", help="Document type (default: from extension)"),
]
HeaderOpt = Annotated[
    Optional[list[str]],
    typer.Option("--header", "-H", help="HTTP header 'Key: Value' (repeatable)"),
]
DataDirOpt = Annotated[
    Path,
    typer.Option("--data-dir", help="Directory holding the document cache"),
]
AssetRootOpt = Annotated[
    Path,
    typer.Option("--asset-root", help="Root directory for bundled assets"),
]
TimeoutOpt = Annotated[
    float,
    typer.Option("--timeout", help="Network timeout in seconds"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Load PDF/EPUB documents, list pages and render thumbnails."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def parse_headers(headers: list[str] | None) -> dict[str, str] | None:
    """Parse 'Key: Value' strings into a header mapping."""
    if not headers:
        return None

    parsed = {}
    for header in headers:
        key, sep, value = header.partition(":")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Header must look like 'Key: Value': {header}")
        parsed[key.strip()] = value.strip()
    return parsed


def build_source(
    location: str, kind: SourceKind | None, headers: list[str] | None
) -> DocumentSource:
    """Build a DocumentSource, inferring the kind from the location."""
    if kind is None:
        if location.startswith(("http://", "https://")):
            kind = SourceKind.NETWORK
        else:
            kind = SourceKind.FILE

    if kind == SourceKind.NETWORK:
        return DocumentSource.network(location, headers=parse_headers(headers))
    if headers:
        raise typer.BadParameter("--header only applies to network sources")
    if kind == SourceKind.ASSET:
        return DocumentSource.asset(location)
    return DocumentSource.file(location)


def resolve_type(location: str, document_type: DocumentType | None) -> DocumentType:
    if document_type is not None:
        return document_type

    detected = DocumentFactory.detect_format(location)
    if detected is None:
        console.print(f"[red]Cannot detect document type of: {location}[/]")
        console.print("[dim]Supported formats: .epub, .pdf (or pass --type)[/]")
        raise typer.Exit(1)
    return detected


def open_viewer(
    location: str,
    kind: SourceKind | None,
    document_type: DocumentType | None,
    headers: list[str] | None,
    config: ViewerConfig,
) -> DocumentViewer:
    """Build a viewer, exiting with an error message on bad input."""
    source = build_source(location, kind, headers)
    return DocumentViewer(source, resolve_type(location, document_type), config=config)


def fail_if_error(viewer: DocumentViewer) -> None:
    if viewer.state.is_error:
        console.print(f"[red]Error: {viewer.state.error_message}[/]")
        raise typer.Exit(1)


@app.command()
def info(
    source: SourceArg,
    kind: KindOpt = None,
    document_type: TypeOpt = None,
    header: HeaderOpt = None,
    data_dir: DataDirOpt = DEFAULT_DATA_DIR,
    asset_root: AssetRootOpt = Path("."),
    timeout: TimeoutOpt = 60.0,
) -> None:
    """Load a document and show its state."""
    config = ViewerConfig(
        app_data_dir=data_dir,
        asset_root=asset_root,
        show_thumbnails=False,
        request_timeout=timeout,
    )
    viewer = open_viewer(source, kind, document_type, header, config)

    with console.status(f"Loading {viewer.filename}..."):
        asyncio.run(viewer.load())
    fail_if_error(viewer)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Filename", viewer.filename)
    table.add_row("Title", viewer.document_title or "")
    table.add_row("Type", viewer.document_type.value)
    table.add_row("Source", viewer.source.kind.value)
    table.add_row("Total Pages", str(viewer.state.total_pages))
    table.add_row("State", viewer.state.phase.value)
    console.print(table)
    viewer.dispose()


@app.command()
def toc(
    source: SourceArg,
    kind: KindOpt = None,
    header: HeaderOpt = None,
    data_dir: DataDirOpt = DEFAULT_DATA_DIR,
    asset_root: AssetRootOpt = Path("."),
) -> None:
    """Show the flattened chapter list of an EPUB."""
    config = ViewerConfig(
        app_data_dir=data_dir, asset_root=asset_root, show_thumbnails=False
    )
    viewer = open_viewer(source, kind, DocumentType.EPUB, header, config)

    with console.status(f"Loading {viewer.filename}..."):
        asyncio.run(viewer.load())
    fail_if_error(viewer)

    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")

    for i, (title, level) in enumerate(viewer.chapter_outline(), start=1):
        indent = "  " * level
        table.add_row(str(i), f"{indent}{title or '[dim]Untitled Chapter[/]'}")

    console.print(table)
    viewer.dispose()


@app.command()
def chapter(
    source: SourceArg,
    index: Annotated[int, typer.Argument(help="1-based chapter index")],
    kind: KindOpt = None,
    header: HeaderOpt = None,
    images_dir: Annotated[
        Optional[Path],
        typer.Option("--images-dir", "-i", help="Write image blocks to this directory"),
    ] = None,
    data_dir: DataDirOpt = DEFAULT_DATA_DIR,
    asset_root: AssetRootOpt = Path("."),
) -> None:
    """Print the content blocks of one EPUB chapter."""
    config = ViewerConfig(
        app_data_dir=data_dir, asset_root=asset_root, show_thumbnails=False
    )
    viewer = open_viewer(source, kind, DocumentType.EPUB, header, config)

    with console.status(f"Loading {viewer.filename}..."):
        asyncio.run(viewer.load())
    fail_if_error(viewer)

    if not viewer.go_to_index(index):
        console.print(
            f"[red]Chapter {index} out of range (1-{viewer.state.total_pages})[/]"
        )
        raise typer.Exit(1)

    if images_dir:
        images_dir.mkdir(parents=True, exist_ok=True)

    for n, block in enumerate(viewer.content_blocks(index), start=1):
        if isinstance(block, TextBlock):
            console.print(block.text, highlight=False)
            console.print()
        elif isinstance(block, ImageBlock):
            label = "cover image" if block.is_cover else "image"
            line = f"[dim]\\[{label}, {len(block.data):,} bytes][/]"
            if images_dir:
                path = images_dir / f"chapter_{index:03d}_block_{n:03d}.img"
                path.write_bytes(block.data)
                line += f" [dim]-> {path}[/]"
            console.print(line)

    viewer.dispose()


@app.command()
def thumbnails(
    source: SourceArg,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory for thumb_NNN.png files"),
    ],
    kind: KindOpt = None,
    document_type: TypeOpt = None,
    header: HeaderOpt = None,
    data_dir: DataDirOpt = DEFAULT_DATA_DIR,
    asset_root: AssetRootOpt = Path("."),
    timeout: TimeoutOpt = 60.0,
) -> None:
    """Render every page thumbnail to PNG files."""
    config = ViewerConfig(
        app_data_dir=data_dir, asset_root=asset_root, request_timeout=timeout
    )
    viewer = open_viewer(source, kind, document_type, header, config)
    written, failed = asyncio.run(_export_thumbnails(viewer, output_dir))
    viewer.dispose()

    console.print(f"[green]Wrote {written} thumbnails to {output_dir}[/]")
    if failed:
        pages = ", ".join(str(i) for i in failed)
        console.print(f"[yellow]Failed pages: {pages}[/]")


async def _export_thumbnails(
    viewer: DocumentViewer, output_dir: Path
) -> tuple[int, list[int]]:
    await viewer.load()
    fail_if_error(viewer)

    output_dir.mkdir(parents=True, exist_ok=True)
    total = viewer.state.total_pages
    written = 0
    failed: list[int] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Rendering thumbnails", total=total)
        for index in range(1, total + 1):
            pending = viewer.thumbnail(index)
            thumb = await pending if pending is not None else None
            if thumb is None:
                failed.append(index)
            else:
                (output_dir / f"thumb_{index:03d}.png").write_bytes(thumb.data)
                written += 1
            progress.advance(task)

    return written, failed


@cache_app.command("list")
def cache_list(data_dir: DataDirOpt = DEFAULT_DATA_DIR) -> None:
    """List cached documents."""
    entries = DocumentCache(data_dir).list_cached()

    if not entries:
        console.print("[dim]No cached documents[/]")
        return

    table = Table(title="Cached Documents", show_header=True, header_style="bold cyan")
    table.add_column("File", style="white")
    table.add_column("Size", justify="right", style="green")
    for name, size in entries:
        table.add_row(name, f"{size:,} B")
    console.print(table)


@cache_app.command("clear")
def cache_clear(data_dir: DataDirOpt = DEFAULT_DATA_DIR) -> None:
    """Remove all cached documents."""
    count = DocumentCache(data_dir).clear_cache()
    console.print(f"[green]Cleared {count} cached document(s)[/]")


if __name__ == "__main__":
    app()
