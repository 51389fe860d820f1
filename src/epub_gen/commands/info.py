"""Info command implementation."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from epub_gen.core.epub_reader import EpubReader
from epub_gen.models.epub import ParsedEpub


def display_info(parsed: ParsedEpub, console: Console) -> None:
    """Display book metadata, table of contents and per-document stats."""
    metadata = parsed.metadata
    info_lines = [
        f"[bold]{metadata.title}[/]",
        "",
        f"[dim]Author(s):[/] {', '.join(metadata.authors) or 'Unknown'}",
        f"[dim]Identifier:[/] {metadata.identifier or 'Unknown'}",
        f"[dim]Language:[/] {metadata.language or 'Unknown'}",
        f"[dim]Publisher:[/] {metadata.publisher or 'Unknown'}",
        f"[dim]Documents:[/] {len(parsed.documents)}",
        f"[dim]Words:[/] {sum(d.word_count for d in parsed.documents)}",
        f"[dim]Images:[/] {parsed.image_count}",
        f"[dim]EPUB version:[/] {parsed.version or 'Unknown'}",
        f"[dim]Spine:[/] {', '.join(parsed.spine)}",
    ]

    console.print()
    console.print(Panel("\n".join(info_lines), title="Book Information", border_style="green"))

    console.print()
    table = Table(title="Table of Contents", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Href", style="green")

    for number, entry in enumerate(parsed.flat_navigation(), start=1):
        table.add_row(str(number), "  " * entry.level + entry.title, entry.href)

    console.print(table)

    console.print()
    documents = Table(title="Documents", show_header=True, header_style="bold cyan")
    documents.add_column("File", style="green")
    documents.add_column("Heading", style="white")
    documents.add_column("Words", justify="right")
    documents.add_column("Images", justify="center")

    for document in parsed.documents:
        documents.add_row(
            document.file_name,
            document.heading or "-",
            str(document.word_count),
            "yes" if document.has_images else "",
        )

    console.print(documents)
    console.print()


def execute_info(epub_path: Path, console: Console) -> ParsedEpub:
    """Execute the info command."""
    parsed = EpubReader(epub_path).parse()
    display_info(parsed, console)
    return parsed
