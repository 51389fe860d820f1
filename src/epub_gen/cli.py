"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from epub_gen.commands.build import execute_build
from epub_gen.core.sanitizer import sanitize as sanitize_markup

app = typer.Typer(
    name="epub-gen",
    help="Build structurally valid EPUB files from HTML fragments.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr; INFO and up when verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def build(
    manifest_path: Annotated[
        Path,
        typer.Argument(
            help="JSON book manifest (title, author, content, ...)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Output file (default: {manifest_name}.epub beside the manifest)",
        ),
    ] = None,
    version: Annotated[
        Optional[int],
        typer.Option(
            "--epub-version",
            help="EPUB major version: 2 or 3",
            min=2,
            max=3,
        ),
    ] = None,
    lang: Annotated[
        Optional[str],
        typer.Option("--lang", "-l", help="Language tag, e.g. 'en' or 'fr'"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every disallowed tag the sanitizer replaces",
        ),
    ] = False,
    strict_images: Annotated[
        bool,
        typer.Option(
            "--strict-images",
            help="Fail the build when an image, cover or font cannot be fetched",
        ),
    ] = False,
    proxy: Annotated[
        Optional[str],
        typer.Option("--proxy", help="HTTP(S) proxy used to fetch remote images"),
    ] = None,
    opf_template: Annotated[
        Optional[Path],
        typer.Option("--opf-template", help="Custom jinja2 template for content.opf", exists=True),
    ] = None,
    ncx_template: Annotated[
        Optional[Path],
        typer.Option("--ncx-template", help="Custom jinja2 template for toc.ncx", exists=True),
    ] = None,
    toc_template: Annotated[
        Optional[Path],
        typer.Option("--toc-template", help="Custom jinja2 template for toc.xhtml", exists=True),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Build an EPUB from a JSON book manifest."""
    configure_logging(verbose)

    try:
        execute_build(
            manifest_path=manifest_path,
            output_path=output,
            overrides={
                "version": version,
                "lang": lang,
                "verbose": verbose or None,
                "proxy": proxy,
                "strict_images": strict_images or None,
            },
            templates={
                "opf": opf_template,
                "ncx": ncx_template,
                "html_toc": toc_template,
            },
            quiet=quiet,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def info(
    epub_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """Display book metadata and table of contents."""
    try:
        from epub_gen.commands.info import execute_info

        execute_info(epub_path, console)
    except Exception as e:
        console.print(f"[red]Error reading file: {e}[/]")
        raise typer.Exit(1)


@app.command()
def sanitize(
    html_path: Annotated[
        Path,
        typer.Argument(
            help="HTML file to sanitize",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    version: Annotated[
        int,
        typer.Option("--epub-version", help="EPUB major version: 2 or 3", min=2, max=3),
    ] = 3,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every replaced tag"),
    ] = False,
) -> None:
    """Print the sanitized body markup of an HTML file."""
    configure_logging(verbose)

    try:
        fragment = html_path.read_text(encoding="utf-8")
        typer.echo(sanitize_markup(fragment, version=version, verbose=verbose))
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
