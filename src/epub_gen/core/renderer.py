"""Render the package, navigation and chapter documents with jinja2."""

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    select_autoescape,
)

from epub_gen.errors import TemplateRenderError
from epub_gen.models.book import Chapter, EpubOptions
from epub_gen.models.package import PackageModel

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
GENERATOR_NAME = "epub-gen"

MIMETYPE = "application/epub+zip"
CONTAINER_XML = (
    '<?xml version="1.0" encoding="UTF-8" ?>'
    '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
    "<rootfiles>"
    '<rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>'
    "</rootfiles>"
    "</container>"
)
DISPLAY_OPTIONS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes" ?>'
    "<display_options>"
    '<platform name="*"><option name="specified-fonts">true</option></platform>'
    "</display_options>"
)


@dataclass(frozen=True)
class StructuralDocuments:
    """Rendered text of the three documents describing the package."""

    opf: str
    ncx: str
    toc_xhtml: str


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(
            enabled_extensions=("xml", "xhtml", "html", "opf", "ncx"),
            default_for_string=True,
        ),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def default_stylesheet() -> str:
    return (TEMPLATES_DIR / "style.css").read_text(encoding="utf-8")


def _load_template(name: str, source: str | None) -> Template:
    env = _template_env()
    if source is not None:
        return env.from_string(source)
    return env.get_template(name)


def _render(name: str, source: str | None, **context: Any) -> str:
    try:
        return _load_template(name, source).render(**context)
    except TemplateError as exc:
        raise TemplateRenderError(name, str(exc)) from exc


def _package_context(book: EpubOptions, package: PackageModel) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "book": book,
        "package": package,
        "generator": GENERATOR_NAME,
        "modified": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "year": now.year,
    }


def render_opf(book: EpubOptions, package: PackageModel) -> str:
    """Render ``content.opf`` (metadata, manifest and spine)."""
    source = book.template.opf if book.template else None
    return _render("content.opf", source, **_package_context(book, package))


def render_ncx(book: EpubOptions, package: PackageModel) -> str:
    """Render ``toc.ncx`` from the shared nav points."""
    source = book.template.ncx if book.template else None
    return _render("toc.ncx", source, **_package_context(book, package))


def render_toc_xhtml(book: EpubOptions, package: PackageModel) -> str:
    """Render the human-readable ``toc.xhtml`` from the shared nav points."""
    source = book.template.html_toc if book.template else None
    return _render("toc.xhtml", source, **_package_context(book, package))


def render_structure(book: EpubOptions, package: PackageModel) -> StructuralDocuments:
    """Render all three structural documents from one package model."""
    return StructuralDocuments(
        opf=render_opf(book, package),
        ncx=render_ncx(book, package),
        toc_xhtml=render_toc_xhtml(book, package),
    )


def render_chapter(book: EpubOptions, chapter: Chapter) -> str:
    """Render a complete XHTML document around sanitized chapter content."""
    return _render("chapter.xhtml", None, book=book, chapter=chapter)
