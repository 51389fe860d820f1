"""Build structurally valid EPUB files from HTML fragments."""

from epub_gen.core.generator import EpubGenerator, generate_epub
from epub_gen.core.sanitizer import sanitize
from epub_gen.errors import (
    ArchiveError,
    EpubGenerationError,
    ImageFetchError,
    PreconditionError,
    TemplateRenderError,
)
from epub_gen.models.book import ChapterOptions, EpubOptions, TemplateOptions

__all__ = [
    "generate_epub",
    "EpubGenerator",
    "sanitize",
    "EpubOptions",
    "ChapterOptions",
    "TemplateOptions",
    "EpubGenerationError",
    "PreconditionError",
    "TemplateRenderError",
    "ImageFetchError",
    "ArchiveError",
]
