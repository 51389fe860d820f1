"""Data models."""

from epub_gen.models.book import (
    Chapter,
    ChapterOptions,
    EpubOptions,
    TemplateOptions,
)
from epub_gen.models.epub import (
    BookMetadata,
    ContentDocument,
    NavEntry,
    ParsedEpub,
)
from epub_gen.models.package import (
    ChapterEntry,
    CoverEntry,
    FontEntry,
    ImageEntry,
    ManifestItem,
    NavPoint,
    PackageModel,
    SpineItem,
)

__all__ = [
    # Book input models
    "ChapterOptions",
    "TemplateOptions",
    "EpubOptions",
    "Chapter",
    # Package models
    "ChapterEntry",
    "ImageEntry",
    "FontEntry",
    "CoverEntry",
    "ManifestItem",
    "SpineItem",
    "NavPoint",
    "PackageModel",
    # Read-back models
    "NavEntry",
    "ContentDocument",
    "BookMetadata",
    "ParsedEpub",
]
