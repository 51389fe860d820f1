"""Turn book options into a finished EPUB container."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from epub_gen.core.archive import ArchiveEntry, write_archive
from epub_gen.core.normalizer import normalize
from epub_gen.core.package_builder import (
    build_package_model,
    collect_images,
    cover_entry,
    font_entries,
    rewrite_image_sources,
)
from epub_gen.core.renderer import (
    CONTAINER_XML,
    DISPLAY_OPTIONS_XML,
    MIMETYPE,
    default_stylesheet,
    render_structure,
)
from epub_gen.core.resources import ResourceFetcher
from epub_gen.core.sanitizer import MarkupSanitizer
from epub_gen.errors import EpubGenerationError, ImageFetchError, PreconditionError
from epub_gen.models.book import Chapter, EpubOptions
from epub_gen.models.package import CoverEntry, FontEntry, ImageEntry, PackageModel

log = logging.getLogger(__name__)

OEBPS = "OEBPS"


def coerce_options(options: EpubOptions | Mapping[str, Any]) -> EpubOptions:
    """Validate caller input into :class:`EpubOptions`.

    Raises:
        PreconditionError: If title or content is missing, or any option
            is invalid.
    """
    if isinstance(options, EpubOptions):
        return options
    if not options.get("title") or options.get("content") is None:
        raise PreconditionError()
    try:
        return EpubOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise PreconditionError(f"Invalid book options: {exc}") from exc


class EpubGenerator:
    """Build an EPUB from :class:`EpubOptions`.

    Pipeline: sanitize chapters, package their images, wrap each chapter
    into an XHTML document, derive the package model, render the
    structural documents and zip everything.
    """

    def __init__(
        self,
        options: EpubOptions | Mapping[str, Any],
        fetcher: ResourceFetcher | None = None,
    ):
        self.options = coerce_options(options)
        self.fetcher = fetcher or ResourceFetcher(
            proxy=self.options.proxy,
            timeout=self.options.image_timeout,
            retries=self.options.image_retries,
            workers=self.options.image_workers,
            base_dir=self.options.assets_dir,
        )
        self.sanitizer = MarkupSanitizer(
            version=self.options.version, verbose=self.options.verbose
        )

    def generate(self, output_path: Path | None = None) -> bytes:
        """Build the book and return the EPUB bytes.

        Raises:
            EpubGenerationError: On any fatal failure. Image problems are
                only fatal with ``strict_images``.
        """
        try:
            return self._generate(output_path)
        except EpubGenerationError:
            raise
        except Exception as e:
            raise EpubGenerationError("build", f"unexpected failure: {e}") from e

    def _generate(self, output_path: Path | None) -> bytes:
        options = self.options
        self._log(f"Generating EPUB {options.version} '{options.title}'")

        chapters = [
            self.sanitizer.sanitize_chapter(
                Chapter.from_options(index, chapter_options, options.author)
            )
            for index, chapter_options in enumerate(options.content)
        ]

        images, image_data = self._package_images(chapters)
        if images:
            by_url = {image.url: image for image in images}
            chapters = [
                chapter.model_copy(
                    update={"content": rewrite_image_sources(chapter.content, by_url)}
                )
                for chapter in chapters
            ]

        chapters = [normalize(options, chapter) for chapter in chapters]

        cover, cover_data = self._package_cover()
        fonts, font_data = self._package_fonts()

        self._log("Building package model")
        package = build_package_model(
            chapters,
            toc_title=options.toc_title,
            version=options.version,
            images=images,
            fonts=fonts,
            cover=cover,
        )

        self._log("Rendering structural documents")
        entries = self._entries(package, chapters, image_data, cover_data, font_data)

        self._log(f"Writing {len(entries)} archive entries")
        return write_archive(entries, output_path)

    def _package_images(
        self, chapters: list[Chapter]
    ) -> tuple[list[ImageEntry], dict[str, bytes]]:
        """Fetch referenced images; only fetched ones are packaged."""
        candidates = collect_images(chapters)
        if not candidates:
            return [], {}
        self._log(f"Fetching {len(candidates)} image(s)")
        data = self.fetcher.fetch_many(
            [image.url for image in candidates], strict=self.options.strict_images
        )
        images = [image for image in candidates if image.url in data]
        return images, {image.href: data[image.url] for image in images}

    def _package_cover(self) -> tuple[CoverEntry | None, bytes | None]:
        cover = cover_entry(self.options.cover)
        if cover is None:
            if self.options.cover and self.options.strict_images:
                raise ImageFetchError(self.options.cover, "unknown cover media type")
            return None, None
        data = self.fetcher.fetch_many([cover.source], strict=self.options.strict_images)
        if cover.source not in data:
            return None, None
        return cover, data[cover.source]

    def _package_fonts(self) -> tuple[list[FontEntry], dict[str, bytes]]:
        fonts = font_entries(self.options.fonts)
        if not fonts:
            return [], {}
        data = self.fetcher.fetch_many(
            [font.source for font in fonts], strict=self.options.strict_images
        )
        fonts = [font for font in fonts if font.source in data]
        return fonts, {font.href: data[font.source] for font in fonts}

    def _entries(
        self,
        package: PackageModel,
        chapters: list[Chapter],
        image_data: dict[str, bytes],
        cover_data: bytes | None,
        font_data: dict[str, bytes],
    ) -> list[ArchiveEntry]:
        options = self.options
        documents = render_structure(options, package)

        entries = [
            ArchiveEntry.text("mimetype", MIMETYPE),
            ArchiveEntry.text("META-INF/container.xml", CONTAINER_XML),
            ArchiveEntry.text(
                "META-INF/com.apple.ibooks.display-options.xml", DISPLAY_OPTIONS_XML
            ),
            ArchiveEntry.text(f"{OEBPS}/content.opf", documents.opf),
            ArchiveEntry.text(f"{OEBPS}/toc.ncx", documents.ncx),
            ArchiveEntry.text(f"{OEBPS}/toc.xhtml", documents.toc_xhtml),
            ArchiveEntry.text(f"{OEBPS}/style.css", options.css or default_stylesheet()),
        ]
        entries.extend(
            ArchiveEntry.text(f"{OEBPS}/{chapter.filename}", chapter.content)
            for chapter in chapters
        )
        if package.cover is not None and cover_data is not None:
            entries.append(ArchiveEntry(f"{OEBPS}/{package.cover.href}", cover_data))
        entries.extend(
            ArchiveEntry(f"{OEBPS}/{href}", data) for href, data in image_data.items()
        )
        entries.extend(
            ArchiveEntry(f"{OEBPS}/{href}", data) for href, data in font_data.items()
        )
        return entries

    def _log(self, message: str) -> None:
        if self.options.verbose:
            log.info(message)


def generate_epub(
    options: EpubOptions | Mapping[str, Any],
    output_path: Path | None = None,
) -> bytes:
    """Build an EPUB and return its bytes, optionally writing it to disk."""
    return EpubGenerator(options).generate(output_path)
