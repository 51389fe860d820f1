"""Derive manifest, spine and navigation data from the chapter list."""

import itertools
import logging
import mimetypes
import re
from collections.abc import Iterable, Mapping
from pathlib import PurePath

from epub_gen.core.identifiers import new_resource_id
from epub_gen.core.sanitizer import parse_fragment
from epub_gen.models.book import Chapter
from epub_gen.models.package import (
    CSS_HREF,
    CSS_ID,
    CSS_MEDIA_TYPE,
    NCX_HREF,
    NCX_ID,
    NCX_MEDIA_TYPE,
    TOC_HREF,
    TOC_ID,
    XHTML_MEDIA_TYPE,
    ChapterEntry,
    CoverEntry,
    FontEntry,
    ImageEntry,
    ManifestItem,
    NavPoint,
    PackageModel,
    SpineItem,
)

log = logging.getLogger(__name__)

FALLBACK_FONT_MEDIA_TYPE = "application/x-font-ttf"
FONT_MEDIA_TYPES = {
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}


def resolve_media_type(source: str) -> str | None:
    """Guess the image media type of a URL or path.

    Query strings and fragments are ignored. Returns None for anything that
    does not resolve to an ``image/*`` type.
    """
    path = source.split("#", 1)[0].split("?", 1)[0]
    media_type, _ = mimetypes.guess_type(path)
    if media_type is None or not media_type.startswith("image/"):
        return None
    return media_type


def extension_for(media_type: str) -> str:
    """Return a filesystem-safe extension (without dot) for a media type."""
    extension = mimetypes.guess_extension(media_type)
    if extension is None:
        # e.g. "image/x-foo+xml" -> "xfoo"
        extension = media_type.split("/", 1)[-1].split("+", 1)[0]
    return re.sub(r"[^a-z0-9]", "", extension.lower())


def collect_images(chapters: Iterable[Chapter]) -> list[ImageEntry]:
    """Collect the images referenced by sanitized chapter content.

    Images are deduplicated by URL; the first successful resolution of a
    URL wins. URLs whose media type cannot be resolved are skipped and
    their ``src`` stays as is.
    """
    images: dict[str, ImageEntry] = {}
    unresolved: set[str] = set()

    for chapter in chapters:
        _, body = parse_fragment(chapter.content)
        for img in body.find_all("img"):
            url = img.get("src")
            if not url or url in images or url in unresolved:
                continue
            media_type = resolve_media_type(url)
            if media_type is None:
                log.info(f"Skipping image with unknown media type: {url}")
                unresolved.add(url)
                continue
            images[url] = ImageEntry(
                url=url,
                id=new_resource_id(),
                extension=extension_for(media_type),
                media_type=media_type,
            )

    return list(images.values())


def rewrite_image_sources(content: str, images: Mapping[str, ImageEntry]) -> str:
    """Point ``<img src>`` at the packaged copy of each known image."""
    if not images or not content:
        return content

    _, body = parse_fragment(content)
    changed = False
    for img in body.find_all("img"):
        image = images.get(img.get("src", ""))
        if image is not None:
            img["src"] = image.href
            changed = True

    return body.decode_contents() if changed else content


def cover_entry(source: str | None) -> CoverEntry | None:
    """Describe the cover image, or None when its type is unknown."""
    if not source:
        return None
    media_type = resolve_media_type(source)
    if media_type is None:
        log.warning(f"Ignoring cover with unknown media type: {source}")
        return None
    return CoverEntry(
        source=source,
        extension=extension_for(media_type),
        media_type=media_type,
    )


def font_entries(sources: Iterable[str]) -> list[FontEntry]:
    """Describe embedded fonts, one entry per distinct source.

    Each font keeps its own file name; a name already taken by an earlier
    font gets a numeric suffix (``Body.ttf``, ``Body_1.ttf``, ...).
    """
    entries = []
    taken: set[str] = set()
    for source in dict.fromkeys(sources):
        name = PurePath(source.split("?", 1)[0]).name
        stem, suffix = PurePath(name).stem, PurePath(name).suffix
        candidate, n = name, 0
        while candidate.lower() in taken:
            n += 1
            candidate = f"{stem}_{n}{suffix}"
        taken.add(candidate.lower())
        media_type = FONT_MEDIA_TYPES.get(suffix.lower(), FALLBACK_FONT_MEDIA_TYPE)
        entries.append(
            FontEntry(source=source, filename=candidate, media_type=media_type)
        )
    return entries


def _chapter_entry(chapter: Chapter, play_order: int | None) -> ChapterEntry:
    return ChapterEntry(
        index=chapter.index,
        id=chapter.id,
        manifest_id=chapter.manifest_id,
        href=chapter.filename,
        title=chapter.title,
        display_title=chapter.display_title,
        authors=chapter.authors,
        url=chapter.url,
        before_toc=chapter.before_toc,
        exclude_from_toc=chapter.exclude_from_toc,
        play_order=play_order,
    )


def _chapter_nav_point(entry: ChapterEntry) -> NavPoint:
    return NavPoint(
        id=entry.manifest_id,
        kind="chapter",
        play_order=entry.play_order,
        href=entry.href,
        label=f"{entry.index + 1}. {entry.display_title}",
        title=entry.display_title,
        authors=entry.authors,
        url=entry.url,
    )


def build_package_model(
    chapters: Iterable[Chapter],
    toc_title: str,
    version: int = 3,
    images: Iterable[ImageEntry] = (),
    fonts: Iterable[FontEntry] = (),
    cover: CoverEntry | None = None,
) -> PackageModel:
    """Compute manifest, spine and navigation for an ordered chapter list.

    Chapters keep the caller's order. The spine lists the ``before_toc``
    chapters, then the table of contents, then the rest; excluded chapters
    stay in the spine and manifest but get no nav point. One play-order
    counter numbers the nav points in the same sequence.
    """
    chapters = sorted(chapters, key=lambda c: c.index)
    before = [c for c in chapters if c.before_toc]
    after = [c for c in chapters if not c.before_toc]

    play_order = itertools.count()
    entries: list[ChapterEntry] = []
    nav_points: list[NavPoint] = []

    def add_bucket(bucket: list[Chapter]) -> None:
        for chapter in bucket:
            order = None if chapter.exclude_from_toc else next(play_order)
            entry = _chapter_entry(chapter, order)
            entries.append(entry)
            if order is not None:
                nav_points.append(_chapter_nav_point(entry))

    add_bucket(before)
    nav_points.append(
        NavPoint(
            id=TOC_ID,
            kind="toc",
            play_order=next(play_order),
            href=TOC_HREF,
            label=toc_title,
            title=toc_title,
        )
    )
    add_bucket(after)

    spine = [SpineItem(idref=e.manifest_id) for e in entries if e.before_toc]
    spine.append(SpineItem(idref=TOC_ID))
    spine.extend(SpineItem(idref=e.manifest_id) for e in entries if not e.before_toc)

    images = list(images)
    fonts = list(fonts)
    manifest = [
        ManifestItem(id=NCX_ID, href=NCX_HREF, media_type=NCX_MEDIA_TYPE),
        ManifestItem(
            id=TOC_ID,
            href=TOC_HREF,
            media_type=XHTML_MEDIA_TYPE,
            properties="nav" if version >= 3 else None,
        ),
        ManifestItem(id=CSS_ID, href=CSS_HREF, media_type=CSS_MEDIA_TYPE),
    ]
    if cover is not None:
        manifest.append(
            ManifestItem(
                id=cover.id,
                href=cover.href,
                media_type=cover.media_type,
                properties="cover-image" if version >= 3 else None,
            )
        )
    manifest.extend(
        ManifestItem(id=f"image_{n}", href=image.href, media_type=image.media_type)
        for n, image in enumerate(images)
    )
    manifest.extend(
        ManifestItem(id=e.manifest_id, href=e.href, media_type=XHTML_MEDIA_TYPE)
        for e in entries
    )
    manifest.extend(
        ManifestItem(id=f"font_{n}", href=font.href, media_type=font.media_type)
        for n, font in enumerate(fonts)
    )

    return PackageModel(
        chapters=entries,
        manifest=manifest,
        spine=spine,
        nav_points=nav_points,
        images=images,
        fonts=fonts,
        cover=cover,
    )
