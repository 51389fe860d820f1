"""Wrap sanitized chapter markup into complete XHTML documents."""

from epub_gen.core.renderer import render_chapter
from epub_gen.models.book import Chapter, EpubOptions


def normalize(book: EpubOptions, chapter: Chapter) -> Chapter:
    """Return ``chapter`` with its content replaced by a full XHTML document.

    The body gets, in order: an ``<h1>`` title when the chapter has one and
    ``append_chapter_titles`` is set, an author byline when the chapter has
    a title and authors, a source link when it has a url, then the
    sanitized content. Interpolated text is XML-escaped.
    """
    return chapter.model_copy(update={"content": render_chapter(book, chapter)})
