"""Restrict HTML fragments to the EPUB content vocabulary."""

import logging
import re
import warnings
from collections.abc import Iterable

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

from epub_gen.core.vocabulary import allowed_attributes_for, allowed_tags_for
from epub_gen.models.book import Chapter

# Chapter fragments are sometimes XHTML; lxml's HTML parser copes fine
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

IMAGE_PLACEHOLDER_ALT = "image-placeholder"
FALLBACK_CONTAINER = "div"
INLINE_FALLBACK_CONTAINER = "span"

_BODY_TAG_RE = re.compile(r"<body[\s>/]", re.IGNORECASE)


def parse_fragment(fragment: str) -> tuple[BeautifulSoup, Tag]:
    """Parse ``fragment`` and move its payload under one synthetic body.

    If the fragment has a ``<body>``, only its children are kept; otherwise
    the whole fragment is the payload.
    """
    if _BODY_TAG_RE.search(fragment):
        soup = BeautifulSoup(fragment, "lxml")
    else:
        # An explicit body keeps lxml from hoisting leading <script>,
        # <style> or <title> elements into <head>.
        soup = BeautifulSoup(f"<body>{fragment}</body>", "lxml")

    source: Tag = soup.body if soup.body is not None else soup
    body = soup.new_tag("body")
    for node in list(source.contents):
        body.append(node.extract())
    return soup, body


class MarkupSanitizer:
    """Sanitize chapter HTML against a tag and attribute allowlist.

    Disallowed attributes are removed. Disallowed elements are never
    dropped: they are replaced by an attribute-free ``<div>`` (``<span>``
    directly inside a paragraph) holding the same children, so no text is
    lost.
    """

    def __init__(
        self,
        version: int = 3,
        allowed_tags: Iterable[str] | None = None,
        allowed_attributes: Iterable[str] | None = None,
        verbose: bool = False,
    ):
        self.version = version
        self.allowed_tags = (
            frozenset(allowed_tags)
            if allowed_tags is not None
            else allowed_tags_for(version)
        )
        self.allowed_attributes = (
            frozenset(allowed_attributes)
            if allowed_attributes is not None
            else allowed_attributes_for(version)
        )
        if FALLBACK_CONTAINER not in self.allowed_tags:
            raise ValueError(
                f"allowed_tags must include <{FALLBACK_CONTAINER}> to hold "
                "unwrapped elements"
            )
        self.verbose = verbose

    def sanitize(self, fragment: str) -> str:
        """Return the sanitized inner markup of ``fragment``."""
        if not fragment or not fragment.strip():
            return ""

        soup, body = parse_fragment(fragment)

        # Snapshot first: unwrapping replaces nodes, and reverse document
        # order guarantees children are finished before their parent.
        for element in reversed(body.find_all(True)):
            self._clean_element(soup, element)

        return body.decode_contents()

    def sanitize_chapter(self, chapter: Chapter) -> Chapter:
        """Return a copy of ``chapter`` with sanitized content."""
        return chapter.model_copy(update={"content": self.sanitize(chapter.content)})

    def _clean_element(self, soup: BeautifulSoup, element: Tag) -> None:
        tag = element.name.lower()

        if tag == "img" and not element.get("alt"):
            element["alt"] = IMAGE_PLACEHOLDER_ALT

        for name in list(element.attrs):
            if name not in self.allowed_attributes:
                del element[name]
            elif name == "type" and tag != "script":
                del element[name]

        if tag not in self.allowed_tags:
            replacement = self._container_for(element)
            if self.verbose:
                log.warning(
                    f"<{tag}> is not allowed in EPUB {self.version} content, "
                    f"replaced with <{replacement}>"
                )
            container = soup.new_tag(replacement)
            for child in list(element.contents):
                container.append(child.extract())
            element.replace_with(container)

    def _container_for(self, element: Tag) -> str:
        # A <div> opened directly inside <p> would close the paragraph when
        # the output is parsed again, so phrasing context gets a <span>.
        parent = element.parent
        if (
            parent is not None
            and parent.name == "p"
            and INLINE_FALLBACK_CONTAINER in self.allowed_tags
        ):
            return INLINE_FALLBACK_CONTAINER
        return FALLBACK_CONTAINER


def sanitize(
    fragment: str,
    allowed_tags: Iterable[str] | None = None,
    allowed_attributes: Iterable[str] | None = None,
    version: int = 3,
    verbose: bool = False,
) -> str:
    """Sanitize one HTML fragment.

    Args:
        fragment: Raw chapter HTML, a full document or a bare fragment.
        allowed_tags: Tag allowlist. Defaults to the set for ``version``.
        allowed_attributes: Attribute allowlist. Defaults to the set for
            ``version``.
        version: EPUB major version (2 is the strict XHTML 1.1 vocabulary).
        verbose: Log every element that gets replaced.

    Returns:
        The inner markup of the sanitized body. Empty input gives "".

    Raises:
        ValueError: If ``allowed_tags`` lacks the fallback ``div`` container.
    """
    sanitizer = MarkupSanitizer(
        version=version,
        allowed_tags=allowed_tags,
        allowed_attributes=allowed_attributes,
        verbose=verbose,
    )
    return sanitizer.sanitize(fragment)
